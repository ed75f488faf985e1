[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mimeenvelope"
version = "0.1.0"
description = "Tolerant reading of MIME e-mail headers: RFC 2047 decoding, address lists, header repair and a message envelope"
requires-python = ">=3.10"
dependencies = []
keywords = ["email", "mime", "rfc2047", "headers", "envelope", "address"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Email",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mimeenvelope"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

"""Tolerant reading of MIME e-mail headers, address lists and message envelopes."""

__version__ = "0.1.0"
__all__ = ["problems", "header", "headerinspect", "envelope"]
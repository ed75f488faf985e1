"""Problems (errors and warnings) collected while parsing a message."""

from __future__ import annotations

from dataclasses import dataclass, field

ERROR_MALFORMED_BASE64 = "Malformed Base64"
ERROR_MALFORMED_HEADER = "Malformed Header"
ERROR_MISSING_BOUNDARY = "Missing Boundary"
ERROR_MISSING_CONTENT_TYPE = "Missing Content-Type"
ERROR_CHARSET_CONVERSION = "Character Set Conversion"
ERROR_CONTENT_ENCODING = "Content Encoding"
ERROR_PLAIN_TEXT_FROM_HTML = "Plain Text from HTML"
ERROR_CHARSET_DECLARATION = "Character Set Declaration Mismatch"
ERROR_MISSING_RECIPIENT = "no recipients (to, cc, bcc) set"
ERROR_MALFORMED_CHILD_PART = "Malformed child part"

# Default limit on stored problems per log; 0 means unlimited.
MAX_PART_ERRORS = 0


class MessageError(Exception):
    """A problem encountered while parsing; severe means content was lost."""

    def __init__(self, name: str, detail: str, severe: bool = False) -> None:
        super().__init__(name, detail, severe)
        self.name = name
        self.detail = detail
        self.severe = severe

    def __str__(self) -> str:
        level = "E" if self.severe else "W"
        return f"[{level}] {self.name}: {self.detail}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MessageError):
            return NotImplemented
        return (self.name, self.detail, self.severe) == (
            other.name,
            other.detail,
            other.severe,
        )

    def __hash__(self) -> int:
        return hash((self.name, self.detail, self.severe))


@dataclass
class ProblemLog:
    """Bounded list of problems; max_errors None falls back to MAX_PART_ERRORS."""

    errors: list[MessageError] = field(default_factory=list)
    max_errors: int | None = None

    def add_error(self, name: str, detail: str) -> None:
        self.add_problem(MessageError(name, detail, True))

    def add_warning(self, name: str, detail: str) -> None:
        self.add_problem(MessageError(name, detail, False))

    def add_problem(self, error: MessageError) -> None:
        limit = MAX_PART_ERRORS if self.max_errors is None else self.max_errors
        if limit == 0 or len(self.errors) < limit:
            self.errors.append(error)
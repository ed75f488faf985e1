"""A simplified view of a parsed mail message and its top-level header."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any

from .header import (
    ADDRESS_HEADERS,
    MIMEHeader,
    _b_encode,
    decode_ext_header,
    parse_address_list,
)
from .problems import MessageError


def _require_name(name: str) -> None:
    if not name:
        raise ValueError("provide non-empty header name")


@dataclass
class Envelope:
    """Message bodies, sorted parts, collected problems and the top-level header."""

    text: str = ""
    html: str = ""
    root: Any = None
    attachments: list[Any] = field(default_factory=list)
    inlines: list[Any] = field(default_factory=list)
    other_parts: list[Any] = field(default_factory=list)
    errors: list[MessageError] = field(default_factory=list)
    header: MIMEHeader | None = None

    def get_header_keys(self) -> list[str]:
        """Header names seen in the message."""
        if self.header is None:
            return []
        return self.header.keys()

    def get_header(self, name: str) -> str:
        """First value of the header, with encoded words decoded."""
        if self.header is None:
            return ""
        return decode_ext_header(self.header.get(name))

    def get_header_values(self, name: str) -> list[str]:
        """All values of the header, with encoded words decoded."""
        if self.header is None:
            return []
        return [decode_ext_header(v) for v in self.header.values(name)]

    def _ensure_header(self) -> MIMEHeader:
        if self.header is None:
            self.header = MIMEHeader()
        return self.header

    def set_header(self, name: str, values: list[str]) -> None:
        """Replace all values of the header with the given ones."""
        _require_name(name)
        if not values:
            return
        header = self._ensure_header()
        first, *rest = values
        header.set(name, _b_encode("utf-8", first))
        for value in rest:
            header.add(name, _b_encode("utf-8", value))

    def add_header(self, name: str, value: str) -> None:
        """Append a value to the header, creating it if absent."""
        _require_name(name)
        self._ensure_header().add(name, _b_encode("utf-8", value))

    def delete_header(self, name: str) -> None:
        """Remove every value of the header."""
        _require_name(name)
        if self.header is not None:
            self.header.delete(name)

    def address_list(self, key: str) -> list[tuple[str, str]]:
        """Parse an address header into decoded (name, address) pairs."""
        if self.header is None:
            raise ValueError("no headers available")
        if key.lower() not in ADDRESS_HEADERS:
            raise ValueError(f"{key} is not an address header")
        return parse_address_list(self.header.get(key))

    def date(self) -> datetime:
        """Parse the Date header; LookupError if absent, ValueError if malformed."""
        value = self.get_header("Date")
        if not value:
            raise LookupError("mail: header not in message")
        try:
            return parsedate_to_datetime(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"mail: could not parse date {value!r}") from exc

    def clone(self) -> Envelope:
        """Copy with a deep copy of the root; part lists and header are shared."""
        return replace(self, root=copy.deepcopy(self.root))
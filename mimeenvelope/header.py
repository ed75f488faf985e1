"""Mail header reading, RFC 2047 decoding and tolerant address parsing."""

from __future__ import annotations

import base64
import binascii
import codecs
import json
import re
from typing import BinaryIO, Iterator

from .problems import ERROR_MALFORMED_HEADER, ProblemLog

ADDRESS_HEADERS = frozenset(
    {
        "bcc", "cc", "delivered-to", "from", "reply-to", "to", "sender",
        "resent-bcc", "resent-cc", "resent-from", "resent-reply-to",
        "resent-to", "resent-sender",
    }
)

_MAX_ENCODED_WORD_LEN = 75


def canonical_header_key(key: str) -> str:
    """Capitalise the first letter and each letter after a hyphen."""
    return "-".join(p[:1].upper() + p[1:].lower() for p in key.split("-"))


class MIMEHeader:
    """Multi-valued, case-insensitive mail header map."""

    def __init__(self, items: dict[str, list[str]] | None = None) -> None:
        self._data: dict[str, list[str]] = {}
        for key, vals in (items or {}).items():
            for v in vals:
                self.add(key, v)

    def get(self, key: str) -> str:
        vals = self._data.get(canonical_header_key(key))
        return vals[0] if vals else ""

    def values(self, key: str) -> list[str]:
        return list(self._data.get(canonical_header_key(key), []))

    def set(self, key: str, value: str) -> None:
        self._data[canonical_header_key(key)] = [value]

    def add(self, key: str, value: str) -> None:
        self._data.setdefault(canonical_header_key(key), []).append(value)

    def delete(self, key: str) -> None:
        self._data.pop(canonical_header_key(key), None)

    def keys(self) -> list[str]:
        return list(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonical_header_key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MIMEHeader):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"MIMEHeader({self._data!r})"


# --- RFC 2047 decoding -----------------------------------------------------

_ENCODED_WORD = re.compile(r"=\?([^?\s]+)\?([bBqQ])\?([^?\s]*)\?=")
_QP_ESCAPE = re.compile(rb"=([0-9A-Fa-f]{2})")
_CHARSET_ALIASES = {
    "iso-8859-1": "cp1252",
    "latin1": "cp1252",
    "us-ascii": "cp1252",
    "ascii": "cp1252",
    "big5": "cp950",
}


def _decode_charset(raw: bytes, charset: str) -> str | None:
    name = charset.split("*", 1)[0].strip().lower()
    name = _CHARSET_ALIASES.get(name, name)
    try:
        codecs.lookup(name)
    except LookupError:
        return None
    try:
        return raw.decode(name)
    except UnicodeDecodeError:
        if name == "cp1252":
            return raw.decode("latin-1")
        return raw.decode(name, errors="replace")


def _decode_word(charset: str, encoding: str, text: str) -> str | None:
    if encoding in "bB":
        try:
            raw = base64.b64decode(text + "=" * (-len(text) % 4), validate=True)
        except (binascii.Error, ValueError):
            return None
    else:
        data = text.replace("_", " ").encode("latin-1", errors="replace")
        raw = _QP_ESCAPE.sub(lambda m: bytes([int(m.group(1), 16)]), data)
    return _decode_charset(raw, charset)


def decode_ext_header(value: str) -> str:
    """Decode RFC 2047 encoded words wherever they occur; unknown ones stay as is."""
    if "=?" not in value:
        return value
    out: list[str] = []
    pos = 0
    last_was_word = False
    for m in _ENCODED_WORD.finditer(value):
        between = value[pos : m.start()]
        decoded = _decode_word(m.group(1), m.group(2), m.group(3))
        if decoded is None:
            out.append(between + m.group(0))
            last_was_word = False
        else:
            if not (last_was_word and between.strip(" \t\r\n") == ""):
                out.append(between)
            out.append(decoded)
            last_was_word = True
        pos = m.end()
    out.append(value[pos:])
    return "".join(out)


def _needs_encoding(text: str) -> bool:
    return any((c < " " or c > "~") and c != "\t" for c in text)


def _b_encode(charset: str, text: str) -> str:
    """Encode text as one or more base64 encoded words if it needs it."""
    if not _needs_encoding(text):
        return text
    content_len = _MAX_ENCODED_WORD_LEN - len("=?") - len(charset) - len("?b?") - len("?=")
    max_raw = content_len // 4 * 3
    words: list[str] = []
    chunk = b""
    for ch in text:
        encoded = ch.encode("utf-8")
        if chunk and len(chunk) + len(encoded) > max_raw:
            words.append(chunk)
            chunk = b""
        chunk += encoded
    words.append(chunk)
    return " ".join(
        f"=?{charset}?b?{base64.b64encode(w).decode('ascii')}?=" for w in words
    )


def _is_white(c: str) -> bool:
    return c in " \t\r\n"


def _quoted_display_name(value: str) -> str:
    if not value.startswith('"'):
        return value
    idx = value.rfind('"')
    return f"{value[: idx + 1]} {value[idx + 1 :]}"


def decode_to_utf8_base64_header(value: str) -> str:
    """Decode encoded words and re-encode them as UTF-8 base64 words."""
    if "=?" not in value:
        return value
    pieces = re.split(r"[ \t\r\n]+", _quoted_display_name(value))
    output = []
    for piece in filter(None, pieces):
        if len(piece) > 4 and "=?" in piece:
            prefix = suffix = ""
            if piece.startswith("("):
                prefix = "("
                piece = piece[1:]
            if piece.endswith(")"):
                suffix = ")"
                piece = piece[:-1]
            piece = prefix + _b_encode("UTF-8", decode_ext_header(piece)) + suffix
        output.append(piece)
    return " ".join(output)


# --- address lists ---------------------------------------------------------

_PHRASE_WORD = re.compile(r'"((?:[^"\\]|\\.)*)"|[^\s"]+')


class _Chunk:
    def __init__(self) -> None:
        self.phrase: list[str] = []
        self.angle: list[str] = []
        self.comment: list[str] = []
        self.has_angle = False

    def empty(self) -> bool:
        return not ("".join(self.phrase).strip() or self.has_angle)


def _split_addresses(text: str) -> list[_Chunk]:
    chunks = [_Chunk()]
    in_quote = in_angle = closed_angle = False
    depth = 0
    chars = iter(text)
    for c in chars:
        cur = chunks[-1]
        if depth:
            if c == "\\":
                cur.comment.append(next(chars, ""))
            elif c == "(":
                depth += 1
                cur.comment.append(c)
            elif c == ")":
                depth -= 1
                if depth:
                    cur.comment.append(c)
            else:
                cur.comment.append(c)
            continue
        if in_quote:
            target = cur.angle if in_angle else cur.phrase
            target.append(c)
            if c == "\\":
                target.append(next(chars, ""))
            elif c == '"':
                in_quote = False
            continue
        if in_angle:
            if c == ">":
                in_angle = False
                closed_angle = True
            else:
                cur.angle.append(c)
                if c == '"':
                    in_quote = True
            continue
        if c == "(":
            depth = 1
            if cur.comment:
                cur.comment.append(" ")
            continue
        if c in ",;":
            chunks.append(_Chunk())
            closed_angle = False
            continue
        if closed_angle and not _is_white(c):
            # Missing separator after an angle-addr: start a new address.
            chunks.append(_Chunk())
            cur = chunks[-1]
            closed_angle = False
        if c == "<":
            in_angle = True
            cur.has_angle = True
        else:
            cur.phrase.append(c)
            if c == '"':
                in_quote = True
    return [c for c in chunks if not c.empty()]


def _phrase_text(phrase: str) -> str:
    words = []
    for m in _PHRASE_WORD.finditer(phrase):
        if m.group(1) is not None:
            words.append(re.sub(r"\\(.)", r"\1", m.group(1)))
        else:
            words.append(m.group(0))
    return " ".join(words)


def parse_address_list(value: str) -> list[tuple[str, str]]:
    """Parse an address header into (name, address) pairs, decoding encoded words.

    Raises LookupError when there is no address and ValueError when one is malformed.
    """
    chunks = _split_addresses(value)
    if not chunks:
        raise LookupError("mail: header not in message")
    result = []
    for chunk in chunks:
        comment = " ".join("".join(chunk.comment).split())
        if chunk.has_angle:
            address = "".join("".join(chunk.angle).split())
            name = _phrase_text("".join(chunk.phrase))
        else:
            address = "".join("".join(chunk.phrase).split())
            name = comment
        local, at, domain = address.rpartition("@")
        if not at or not local or not domain:
            raise ValueError(f"mail: missing @ in addr-spec: {address!r}")
        if len(local) > 1 and local.startswith('"') and local.endswith('"'):
            address = f"{_phrase_text(local)}@{domain}"
        result.append((decode_ext_header(name), decode_ext_header(address)))
    return result


# --- header block reading --------------------------------------------------


def _valid_field_byte(c: int) -> bool:
    return 33 <= c <= 126 and c != ord(":")


def _quote_bytes(data: bytes) -> str:
    return json.dumps(data.decode("utf-8", errors="replace"), ensure_ascii=False)


def _quote_byte(c: int) -> str:
    ch = chr(c)
    return f"'{ch}'" if ch.isprintable() else f"'\\x{c:02x}'"


def read_header(stream: BinaryIO, problems: ProblemLog) -> MIMEHeader:
    """Read a header block up to the blank line, repairing common damage.

    Repairs and skipped lines are recorded in problems. The stream is left at
    the start of the body.
    """
    entries: list[str] = []

    def extend(extra: bytes) -> None:
        if not entries:
            raise ValueError("malformed MIME header initial line: " + _quote_bytes(extra))
        entries[-1] += " " + extra.decode("utf-8", errors="surrogateescape")

    while True:
        raw = stream.readline()
        if not raw:
            break
        line = raw[:-1] if raw.endswith(b"\n") else raw
        if line.endswith(b"\r"):
            line = line[:-1]

        first_colon = line.find(b":")
        if line[:1] in (b" ", b"\t", b"\n", b"\r"):
            extend(line.strip(b" \t\r\n"))
            continue
        if first_colon == 0:
            problems.add_error(
                ERROR_MALFORMED_HEADER,
                f"Header line {_quote_bytes(line)} started with a colon",
            )
            continue
        if first_colon > 0:
            if b" :" in line[: first_colon + 1]:
                line = line.replace(b" :", b":", 1)
                first_colon = line.find(b":")
            bad = next(
                (c for c in line[:first_colon] if c != 32 and not _valid_field_byte(c)),
                None,
            )
            if bad is not None:
                problems.add_error(
                    ERROR_MALFORMED_HEADER,
                    f"Header name {_quote_bytes(line)} contains invalid character "
                    f"{_quote_byte(bad)}",
                )
                continue
            entries.append(line.strip(b" \t\r\n").decode("utf-8", errors="surrogateescape"))
        elif line:
            extend(line)
            problems.add_warning(
                ERROR_MALFORMED_HEADER,
                f"Continued line {_quote_bytes(line)} was not indented",
            )
        else:
            break

    header = MIMEHeader()
    for entry in entries:
        key, _, value = entry.partition(":")
        value = value.strip(" \t")
        value = value.encode("utf-8", errors="surrogateescape").decode("utf-8", errors="replace")
        header.add(key, value)
    return header
"""Lightweight header inspection for user agents: decode a fixed set of headers."""

from __future__ import annotations

import re

from .header import MIMEHeader, canonical_header_key, decode_ext_header

DEFAULT_HEADERS = ("From", "To", "Sender", "CC", "BCC", "Subject", "Date")

# Decoding is repeated while encoded words keep appearing, up to this depth.
_MAX_DECODE_DEPTH = 10

_LINE_BREAK = re.compile(rb"\r?\n")


def decode_rfc2047(value: str) -> str:
    """Decode RFC 2047 encoded words; unknown charsets leave the input unchanged.

    Words whose decoded text is itself encoded are decoded again.
    """
    result = value
    for _ in range(_MAX_DECODE_DEPTH):
        if "=?" not in result:
            break
        decoded = decode_ext_header(result)
        if decoded == result:
            break
        result = decoded
    return result


def ensure_header_boundary(data: bytes) -> bytes:
    """Insert the blank CRLF line between headers and body when it is missing."""
    pieces = data.split(b"\r\n")
    lines = [piece + b"\r\n" for piece in pieces[:-1]]
    lines.append(pieces[-1])

    out = bytearray()
    in_headers = True
    for line in lines:
        if in_headers and (b":" in line or line.startswith((b" ", b"\t"))):
            out += line
            continue
        if in_headers:
            in_headers = False
            if line != b"\r\n":
                out += b"\r\n" + line
                continue
        out += line
    return bytes(out)


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def _read_mime_header(data: bytes) -> MIMEHeader:
    """Strictly read a header block; malformed lines raise ValueError."""
    entries: list[list[str]] = []
    for line in _LINE_BREAK.split(data):
        if not line:
            break
        if line[:1] in (b" ", b"\t"):
            if not entries:
                raise ValueError(f"malformed MIME header initial line: {_text(line)!r}")
            extra = line.strip(b" \t")
            if extra:
                entries[-1][1] += " " + _text(extra)
            continue
        key, sep, value = line.partition(b":")
        if not sep or not key or key != key.strip(b" \t") or re.search(rb"\s", key):
            raise ValueError(f"malformed MIME header line: {_text(line)!r}")
        entries.append([_text(key), _text(value.strip(b" \t"))])

    header = MIMEHeader()
    for key, value in entries:
        header.add(key, value)
    return header


def decode_headers(data: bytes, *args: str) -> MIMEHeader:
    """Return the default headers plus those named in args, RFC 2047 decoded.

    Raises ValueError when the header block is malformed.
    """
    parsed = _read_mime_header(ensure_header_boundary(data))
    result = MIMEHeader()
    for name in (*DEFAULT_HEADERS, *args):
        key = canonical_header_key(name)
        if key in result:
            continue
        for value in parsed.values(key):
            result.add(key, decode_rfc2047(value))
    return result
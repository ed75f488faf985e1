# mimeenvelope

A forgiving reader for MIME e-mail headers.

Real-world mail is often malformed: header names carry stray spaces,
continuation lines are not indented, address lists are separated by
semicolons or by nothing at all, and encoded words (RFC 2047) use unusual
character sets. `mimeenvelope` repairs what it can, records what it had to
repair, and hands back plain Unicode strings. It has no dependencies beyond
the standard library.

## Installation

```
pip install mimeenvelope
```

## Decoding encoded words

```python
from mimeenvelope.headerinspect import decode_rfc2047

decode_rfc2047("=?UTF-8?Q?Miros=C5=82aw_Marczak?=")   # 'Mirosław Marczak'
decode_rfc2047("=?ABC-1?Q?FooBar?=")                  # unknown charset: returned unchanged
```

Adjacent encoded words separated only by whitespace are joined, and text
that decodes to further encoded words is decoded again.
`mimeenvelope.header.decode_ext_header` does a single decoding pass.

## Picking headers out of raw bytes

```python
from mimeenvelope.headerinspect import decode_headers

raw = b"From: =?UTF-8?Q?Miros=C5=82aw?= <user@example.com>\r\nSubject: hi\r\n\r\nbody\r\n"
headers = decode_headers(raw, "content-type")
headers.get("From")      # 'Mirosław <user@example.com>'
```

`decode_headers` returns a `MIMEHeader` holding From, To, Sender, CC, BCC,
Subject and Date, plus any extra header names passed, all decoded. A missing
blank line between header and body is tolerated (see
`ensure_header_boundary`); a malformed header block raises `ValueError`.

## Address lists

```python
from mimeenvelope.header import parse_address_list

parse_address_list('"Joe @ Company" <joe@example.com>;<ann@example.com>')
# [('Joe @ Company', 'joe@example.com'), ('', 'ann@example.com')]
```

Addresses come back as `(name, address)` tuples. Missing commas and
semicolon separators are tolerated and encoded names and addresses are
decoded. An empty list raises `LookupError`; an address without `@`
raises `ValueError`.

## Reading header blocks

`read_header(stream, problems)` reads a header block from a binary stream up
to the blank line, leaving the stream at the start of the body. Repairs and
skipped lines are recorded as `MessageError` entries in a `ProblemLog`:

```python
import io
from mimeenvelope.header import read_header
from mimeenvelope.problems import ProblemLog

log = ProblemLog()
header = read_header(io.BytesIO(b"To: a@example.com\nX-Bad: one;\ntwo\n\nbody\n"), log)
header.get("X-Bad")            # 'one; two'
[str(e) for e in log.errors]   # ['[W] Malformed Header: Continued line "two" was not indented']
```

A `MessageError` prints as `[W]` (warning) or `[E]` (severe). A `ProblemLog`
keeps at most `max_errors` entries; when that is `None` the module-level
`MAX_PART_ERRORS` applies, and 0 means unlimited.

`MIMEHeader` is a case-insensitive, multi-valued map with `get`, `values`,
`set`, `add`, `delete` and `keys`; keys are stored in canonical form
(`canonical_header_key("content-type")` gives `"Content-Type"`).

`decode_to_utf8_base64_header` rewrites every encoded word in a header value
as a UTF-8 base64 encoded word, keeping surrounding parentheses and plain
tokens as they are.

## Envelopes

`mimeenvelope.envelope.Envelope` is a dataclass with `text`, `html`, `root`,
`attachments`, `inlines`, `other_parts`, `errors` and `header` fields. Its
methods:

- `get_header`, `get_header_values`, `get_header_keys` — decoded values and names;
- `set_header`, `add_header`, `delete_header` — values with non-ASCII text are
  stored as UTF-8 base64 encoded words; an empty name raises `ValueError`;
- `address_list(key)` — for address headers only (From, To, Cc, Bcc,
  Reply-To, Sender, Delivered-To and their Resent- forms), otherwise `ValueError`;
- `date()` — a `datetime`; `LookupError` if absent, `ValueError` if malformed;
- `clone()` — a copy with a deep copy of `root`.

## What this package does not do

It does not split a message into MIME parts, decode bodies or attachments,
convert HTML to text, or build and send mail. An `Envelope` is filled in by
the caller; the package works on header data.
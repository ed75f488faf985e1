import base64

import pytest

from mimeenvelope.headerinspect import (
    decode_headers,
    decode_rfc2047,
    ensure_header_boundary,
)

QP_UTF8 = (
    b"Date: Fri, 19 Oct 2012 12:22:49 -0700\r\n"
    b"From: James Hillyerd <james@example.com>\r\n"
    b"To: =?UTF-8?Q?Miros=C5=82aw_Marczak?= <miroslaw@example.com>\r\n"
    b"Subject: =?utf-8?Q?MIME_UTF8_Test_=C2=A2_More_Text?=\r\n"
    b"X-Mailer: test mailer\r\n"
    b"\r\n"
    b"Body text\r\n"
)

QP_UTF8_NO_BREAK = (
    b"To: =?UTF-8?Q?Miros=C5=82aw_Marczak?= <miroslaw@example.com>\r\n"
    b"Subject: hello\r\n"
    b"Body text without a blank line\r\n"
)


def test_decode_rfc2047_basic():
    assert decode_rfc2047("=?UTF-8?Q?Miros=C5=82aw_Marczak?=") == "Mirosław Marczak"


def test_decode_rfc2047_unknown_charset():
    assert decode_rfc2047("=?ABC-1?Q?FooBar?=") == "=?ABC-1?Q?FooBar?="


def test_decode_rfc2047_pass_through():
    assert decode_rfc2047("Hello World") == "Hello World"


def test_decode_rfc2047_recursive():
    inner = "=?utf-8?Q?WirelessCaller_Number?="
    outer = "=?utf-8?B?" + base64.b64encode(inner.encode()).decode() + "?="
    assert decode_rfc2047(outer) == "WirelessCaller Number"


def test_decode_headers_sample():
    h = decode_headers(QP_UTF8)
    assert "Mirosław Marczak" in h.get("To")
    assert h.get("Subject") == "MIME UTF8 Test ¢ More Text"
    assert h.get("From") == "James Hillyerd <james@example.com>"


def test_decode_headers_excludes_unrequested():
    h = decode_headers(QP_UTF8)
    assert h.get("X-Mailer") == ""
    assert sorted(h.keys()) == ["Date", "From", "Subject", "To"]


def test_decode_headers_additional_canonical():
    h = decode_headers(QP_UTF8, "x-mailer")
    assert h.get("X-Mailer") == "test mailer"
    assert "X-Mailer" in h.keys()


def test_decode_headers_no_break_between_headers_and_content():
    h = decode_headers(QP_UTF8_NO_BREAK)
    assert "Mirosław Marczak" in h.get("To")
    assert h.get("Subject") == "hello"


def test_decode_headers_lf_line_endings():
    data = QP_UTF8.replace(b"\r\n", b"\n")
    assert "Mirosław Marczak" in decode_headers(data).get("To")


def test_decode_headers_continuation():
    data = b"Subject: part one\r\n part two\r\n\r\nbody\r\n"
    assert decode_headers(data).get("Subject") == "part one part two"


def test_decode_headers_bad_start_raises():
    data = b" bad start\r\nFrom: someone@example.com\r\n\r\nbody\r\n"
    with pytest.raises(ValueError, match="initial line"):
        decode_headers(data)


def test_ensure_header_boundary_inserts_blank_line():
    assert ensure_header_boundary(b"A: 1\r\nbody\r\n") == b"A: 1\r\n\r\nbody\r\n"


def test_ensure_header_boundary_keeps_existing_blank_line():
    data = b"A: 1\r\n\r\nbody"
    assert ensure_header_boundary(data) == data


def test_ensure_header_boundary_headers_only():
    assert ensure_header_boundary(b"A: 1\r\n") == b"A: 1\r\n\r\n"


def test_ensure_header_boundary_keeps_continuations():
    data = b"A: 1\r\n\tmore\r\n\r\nbody"
    assert ensure_header_boundary(data) == data
import sys

import pytest

from fetchreport.errors import ParseError
from fetchreport.parsing import charset_of, decode_text, parse_document


def test_parse_object():
    assert parse_document(b'{"a":1}', "application/json") == {"a": 1}


def test_parse_scalars_and_arrays():
    assert parse_document(b"[1, 2]") == [1, 2]
    assert parse_document(b"true") is True
    assert parse_document(b'"x"') == "x"


@pytest.mark.parametrize("body", [b"", b"   \n", b'{"a":', b"<html></html>", b"{'a': 1}"])
def test_malformed_bodies(body: bytes):
    with pytest.raises(ParseError) as excinfo:
        parse_document(body)
    assert str(excinfo.value).startswith("malformed body")


def test_expect_shape():
    assert parse_document(b"[1]", expect="array") == [1]
    with pytest.raises(ParseError):
        parse_document(b"[1]", expect="object")
    with pytest.raises(ParseError):
        parse_document(b"1", expect="array")


def test_charset_from_content_type():
    assert charset_of("application/json; charset=ISO-8859-1") == "iso-8859-1"
    assert charset_of('text/plain; charset="utf-8"') == "utf-8"
    assert charset_of("application/json") is None
    assert charset_of("") is None


def test_decode_text_honours_charset_and_bom():
    assert decode_text("café".encode("latin-1"), "text/plain; charset=latin-1") == "café"
    assert decode_text(b'\xef\xbb\xbf{"a":1}') == '{"a":1}'
    # unknown charsets fall back to utf-8
    assert decode_text(b"ok", "text/plain; charset=x-nonsense") == "ok"
    assert decode_text(b"ok", "text/plain; charset=base64") == "ok"
    assert decode_text(b"ok", "text/plain; charset=zlib") == "ok"


def test_decode_text_rejects_invalid_bytes():
    with pytest.raises(ParseError):
        decode_text(b"\xff\xfe\xfa", "application/json")


def test_deep_nesting_is_malformed():
    with pytest.raises(ParseError):
        parse_document(b"[" * 100000 + b"]" * 100000)


@pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="no integer digit limit")
def test_oversized_integer_is_malformed():
    with pytest.raises(ParseError):
        parse_document(b"1" * 5000)


@pytest.mark.parametrize("body", [b"NaN", b"[Infinity]", b'{"x": -Infinity}'])
def test_non_finite_numbers_are_malformed(body: bytes):
    with pytest.raises(ParseError) as excinfo:
        parse_document(body)
    assert "non-finite number" in str(excinfo.value)


@pytest.mark.parametrize("charset", ["base64", "zlib", "hex", "rot13"])
def test_bytes_codecs_fall_back_to_utf8(charset: str):
    assert parse_document(b'{"a":1}', f"application/json; charset={charset}") == {"a": 1}

import codecs
import json
from typing import Any, Optional

from .errors import ParseError


_SHAPES = {"object": dict, "array": list}


def charset_of(content_type: str) -> Optional[str]:
    for part in (content_type or "").split(";")[1:]:
        key, _, value = part.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"').lower()
    return None


def decode_text(body: bytes, content_type: str = "") -> str:
    charset = charset_of(content_type) or "utf-8"
    try:
        codec = codecs.lookup(charset)
    except LookupError:
        codec = None
    # bytes-to-bytes codecs (base64, zlib, ...) cannot decode text
    if codec is None or not getattr(codec, "_is_text_encoding", True):
        charset = "utf-8"
    if charset.replace("-", "") == "utf8":
        # tolerate a leading byte order mark
        charset = "utf-8-sig"
    try:
        return body.decode(charset)
    except UnicodeError as exc:
        raise ParseError(f"body is not valid {charset}: {exc}") from exc


def _reject_constant(name: str) -> Any:
    raise ParseError(f"non-finite number {name} is not JSON")


def parse_document(body: bytes, content_type: str = "", expect: Optional[str] = None) -> Any:
    """Decode ``body`` and parse it as JSON.

    ``expect`` pins the top-level shape ("object" or "array"); anything else
    is reported as a malformed body rather than handed to the caller.
    """
    text = decode_text(body, content_type)
    if not text.strip():
        raise ParseError("empty body")
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise ParseError(f"{exc.msg} at line {exc.lineno} column {exc.colno}") from exc
    except (ValueError, RecursionError) as exc:
        # oversized integer literals and nesting deeper than the interpreter stack
        raise ParseError(str(exc)) from exc
    if expect is not None:
        wanted = _SHAPES[expect]
        if not isinstance(value, wanted):
            raise ParseError(f"expected a JSON {expect}, got {type(value).__name__}")
    return value

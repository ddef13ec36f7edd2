from __future__ import annotations

from email.errors import HeaderParseError
from email.header import decode_header, make_header

from loguru import logger


def decode_header_value(value: str | None) -> str:
    """Decode RFC 2047 encoded-words in a raw header.

    Never raises: if any charset is unknown or a fragment is malformed, the
    raw text is returned unchanged.
    """
    if not value:
        return ""
    try:
        return str(make_header(decode_header(value)))
    except (HeaderParseError, LookupError, UnicodeError, ValueError) as e:
        logger.warning(f"Unable to decode header: {e}: {value}")
        return value

"""
Text utilities for cleaning feed values before storage.
"""

import re
import unicodedata
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def clean_text(value: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Clean a free-text feed value for storage.

    - Strips surrounding whitespace
    - Drops control characters (stray \\r, \\x00 from exported feeds)
    - Truncates to max_length if given
    - Returns "" for None/blank input

    Args:
        value: Raw cell value
        max_length: Maximum characters to keep

    Returns:
        Cleaned string
    """
    if not value:
        return ""

    cleaned = "".join(
        c for c in str(value)
        if c in "\n\t" or unicodedata.category(c) != "Cc"
    ).strip()

    if max_length is not None and len(cleaned) > max_length:
        cleaned = cleaned[:max_length].rstrip()

    return cleaned


def clean_name(value: Optional[str], max_length: int = 255) -> str:
    """
    Clean a product/manufacturer name.

    Same as clean_text() but also collapses runs of whitespace:
    - "  Gauze   Sponge 4x4 " → "Gauze Sponge 4x4"
    """
    return _WHITESPACE.sub(" ", clean_text(value, max_length=max_length))


def parse_source_id(value: Optional[str]) -> Optional[int]:
    """
    Parse a numeric source id ("77", " 0077 ", "77.0") to int.

    Returns None when the value is blank or not a whole number.
    """
    text = (value or "").strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if not number.is_integer():
        return None
    return int(number)

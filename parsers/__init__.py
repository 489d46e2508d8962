"""
Feed file parsers.
"""

from parsers.feed_parser import (
    iter_feed_rows,
    parse_price,
    DEFAULT_CHUNK_SIZE,
)

__all__ = [
    "iter_feed_rows",
    "parse_price",
    "DEFAULT_CHUNK_SIZE",
]

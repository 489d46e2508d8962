"""
Tab-separated product feed parser.

Streams the feed in fixed-size chunks so that memory stays bounded no
matter how large the file is. Rows are yielded one at a time as plain
dicts keyed by the header row.
"""

import csv
import math
from pathlib import Path
from typing import Callable, Iterator, Optional, Union
import structlog

import pandas as pd

from exceptions import FeedFileNotFoundError

logger = structlog.get_logger(__name__)

DEFAULT_CHUNK_SIZE = 500


def iter_feed_rows(
    path: Union[str, Path],
    chunksize: int = DEFAULT_CHUNK_SIZE,
    encoding: str = "utf-8-sig",
    on_bad_line: Optional[Callable[[list[str]], None]] = None,
) -> Iterator[dict[str, str]]:
    """
    Stream records from a tab-separated feed file.

    Every cell is read as a string, empty cells become "", and quote
    characters are kept literally (product names carry inch marks).
    A line with more fields than the header is logged, reported to
    on_bad_line and skipped; the rest of its chunk is still yielded.
    Short lines are padded with "".

    Args:
        path: Feed file path
        chunksize: Rows read from disk per chunk
        encoding: File encoding
        on_bad_line: Called with the split fields of each skipped line

    Yields:
        One dict per record, keys from the header row

    Raises:
        FeedFileNotFoundError: If the file does not exist
        pandas.errors.ParserError: If the file cannot be tokenised at all
    """
    path = Path(path)
    if not path.is_file():
        raise FeedFileNotFoundError(str(path))

    logger.debug("feed_stream_opened", path=str(path), chunksize=chunksize)

    def skip_bad_line(fields: list[str]) -> None:
        logger.warning("feed_line_skipped", reason="too many fields", fields=len(fields), line=fields)
        if on_bad_line is not None:
            on_bad_line(fields)
        return None

    # Callable on_bad_lines is only supported by the python engine
    reader = pd.read_csv(
        path,
        sep="\t",
        dtype=str,
        keep_default_na=False,
        quoting=csv.QUOTE_NONE,
        encoding=encoding,
        chunksize=chunksize,
        engine="python",
        on_bad_lines=skip_bad_line,
    )

    with reader:
        for chunk in reader:
            chunk.columns = [str(c).strip() for c in chunk.columns]
            chunk = chunk.fillna("")
            for record in chunk.to_dict(orient="records"):
                yield record


def parse_price(value) -> float:
    """
    Parse a price cell.

    Non-numeric, blank, negative or non-finite input degrades to 0.0.

    Examples:
        "2.50" -> 2.5
        "$1,200.00" -> 1200.0
        "N/A" -> 0.0
    """
    if value is None:
        return 0.0

    text = str(value).strip().replace(",", "").lstrip("$")
    if not text:
        return 0.0

    try:
        price = float(text)
    except ValueError:
        return 0.0

    if not math.isfinite(price) or price < 0:
        return 0.0
    return price

"""
Import run result.
"""

from pydantic import BaseModel, Field
from enum import Enum
from typing import Optional

# Messages kept on a summary; later errors are only counted
MAX_ERRORS = 100


class ImportStatus(str, Enum):
    """How an import run ended."""
    COMPLETED = "completed"
    FILE_NOT_FOUND = "file_not_found"
    STREAM_FAILED = "stream_failed"
    SKIPPED = "skipped"


class ImportSummary(BaseModel):
    """
    Counters collected during one import run.

    Not persisted; logged at the end of the run and printed by the CLI.
    """

    status: ImportStatus = ImportStatus.COMPLETED
    file_path: Optional[str] = None
    rows_read: int = 0
    rows_imported: int = 0
    rows_skipped: int = 0
    batches_flushed: int = 0
    products_upserted: int = 0
    upsert_failures: int = 0
    products_flagged_deleted: int = 0
    products_retained_with_orders: int = 0
    reconciliation_ran: bool = False
    error_count: int = 0
    errors: list[str] = Field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Count an error; keep the message only for the first MAX_ERRORS."""
        self.error_count += 1
        if len(self.errors) < MAX_ERRORS:
            self.errors.append(message)

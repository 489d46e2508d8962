"""
Product feed import.

Streams the feed, transforms rows one at a time, upserts drafts in
fixed-size batches and, when DELETE_FLAG is on, soft-deletes products
that were not in the feed.

Only one import runs at a time per process; a trigger that arrives
while a run is active is skipped.
"""

import threading
from typing import Optional
import structlog

import pandas as pd

from config import settings
from models.import_run import ImportStatus, ImportSummary
from models.product import ProductDraft
from parsers.feed_parser import iter_feed_rows
from services.product_service import ProductService, get_product_service
from services.product_transform_service import ProductTransformService
from services.order_service import OrderService, get_order_service
from exceptions import (
    FeedFileNotFoundError,
    InvalidFeedRowError,
    ImportAlreadyRunningError,
)

logger = structlog.get_logger(__name__)


class ProductImportService:
    """
    Import orchestrator.

    Rows are processed strictly in order: a row is fully transformed
    (vendor/manufacturer resolved, description enhanced) before the next
    one is read, so memory holds one row plus one pending batch.
    """

    _run_lock = threading.Lock()

    def __init__(
        self,
        product_service: Optional[ProductService] = None,
        transformer: Optional[ProductTransformService] = None,
        order_service: Optional[OrderService] = None,
        file_path: Optional[str] = None,
        batch_size: Optional[int] = None,
        delete_flag: Optional[bool] = None,
    ):
        self.product_service = product_service or get_product_service()
        self.transformer = transformer or ProductTransformService()
        self.order_service = order_service or get_order_service()
        self.file_path = file_path or settings.csv_file_path
        self.batch_size = batch_size or settings.import_batch_size
        self.delete_flag = settings.delete_flag if delete_flag is None else delete_flag

    @classmethod
    def is_running(cls) -> bool:
        """True while an import holds the run lock."""
        return cls._run_lock.locked()

    def import_products(self, raise_if_running: bool = False) -> ImportSummary:
        """
        Run one full import.

        Args:
            raise_if_running: Raise instead of returning a skipped summary
                when another import is in progress

        Returns:
            ImportSummary with run counters

        Raises:
            ImportAlreadyRunningError: If raise_if_running and a run is active
        """
        if not self._run_lock.acquire(blocking=False):
            logger.warning("product_import_already_running", file_path=self.file_path)
            if raise_if_running:
                raise ImportAlreadyRunningError()
            return ImportSummary(status=ImportStatus.SKIPPED, file_path=self.file_path)

        try:
            return self._run()
        finally:
            self._run_lock.release()

    # ===================
    # RUN STEPS
    # ===================

    def _run(self) -> ImportSummary:
        summary = ImportSummary(file_path=self.file_path)
        batch: list[ProductDraft] = []
        imported_names: set[str] = set()

        logger.info(
            "product_import_started",
            file_path=self.file_path,
            batch_size=self.batch_size,
            delete_flag=self.delete_flag
        )

        try:
            rows = iter_feed_rows(
                self.file_path,
                on_bad_line=lambda fields: self._skip_bad_line(fields, summary)
            )
            for row in rows:
                summary.rows_read += 1

                draft = self._process_row(row, summary)
                if draft is None:
                    continue

                batch.append(draft)
                imported_names.add(draft.name)
                summary.rows_imported += 1

                if len(batch) >= self.batch_size:
                    self._flush(batch, summary)
                    batch = []

        except FeedFileNotFoundError as e:
            logger.error("feed_file_not_found", file_path=self.file_path)
            summary.status = ImportStatus.FILE_NOT_FOUND
            summary.add_error(e.message)
            return summary

        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
            logger.error(
                "feed_stream_failed",
                file_path=self.file_path,
                rows_read=summary.rows_read,
                error=str(e),
                error_type=type(e).__name__
            )
            summary.status = ImportStatus.STREAM_FAILED
            summary.add_error(f"stream failed after {summary.rows_read} rows: {e}")

        if batch:
            self._flush(batch, summary)

        if self.delete_flag:
            if summary.status == ImportStatus.COMPLETED:
                self.handle_deletions(imported_names, summary)
            else:
                logger.warning(
                    "deletion_reconciliation_skipped",
                    reason="feed not fully read",
                    status=summary.status.value
                )

        logger.info("product_import_completed", **summary.model_dump(exclude={"errors"}, mode="json"))
        return summary

    def _process_row(self, row: dict, summary: ImportSummary) -> Optional[ProductDraft]:
        """Transform one row, or log and return None if it must be skipped."""
        try:
            return self.transformer.transform(row)
        except InvalidFeedRowError as e:
            summary.rows_skipped += 1
            logger.warning(
                "feed_row_skipped",
                row_number=summary.rows_read,
                reason=e.details.get("reason"),
                row=row
            )
        except Exception as e:
            summary.rows_skipped += 1
            summary.add_error(f"row {summary.rows_read}: {e}")
            logger.error(
                "feed_row_failed",
                row_number=summary.rows_read,
                row=row,
                error=str(e),
                error_type=type(e).__name__
            )
        return None

    def _skip_bad_line(self, fields: list[str], summary: ImportSummary) -> None:
        """Count a line the parser could not split into the header's columns."""
        summary.rows_read += 1
        summary.rows_skipped += 1
        summary.add_error(f"malformed line with {len(fields)} fields: {fields[:4]}")

    def _flush(self, batch: list[ProductDraft], summary: ImportSummary) -> None:
        upserted, failed = self.product_service.bulk_upsert(batch)
        summary.batches_flushed += 1
        summary.products_upserted += upserted
        summary.upsert_failures += failed
        logger.info(
            "product_batch_flushed",
            batch_number=summary.batches_flushed,
            size=len(batch),
            upserted=upserted,
            failed=failed
        )

    def handle_deletions(self, imported_names: set[str], summary: ImportSummary) -> None:
        """
        Soft-delete stored products whose name was not imported this run.

        A product with orders is kept and logged instead.

        Args:
            imported_names: Product names seen in this run's feed
            summary: Run summary to update
        """
        logger.info("handling_deletions", imported=len(imported_names))
        summary.reconciliation_ran = True

        try:
            active = self.product_service.get_active()
        except Exception as e:
            logger.error("handling_deletions_failed", error=str(e))
            summary.add_error(f"deletion reconciliation failed: {e}")
            return

        stale = [p for p in active if p.name not in imported_names]

        for product in stale:
            try:
                if self.order_service.has_orders(product.doc_id):
                    summary.products_retained_with_orders += 1
                    logger.warning(
                        "product_has_orders_not_deleted",
                        product_name=product.name,
                        doc_id=product.doc_id
                    )
                    continue

                self.product_service.flag_deleted(product.doc_id)
                summary.products_flagged_deleted += 1
                logger.info(
                    "product_flagged_deleted",
                    product_name=product.name,
                    doc_id=product.doc_id
                )
            except Exception as e:
                summary.add_error(f"delete {product.name}: {e}")
                logger.error(
                    "flag_product_deleted_failed",
                    product_name=product.name,
                    error=str(e)
                )

        logger.info(
            "deletions_handled",
            stale=len(stale),
            flagged=summary.products_flagged_deleted,
            retained=summary.products_retained_with_orders
        )


# Singleton instance for convenience
_product_import_service: Optional[ProductImportService] = None


def get_product_import_service() -> ProductImportService:
    """Get or create ProductImportService instance."""
    global _product_import_service
    if _product_import_service is None:
        _product_import_service = ProductImportService()
    return _product_import_service

"""Run one product feed import from the command line.

For hosts that trigger the import from system cron instead of the API
server's schedule.

Usage:
    python scripts/run_import.py                      # CSV_FILE_PATH from .env
    python scripts/run_import.py data/feed.txt        # explicit feed file
    python scripts/run_import.py data/feed.txt --delete-missing
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse

from models.import_run import ImportStatus
from services.product_import_service import ProductImportService


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Import the product feed")
    parser.add_argument("file_path", nargs="?", help="Feed file (defaults to CSV_FILE_PATH)")
    parser.add_argument("--batch-size", type=int, default=None, help="Products per upsert")
    parser.add_argument(
        "--delete-missing",
        action="store_true",
        default=None,
        help="Flag products missing from the feed as deleted (overrides DELETE_FLAG)"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    print("=" * 60)
    print("PRODUCT FEED IMPORT")
    print("=" * 60)

    service = ProductImportService(
        file_path=args.file_path,
        batch_size=args.batch_size,
        delete_flag=args.delete_missing
    )
    print(f"Feed: {service.file_path}")
    print(f"Batch size: {service.batch_size}")
    print(f"Delete missing: {service.delete_flag}")

    summary = service.import_products()

    print()
    print(f"Status:            {summary.status.value}")
    print(f"Rows read:         {summary.rows_read}")
    print(f"Rows imported:     {summary.rows_imported}")
    print(f"Rows skipped:      {summary.rows_skipped}")
    print(f"Batches flushed:   {summary.batches_flushed}")
    print(f"Upserted:          {summary.products_upserted}")
    print(f"Upsert failures:   {summary.upsert_failures}")
    if summary.reconciliation_ran:
        print(f"Flagged deleted:   {summary.products_flagged_deleted}")
        print(f"Kept (has orders): {summary.products_retained_with_orders}")
    print(f"Errors:            {summary.error_count}")
    for error in summary.errors[:20]:
        print(f"  [ERROR] {error}")

    return 0 if summary.status == ImportStatus.COMPLETED else 1


if __name__ == "__main__":
    sys.exit(main())

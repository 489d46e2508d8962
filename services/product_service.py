"""
Product store operations.

Products are keyed by name: every import replaces the full row for a
name (or creates it), and products missing from a feed are soft-deleted.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.product import ProductDraft, StoredProduct
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class ProductService:
    """
    Product persistence.

    Handles bulk upserts from the importer and soft deletion.
    """

    PAGE_SIZE = 1000

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "products"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_by_name(self, name: str) -> Optional[StoredProduct]:
        """
        Get a product by its unique name.

        Args:
            name: Product name

        Returns:
            StoredProduct or None if not found
        """
        logger.debug("getting_product_by_name", product_name=name)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("name", name)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_product_by_name_failed", product_name=name, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            return None
        return StoredProduct(**result.data[0])

    def get_active(self) -> list[StoredProduct]:
        """
        Get every product not flagged as deleted.

        Reads in pages of PAGE_SIZE ordered by name. Only doc_id and name
        are selected.

        Returns:
            List of StoredProduct (data left empty)
        """
        logger.info("getting_active_products")

        products: list[StoredProduct] = []
        offset = 0

        try:
            while True:
                result = (
                    self.db.table(self.table)
                    .select("doc_id,name")
                    .eq("is_deleted", False)
                    .order("name")
                    .range(offset, offset + self.PAGE_SIZE - 1)
                    .execute()
                )
                page = result.data or []
                products.extend(
                    StoredProduct(doc_id=row["doc_id"], name=row["name"])
                    for row in page
                )
                if len(page) < self.PAGE_SIZE:
                    break
                offset += self.PAGE_SIZE
        except Exception as e:
            logger.error("get_active_products_failed", error=str(e))
            raise DatabaseError("select", str(e))

        logger.info("active_products_retrieved", count=len(products))
        return products

    # ===================
    # WRITE OPERATIONS
    # ===================

    def _upsert(self, records: list[dict]) -> None:
        (
            self.db.table(self.table)
            .upsert(records, on_conflict="name")
            .execute()
        )

    def bulk_upsert(self, drafts: list[ProductDraft]) -> tuple[int, int]:
        """
        Upsert a batch of drafts keyed by product name.

        Each row is fully replaced (or created). Drafts sharing a name
        collapse to the last one. The batch is sent as one statement; if
        that fails, items are retried one by one so a bad item does not
        block the rest. Failed items are logged and not retried again.

        Args:
            drafts: Transformed products

        Returns:
            Tuple of (upserted_count, failed_count)
        """
        if not drafts:
            return 0, 0

        by_name: dict[str, dict] = {}
        for draft in drafts:
            by_name[draft.name] = draft.to_record()
        records = list(by_name.values())

        if len(records) < len(drafts):
            logger.warning(
                "duplicate_names_in_batch",
                drafts=len(drafts),
                unique_names=len(records)
            )

        try:
            self._upsert(records)
            logger.info("batch_upserted", count=len(records))
            return len(records), 0
        except Exception as e:
            logger.error(
                "batch_upsert_failed",
                count=len(records),
                error=str(e)
            )

        upserted = 0
        failed = 0
        for record in records:
            try:
                self._upsert([record])
                upserted += 1
            except Exception as e:
                failed += 1
                logger.error(
                    "product_upsert_failed",
                    product_name=record["name"],
                    error=str(e)
                )

        logger.info("batch_upserted_itemwise", upserted=upserted, failed=failed)
        return upserted, failed

    def flag_deleted(self, doc_id: str) -> None:
        """
        Soft-delete a product.

        Sets is_deleted on both the column and the stored document.

        Args:
            doc_id: Product doc_id

        Raises:
            DatabaseError: If the read or update fails
        """
        try:
            result = (
                self.db.table(self.table)
                .select("data")
                .eq("doc_id", doc_id)
                .limit(1)
                .execute()
            )
            data = dict(result.data[0].get("data") or {}) if result.data else {}
            data["is_deleted"] = True

            (
                self.db.table(self.table)
                .update({"is_deleted": True, "data": data})
                .eq("doc_id", doc_id)
                .execute()
            )
        except Exception as e:
            logger.error("flag_product_deleted_failed", doc_id=doc_id, error=str(e))
            raise DatabaseError("update", str(e), {"doc_id": doc_id})


# Singleton instance for convenience
_product_service: Optional[ProductService] = None


def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service

"""
Vendor and manufacturer reference resolution.

Maps the feed's numeric ManufacturerID (natural key) to a generated
stable id, creating the record the first time a key is seen. Vendors and
manufacturers share the logic and differ only in their table.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.reference import ReferenceRecord
from exceptions import DatabaseError
from utils.ids import new_id

logger = structlog.get_logger(__name__)


class ReferenceService:
    """
    Lookup-or-create for one reference table.

    Table columns: source_id (unique), <id_column>, name.
    """

    def __init__(self, table: str, id_column: str, entity: str):
        self.db = get_supabase_client()
        self.table = table
        self.id_column = id_column
        self.entity = entity

    def _to_record(self, row: dict) -> ReferenceRecord:
        return ReferenceRecord(
            source_id=row["source_id"],
            stable_id=row[self.id_column],
            name=row.get("name") or ""
        )

    def get_by_source_id(self, source_id: str) -> Optional[ReferenceRecord]:
        """
        Get a record by its natural key.

        Args:
            source_id: Natural key as stored (string)

        Returns:
            ReferenceRecord or None if not found
        """
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("source_id", source_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(
                f"get_{self.entity}_failed",
                source_id=source_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e), {"table": self.table})

        if not result.data:
            return None
        return self._to_record(result.data[0])

    def resolve(self, natural_key: int, display_name: str) -> str:
        """
        Return the stable id for a natural key, creating it if unseen.

        An existing record is returned as-is; its name is never updated.
        Creation is an upsert that ignores conflicts on source_id, followed
        by a re-read, so two concurrent creators end up with the same id.

        Args:
            natural_key: Numeric source id from the feed
            display_name: Name stored on first creation

        Returns:
            Stable id

        Raises:
            DatabaseError: If the lookup or insert fails
        """
        source_id = str(natural_key)

        existing = self.get_by_source_id(source_id)
        if existing:
            return existing.stable_id

        stable_id = new_id()
        try:
            (
                self.db.table(self.table)
                .upsert(
                    {
                        "source_id": source_id,
                        self.id_column: stable_id,
                        "name": display_name,
                    },
                    on_conflict="source_id",
                    ignore_duplicates=True
                )
                .execute()
            )
        except Exception as e:
            logger.error(
                f"create_{self.entity}_failed",
                source_id=source_id,
                name=display_name,
                error=str(e)
            )
            raise DatabaseError("upsert", str(e), {"table": self.table})

        created = self.get_by_source_id(source_id)
        if created is None:
            raise DatabaseError(
                "upsert",
                f"{self.entity} {source_id} missing after insert",
                {"table": self.table}
            )

        if created.stable_id == stable_id:
            logger.info(
                f"{self.entity}_created",
                source_id=source_id,
                stable_id=stable_id,
                name=display_name
            )
        else:
            logger.info(
                f"{self.entity}_created_concurrently",
                source_id=source_id,
                stable_id=created.stable_id
            )

        return created.stable_id


# Singleton instances for convenience
_vendor_service: Optional[ReferenceService] = None
_manufacturer_service: Optional[ReferenceService] = None


def get_vendor_service() -> ReferenceService:
    """Get or create the vendor ReferenceService."""
    global _vendor_service
    if _vendor_service is None:
        _vendor_service = ReferenceService("vendors", "vendor_id", "vendor")
    return _vendor_service


def get_manufacturer_service() -> ReferenceService:
    """Get or create the manufacturer ReferenceService."""
    global _manufacturer_service
    if _manufacturer_service is None:
        _manufacturer_service = ReferenceService(
            "manufacturers", "manufacturer_id", "manufacturer"
        )
    return _manufacturer_service

"""
Vendor and manufacturer reference records.

Both map a numeric source id from the feed (natural key) to a generated
stable id. Records are created once and never updated by the importer.
"""

from pydantic import Field

from models.base import BaseSchema


class ReferenceRecord(BaseSchema):
    """Natural key to stable id mapping."""

    source_id: str = Field(..., min_length=1, description="Feed ManufacturerID as a string")
    stable_id: str = Field(..., min_length=1, description="Generated id stored on products")
    name: str = Field("", description="Display name at creation time")

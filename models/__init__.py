"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.feed import FeedRow, AVAILABLE_MARKER
from models.product import (
    ProductType,
    PriceVisibility,
    ProductImage,
    VariantAttributes,
    ProductVariant,
    ProductData,
    ProductDraft,
    StoredProduct,
)
from models.reference import ReferenceRecord
from models.import_run import ImportStatus, ImportSummary

__all__ = [
    "BaseSchema",
    # Feed
    "FeedRow",
    "AVAILABLE_MARKER",
    # Product
    "ProductType",
    "PriceVisibility",
    "ProductImage",
    "VariantAttributes",
    "ProductVariant",
    "ProductData",
    "ProductDraft",
    "StoredProduct",
    # References
    "ReferenceRecord",
    # Import
    "ImportStatus",
    "ImportSummary",
]

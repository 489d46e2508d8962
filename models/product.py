"""
Product document schemas.

A product row in the store holds the document under `data` plus the
columns the pipeline queries on (doc_id, name, is_deleted).
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema


class ProductType(str, Enum):
    """Product fulfilment type."""
    NON_INVENTORY = "non-inventory"


class PriceVisibility(str, Enum):
    """Who can see storefront prices."""
    MEMBERS_ONLY = "members-only"
    PUBLIC = "public"


class ProductImage(BaseSchema):
    """Image attached to a variant."""

    file_name: str = Field("", description="Image file name from the feed")
    cdn_link: Optional[str] = Field(None, description="Image URL, if the feed has one")
    i: int = Field(0, ge=0, description="Position in the variant's image list")
    alt: Optional[str] = Field(None, description="Alt text")


class VariantAttributes(BaseSchema):
    """Free-form variant attributes."""

    packaging: str = ""
    description: str = ""


class ProductVariant(BaseSchema):
    """
    Purchasable variant of a product.

    price is the marked-up selling price; cost is the raw feed unit price.
    """

    id: str = Field(..., description="Generated variant id")
    available: bool = False
    attributes: VariantAttributes = Field(default_factory=VariantAttributes)
    cost: float = Field(0.0, ge=0)
    currency: str = "USD"
    description: str = ""
    manufacturer_item_code: str = ""
    manufacturer_item_id: str = ""
    packaging: str = ""
    price: float = Field(0.0, ge=0)
    sku: str = ""
    active: bool = True
    images: list[ProductImage] = Field(default_factory=list)
    item_code: str = ""


class ProductData(BaseSchema):
    """Product document body."""

    name: str = Field(..., min_length=1, description="Unique product name (upsert key)")
    type: ProductType = ProductType.NON_INVENTORY
    short_description: str = ""
    description: str = ""
    vendor_id: str = Field(..., min_length=1)
    manufacturer_id: str = Field(..., min_length=1)
    storefront_price_visibility: PriceVisibility = PriceVisibility.MEMBERS_ONLY
    variants: list[ProductVariant] = Field(default_factory=list)
    is_deleted: bool = False


class ProductDraft(BaseSchema):
    """
    Fully transformed product, not yet persisted.

    Produced by the row transformer, written by ProductService.bulk_upsert().
    """

    doc_id: str = Field(..., min_length=1, description="Generated product id")
    data: ProductData

    @property
    def name(self) -> str:
        return self.data.name

    def to_record(self) -> dict:
        """Row written to the products table (full replace on upsert)."""
        return {
            "doc_id": self.doc_id,
            "name": self.data.name,
            "data": self.data.model_dump(mode="json"),
            "is_deleted": self.data.is_deleted,
        }


class StoredProduct(BaseSchema):
    """Product row as read back from the store."""

    doc_id: str
    name: str
    data: dict = Field(default_factory=dict)
    is_deleted: bool = False

"""
Feed row schema.

Maps the tab-separated feed's column headers to snake_case fields.
Every value arrives as a string; missing columns default to "".
"""

from pydantic import ConfigDict, Field

from models.base import BaseSchema


AVAILABLE_MARKER = "Available"


class FeedRow(BaseSchema):
    """One record of the product feed."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore"
    )

    product_id: str = Field("", alias="ProductID")
    manufacturer_id: str = Field("", alias="ManufacturerID")
    manufacturer_name: str = Field("", alias="ManufacturerName")
    product_name: str = Field("", alias="ProductName")
    primary_category_name: str = Field("", alias="PrimaryCategoryName")
    product_description: str = Field("", alias="ProductDescription")
    price_description: str = Field("", alias="PriceDescription")
    item_description: str = Field("", alias="ItemDescription")
    unit_price: str = Field("", alias="UnitPrice")
    pkg: str = Field("", alias="PKG")
    manufacturer_item_code: str = Field("", alias="ManufacturerItemCode")
    availability: str = Field("", alias="Availability")
    image_file_name: str = Field("", alias="ImageFileName")
    item_image_url: str = Field("", alias="ItemImageURL")
    ndc_item_code: str = Field("", alias="NDCItemCode")

    @property
    def is_available(self) -> bool:
        return self.availability == AVAILABLE_MARKER

"""
Feed row to product draft transformation.

One feed row becomes one product with exactly one variant and one image.
"""

from typing import Optional, Union
import structlog

from pydantic import ValidationError as PydanticValidationError

from models.feed import FeedRow
from models.product import (
    ProductData,
    ProductDraft,
    ProductImage,
    ProductVariant,
    VariantAttributes,
)
from parsers.feed_parser import parse_price
from services.reference_service import (
    ReferenceService,
    get_vendor_service,
    get_manufacturer_service,
)
from services.description_enhancer_service import (
    DescriptionEnhancerService,
    get_description_enhancer,
)
from exceptions import InvalidFeedRowError
from utils.ids import new_id
from utils.text_utils import clean_name, clean_text, parse_source_id

logger = structlog.get_logger(__name__)

PRICE_MARKUP = 1.2
CURRENCY = "USD"


class ProductTransformService:
    """
    Build ProductDraft objects from feed rows.

    Resolves vendor and manufacturer ids (both from the row's
    manufacturer id/name) and runs the description enhancer.
    """

    def __init__(
        self,
        vendor_service: Optional[ReferenceService] = None,
        manufacturer_service: Optional[ReferenceService] = None,
        enhancer: Optional[DescriptionEnhancerService] = None,
    ):
        self.vendor_service = vendor_service or get_vendor_service()
        self.manufacturer_service = manufacturer_service or get_manufacturer_service()
        self.enhancer = enhancer or get_description_enhancer()

    @staticmethod
    def marked_up_price(unit_price: float) -> float:
        """Selling price: unit price plus the fixed 20% markup, in cents."""
        return round(unit_price * PRICE_MARKUP, 2)

    def transform(self, row: Union[FeedRow, dict]) -> ProductDraft:
        """
        Transform one feed row into a product draft.

        Args:
            row: FeedRow or raw dict keyed by feed column names

        Returns:
            ProductDraft

        Raises:
            InvalidFeedRowError: Row lacks a manufacturer name, product name
                or numeric manufacturer id (row is skipped)
            DatabaseError: Vendor/manufacturer lookup or creation failed
        """
        raw = row if isinstance(row, dict) else row.model_dump(by_alias=True)
        try:
            feed_row = row if isinstance(row, FeedRow) else FeedRow.model_validate(row)
        except PydanticValidationError as e:
            raise InvalidFeedRowError(f"unreadable row: {e.error_count()} errors", raw) from e

        manufacturer_name = clean_name(feed_row.manufacturer_name)
        if not manufacturer_name:
            raise InvalidFeedRowError("missing ManufacturerName", raw)

        # Upsert key: kept as the feed gives it, stripped only
        product_name = feed_row.product_name
        if not product_name:
            raise InvalidFeedRowError("missing ProductName", raw)

        source_id = parse_source_id(feed_row.manufacturer_id)
        if source_id is None:
            raise InvalidFeedRowError("ManufacturerID is not numeric", raw)

        doc_id = new_id()

        vendor_id = self.vendor_service.resolve(source_id, manufacturer_name)
        manufacturer_id = self.manufacturer_service.resolve(source_id, manufacturer_name)

        description = self.enhancer.enhance(
            product_name,
            clean_text(feed_row.primary_category_name),
            clean_text(feed_row.product_description) or None,
        )

        unit_price = parse_price(feed_row.unit_price)
        item_description = clean_text(feed_row.item_description)
        packaging = feed_row.pkg
        item_code = feed_row.manufacturer_item_code

        image = ProductImage(
            file_name=feed_row.image_file_name,
            cdn_link=feed_row.item_image_url or None,
            i=0,
            alt=product_name
        )

        try:
            variant = ProductVariant(
                id=new_id(),
                available=feed_row.is_available,
                attributes=VariantAttributes(
                    packaging=packaging,
                    description=item_description
                ),
                cost=unit_price,
                currency=CURRENCY,
                description=item_description,
                manufacturer_item_code=item_code,
                manufacturer_item_id=feed_row.manufacturer_id,
                packaging=packaging,
                price=self.marked_up_price(unit_price),
                sku=f"{item_code}{packaging}",
                active=True,
                images=[image],
                item_code=feed_row.ndc_item_code
            )

            draft = ProductDraft(
                doc_id=doc_id,
                data=ProductData(
                    name=product_name,
                    short_description=clean_text(feed_row.price_description),
                    description=description,
                    vendor_id=vendor_id,
                    manufacturer_id=manufacturer_id,
                    variants=[variant]
                )
            )
        except PydanticValidationError as e:
            raise InvalidFeedRowError(f"invalid product fields: {e.error_count()} errors", raw) from e

        logger.debug(
            "row_transformed",
            product_name=product_name,
            doc_id=doc_id,
            sku=variant.sku,
            price=variant.price
        )

        return draft

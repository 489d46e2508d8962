"""
Unit tests for ProductTransformService.

Run: pytest tests/unit/test_product_transform_service.py -v
"""

import pytest
from unittest.mock import MagicMock

from models.feed import FeedRow
from services.product_transform_service import ProductTransformService
from exceptions import InvalidFeedRowError, DatabaseError
from tests.factories import FeedRowFactory


class TestTransformExample:
    """The worked example row."""

    def test_example_row(self, transformer, sample_row):
        draft = transformer.transform(sample_row)

        variant = draft.data.variants[0]
        assert variant.price == pytest.approx(3.00)
        assert variant.cost == pytest.approx(2.50)
        assert variant.sku == "GZ1BX"
        assert variant.available is True

    def test_document_shape(self, transformer, sample_row, mock_supabase):
        draft = transformer.transform(sample_row)
        data = draft.data

        assert draft.doc_id
        assert data.name == "Gauze"
        assert data.type.value == "non-inventory"
        assert data.short_description == "Box of 100"
        assert data.description == "Enhanced description."
        assert data.storefront_price_visibility.value == "members-only"
        assert data.is_deleted is False
        assert data.vendor_id == mock_supabase.rows("vendors")[0]["vendor_id"]
        assert data.manufacturer_id == mock_supabase.rows("manufacturers")[0]["manufacturer_id"]

        assert len(data.variants) == 1
        variant = data.variants[0]
        assert variant.id
        assert variant.currency == "USD"
        assert variant.packaging == "BX"
        assert variant.attributes.packaging == "BX"
        assert variant.attributes.description == "4x4 in, 12 ply"
        assert variant.manufacturer_item_code == "GZ1"
        assert variant.manufacturer_item_id == "77"
        assert variant.item_code == "NDC-001"
        assert variant.active is True

        assert len(variant.images) == 1
        image = variant.images[0]
        assert image.i == 0
        assert image.file_name == "gz1.jpg"
        assert image.cdn_link == "https://cdn.example.com/gz1.jpg"
        assert image.alt == "Gauze"

    def test_accepts_feed_row_model(self, transformer, sample_row):
        draft = transformer.transform(FeedRow.model_validate(sample_row))
        assert draft.data.variants[0].sku == "GZ1BX"


class TestTransformFields:

    @pytest.mark.parametrize("unit_price,expected_price", [
        ("10.00", 12.00),
        ("0.99", 1.19),
        ("1234.56", 1481.47),
    ])
    def test_markup_is_twenty_percent(self, transformer, unit_price, expected_price):
        draft = transformer.transform(FeedRowFactory.create(UnitPrice=unit_price))
        assert draft.data.variants[0].price == pytest.approx(expected_price)

    @pytest.mark.parametrize("unit_price", ["", "call for price", "N/A"])
    def test_non_numeric_price_degrades_to_zero(self, transformer, unit_price):
        draft = transformer.transform(FeedRowFactory.create(UnitPrice=unit_price))
        variant = draft.data.variants[0]
        assert variant.price == 0.0
        assert variant.cost == 0.0

    @pytest.mark.parametrize("availability", ["Unavailable", "available", "", "Backorder"])
    def test_only_exact_marker_is_available(self, transformer, availability):
        draft = transformer.transform(FeedRowFactory.create(Availability=availability))
        assert draft.data.variants[0].available is False

    def test_missing_image_url_is_none(self, transformer):
        draft = transformer.transform(FeedRowFactory.create(ItemImageURL=""))
        assert draft.data.variants[0].images[0].cdn_link is None

    def test_product_name_kept_as_given(self, transformer):
        """Inner spacing and length are preserved; only the ends are stripped."""
        draft = transformer.transform(FeedRowFactory.create(ProductName="  Gauze  Pads   4x4  "))
        assert draft.name == "Gauze  Pads   4x4"
        assert draft.data.variants[0].images[0].alt == "Gauze  Pads   4x4"

    def test_long_product_name_not_truncated(self, transformer):
        long_name = "Sterile Gauze " + "x" * 300
        draft = transformer.transform(FeedRowFactory.create(ProductName=long_name))
        assert draft.name == long_name

    def test_names_differing_in_spacing_stay_distinct(self, transformer):
        first = transformer.transform(FeedRowFactory.create(ProductName="Gauze Pads"))
        second = transformer.transform(FeedRowFactory.create(ProductName="Gauze  Pads"))
        assert first.name != second.name

    def test_fresh_ids_each_call(self, transformer):
        row = FeedRowFactory.create()
        first = transformer.transform(row)
        second = transformer.transform(row)

        assert first.doc_id != second.doc_id
        assert first.data.variants[0].id != second.data.variants[0].id
        assert first.data.vendor_id == second.data.vendor_id

    def test_enhancer_receives_name_category_description(self, transformer, mock_anthropic):
        transformer.transform(FeedRowFactory.create(
            ProductName="Syringe",
            PrimaryCategoryName="Needles & Syringes",
            ProductDescription="Luer lock"
        ))

        prompt = mock_anthropic.messages.calls[0]["messages"][0]["content"]
        assert "Product name: Syringe" in prompt
        assert "Category: Needles & Syringes" in prompt
        assert "Product description: Luer lock" in prompt

    def test_to_record(self, transformer, sample_row):
        draft = transformer.transform(sample_row)
        record = draft.to_record()

        assert record["doc_id"] == draft.doc_id
        assert record["name"] == "Gauze"
        assert record["is_deleted"] is False
        assert record["data"]["variants"][0]["sku"] == "GZ1BX"
        assert record["data"]["type"] == "non-inventory"


class TestTransformRejects:
    """Rows that must be skipped."""

    @pytest.mark.parametrize("overrides,reason", [
        ({"ManufacturerName": ""}, "missing ManufacturerName"),
        ({"ManufacturerName": "   "}, "missing ManufacturerName"),
        ({"ProductName": ""}, "missing ProductName"),
        ({"ManufacturerID": "abc"}, "ManufacturerID is not numeric"),
        ({"ManufacturerID": ""}, "ManufacturerID is not numeric"),
    ])
    def test_invalid_rows_raise(self, transformer, overrides, reason, mock_supabase):
        with pytest.raises(InvalidFeedRowError) as exc_info:
            transformer.transform(FeedRowFactory.create(**overrides))

        assert exc_info.value.details["reason"] == reason
        assert exc_info.value.status_code == 422
        assert mock_supabase.rows("vendors") == []

    def test_resolver_failure_propagates(self, enhancer):
        vendor_service = MagicMock()
        vendor_service.resolve.side_effect = DatabaseError("upsert", "connection reset")
        service = ProductTransformService(
            vendor_service=vendor_service,
            manufacturer_service=MagicMock(),
            enhancer=enhancer
        )

        with pytest.raises(DatabaseError):
            service.transform(FeedRowFactory.create())

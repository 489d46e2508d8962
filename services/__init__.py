"""
Business logic services.

Each service handles one step of the product feed import.
"""

from services.product_service import ProductService, get_product_service
from services.reference_service import (
    ReferenceService,
    get_vendor_service,
    get_manufacturer_service,
)
from services.description_enhancer_service import (
    DescriptionEnhancerService,
    get_description_enhancer,
)
from services.order_service import OrderService, get_order_service
from services.product_transform_service import ProductTransformService
from services.product_import_service import (
    ProductImportService,
    get_product_import_service,
)

__all__ = [
    "ProductService",
    "get_product_service",
    "ReferenceService",
    "get_vendor_service",
    "get_manufacturer_service",
    "DescriptionEnhancerService",
    "get_description_enhancer",
    "OrderService",
    "get_order_service",
    "ProductTransformService",
    "ProductImportService",
    "get_product_import_service",
]

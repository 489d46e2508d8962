"""
Order lookups used by the importer before soft-deleting a product.
"""

from typing import Optional
import structlog

logger = structlog.get_logger(__name__)


class OrderService:
    """
    Order-existence checks.

    Orders live outside this service; until that integration exists,
    has_orders() reports no orders for every product.
    """

    def has_orders(self, product_id: str) -> bool:
        """
        Check whether any order references a product.

        Args:
            product_id: Product doc_id

        Returns:
            True if the product has orders (always False for now)
        """
        logger.debug("checking_product_orders", product_id=product_id, has_orders=False)
        return False


# Singleton instance for convenience
_order_service: Optional[OrderService] = None


def get_order_service() -> OrderService:
    """Get or create OrderService instance."""
    global _order_service
    if _order_service is None:
        _order_service = OrderService()
    return _order_service

"""Read-only selectors (query side)."""

from inventory_kernel.selectors.adjustment_selector import AdjustmentSelector
from inventory_kernel.selectors.base import BaseSelector
from inventory_kernel.selectors.order_selector import OrderSelector
from inventory_kernel.selectors.product_selector import ProductSelector

__all__ = [
    "AdjustmentSelector",
    "BaseSelector",
    "OrderSelector",
    "ProductSelector",
]

"""Domain models for the inventory kernel."""

from inventory_kernel.domain.values import AdjustmentType, OrderStatus
from inventory_kernel.models.adjustment import InventoryAdjustment
from inventory_kernel.models.order import Order, OrderItem
from inventory_kernel.models.product import Product

__all__ = [
    "AdjustmentType",
    "InventoryAdjustment",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
]

"""Services for the inventory kernel (write side)."""

from inventory_kernel.services.adjustment_service import AdjustmentService
from inventory_kernel.services.notifier import EventNotifier, ListenerHub
from inventory_kernel.services.order_service import OrderService
from inventory_kernel.services.product_service import ProductService
from inventory_kernel.services.stock_ledger import StockLedger
from inventory_kernel.services.transaction import TransactionExecutor

__all__ = [
    "AdjustmentService",
    "EventNotifier",
    "ListenerHub",
    "OrderService",
    "ProductService",
    "StockLedger",
    "TransactionExecutor",
]

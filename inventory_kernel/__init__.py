"""
Inventory Kernel

The transactional core of the inventory/order backend:
- Atomic stock ledger (stock never negative, every change audited)
- Multi-line order placement in one transaction
- Manual stock adjustments
- Best-effort post-commit event notification
"""

__version__ = "0.1.0"

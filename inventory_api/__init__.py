"""HTTP surface for the inventory kernel (FastAPI)."""

from inventory_api.app import create_app

__all__ = ["create_app"]

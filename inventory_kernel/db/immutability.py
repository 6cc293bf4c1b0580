"""
ORM-Level Immutability Enforcement.

===============================================================================
WHY THIS EXISTS
===============================================================================

Stock movements must be auditable.  The adjustment trail is only worth
something if nobody can quietly edit or remove a row after the fact, and an
order's captured prices and total must not drift once committed.

SQLAlchemy fires events before UPDATE/DELETE operations reach the database.
We register listeners that intercept these events and check our invariants:

    session.flush()
         |
         v
    [before_update event] --> _check_*_immutability() --> ImmutabilityViolationError
         |                                                        ^
         v                                                        |
    [before_delete event] --> _check_*_delete() -----------------+
         |
         v
    SQL sent to database (only if checks pass)

If a check fails, ImmutabilityViolationError propagates out of flush() and
the enclosing session_scope() rolls the transaction back.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity              | Rule
--------------------|-----------------------------------------------------
InventoryAdjustment | ALWAYS immutable; never deleted
OrderItem           | Never updated; deleted only together with its Order
Order               | total_amount and user_id frozen; status may change

===============================================================================
USAGE
===============================================================================

    from inventory_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # Called once at startup

===============================================================================
"""

from sqlalchemy import event, inspect
from sqlalchemy.orm import object_session

from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

# Audit metadata that may change on otherwise-frozen rows
_AUDIT_FIELDS = frozenset({"updated_at"})

_ORDER_FROZEN_FIELDS = ("total_amount", "user_id")


def _blocked(entity_type: str, entity_id, operation: str, reason: str, field: str | None = None):
    extra = {
        "entity_type": entity_type,
        "entity_id": str(entity_id),
        "operation": operation,
    }
    if field is not None:
        extra["field"] = field
    logger.error("immutability_violation_blocked", extra=extra)
    return ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(entity_id),
        reason=reason,
    )


def _changed_fields(target) -> list[str]:
    changed = []
    for attr in inspect(target).attrs:
        if attr.key in _AUDIT_FIELDS:
            continue
        if attr.history.has_changes():
            changed.append(attr.key)
    return changed


def _check_adjustment_immutability(mapper, connection, target):
    """Adjustments are append-only: any column change is rejected."""
    changed = _changed_fields(target)
    if changed:
        raise _blocked(
            "InventoryAdjustment",
            target.id,
            "UPDATE",
            f"Cannot modify field '{changed[0]}' on an inventory adjustment",
            field=changed[0],
        )


def _check_adjustment_delete(mapper, connection, target):
    raise _blocked(
        "InventoryAdjustment",
        target.id,
        "DELETE",
        "Inventory adjustments cannot be deleted",
    )


def _check_order_item_immutability(mapper, connection, target):
    changed = _changed_fields(target)
    if changed:
        raise _blocked(
            "OrderItem",
            target.id,
            "UPDATE",
            f"Cannot modify field '{changed[0]}' on an order item",
            field=changed[0],
        )


def _check_order_item_delete(mapper, connection, target):
    """Items go only when their order goes (lifecycle-bound ownership)."""
    session = object_session(target)
    parent = target.order
    if session is not None and parent is not None and parent in session.deleted:
        return
    raise _blocked(
        "OrderItem",
        target.id,
        "DELETE",
        "Order items can only be deleted together with their order",
    )


def _check_order_immutability(mapper, connection, target):
    """Order totals and placer are frozen; only status may change."""
    state = inspect(target)
    for field in _ORDER_FROZEN_FIELDS:
        if state.attrs[field].history.has_changes():
            raise _blocked(
                "Order",
                target.id,
                "UPDATE",
                f"Cannot modify field '{field}' on a committed order",
                field=field,
            )


def _listeners():
    from inventory_kernel.models.adjustment import InventoryAdjustment
    from inventory_kernel.models.order import Order, OrderItem

    return (
        (InventoryAdjustment, "before_update", _check_adjustment_immutability),
        (InventoryAdjustment, "before_delete", _check_adjustment_delete),
        (OrderItem, "before_update", _check_order_item_immutability),
        (OrderItem, "before_delete", _check_order_item_delete),
        (Order, "before_update", _check_order_immutability),
    )


def register_immutability_listeners() -> None:
    """
    Register all immutability enforcement event listeners (idempotent).

    Call this after all models are imported but before any database
    operations begin.
    """
    for target, identifier, fn in _listeners():
        if not event.contains(target, identifier, fn):
            event.listen(target, identifier, fn)
    logger.debug("immutability_listeners_registered")


def unregister_immutability_listeners() -> None:
    """
    Remove all immutability enforcement event listeners.

    FOR TESTING ONLY.
    """
    for target, identifier, fn in _listeners():
        if event.contains(target, identifier, fn):
            event.remove(target, identifier, fn)

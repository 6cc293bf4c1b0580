"""
Values -- closed variants shared by the domain and the ORM layer.

Responsibility:
    Defines the two closed enums of the system (order status and adjustment
    type) and the boundary parsers that turn free strings into them.  Past
    the parsers, nothing in the kernel handles these as raw strings.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Importable by models/.

Failure modes:
    - InvalidStatusError when a string is not a member of the closed set.
"""

from enum import Enum

from inventory_kernel.exceptions import InvalidStatusError


class OrderStatus(str, Enum):
    """Lifecycle status of an order.

    Contract: changes only through an explicit status update.
    """

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AdjustmentType(str, Enum):
    """Direction of a stock movement.

    Contract: IN requires a positive delta, OUT a negative delta.
    """

    IN = "IN"
    OUT = "OUT"


def parse_order_status(value: "OrderStatus | str | None") -> OrderStatus:
    """Parse an order status; None means the default (PENDING)."""
    if value is None:
        return OrderStatus.PENDING
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).upper())
    except ValueError:
        raise InvalidStatusError(
            "status", str(value), [s.value for s in OrderStatus]
        ) from None


def parse_adjustment_type(value: "AdjustmentType | str") -> AdjustmentType:
    """Parse an adjustment type (IN / OUT)."""
    if isinstance(value, AdjustmentType):
        return value
    try:
        return AdjustmentType(str(value).upper())
    except ValueError:
        raise InvalidStatusError(
            "type", str(value), [t.value for t in AdjustmentType]
        ) from None

"""
TransactionExecutor -- runs one unit of work as one atomic transaction.

Responsibility:
    Executes the write stage of a transaction script: opens a session via
    ``session_scope()``, hands it to the caller-supplied work function,
    and commits all of its writes or none of them.

Architecture position:
    Kernel > Services -- the only place in the kernel where a transaction
    is committed.  Engines (OrderService, AdjustmentService,
    ProductService) plan first, then pass their writes here.

Invariants enforced:
    - All-or-nothing: any exception inside ``work`` rolls back every write
      made through the session.
    - Kernel errors (InventoryKernelError) propagate unchanged so callers
      can react by type.
    - Storage errors (SQLAlchemyError) are rolled back and re-raised as
      TransactionFailureError with the driver error chained, never
      exposed in the message.
    - No automatic retries.

Failure modes:
    - TransactionFailureError on any SQLAlchemyError (including commit).
"""

from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from inventory_kernel.db.engine import session_scope
from inventory_kernel.exceptions import InventoryKernelError, TransactionFailureError
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.transaction")

T = TypeVar("T")


class TransactionExecutor:
    """
    Commit-all-or-nothing runner for a unit of work.

    Usage:
        executor = TransactionExecutor()
        record = executor.run("place_order", lambda session: ...)
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory

    def run(self, operation: str, work: Callable[[Session], T]) -> T:
        """
        Run ``work`` inside one transaction and return its result.

        Postconditions:
            On return, every write made by ``work`` is committed.  On
            raise, none of them is.

        Raises:
            InventoryKernelError subclasses raised by ``work`` (unchanged).
            TransactionFailureError on storage-layer failure.
        """
        try:
            with session_scope(self._session_factory) as session:
                return work(session)
        except InventoryKernelError:
            raise
        except SQLAlchemyError as exc:
            logger.error(
                "transaction_failed",
                extra={"operation": operation},
                exc_info=True,
            )
            raise TransactionFailureError(operation) from exc

    def read(self, work: Callable[[Session], T]) -> T:
        """Run a read-only unit of work; storage errors map the same way."""
        return self.run("read", work)

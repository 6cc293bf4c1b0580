"""
Service base classes.

Two kinds of service live in the kernel:

- Session-bound writers (StockLedger) run inside a transaction somebody
  else opened.  They flush, never commit or roll back.
- Transactional services (orders, adjustments, catalogue) own their
  transactions: every public call goes through a TransactionExecutor.
"""

from sqlalchemy.orm import Session, sessionmaker

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.services.transaction import TransactionExecutor


class SessionBoundService:
    """Works within the caller's session; the caller owns commit/rollback."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self._clock = clock or SystemClock()


class TransactionalService:
    """Opens one transaction per public operation."""

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
    ):
        self._executor = TransactionExecutor(session_factory)
        self._clock = clock or SystemClock()

"""
EventNotifier -- best-effort, post-commit publication of domain events.

Responsibility:
    Delivers ``stock:updated`` and ``order:created`` payloads to whatever
    listeners are connected at emit time.  Purely observational: nothing
    in the kernel reads these events back, and losing one never changes
    stored state.

Architecture position:
    Kernel > Services -- imperative shell.
    An EventNotifier is injected into OrderService and AdjustmentService
    at construction.  ListenerHub is the in-process transport; any object
    with ``emit(event_name, payload)`` can stand in for it.

Invariants enforced:
    - publish() never raises.  Transport failures are logged as
      ``notification_failed`` and swallowed.
    - An EventNotifier without a transport is a no-op.
    - ListenerHub.emit() delivers to a snapshot of the listener set, so
      listeners may subscribe or unsubscribe concurrently (even from
      inside a callback).  A listener that raises is logged and skipped;
      the remaining listeners still receive the event.

Non-goals:
    - No retry, no persistence, no acknowledgement, no replay for
      listeners that connect after the fact.
"""

import threading
from collections.abc import Callable
from typing import Any, Protocol

from inventory_kernel.domain.events import DomainEvent
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.notifier")

Listener = Callable[[str, dict[str, Any]], None]


class ListenerTransport(Protocol):
    """Publish primitive to all currently connected subscribers."""

    def emit(self, event_name: str, payload: dict[str, Any]) -> None: ...


class ListenerHub:
    """
    Thread-safe in-process listener registry.

    Usage:
        hub = ListenerHub()
        unsubscribe = hub.subscribe(lambda name, payload: ...)
        ...
        unsubscribe()
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        with self._lock:
            snapshot = list(self._listeners)
        for listener in snapshot:
            try:
                listener(event_name, payload)
            except Exception:
                logger.warning(
                    "listener_failed",
                    extra={"event_name": event_name},
                    exc_info=True,
                )


class EventNotifier:
    """
    Engine-facing publisher.

    Contract:
        Call publish() only after the owning transaction has committed.
    """

    def __init__(self, transport: ListenerTransport | None = None):
        self._transport = transport

    def publish(self, event: DomainEvent) -> None:
        if self._transport is None:
            logger.debug("notification_skipped", extra={"event_name": event.name})
            return
        try:
            self._transport.emit(event.name, event.to_payload())
        except Exception:
            logger.warning(
                "notification_failed",
                extra={"event_name": event.name},
                exc_info=True,
            )
            return
        logger.debug("notification_published", extra={"event_name": event.name})

"""Module event emitter for dispatching events to observers."""

import logging
from typing import Any

from gadgetrl.domain.events.event import ModuleEvent
from gadgetrl.domain.events.event_types import ModuleEventType
from gadgetrl.domain.events.observer import ModuleObserver

logger = logging.getLogger(__name__)


class ModuleEventEmitter:
    """Dispatches module events to subscribed observers.

    Each subscription carries an optional event type filter; ``None`` means
    the observer receives every event.
    """

    def __init__(self) -> None:
        self._subscriptions: list[tuple[ModuleObserver, frozenset[ModuleEventType] | None]] = []

    @property
    def has_observers(self) -> bool:
        return bool(self._subscriptions)

    def subscribe(
        self,
        observer: ModuleObserver,
        event_types: list[ModuleEventType] | None = None,
    ) -> None:
        """Subscribe to specific event types, or all events if None."""
        wanted = frozenset(event_types) if event_types is not None else None
        self._subscriptions.append((observer, wanted))

    def unsubscribe(self, observer: ModuleObserver) -> None:
        """Remove every subscription held by ``observer``."""
        self._subscriptions = [
            (subscriber, wanted)
            for subscriber, wanted in self._subscriptions
            if subscriber is not observer
        ]

    def emit(self, event_type: ModuleEventType, bundle_id: str, **fields: Any) -> ModuleEvent | None:
        """Build an event and dispatch it.

        Returns:
            The dispatched event, or None when nobody is listening
        """
        if not self._subscriptions:
            return None

        event = ModuleEvent(event_type=event_type, bundle_id=bundle_id, **fields)
        for observer, wanted in list(self._subscriptions):
            if wanted is None or event_type in wanted:
                self._safe_notify(observer, event)
        return event

    def _safe_notify(self, observer: ModuleObserver, event: ModuleEvent) -> None:
        # Observers must never break module resolution.
        try:
            observer.on_event(event)
        except Exception as e:
            logger.warning(f"Observer {observer} failed on {event.event_type.value}: {e}")

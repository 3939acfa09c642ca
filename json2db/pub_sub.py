from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict

from json2db.logger import get_logger


logger = get_logger(__name__)


class EventKind(str, Enum):
    """Kinds of store operations that are published to subscribers."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"


class StoreEvent(BaseModel):
    """A single read/write/delete notification."""

    kind: EventKind
    path: str
    payload: Any = None

    model_config = ConfigDict(frozen=True)


Subscriber = Callable[[StoreEvent], None]


@dataclass
class _Subscription:
    callback: Subscriber
    kinds: frozenset[EventKind] | None


@dataclass
class NotificationBus:
    """Synchronous fan-out of store events to registered subscribers.

    Delivery happens on the caller's thread, in registration order. A
    subscriber that raises is logged and skipped; it never fails the
    store operation that triggered the event.
    """

    _subscriptions: dict[UUID, _Subscription] = field(default_factory=dict)

    def subscribe(
        self,
        callback: Subscriber,
        kinds: EventKind | list[EventKind] | None = None,
    ) -> UUID:
        """Register ``callback`` and return an id usable with ``unsubscribe``.

        Args:
            callback: Called with each matching ``StoreEvent``.
            kinds: Restrict delivery to these event kinds. ``None`` means all.
        """
        if isinstance(kinds, EventKind):
            kinds = [kinds]
        subscriber_id = uuid4()
        self._subscriptions[subscriber_id] = _Subscription(
            callback=callback,
            kinds=frozenset(kinds) if kinds is not None else None,
        )
        return subscriber_id

    def unsubscribe(self, subscriber_id: UUID) -> bool:
        return self._subscriptions.pop(subscriber_id, None) is not None

    def __len__(self) -> int:
        return len(self._subscriptions)

    def emit(self, event: StoreEvent) -> None:
        for subscriber_id, subscription in list(self._subscriptions.items()):
            if subscription.kinds is not None and event.kind not in subscription.kinds:
                continue
            try:
                subscription.callback(event)
            except Exception as e:
                logger.warning(
                    f"Subscriber {subscriber_id} failed on {event.kind.value} "
                    f"{event.path}: {e}"
                )

    def publish(self, kind: EventKind, path: str, payload=None) -> None:
        self.emit(StoreEvent(kind=kind, path=path, payload=payload))


_default_bus: NotificationBus | None = None


def get_default_bus() -> NotificationBus:
    """Get the process-wide bus shared by stores built without their own"""
    global _default_bus
    if _default_bus is None:
        _default_bus = NotificationBus()
    return _default_bus

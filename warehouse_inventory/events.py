"""Typed events passed between the interaction surface and the controller.

Rendering code never calls edit handlers directly: it publishes an event on
the bus and whoever owns the behaviour subscribes to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Type, TypeVar

from .models import Pallet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotClicked:
    slot_id: str


@dataclass(frozen=True)
class SelectionChanged:
    slot_id: Optional[str]


@dataclass(frozen=True)
class EditRequested:
    """The user asked to edit the pallet with `pallet_id`."""

    pallet_id: str


@dataclass(frozen=True)
class PalletChanged:
    """Post-mutation state of the pallet selected for product editing.

    `pallet` is None when the pallet was removed.
    """

    pallet_id: str
    pallet: Optional[Pallet]


@dataclass(frozen=True)
class LayoutReplaced:
    version: int


E = TypeVar("E")
Handler = Callable[[E], None]


class EventBus:
    """Synchronous publish/subscribe keyed by event type.

    Handlers run in subscription order on the caller's thread; `publish`
    returns once all of them have completed.
    """

    def __init__(self):
        self._handlers: Dict[type, List[Callable]] = {}

    def subscribe(self, event_type: Type[E], handler: Handler) -> Callable[[], None]:
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, event: object) -> None:
        handlers = list(self._handlers.get(type(event), ()))
        logger.debug("Publishing %s to %d handler(s)", event, len(handlers))
        for handler in handlers:
            handler(event)

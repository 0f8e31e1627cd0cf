"""Ordered lifecycle observers for one secure entity type."""

from collections.abc import Iterable
from enum import IntEnum
from typing import Protocol

import structlog

from rowguard.application.dto import RequestContext
from rowguard.application.ports import SecureEntity
from rowguard.domain.value_objects import LifecycleEvent

logger = structlog.get_logger(__name__)


class HookPriority(IntEnum):
    """Observer execution priority (lower runs first)."""

    FIRST = 0
    EARLY = 25
    NORMAL = 50
    LATE = 75
    LAST = 100


class LifecycleObserver(Protocol):
    """Observer reacting to entity lifecycle events through ``on_<event>`` methods."""

    priority: int


class LifecyclePipeline:
    """Dispatches lifecycle events to observers in priority order.

    Observers registered with equal priority keep registration order.
    An observer without an ``on_<event>`` method is skipped for that event.
    """

    def __init__(self, observers: Iterable[LifecycleObserver] = ()) -> None:
        self._observers: list[LifecycleObserver] = []
        for observer in observers:
            self.register(observer)

    @property
    def observers(self) -> list[LifecycleObserver]:
        return list(self._observers)

    def register(self, observer: LifecycleObserver) -> None:
        self._observers.append(observer)
        self._observers.sort(key=lambda o: getattr(o, "priority", HookPriority.NORMAL))
        logger.debug(
            "Registered lifecycle observer",
            observer=type(observer).__name__,
            priority=int(getattr(observer, "priority", HookPriority.NORMAL)),
        )

    def dispatch(
        self,
        event: LifecycleEvent,
        entity: SecureEntity,
        context: RequestContext,
    ) -> None:
        for observer in self._observers:
            handler = getattr(observer, f"on_{event.value}", None)
            if handler is not None:
                handler(entity, context)

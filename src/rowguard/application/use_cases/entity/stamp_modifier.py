"""Last modifier stamping - records who created and last changed an entity."""

from collections.abc import Iterable
from contextvars import ContextVar

from rowguard.application.dto import RequestContext
from rowguard.application.ports import SecureEntity
from rowguard.application.use_cases.entity.pipeline import HookPriority


class LastModifierStamp:
    """Writes the caller's user id into audit attributes before insert and update.

    ``update_attributes`` may be overridden for the current flow only (see
    ConflictResolver); other threads and requests keep the configured list.
    """

    priority = HookPriority.EARLY

    def __init__(
        self,
        insert_attributes: Iterable[str] = ("created_by", "updated_by"),
        update_attributes: Iterable[str] = ("updated_by",),
    ) -> None:
        self.insert_attributes = tuple(insert_attributes)
        self._configured = tuple(update_attributes)
        self._override: ContextVar[tuple[str, ...] | None] = ContextVar(
            f"rowguard_stamp_{id(self)}", default=None
        )

    @property
    def update_attributes(self) -> tuple[str, ...]:
        override = self._override.get()
        return self._configured if override is None else override

    @update_attributes.setter
    def update_attributes(self, attributes: Iterable[str]) -> None:
        self._override.set(tuple(attributes))

    def on_before_insert(self, entity: SecureEntity, context: RequestContext) -> None:
        self._stamp(entity, context, self.insert_attributes)

    def on_before_update(self, entity: SecureEntity, context: RequestContext) -> None:
        self._stamp(entity, context, self.update_attributes)

    @staticmethod
    def _stamp(entity: SecureEntity, context: RequestContext, attributes: tuple[str, ...]) -> None:
        identity = context.caller.identity
        user_id = identity.user_id if identity else None
        for name in attributes:
            if entity.has_attribute(name):
                entity.set_attribute(name, user_id)

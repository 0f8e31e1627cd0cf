"""Binding of a mapped class to a secure lifecycle pipeline through ORM events."""

from typing import Any
from weakref import WeakKeyDictionary

import structlog
from sqlalchemy import Connection, event, inspect
from sqlalchemy.orm import Mapper, Session, object_session
from sqlalchemy.orm.attributes import flag_modified

from rowguard.application.dto import RequestContext, SecureOptions
from rowguard.application.use_cases.entity.pipeline import LifecyclePipeline
from rowguard.application.use_cases.entity.resolve_conflicts import ConflictResolver
from rowguard.domain.exceptions import ConfigurationError
from rowguard.domain.value_objects import LifecycleEvent
from rowguard.infrastructure.persistence.sqlalchemy.secure_entity import (
    SqlAlchemySecureEntity,
)

logger = structlog.get_logger(__name__)

CONTEXT_KEY = "rowguard.context"


def set_request_context(session: Session, context: RequestContext) -> None:
    """Attach the request context to a session; every secure flush reads it."""
    session.info[CONTEXT_KEY] = context


def get_request_context(session: Session | None) -> RequestContext:
    context = session.info.get(CONTEXT_KEY) if session is not None else None
    if context is None:
        raise ConfigurationError("No request context bound to the session")
    return context


class SecureModelBinding:
    """Routes ORM events of one mapped class into a LifecyclePipeline.

    before-validate runs from ``before_flush`` for new and modified
    instances; the mapper events map one to one onto lifecycle events.
    A role-only change has no modified column; mark it with ``touch()``.
    """

    def __init__(
        self,
        model: type,
        pipeline: LifecyclePipeline,
        options: SecureOptions,
        resolver: ConflictResolver | None = None,
        session_target: Any = Session,
    ) -> None:
        options.fields.validate(inspect(model).column_attrs.keys())
        self._model = model
        self._pipeline = pipeline
        self._options = options
        self._resolver = resolver
        self._session_target = session_target
        self._entities: WeakKeyDictionary[Any, SqlAlchemySecureEntity] = WeakKeyDictionary()
        self._mapper_events = {
            "before_insert": self._before_insert,
            "before_update": self._before_update,
            "after_insert": self._after_insert,
            "after_update": self._after_update,
            "after_delete": self._after_delete,
        }
        self._session_events = {
            "before_flush": self._before_flush,
            "after_flush_postexec": self._after_flush_postexec,
            "after_soft_rollback": self._after_soft_rollback,
        }

    @property
    def model(self) -> type:
        return self._model

    def listen(self) -> "SecureModelBinding":
        for name, handler in self._mapper_events.items():
            event.listen(self._model, name, handler, propagate=True)
        for name, handler in self._session_events.items():
            event.listen(self._session_target, name, handler)
        logger.info("Secure model bound", model=self._model.__name__)
        return self

    def remove(self) -> None:
        for name, handler in self._mapper_events.items():
            event.remove(self._model, name, handler)
        for name, handler in self._session_events.items():
            event.remove(self._session_target, name, handler)

    def entity_for(
        self,
        target: Any,
        connection: Connection | None = None,
        context: RequestContext | None = None,
    ) -> SqlAlchemySecureEntity:
        entity = self._entities.get(target)
        if entity is None:
            entity = SqlAlchemySecureEntity(target)
            self._entities[target] = entity
        entity.begin_event(connection)
        if context is not None:
            entity.on_save = lambda e: self._pipeline.dispatch(
                LifecycleEvent.BEFORE_UPDATE, e, context
            )
        return entity

    def _dispatch(
        self,
        lifecycle_event: LifecycleEvent,
        connection: Connection | None,
        target: Any,
    ) -> None:
        context = get_request_context(object_session(target))
        entity = self.entity_for(target, connection, context)
        self._pipeline.dispatch(lifecycle_event, entity, context)

    def touch(self, target: Any) -> None:
        """Sync the permission of ``target`` on the next flush even if no column changed.

        Use when only the submitted role set differs. The permission name
        column is flagged modified so the flush emits an UPDATE and the
        update lifecycle runs; its value is compared against the stored row,
        so the flag alone does not count as a rename.
        """
        if not isinstance(target, self._model):
            raise ConfigurationError(
                f"{type(target).__name__} is not bound as {self._model.__name__}"
            )
        name = self._options.fields.permission
        getattr(target, name)
        flag_modified(target, name)

    def _before_flush(self, session: Session, flush_context: Any, instances: Any) -> None:
        for target in list(session.new) + list(session.dirty):
            if not isinstance(target, self._model):
                continue
            if target not in session.new and not session.is_modified(target):
                continue
            context = get_request_context(session)
            entity = self.entity_for(target, session.connection(), context)
            entity.begin_flush()
            self._pipeline.dispatch(LifecycleEvent.BEFORE_VALIDATE, entity, context)

    def _before_insert(self, mapper: Mapper, connection: Connection, target: Any) -> None:
        self._dispatch(LifecycleEvent.BEFORE_INSERT, connection, target)

    def _before_update(self, mapper: Mapper, connection: Connection, target: Any) -> None:
        self._dispatch(LifecycleEvent.BEFORE_UPDATE, connection, target)

    def _after_insert(self, mapper: Mapper, connection: Connection, target: Any) -> None:
        self._dispatch(LifecycleEvent.AFTER_INSERT, connection, target)

    def _after_update(self, mapper: Mapper, connection: Connection, target: Any) -> None:
        self._dispatch(LifecycleEvent.AFTER_UPDATE, connection, target)

    def _after_delete(self, mapper: Mapper, connection: Connection, target: Any) -> None:
        self._dispatch(LifecycleEvent.AFTER_DELETE, connection, target)

    def _after_flush_postexec(self, session: Session, flush_context: Any) -> None:
        self._release()

    def _after_soft_rollback(self, session: Session, previous_transaction: Any) -> None:
        self._release()

    def _release(self) -> None:
        if self._resolver is not None and self._resolver.pending:
            logger.warning("Releasing conflict snapshots left by an interrupted insert")
            self._resolver.restore_all()

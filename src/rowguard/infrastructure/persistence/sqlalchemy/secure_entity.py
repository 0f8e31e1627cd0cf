"""SecureEntity adapter over a mapped SQLAlchemy instance."""

import weakref
from collections.abc import Callable
from typing import Any

from sqlalchemy import Connection, and_, inspect, select, update
from sqlalchemy.orm.attributes import set_committed_value

from rowguard.domain.exceptions import RowGuardError
from rowguard.domain.value_objects import Operation


class SqlAlchemySecureEntity:
    """Wraps one ORM instance for the duration of its flushes.

    Inside mapper events the instance cannot be flushed again, so ``save()``
    writes the attributes set through ``set_attribute`` with a direct UPDATE
    on the flush connection and marks them as committed.

    Old values come from attribute history. A column without
    ``active_history`` that was set while expired has no old value in
    history; it is then read from the row before the flush writes it and
    kept until the next flush.
    """

    def __init__(self, target: Any) -> None:
        self._target_ref = weakref.ref(target)
        self._mapper = inspect(target).mapper
        self._pending: dict[str, Any] = {}
        self._persisted: dict[str, Any] = {}
        self.connection: Connection | None = None
        self.on_save: Callable[["SqlAlchemySecureEntity"], None] | None = None

    @property
    def target(self) -> Any:
        target = self._target_ref()
        if target is None:
            raise RowGuardError("Secure entity instance is gone")
        return target

    def begin_flush(self) -> None:
        """Forget persisted values read during an earlier flush."""
        self._persisted.clear()

    def begin_event(self, connection: Connection | None) -> None:
        """Start a lifecycle event on the given flush connection."""
        self.connection = connection
        self._pending.clear()

    @property
    def entity_name(self) -> str:
        return self._mapper.class_.__name__

    @property
    def is_new_record(self) -> bool:
        return inspect(self.target).key is None

    def primary_key(self) -> dict[str, Any]:
        target = self.target
        keys = {}
        for column in self._mapper.primary_key:
            prop = self._mapper.get_property_by_column(column)
            keys[prop.key] = getattr(target, prop.key)
        return keys

    def has_attribute(self, name: str) -> bool:
        return name in self._mapper.column_attrs.keys()

    def get_attribute(self, name: str) -> Any:
        return getattr(self.target, name)

    def set_attribute(self, name: str, value: Any) -> None:
        setattr(self.target, name, value)
        self._pending[name] = value

    def get_old_attribute(self, name: str) -> Any:
        state = inspect(self.target)
        if state.key is None:
            return None
        history = state.attrs[name].load_history()
        if history.deleted:
            return history.deleted[0]
        if history.unchanged:
            return history.unchanged[0]
        if history.added:
            return self._load_persisted(name)
        return None

    def is_attribute_changed(self, name: str) -> bool:
        state = inspect(self.target)
        history = state.attrs[name].load_history()
        if not history.has_changes():
            return False
        if state.key is None or history.deleted:
            return True
        return self.get_attribute(name) != self.get_old_attribute(name)

    def is_transactional(self, operation: Operation) -> bool:
        # Every ORM flush runs inside the session transaction, whatever the operation.
        return self.connection is not None and self.connection.in_transaction()

    def save(self) -> bool:
        if self.on_save is not None:
            self.on_save(self)
        if not self._pending:
            return True
        if self.connection is None:
            return False

        target = self.target
        values = {
            self._mapper.get_property(name).columns[0].name: value
            for name, value in self._pending.items()
        }
        result = self.connection.execute(
            update(self._mapper.local_table).where(self._key_criteria()).values(values)
        )
        for name, value in self._pending.items():
            set_committed_value(target, name, value)
        self._pending.clear()
        return result.rowcount == 1

    def _key_criteria(self):
        target = self.target
        return and_(
            *(
                column == getattr(target, self._mapper.get_property_by_column(column).key)
                for column in self._mapper.primary_key
            )
        )

    def _load_persisted(self, name: str) -> Any:
        if name in self._persisted:
            return self._persisted[name]
        if self.connection is None:
            raise RowGuardError(
                f"Cannot read persisted '{name}' of {self.entity_name} without a connection"
            )
        column = self._mapper.get_property(name).columns[0]
        value = self.connection.execute(
            select(column).where(self._key_criteria())
        ).scalar_one_or_none()
        self._persisted[name] = value
        return value

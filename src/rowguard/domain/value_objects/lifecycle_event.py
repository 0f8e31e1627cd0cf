"""Entity lifecycle events and persistence operations."""

from enum import StrEnum


class LifecycleEvent(StrEnum):
    """Events delivered by the persistence layer, in firing order for one save."""

    BEFORE_VALIDATE = "before_validate"
    BEFORE_INSERT = "before_insert"
    BEFORE_UPDATE = "before_update"
    AFTER_INSERT = "after_insert"
    AFTER_UPDATE = "after_update"
    AFTER_DELETE = "after_delete"


class Operation(StrEnum):
    """Write operations that must run inside a transaction for secure entities."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"

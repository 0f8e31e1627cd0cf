"""Secure entity port - narrow view of a persisted entity instance."""

from typing import Any, Protocol

from rowguard.domain.value_objects import Operation


class SecureEntity(Protocol):
    """Capabilities rowguard needs from the persistence layer's entity."""

    @property
    def entity_name(self) -> str:
        """Short type name, e.g. ``Document``."""
        ...

    @property
    def is_new_record(self) -> bool: ...

    def primary_key(self) -> dict[str, Any]:
        """Primary key components in declared key order."""
        ...

    def has_attribute(self, name: str) -> bool: ...

    def get_attribute(self, name: str) -> Any: ...

    def set_attribute(self, name: str, value: Any) -> None: ...

    def get_old_attribute(self, name: str) -> Any: ...

    def is_attribute_changed(self, name: str) -> bool: ...

    def is_transactional(self, operation: Operation) -> bool: ...

    def save(self) -> bool:
        """Persist attributes written through set_attribute, skipping validation."""
        ...

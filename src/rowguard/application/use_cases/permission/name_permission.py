"""Permission naming - deterministic name per entity instance."""

import re

from rowguard.application.dto import SecureOptions
from rowguard.application.ports import SecureEntity

DEFAULT_PREFIX = "ACCESS_"

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """``ProjectFile`` -> ``project_file``, ``HTTPRoute`` -> ``http_route``."""
    return _WORD_BOUNDARY.sub("_", name).replace("-", "_").lower()


class PermissionNamer:
    """Derive the permission name for an entity from a template and its primary key."""

    def __init__(self, options: SecureOptions, prefix: str = DEFAULT_PREFIX) -> None:
        self._options = options
        self._prefix = prefix

    def template(self, entity: SecureEntity) -> str:
        if self._options.item_template:
            return self._options.item_template
        return self._prefix + snake_case(entity.entity_name).upper()

    def name(self, entity: SecureEntity) -> str:
        """Template followed by every primary key value, in key order, joined by ``_``."""
        parts = [self.template(entity)]
        parts.extend(str(value) for value in entity.primary_key().values())
        return "_".join(parts)

    def assign(self, entity: SecureEntity) -> str:
        """Set the permission name on the entity unless one is already there."""
        field = self._options.fields.permission
        current = entity.get_attribute(field)
        if current:
            return current
        name = self.name(entity)
        entity.set_attribute(field, name)
        return name

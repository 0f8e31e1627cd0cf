"""Mapping from logical secure fields to entity attribute names."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from rowguard.domain.exceptions import ConfigurationError

SECURE_ON = 1


def flag_value(value: Any) -> int:
    """Integer value of a stored secured flag; empty or unparsable values are 0."""
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def is_secure_on(value: Any) -> bool:
    """True iff a stored secured-flag value equals the on sentinel (1)."""
    return flag_value(value) == SECURE_ON


@dataclass(frozen=True)
class SecureFieldMap:
    """Names of the entity fields holding the secured flag and the permission name.

    ``description_param`` names the field substituted into the permission
    description; it falls back to the permission field.
    """

    secured: str = "rbac_on"
    permission: str = "rbac_item"
    description_param: str | None = None

    @property
    def description_field(self) -> str:
        return self.description_param or self.permission

    def validate(self, attribute_names: Iterable[str]) -> None:
        """Raise ConfigurationError if any mapped field is not an entity attribute."""
        known = set(attribute_names)
        for role, name in (
            ("secured", self.secured),
            ("permission", self.permission),
            ("description_param", self.description_field),
        ):
            if name not in known:
                raise ConfigurationError(
                    f"Secure field '{role}' maps to unknown attribute '{name}'"
                )

"""Secure attribute change set, computed once per validation pass."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AttributeChangeSet:
    """Which security-relevant attributes changed since the last persisted state."""

    enabled_changed: bool = False
    name_changed: bool = False
    roles_changed: bool = False
    current_roles: frozenset[str] = field(default_factory=frozenset)

    @property
    def any(self) -> bool:
        return self.enabled_changed or self.name_changed or self.roles_changed

    @property
    def requires_guard(self) -> bool:
        """Flag or name changes need the caller to hold the entity's secure roles."""
        return self.enabled_changed or self.name_changed

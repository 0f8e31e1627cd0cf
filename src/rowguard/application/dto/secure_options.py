"""Per-entity-type secure configuration."""

from dataclasses import dataclass, field
from string import Formatter
from typing import Any

from rowguard.domain.exceptions import ConfigurationError
from rowguard.domain.value_objects import SecureFieldMap

DESCRIPTION_PARAM = "param"


@dataclass(frozen=True)
class SecureOptions:
    """How one entity type is secured.

    ``description_template`` is rendered with a single named parameter,
    ``param``, e.g. ``'Access to page "{param}"'``.
    """

    description_template: str
    fields: SecureFieldMap = field(default_factory=SecureFieldMap)
    secure_roles: tuple[str, ...] = ()
    item_template: str | None = None
    secure_enabled: bool = True

    def __post_init__(self) -> None:
        if not self.description_template:
            raise ConfigurationError("Property 'description_template' must be set")
        try:
            names = {
                name
                for _, name, _, _ in Formatter().parse(self.description_template)
                if name is not None
            }
        except ValueError as e:
            raise ConfigurationError(f"Invalid description template: {e}") from e
        unknown = names - {DESCRIPTION_PARAM}
        if unknown:
            raise ConfigurationError(
                f"Description template may only use '{{{DESCRIPTION_PARAM}}}', "
                f"got {sorted(unknown)}"
            )

    def render_description(self, param: Any) -> str:
        return self.description_template.format(param="" if param is None else param)

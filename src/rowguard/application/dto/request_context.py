"""Request-scoped secure context."""

from dataclasses import dataclass, field

from rowguard.application.ports import Caller


@dataclass(frozen=True)
class RequestContext:
    """Everything rowguard reads from the current request.

    ``access_roles`` is the desired set of roles granted the entity's
    permission, as submitted with the entity. ``secure`` switches row
    filtering for the whole request.
    """

    caller: Caller
    access_roles: frozenset[str] = field(default_factory=frozenset)
    secure: bool = True

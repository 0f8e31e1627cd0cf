"""Row access filter - drops secured rows the caller may not see."""

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from rowguard.application.ports import Caller
from rowguard.application.use_cases.access.access_guard import AccessGuard
from rowguard.domain.exceptions import MalformedRow
from rowguard.domain.value_objects import is_secure_on

logger = structlog.get_logger(__name__)


class RowAccessFilter:
    """Stable filter over fetched rows.

    Rows whose secured flag is not exactly 1 are public and always kept.
    Secured rows are kept only when the caller may exercise the row's
    permission. Denied rows are logged and left out, never raised.
    """

    def __init__(self, guard: AccessGuard) -> None:
        self._guard = guard

    def filter(
        self,
        rows: Iterable[Mapping[str, Any]],
        secured_field: str,
        permission_field: str,
        caller: Caller,
    ) -> list[Mapping[str, Any]]:
        kept: list[Mapping[str, Any]] = []
        reduced = 0

        for row in rows:
            if secured_field not in row:
                raise MalformedRow(secured_field)
            if permission_field not in row:
                raise MalformedRow(permission_field)

            if not is_secure_on(row[secured_field]) or self._check(
                row[permission_field], caller
            ):
                kept.append(row)
            else:
                reduced += 1

        logger.info("Secure access filtering result", rows_remaining=len(kept), rows_reduced=reduced)
        return kept

    def _check(self, permission: str, caller: Caller) -> bool:
        identity = caller.identity
        user = (identity.username or identity.user_id) if identity else None
        allowed = self._guard.can_access_row(caller, permission)
        if allowed:
            logger.debug("Access granted", user=user, permission=permission)
        else:
            logger.warning("Access denied", user=user, permission=permission)
        return allowed

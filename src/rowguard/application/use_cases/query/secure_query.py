"""Secure query - fetch rows and pass them through the row access filter."""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from rowguard.application.dto import RequestContext, SecureOptions
from rowguard.application.use_cases.access.filter_rows import RowAccessFilter

RowFetcher = Callable[[], Iterable[Mapping[str, Any]]]


class SecureQuery:
    """Query over one secure entity type.

    Filtering runs when the entity type has security enabled, the request
    has not switched it off, and the query itself is secure (the default).
    """

    def __init__(
        self,
        fetch: RowFetcher,
        options: SecureOptions,
        row_filter: RowAccessFilter,
    ) -> None:
        self._fetch = fetch
        self._options = options
        self._filter = row_filter
        self._secure = True

    def secure(self, secure: bool = True) -> "SecureQuery":
        self._secure = secure
        return self

    @property
    def is_secure(self) -> bool:
        return self._secure

    def is_secure_enabled(self, context: RequestContext) -> bool:
        return self._options.secure_enabled and context.secure

    def all(self, context: RequestContext) -> list[Mapping[str, Any]]:
        rows = list(self._fetch())
        if not (self._secure and self.is_secure_enabled(context)):
            return rows

        fields = self._options.fields
        return self._filter.filter(rows, fields.secured, fields.permission, context.caller)

    def one(self, context: RequestContext) -> Mapping[str, Any] | None:
        rows = self.all(context)
        return rows[0] if rows else None

"""Domain exceptions."""


class RowGuardError(Exception):
    """Base exception for rowguard."""

    pass


class ConfigurationError(RowGuardError):
    """Secure entity or lifecycle is misconfigured."""

    pass


class PermissionDenied(RowGuardError):
    """Caller is not allowed to change security settings of an entity."""

    pass


class InconsistencyError(RowGuardError):
    """Authorization manager and entity state diverged during a lifecycle step."""

    pass


class MalformedRow(RowGuardError):
    """Fetched row lacks a field required by the access filter."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Row from database should contain secure field '{field}'")
        self.field = field

"""SQLAlchemy adapters for secure entities."""

from rowguard.infrastructure.persistence.sqlalchemy.binding import (
    SecureModelBinding,
    get_request_context,
    set_request_context,
)
from rowguard.infrastructure.persistence.sqlalchemy.columns import SecureColumnsMixin
from rowguard.infrastructure.persistence.sqlalchemy.query import secure_select
from rowguard.infrastructure.persistence.sqlalchemy.secure_entity import (
    SqlAlchemySecureEntity,
)

__all__ = [
    "SecureColumnsMixin",
    "SecureModelBinding",
    "SqlAlchemySecureEntity",
    "get_request_context",
    "secure_select",
    "set_request_context",
]

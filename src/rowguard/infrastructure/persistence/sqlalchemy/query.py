"""Secure SELECT over a session."""

from sqlalchemy.sql.expression import Executable
from sqlalchemy.orm import Session

from rowguard.application.dto import SecureOptions
from rowguard.application.use_cases.access.filter_rows import RowAccessFilter
from rowguard.application.use_cases.query.secure_query import SecureQuery


def secure_select(
    session: Session,
    statement: Executable,
    options: SecureOptions,
    row_filter: RowAccessFilter,
) -> SecureQuery:
    """SecureQuery whose rows are the mappings returned by ``statement``.

    The statement must select the secured flag and permission name columns.
    """
    return SecureQuery(
        lambda: session.execute(statement).mappings().all(),
        options,
        row_filter,
    )

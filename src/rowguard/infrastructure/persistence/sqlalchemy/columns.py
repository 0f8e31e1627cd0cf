"""Declarative columns for secure entities."""

from sqlalchemy import SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column


class SecureColumnsMixin:
    """Adds the secured flag and permission name columns.

    Usage:
        class Page(Base, SecureColumnsMixin):
            __tablename__ = "page"

            id: Mapped[int] = mapped_column(primary_key=True)
    """

    rbac_on: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, default=0, active_history=True
    )
    rbac_item: Mapped[str | None] = mapped_column(
        String(128), nullable=True, unique=True, active_history=True
    )

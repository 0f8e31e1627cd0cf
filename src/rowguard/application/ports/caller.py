"""Caller port - identity of whoever drives the current request."""

from typing import Protocol

from rowguard.domain.entities import Identity


class Caller(Protocol):
    """Port for the current caller."""

    @property
    def identity(self) -> Identity | None: ...

    def has_role(self, role: str) -> bool: ...

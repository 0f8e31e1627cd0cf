"""Conflict resolution between permission creation and last modifier stamping.

Creating the permission writes the assigned name back onto the freshly
inserted entity. That save must not look like a later update to the
last modifier stamp, so its update-time attributes are emptied from
before-insert until after-insert has finished.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass

import structlog

from rowguard.application.use_cases.entity.stamp_modifier import LastModifierStamp

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ConflictSnapshot:
    """Update-time attributes of the stamp as they were before suppression."""

    update_attributes: tuple[str, ...]


class ConflictResolver:
    """Suppresses and restores the last modifier stamp around an insert flow.

    Snapshots are kept per flow (context variable). Several inserts in one
    flush may suppress before any of them restores; the stamp is restored
    when the last pending snapshot is released.
    """

    def __init__(self, stamp: LastModifierStamp | None = None) -> None:
        self._stamp = stamp
        self._snapshots: ContextVar[tuple[ConflictSnapshot, ...]] = ContextVar(
            f"rowguard_conflicts_{id(self)}", default=()
        )

    @property
    def pending(self) -> int:
        return len(self._snapshots.get())

    def suppress(self) -> None:
        if self._stamp is None:
            return

        snapshots = self._snapshots.get()
        if snapshots:
            snapshot = snapshots[0]
        else:
            snapshot = ConflictSnapshot(self._stamp.update_attributes)
            self._stamp.update_attributes = ()
            logger.info(
                "Suppressed last modifier stamp during insert",
                update_attributes=snapshot.update_attributes,
            )
        self._snapshots.set(snapshots + (snapshot,))

    def restore(self) -> None:
        if self._stamp is None:
            return

        snapshots = self._snapshots.get()
        if not snapshots:
            return
        remaining = snapshots[:-1]
        self._snapshots.set(remaining)
        if not remaining:
            self._stamp.update_attributes = snapshots[0].update_attributes
            logger.info(
                "Restored last modifier stamp",
                update_attributes=snapshots[0].update_attributes,
            )

    def restore_all(self) -> None:
        """Release every pending snapshot, e.g. after a failed flush."""
        while self.pending:
            self.restore()

    @contextmanager
    def suppressed(self) -> Iterator[None]:
        self.suppress()
        try:
            yield
        finally:
            self.restore()

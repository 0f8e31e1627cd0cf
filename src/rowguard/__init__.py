"""Row-level access control for persisted entities."""

__version__ = "0.1.0"

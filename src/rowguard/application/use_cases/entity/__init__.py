"""Entity lifecycle helpers."""

"""Access decision use cases."""

"""Permission lifecycle use cases."""

"""Secure query use cases."""

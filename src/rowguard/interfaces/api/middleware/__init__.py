"""API middleware."""

from rowguard.interfaces.api.middleware.secure_context import SecureContextMiddleware

__all__ = ["SecureContextMiddleware"]

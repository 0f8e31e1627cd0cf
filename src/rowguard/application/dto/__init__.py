"""Application DTOs."""

from rowguard.application.dto.request_context import RequestContext
from rowguard.application.dto.secure_options import SecureOptions

__all__ = [
    "RequestContext",
    "SecureOptions",
]

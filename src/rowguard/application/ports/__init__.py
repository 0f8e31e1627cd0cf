"""Application ports - interfaces for external adapters."""

from rowguard.application.ports.authorization_manager import AuthorizationManager
from rowguard.application.ports.caller import Caller
from rowguard.application.ports.secure_entity import SecureEntity

__all__ = [
    "AuthorizationManager",
    "Caller",
    "SecureEntity",
]

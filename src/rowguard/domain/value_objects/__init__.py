"""Domain value objects."""

from rowguard.domain.value_objects.attribute_changes import AttributeChangeSet
from rowguard.domain.value_objects.lifecycle_event import LifecycleEvent, Operation
from rowguard.domain.value_objects.secure_fields import (
    SECURE_ON,
    SecureFieldMap,
    flag_value,
    is_secure_on,
)

__all__ = [
    "SECURE_ON",
    "AttributeChangeSet",
    "LifecycleEvent",
    "Operation",
    "SecureFieldMap",
    "flag_value",
    "is_secure_on",
]

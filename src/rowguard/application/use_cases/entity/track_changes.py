"""Secure attribute change tracking at validation time."""

import structlog

from rowguard.application.dto import RequestContext, SecureOptions
from rowguard.application.ports import AuthorizationManager, SecureEntity
from rowguard.application.use_cases.access.access_guard import AccessGuard
from rowguard.application.use_cases.permission.reconcile_roles import (
    RoleAssignmentSynchronizer,
)
from rowguard.domain.value_objects import AttributeChangeSet, flag_value

logger = structlog.get_logger(__name__)


class AttributeChangeTracker:
    """Detects changes of the secured flag, permission name and granted roles.

    Flag or name changes are only accepted from callers holding the
    entity's secure roles (or admins); everyone else is rejected before
    anything is written.
    """

    def __init__(
        self,
        options: SecureOptions,
        authorization_manager: AuthorizationManager,
        guard: AccessGuard,
        synchronizer: RoleAssignmentSynchronizer,
    ) -> None:
        self._options = options
        self._auth = authorization_manager
        self._guard = guard
        self._synchronizer = synchronizer

    def evaluate(self, entity: SecureEntity, context: RequestContext) -> AttributeChangeSet:
        fields = self._options.fields

        if entity.is_new_record:
            enabled_changed = flag_value(entity.get_attribute(fields.secured)) != 0
        else:
            enabled_changed = entity.is_attribute_changed(fields.secured)
        name_changed = entity.is_attribute_changed(fields.permission)

        current_roles = self.current_roles(entity)
        roles_changed = bool(current_roles ^ context.access_roles)

        changes = AttributeChangeSet(
            enabled_changed=enabled_changed,
            name_changed=name_changed,
            roles_changed=roles_changed,
            current_roles=current_roles,
        )
        logger.info(
            "Resolved secure attribute changes",
            entity=entity.entity_name,
            enabled_changed=enabled_changed,
            name_changed=name_changed,
            roles_changed=roles_changed,
        )

        if changes.requires_guard:
            self._guard.ensure_authorized(context.caller, self._options.secure_roles)
        return changes

    def current_roles(self, entity: SecureEntity) -> frozenset[str]:
        """Roles granted the entity's last persisted permission."""
        name = entity.get_old_attribute(self._options.fields.permission)
        if not name:
            return frozenset()

        permission = self._auth.get_permission(name)
        if permission is None:
            logger.warning(
                "Secure access permission does not exist, assuming no roles",
                permission=name,
            )
            return frozenset()
        return self._synchronizer.current_roles(permission)

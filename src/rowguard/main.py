"""Composition root."""

from dataclasses import dataclass

from rowguard import __version__
from rowguard.application.dto import SecureOptions
from rowguard.application.ports import AuthorizationManager
from rowguard.application.use_cases.access.access_guard import AccessGuard
from rowguard.application.use_cases.access.filter_rows import RowAccessFilter
from rowguard.application.use_cases.entity.pipeline import LifecyclePipeline
from rowguard.application.use_cases.entity.resolve_conflicts import ConflictResolver
from rowguard.application.use_cases.entity.stamp_modifier import LastModifierStamp
from rowguard.application.use_cases.entity.track_changes import AttributeChangeTracker
from rowguard.application.use_cases.permission.name_permission import PermissionNamer
from rowguard.application.use_cases.permission.reconcile_roles import (
    RoleAssignmentSynchronizer,
)
from rowguard.application.use_cases.permission.sync_permission import (
    PermissionLifecycleManager,
)
from rowguard.config import Settings, get_settings
from rowguard.domain.value_objects import SecureFieldMap
from rowguard.infrastructure.auth.keycloak_provider import KeycloakProvider
from rowguard.infrastructure.persistence.sqlalchemy.binding import SecureModelBinding
from rowguard.interfaces.api.middleware.secure_context import SecureContextMiddleware
from rowguard.logging import get_logger, setup_logging


@dataclass
class SecureComponents:
    """Wired components for one secure entity type."""

    options: SecureOptions
    guard: AccessGuard
    namer: PermissionNamer
    synchronizer: RoleAssignmentSynchronizer
    tracker: AttributeChangeTracker
    resolver: ConflictResolver
    manager: PermissionLifecycleManager
    pipeline: LifecyclePipeline
    row_filter: RowAccessFilter


def main() -> None:
    """CLI entry point."""
    print(f"rowguard v{__version__}")


def make_secure_options(
    description_template: str,
    *,
    secure_roles: tuple[str, ...] = (),
    item_template: str | None = None,
    description_param: str | None = None,
    secure_enabled: bool = True,
    settings: Settings | None = None,
) -> SecureOptions:
    """SecureOptions using the field names configured in settings."""
    settings = settings or get_settings()
    return SecureOptions(
        description_template=description_template,
        fields=SecureFieldMap(
            secured=settings.secure_attribute,
            permission=settings.secure_item_attribute,
            description_param=description_param,
        ),
        secure_roles=secure_roles,
        item_template=item_template,
        secure_enabled=secure_enabled,
    )


def build_secure_components(
    options: SecureOptions,
    authorization_manager: AuthorizationManager,
    stamp: LastModifierStamp | None = None,
    settings: Settings | None = None,
) -> SecureComponents:
    """Wire the lifecycle pipeline for one entity type.

    The last modifier stamp, when given, runs before the permission
    manager and is suppressed by it for the duration of each insert.
    """
    settings = settings or get_settings()

    guard = AccessGuard(authorization_manager)
    namer = PermissionNamer(options, prefix=settings.item_prefix)
    synchronizer = RoleAssignmentSynchronizer(authorization_manager)
    tracker = AttributeChangeTracker(options, authorization_manager, guard, synchronizer)
    resolver = ConflictResolver(stamp)
    manager = PermissionLifecycleManager(
        options=options,
        authorization_manager=authorization_manager,
        namer=namer,
        tracker=tracker,
        synchronizer=synchronizer,
        resolver=resolver,
    )
    observers = [manager] if stamp is None else [stamp, manager]

    return SecureComponents(
        options=options,
        guard=guard,
        namer=namer,
        synchronizer=synchronizer,
        tracker=tracker,
        resolver=resolver,
        manager=manager,
        pipeline=LifecyclePipeline(observers),
        row_filter=RowAccessFilter(guard),
    )


def bind_secure_model(
    model: type,
    options: SecureOptions,
    authorization_manager: AuthorizationManager,
    stamp: LastModifierStamp | None = None,
    settings: Settings | None = None,
) -> SecureModelBinding:
    """Wire components for ``model`` and start listening to its ORM events."""
    components = build_secure_components(options, authorization_manager, stamp, settings)
    binding = SecureModelBinding(
        model,
        components.pipeline,
        options,
        resolver=components.resolver,
    )
    get_logger(__name__).info(
        "Secure entity configured",
        model=model.__name__,
        secure_roles=options.secure_roles,
        secure_enabled=options.secure_enabled,
    )
    return binding.listen()


def create_secure_context_middleware(settings: Settings | None = None) -> SecureContextMiddleware:
    """Middleware building the request context from Keycloak tokens."""
    settings = settings or get_settings()
    setup_logging(settings)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
            admin_role=settings.admin_role,
        )
        if settings.keycloak_client_secret
        else None
    )
    return SecureContextMiddleware(
        keycloak_provider=keycloak,
        access_roles_field=settings.access_roles_field,
        secure_enabled=settings.secure_enabled,
        admin_role=settings.admin_role,
    )

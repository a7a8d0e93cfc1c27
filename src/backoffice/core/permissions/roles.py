"""Default roles and role management.

Default roles are reconciled at startup: missing roles are created and
roles whose permission set drifted from the definition below are updated.
"""

from dataclasses import dataclass
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.errors import NotFoundError, ValidationError
from backoffice.core.permissions.models import Role, format_permissions


logger = structlog.get_logger()


SUPERADMIN = "superadmin"
ADMIN = "admin"
MANAGER = "manager"
SUPPLIER = "supplier"
CUSTOMER = "customer"

# Permission catalogue, grouped by resource
ALL_PERMISSIONS: dict[str, list[str]] = {
    "user": ["view", "create", "update", "delete"],
    "product": ["view", "create", "update", "delete"],
    "category": ["view", "create", "update", "delete"],
    "order": ["view", "create", "update", "delete", "process", "cancel"],
    "role": ["view", "create", "update", "delete"],
}


@dataclass(frozen=True)
class RoleDefinition:
    name: str
    description: str
    permissions: frozenset[str]


def _admin_permissions() -> dict[str, list[str]]:
    return {
        resource: actions for resource, actions in ALL_PERMISSIONS.items() if resource != "role"
    }


DEFAULT_ROLES: tuple[RoleDefinition, ...] = (
    RoleDefinition(
        name=SUPERADMIN,
        description="Full access, including role management",
        permissions=frozenset(format_permissions(ALL_PERMISSIONS)),
    ),
    RoleDefinition(
        name=ADMIN,
        description="System administrator with full access to store data",
        permissions=frozenset(format_permissions(_admin_permissions())),
    ),
    RoleDefinition(
        name=MANAGER,
        description="Store manager: catalogue and order processing",
        permissions=frozenset(
            format_permissions(
                {
                    "product": ["view", "create", "update"],
                    "category": ["view", "create", "update"],
                    "order": ["view", "update", "process"],
                }
            )
        ),
    ),
    RoleDefinition(
        name=SUPPLIER,
        description="Supplier with limited access to products and orders",
        permissions=frozenset(
            format_permissions(
                {
                    "product": ["view", "create", "update"],
                    "category": ["view"],
                    "order": ["view"],
                }
            )
        ),
    ),
    RoleDefinition(
        name=CUSTOMER,
        description="Customer with access to own data only",
        permissions=frozenset(),
    ),
)


async def get_role_by_name(session: AsyncSession, name: str) -> Role | None:
    """Get a role by its unique name."""
    result = await session.execute(select(Role).where(Role.name == name))
    return result.scalar_one_or_none()


async def list_roles(session: AsyncSession) -> list[Role]:
    result = await session.execute(select(Role).order_by(Role.name))
    return list(result.scalars().all())


async def missing_default_roles(session: AsyncSession) -> list[str]:
    """Names of default roles that have not been seeded yet."""
    wanted = [definition.name for definition in DEFAULT_ROLES]
    result = await session.execute(select(Role.name).where(Role.name.in_(wanted)))
    present = set(result.scalars().all())
    return [name for name in wanted if name not in present]


async def get_roles_by_ids(session: AsyncSession, role_ids: list[UUID]) -> list[Role]:
    """Get roles by ID, failing if any ID is unknown.

    Raises:
        ValidationError: If one or more IDs do not name a role
    """
    if not role_ids:
        return []
    wanted = set(role_ids)
    result = await session.execute(select(Role).where(Role.id.in_(wanted)))
    roles = list(result.scalars().all())
    missing = wanted - {role.id for role in roles}
    if missing:
        raise ValidationError(
            "Unknown role IDs",
            errors=[
                {"field": "role_ids", "message": f"Unknown role: {role_id}"}
                for role_id in sorted(str(m) for m in missing)
            ],
        )
    return roles


async def initialize_roles(session: AsyncSession) -> list[Role]:
    """Create or reconcile the default roles.

    Returns:
        The default roles, in definition order
    """
    roles: list[Role] = []
    for definition in DEFAULT_ROLES:
        role = await get_role_by_name(session, definition.name)
        if role is None:
            role = Role(name=definition.name, description=definition.description)
            role.set_permissions(definition.permissions)
            session.add(role)
            logger.info("role_created", role=definition.name)
        elif role.permission_set != definition.permissions:
            role.set_permissions(definition.permissions)
            logger.info("role_permissions_updated", role=definition.name)
        roles.append(role)

    await session.flush()
    logger.info("roles_initialized", count=len(roles))
    return roles


async def create_custom_role(
    session: AsyncSession,
    name: str,
    description: str | None,
    permissions: list[str],
) -> Role:
    """Create a role with an arbitrary permission set.

    Raises:
        ValidationError: If a role with this name already exists
    """
    if await get_role_by_name(session, name) is not None:
        raise ValidationError(
            f"Role with name {name} already exists",
            error_code="role_exists",
            errors=[{"field": "name", "message": "Role name already in use"}],
        )

    role = Role(name=name, description=description)
    role.set_permissions(permissions)
    session.add(role)
    await session.flush()
    await session.refresh(role)
    logger.info("role_created", role=name, permission_count=len(role.permissions))
    return role


async def update_role_permissions(
    session: AsyncSession,
    role_id: UUID,
    permissions: list[str],
    description: str | None = None,
) -> Role:
    """Replace a role's permission set.

    Raises:
        NotFoundError: If the role does not exist
    """
    role = await session.get(Role, role_id)
    if role is None:
        raise NotFoundError("Role not found", resource="role", resource_id=str(role_id))

    role.set_permissions(permissions)
    if description is not None:
        role.description = description
    await session.flush()
    await session.refresh(role)
    logger.info("role_permissions_updated", role=role.name)
    return role

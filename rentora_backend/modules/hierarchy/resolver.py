"""Hierarchy resolver.

Translates the ``created_by`` ownership forest into scope descriptors and
query filters. Every visibility or write check in the services goes
through this module. Nothing is cached: employees can be added or
deactivated between two requests.
"""

from dataclasses import dataclass, field
from typing import Protocol

from sqlalchemy import ColumnElement, false, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import AuthorizationError
from ..auth.models import AGENT_ROLES, User, UserRole


class Actor(Protocol):
    id: int
    role: UserRole


class OwnedResource(Protocol):
    agent_id: int | None
    created_by_id: int | None


@dataclass(frozen=True)
class HierarchyScope:
    """Ids an actor may see or act on.

    ``unrestricted`` short-circuits every check (admins). Otherwise
    ``owned_ids`` holds the actor itself and ``employee_ids`` the
    employees it created.
    """

    unrestricted: bool = False
    owned_ids: frozenset[int] = field(default_factory=frozenset)
    employee_ids: frozenset[int] = field(default_factory=frozenset)

    @classmethod
    def everything(cls) -> "HierarchyScope":
        return cls(unrestricted=True)

    @property
    def owner_ids(self) -> frozenset[int]:
        return self.owned_ids | self.employee_ids

    def includes(self, user_id: int | None) -> bool:
        if self.unrestricted:
            return True
        return user_id is not None and user_id in self.owner_ids

    def as_filter(self, *columns) -> ColumnElement[bool]:
        """SQL predicate matching rows whose any of ``columns`` is in scope."""
        if self.unrestricted:
            return true()
        ids = sorted(self.owner_ids)
        if not ids or not columns:
            return false()
        return or_(*(column.in_(ids) for column in columns))


async def resolve_employee_ids(db: AsyncSession, agent_id: int) -> frozenset[int]:
    """All employee accounts created by the given agent or landlord."""
    result = await db.execute(
        select(User.id).where(
            User.role == UserRole.EMPLOYEE,
            User.created_by_id == agent_id,
        )
    )
    return frozenset(result.scalars().all())


async def resolve_visible_owners(db: AsyncSession, actor: Actor) -> HierarchyScope:
    """Owners whose records the actor may act on.

    - admin: unrestricted
    - agent/landlord: itself plus its employees
    - employee, tenant, seeker: itself only
    """
    role = actor.role
    if role == UserRole.ADMIN:
        return HierarchyScope.everything()
    if role in AGENT_ROLES:
        return HierarchyScope(
            owned_ids=frozenset({actor.id}),
            employee_ids=await resolve_employee_ids(db, actor.id),
        )
    if role in (UserRole.EMPLOYEE, UserRole.TENANT, UserRole.SEEKER):
        return HierarchyScope(owned_ids=frozenset({actor.id}))
    raise ValueError(f"Actor {actor.id} has an unknown role: {role!r}")


async def resolve_company_owners(db: AsyncSession, actor: Actor) -> HierarchyScope:
    """Owners belonging to the actor's company, for read-only listings.

    An employee reads through its creating agent's company; every other
    role falls back to its visible owners.
    """
    if actor.role != UserRole.EMPLOYEE:
        return await resolve_visible_owners(db, actor)

    result = await db.execute(
        select(User.created_by_id).where(User.id == actor.id)
    )
    creator_id = result.scalar_one_or_none()
    if creator_id is None:
        return HierarchyScope(owned_ids=frozenset({actor.id}))

    creator_role = (
        await db.execute(select(User.role).where(User.id == creator_id))
    ).scalar_one_or_none()
    if creator_role not in AGENT_ROLES:
        return HierarchyScope(owned_ids=frozenset({actor.id}))

    employees = await resolve_employee_ids(db, creator_id)
    return HierarchyScope(
        owned_ids=frozenset({creator_id}),
        employee_ids=employees | {actor.id},
    )


async def authorize_action(
    db: AsyncSession, actor: Actor, resource: OwnedResource
) -> bool:
    """Whether the actor may act on a resource owned through agent/created_by."""
    scope = await resolve_visible_owners(db, actor)
    return scope.includes(resource.agent_id) or scope.includes(resource.created_by_id)


async def ensure_authorized(
    db: AsyncSession,
    actor: Actor,
    resource: OwnedResource,
    message: str = "You are not allowed to perform this action",
) -> None:
    """Raise AuthorizationError unless ``authorize_action`` allows it."""
    if not await authorize_action(db, actor, resource):
        raise AuthorizationError(message)

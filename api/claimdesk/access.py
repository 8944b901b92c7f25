"""
Role-based claim visibility and mutation rules.

Every transport asks this module; nothing else compares role strings.

    super_admin  every claim in every tenant
    admin        claims whose owner belongs to the admin's tenant
    user         claims the user owns

Only admin and super_admin may set a claim's status.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Union

from sqlmodel import select

from .errors import ForbiddenMutation, PermissionDenied
from .models import Claim, User


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


_RANK = {Role.USER: 0, Role.ADMIN: 1, Role.SUPER_ADMIN: 2}

STATUS_FIELD = "status"


def role_rank(role: Union[Role, str]) -> int:
    return _RANK[Role(role)]


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: Role
    tenant_id: Optional[str]

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(user_id=user.id, role=Role(user.role), tenant_id=user.tenant_id)


def has_role(subject: Union[Principal, Role, str], minimum: Role) -> bool:
    role = subject.role if isinstance(subject, Principal) else subject
    return role_rank(role) >= role_rank(minimum)


def require_role(principal: Principal, minimum: Role) -> Principal:
    if not has_role(principal, minimum):
        raise PermissionDenied(f"{minimum.value} role required")
    return principal


def can_view(principal: Principal, owner_id: str, owner_tenant_id: Optional[str]) -> bool:
    if principal.role == Role.SUPER_ADMIN:
        return True
    if principal.role == Role.ADMIN:
        return principal.tenant_id is not None and owner_tenant_id == principal.tenant_id
    return owner_id == principal.user_id


def can_view_claim(principal: Principal, claim: Claim) -> bool:
    owner_tenant = claim.user.tenant_id if claim.user is not None else None
    return can_view(principal, claim.user_id, owner_tenant)


def visible_claims(principal: Principal, claims: Iterable[Claim]) -> List[Claim]:
    return [claim for claim in claims if can_view_claim(principal, claim)]


def scope_claims_query(principal: Principal, statement=None):
    """Apply the visibility rule of ``can_view`` to a ``select(Claim)`` statement."""
    if statement is None:
        statement = select(Claim)
    if principal.role == Role.SUPER_ADMIN:
        return statement
    if principal.role == Role.ADMIN:
        return statement.join(User, User.id == Claim.user_id).where(User.tenant_id == principal.tenant_id)
    return statement.where(Claim.user_id == principal.user_id)


def check_mutation(principal: Principal, claim: Claim, changes: Iterable[str]) -> None:
    """Raise ForbiddenMutation when ``principal`` may not change the given claim fields.

    Visibility is checked by the caller first, so an out-of-scope claim is
    reported as missing rather than forbidden.
    """
    if not can_view_claim(principal, claim):
        raise ForbiddenMutation("claim is outside your scope")
    if STATUS_FIELD in set(changes) and not has_role(principal, Role.ADMIN):
        raise ForbiddenMutation("Only admins can change claim status")


def can_mutate(principal: Principal, claim: Claim, changes: Iterable[str]) -> bool:
    try:
        check_mutation(principal, claim, changes)
    except ForbiddenMutation:
        return False
    return True


def can_manage_tenant_members(principal: Principal, tenant_id: Optional[str]) -> bool:
    """Admins manage users of their own tenant; super admins manage everyone."""
    if principal.role == Role.SUPER_ADMIN:
        return True
    return principal.role == Role.ADMIN and tenant_id is not None and tenant_id == principal.tenant_id


from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select

from ..access import Principal, Role, can_manage_tenant_members, role_rank
from ..accounts import create_user, ensure_tenant, save_user, serialize_user
from ..auth import require_admin
from ..db import get_session
from ..errors import NotFound, PermissionDenied
from ..models import Claim, User, utcnow
from ..schemas import UserCreate, UserUpdate
from ..utils import hash_password

router = APIRouter()

def _ensure_user(session: Session, principal: Principal, user_id: str) -> User:
    user = session.get(User, user_id)
    if not user or not can_manage_tenant_members(principal, user.tenant_id):
        raise NotFound("User", user_id)
    return user

def _check_grant(principal: Principal, role: Role | None):
    if role is not None and role_rank(role) > role_rank(principal.role):
        raise PermissionDenied(f"cannot grant the {role.value} role")

@router.post("", status_code=201)
def create_member(
    payload: UserCreate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    tenant_id = payload.tenant_id or principal.tenant_id
    if not can_manage_tenant_members(principal, tenant_id):
        raise PermissionDenied("cannot create users in another tenant")
    _check_grant(principal, payload.role)
    user = create_user(
        session,
        email=payload.email,
        password=payload.password,
        name=payload.name,
        tenant_id=tenant_id,
        role=payload.role or Role.USER,
        external_id=payload.external_id,
    )
    return serialize_user(user)

@router.get("")
def list_members(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    stmt = select(User).order_by(User.created_at)
    if principal.role != Role.SUPER_ADMIN:
        stmt = stmt.where(User.tenant_id == principal.tenant_id)
    return [serialize_user(u) for u in session.exec(stmt).all()]

@router.get("/{user_id}")
def get_member(
    user_id: str,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    return serialize_user(_ensure_user(session, principal, user_id))

@router.patch("/{user_id}")
def update_member(
    user_id: str,
    payload: UserUpdate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    user = _ensure_user(session, principal, user_id)
    _check_grant(principal, Role(user.role))
    data = payload.model_dump(exclude_unset=True)
    if data.get("role") is not None:
        _check_grant(principal, data["role"])
        data["role"] = Role(data["role"]).value
    if data.get("tenant_id"):
        if not can_manage_tenant_members(principal, data["tenant_id"]):
            raise PermissionDenied("cannot move users to another tenant")
        ensure_tenant(session, data["tenant_id"])
    password = data.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    for key, value in data.items():
        if value is None and key != "external_id":
            continue
        setattr(user, key, value)
    user.updated_at = utcnow()
    return serialize_user(save_user(session, user))

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_member(
    user_id: str,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    user = _ensure_user(session, principal, user_id)
    _check_grant(principal, Role(user.role))
    for claim in session.exec(select(Claim).where(Claim.user_id == user.id)).all():
        session.delete(claim)
    session.delete(user)
    session.commit()

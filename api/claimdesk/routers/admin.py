from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from ..access import Principal, Role, can_manage_tenant_members, has_role
from ..accounts import create_user, find_by_email, promote_to_admin, serialize_user
from ..auth import require_admin
from ..db import get_session
from ..errors import ConflictError, NotFound, PermissionDenied
from ..schemas import UserCreate

router = APIRouter()

def _target_tenant(principal: Principal, requested: str | None) -> str:
    tenant_id = requested or principal.tenant_id
    if not can_manage_tenant_members(principal, tenant_id):
        raise PermissionDenied("cannot manage admins of another tenant")
    return tenant_id

@router.post("/create-admin", status_code=201)
def create_admin(
    payload: UserCreate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    tenant_id = _target_tenant(principal, payload.tenant_id)
    user = find_by_email(session, payload.email)
    if user is not None:
        if has_role(user.role, Role.ADMIN):
            raise ConflictError("User is already an admin")
        if not can_manage_tenant_members(principal, user.tenant_id):
            raise PermissionDenied("cannot manage admins of another tenant")
        user = promote_to_admin(session, user, tenant_id)
        return {"message": "User successfully promoted to admin", "user": serialize_user(user)}
    if not tenant_id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Tenant ID is required")
    user = create_user(
        session,
        email=payload.email,
        password=payload.password,
        name=payload.name,
        tenant_id=tenant_id,
        role=Role.ADMIN,
    )
    return {"message": "Admin user created successfully", "user": serialize_user(user)}

@router.post("/make-admin/{email}")
def make_admin(
    email: str,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    user = find_by_email(session, email)
    if user is None or not can_manage_tenant_members(principal, user.tenant_id):
        raise NotFound("User")
    if has_role(user.role, Role.ADMIN):
        return serialize_user(user)
    user = promote_to_admin(session, user)
    return serialize_user(user)

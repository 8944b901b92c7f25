import logging
import secrets
from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select

from ..access import Principal, can_manage_tenant_members
from ..auth import require_admin, require_api_key, require_super_admin
from ..db import get_session
from ..errors import NotFound
from ..models import Claim, Config, Tenant, User
from ..provisioning import resolve_tenant_by_api_key
from ..schemas import TenantCreate, TenantUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

def _public_tenant(tenant: Tenant):
    return {"id": tenant.id, "name": tenant.name, "logo": tenant.logo}

def _serialize_tenant(tenant: Tenant):
    return {**_public_tenant(tenant), "api_key": tenant.api_key}

def _ensure_tenant(session: Session, principal: Principal, tenant_id: str) -> Tenant:
    tenant = session.get(Tenant, tenant_id)
    if not tenant or not can_manage_tenant_members(principal, tenant.id):
        raise NotFound("Tenant", tenant_id)
    return tenant

@router.get("")
def list_tenants(session: Session = Depends(get_session)):
    return [_public_tenant(t) for t in session.exec(select(Tenant).order_by(Tenant.name)).all()]

@router.get("/w")
def tenant_for_widget(
    api_key: str = Depends(require_api_key),
    session: Session = Depends(get_session),
):
    return _public_tenant(resolve_tenant_by_api_key(session, api_key))

@router.post("", status_code=201)
def create_tenant(
    payload: TenantCreate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_super_admin),
):
    tenant = Tenant(name=payload.name, logo=payload.logo, api_key=secrets.token_urlsafe(32))
    session.add(tenant)
    session.commit()
    session.refresh(tenant)
    logger.info("tenant created", extra={"tenant_id": tenant.id})
    return _serialize_tenant(tenant)

@router.get("/{tenant_id}")
def get_tenant(
    tenant_id: str,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    return _serialize_tenant(_ensure_tenant(session, principal, tenant_id))

@router.patch("/{tenant_id}")
def update_tenant(
    tenant_id: str,
    payload: TenantUpdate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_super_admin),
):
    tenant = _ensure_tenant(session, principal, tenant_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(tenant, key, value)
    session.add(tenant)
    session.commit()
    session.refresh(tenant)
    return _serialize_tenant(tenant)

@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tenant(
    tenant_id: str,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_super_admin),
):
    tenant = _ensure_tenant(session, principal, tenant_id)

    users = session.exec(select(User).where(User.tenant_id == tenant.id)).all()
    for user in users:
        for claim in session.exec(select(Claim).where(Claim.user_id == user.id)).all():
            session.delete(claim)
        session.delete(user)

    config = session.exec(select(Config).where(Config.tenant_id == tenant.id)).first()
    if config:
        session.delete(config)

    session.delete(tenant)
    session.commit()
    logger.info("tenant deleted with %d users", len(users), extra={"tenant_id": tenant_id})

@router.post("/{tenant_id}/api-key")
def regenerate_api_key(
    tenant_id: str,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    tenant = _ensure_tenant(session, principal, tenant_id)
    tenant.api_key = secrets.token_urlsafe(32)
    session.add(tenant)
    session.commit()
    session.refresh(tenant)
    return {"api_key": tenant.api_key}

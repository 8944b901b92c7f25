from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlmodel import Session

from .. import claims_service
from ..access import Principal
from ..auth import resolve_current_user, resolve_principal
from ..config import MAX_FILE_FIELD_BYTES
from ..config_store import load_config
from ..db import get_session
from ..models import Claim, User
from ..provisioning import resolve_tenant_by_api_key
from ..schemas import ClaimCreate, ClaimUpdate
from ..validation import oversized_file_fields

router = APIRouter()

def _check_file_sizes(config, data):
    oversized = oversized_file_fields(config, data or {}, MAX_FILE_FIELD_BYTES)
    if oversized:
        raise HTTPException(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"file too large for field(s): {', '.join(oversized)}",
        )

def _serialize_claim(claim: Claim):
    return {
        "id": claim.id,
        "identification_number": claim.identification_number,
        "status": claim.status,
        "data": claim.data,
        "user_id": claim.user_id,
        "created_at": claim.created_at,
        "updated_at": claim.updated_at,
    }

@router.post("/w", status_code=201)
def create_claim_for_widget(
    payload: ClaimCreate,
    api_key: Optional[str] = Header(default=None, alias="API-Key"),
    external_user_id: Optional[str] = Header(default=None, alias="User-ID"),
    session: Session = Depends(get_session),
):
    if not api_key:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "API-Key header is required.")
    if not external_user_id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "User-ID header is required.")
    tenant = resolve_tenant_by_api_key(session, api_key)
    config = load_config(session, tenant.id)
    _check_file_sizes(config, payload.data)
    claim = claims_service.create_claim_for_widget(session, config, payload, tenant, external_user_id)
    return _serialize_claim(claim)

@router.post("", status_code=201)
def create_claim(
    payload: ClaimCreate,
    session: Session = Depends(get_session),
    user: User = Depends(resolve_current_user),
):
    config = load_config(session, user.tenant_id)
    _check_file_sizes(config, payload.data)
    return _serialize_claim(claims_service.create_claim(session, config, payload, user))

@router.get("")
def list_claims(
    session: Session = Depends(get_session),
    principal: Principal = Depends(resolve_principal),
):
    return [_serialize_claim(c) for c in claims_service.list_claims(session, principal)]

@router.get("/{claim_id}")
def get_claim(
    claim_id: str,
    session: Session = Depends(get_session),
    principal: Principal = Depends(resolve_principal),
):
    return _serialize_claim(claims_service.get_claim(session, claim_id, principal))

@router.patch("/{claim_id}")
def update_claim(
    claim_id: str,
    payload: ClaimUpdate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(resolve_principal),
):
    claim = claims_service.get_claim(session, claim_id, principal)
    # data is checked against the owner's tenant form, not the caller's
    config = load_config(session, claim.user.tenant_id)
    _check_file_sizes(config, payload.data)
    claim = claims_service.update_claim(session, config, claim_id, payload, principal)
    return _serialize_claim(claim)

@router.delete("/{claim_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_claim(
    claim_id: str,
    session: Session = Depends(get_session),
    principal: Principal = Depends(resolve_principal),
):
    claims_service.delete_claim(session, claim_id, principal)

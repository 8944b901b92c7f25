from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..access import Principal
from ..auth import require_admin, require_api_key, resolve_principal
from ..config_store import load_config, save_config
from ..db import get_session
from ..form_schema import AppConfig
from ..provisioning import resolve_tenant_by_api_key

router = APIRouter()

@router.get("/w")
def config_for_widget(
    api_key: str = Depends(require_api_key),
    session: Session = Depends(get_session),
):
    tenant = resolve_tenant_by_api_key(session, api_key)
    return load_config(session, tenant.id).to_dict()

@router.get("")
def get_config(
    session: Session = Depends(get_session),
    principal: Principal = Depends(resolve_principal),
):
    return load_config(session, principal.tenant_id).to_dict()

@router.get("/claim-form")
def get_claim_form_steps(
    session: Session = Depends(get_session),
    principal: Principal = Depends(resolve_principal),
):
    config = load_config(session, principal.tenant_id)
    return [
        step.model_copy(update={"fields": step.ordered_fields()}).model_dump(mode="json", by_alias=True, exclude_none=True)
        for step in config.ordered_steps()
    ]

@router.post("")
def update_config(
    payload: AppConfig,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    save_config(session, principal.tenant_id, payload)
    return {"message": "Configuration updated successfully"}

"""
Claim operations shared by every transport.

Callers load the owning tenant's ``AppConfig`` and pass it in; nothing here
keeps configuration between calls. Visibility and mutation decisions come
from ``access`` so the routers never compare roles themselves.
"""

import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from .access import Principal, Role, can_view_claim, check_mutation, has_role, scope_claims_query
from .errors import ConflictError, NotFound
from .form_schema import AppConfig
from .models import Claim, Tenant, User, utcnow
from .provisioning import provision_external_user
from .schemas import ClaimCreate, ClaimStatus, ClaimUpdate
from .utils import generate_identification_number
from .validation import ensure_valid_claim

logger = logging.getLogger(__name__)


def _commit_claim(session: Session, claim: Claim, retryable: bool) -> Claim:
    number = claim.identification_number
    session.add(claim)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError(
            f"identification number {number} already exists",
            retryable=retryable,
        )
    session.refresh(claim)
    return claim


def create_claim(session: Session, config: AppConfig, payload: ClaimCreate, owner: User) -> Claim:
    ensure_valid_claim(config, payload.data)
    supplied = payload.identification_number
    status = ClaimStatus.OPEN
    # only admins choose the starting status
    if payload.status is not None and has_role(owner.role, Role.ADMIN):
        status = payload.status
    claim = Claim(
        identification_number=supplied or generate_identification_number(),
        status=status.value,
        data=dict(payload.data),
        user_id=owner.id,
    )
    # only a generated number is worth retrying
    claim = _commit_claim(session, claim, retryable=supplied is None)
    logger.info(
        "claim created",
        extra={"claim_id": claim.id, "user_id": owner.id, "identification_number": claim.identification_number},
    )
    return claim


def create_claim_for_widget(
    session: Session,
    config: AppConfig,
    payload: ClaimCreate,
    tenant: Tenant,
    external_user_id: str,
) -> Claim:
    # reject bad data before an account exists for it
    ensure_valid_claim(config, payload.data)
    owner = provision_external_user(session, tenant.id, external_user_id)
    # widget submitters never pick a status
    payload = payload.model_copy(update={"status": ClaimStatus.OPEN})
    return create_claim(session, config, payload, owner)


def list_claims(session: Session, principal: Principal) -> List[Claim]:
    statement = scope_claims_query(principal).order_by(Claim.created_at.desc())
    return list(session.exec(statement).all())


def get_claim(session: Session, claim_id: str, principal: Principal) -> Claim:
    claim = session.get(Claim, claim_id)
    if claim is None or not can_view_claim(principal, claim):
        raise NotFound("Claim", claim_id)
    return claim


def update_claim(
    session: Session,
    config: AppConfig,
    claim_id: str,
    patch: ClaimUpdate,
    principal: Principal,
) -> Claim:
    claim = get_claim(session, claim_id, principal)
    changes = {key: value for key, value in patch.model_dump(exclude_unset=True).items() if value is not None}
    check_mutation(principal, claim, changes.keys())

    if "data" in changes:
        ensure_valid_claim(config, changes["data"])
        claim.data = dict(changes["data"])
    if "status" in changes:
        claim.status = ClaimStatus(changes["status"]).value
    if "identification_number" in changes:
        claim.identification_number = changes["identification_number"]
    claim.updated_at = utcnow()

    claim = _commit_claim(session, claim, retryable=False)
    logger.info("claim updated: %s", ", ".join(sorted(changes)) or "no changes", extra={"claim_id": claim.id})
    return claim


def delete_claim(session: Session, claim_id: str, principal: Principal) -> None:
    claim = get_claim(session, claim_id, principal)
    check_mutation(principal, claim, ())
    session.delete(claim)
    session.commit()
    logger.info("claim deleted", extra={"claim_id": claim_id, "user_id": principal.user_id})

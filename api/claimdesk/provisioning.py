"""
Widget-side identity resolution.

The embeddable widget authenticates with a tenant API key plus the host
application's own user id. Each (tenant, external id) pair maps to exactly
one internal ``user`` account, created on first sight.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .access import Role
from .errors import ConflictError, NotFound
from .models import Tenant, User
from .utils import hash_password, placeholder_password

logger = logging.getLogger(__name__)

SHADOW_USER_NAME = "External User"


def resolve_tenant_by_api_key(session: Session, api_key: str) -> Tenant:
    tenant = session.exec(select(Tenant).where(Tenant.api_key == api_key)).first()
    if tenant is None:
        raise NotFound("Tenant")
    return tenant


def shadow_email(tenant_id: str, external_id: str) -> str:
    return f"u-{tenant_id}-{external_id}@widget.invalid"


def find_external_user(session: Session, tenant_id: str, external_id: str) -> User | None:
    return session.exec(
        select(User).where(User.tenant_id == tenant_id, User.external_id == external_id)
    ).first()


def provision_external_user(session: Session, tenant_id: str, external_id: str) -> User:
    user = find_external_user(session, tenant_id, external_id)
    if user is not None:
        return user

    user = User(
        email=shadow_email(tenant_id, external_id),
        name=SHADOW_USER_NAME,
        password_hash=hash_password(placeholder_password()),
        role=Role.USER.value,
        tenant_id=tenant_id,
        external_id=external_id,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # a concurrent submission created the same identity first
        session.rollback()
        existing = find_external_user(session, tenant_id, external_id)
        if existing is None:
            raise ConflictError("external user could not be provisioned", retryable=True)
        logger.info("reused concurrently provisioned user", extra={"tenant_id": tenant_id, "user_id": existing.id})
        return existing
    session.refresh(user)
    logger.info("provisioned shadow user", extra={"tenant_id": tenant_id, "user_id": user.id})
    return user

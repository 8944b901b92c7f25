import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .access import Role
from .errors import ConflictError, NotFound
from .models import Tenant, User, utcnow
from .utils import hash_password, verify_password

logger = logging.getLogger(__name__)


def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "tenant_id": user.tenant_id,
        "external_id": user.external_id,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }

def find_by_email(session: Session, email: str) -> User | None:
    return session.exec(select(User).where(User.email == email)).first()

def ensure_tenant(session: Session, tenant_id: str) -> Tenant:
    tenant = session.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFound("Tenant", tenant_id)
    return tenant

def save_user(session: Session, user: User) -> User:
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError(f"a user with email {user.email} already exists")
    session.refresh(user)
    return user

def create_user(
    session: Session,
    email: str,
    password: str,
    name: str,
    tenant_id: str,
    role: Role = Role.USER,
    external_id: str | None = None,
) -> User:
    ensure_tenant(session, tenant_id)
    if find_by_email(session, email):
        raise ConflictError(f"a user with email {email} already exists")
    user = User(
        email=email,
        name=name,
        password_hash=hash_password(password),
        role=Role(role).value,
        tenant_id=tenant_id,
        external_id=external_id,
    )
    user = save_user(session, user)
    logger.info("user created with role %s", user.role, extra={"tenant_id": tenant_id, "user_id": user.id})
    return user

def authenticate(session: Session, email: str, password: str) -> User | None:
    user = find_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user

def promote_to_admin(session: Session, user: User, tenant_id: str | None = None) -> User:
    user.role = Role.ADMIN.value
    if tenant_id:
        ensure_tenant(session, tenant_id)
        user.tenant_id = tenant_id
    user.updated_at = utcnow()
    user = save_user(session, user)
    logger.info("user promoted to admin", extra={"tenant_id": user.tenant_id, "user_id": user.id})
    return user

from typing import Optional
from fastapi import Depends, Header, HTTPException, Query, status
from sqlmodel import Session

from .access import Principal, Role, require_role
from .db import get_session
from .models import User
from .utils import make_token, read_token


def issue_access_token(user: User) -> str:
    return make_token({"sub": user.id, "role": user.role, "tenant_id": user.tenant_id})


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer" or not value:
        return None
    return value.strip()


def resolve_current_user(
    authorization: Optional[str] = Header(default=None),
    token: Optional[str] = Query(default=None),
    session: Session = Depends(get_session),
) -> User:
    candidate = _bearer(authorization) or token
    if not candidate:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing access token")
    payload = read_token(candidate)
    if not payload or "sub" not in payload:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid access token")
    # role and tenant come from the stored user so promotions apply immediately
    user = session.get(User, payload["sub"])
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid access token")
    return user


def resolve_principal(user: User = Depends(resolve_current_user)) -> Principal:
    return Principal.from_user(user)


def require_admin(principal: Principal = Depends(resolve_principal)) -> Principal:
    return require_role(principal, Role.ADMIN)


def require_super_admin(principal: Principal = Depends(resolve_principal)) -> Principal:
    return require_role(principal, Role.SUPER_ADMIN)


def require_api_key(api_key: Optional[str] = Header(default=None, alias="API-Key")) -> str:
    if not api_key:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="API-Key header is required.")
    return api_key

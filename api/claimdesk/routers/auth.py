from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from ..accounts import authenticate, create_user, serialize_user
from ..auth import issue_access_token, resolve_current_user
from ..db import get_session
from ..models import User
from ..schemas import LoginRequest, RegisterRequest

router = APIRouter()

@router.post("/login")
def login(payload: LoginRequest, session: Session = Depends(get_session)):
    user = authenticate(session, payload.email, payload.password)
    if user is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid credentials")
    return {"access_token": issue_access_token(user), "user": serialize_user(user)}

@router.post("/register", status_code=201)
def register(payload: RegisterRequest, session: Session = Depends(get_session)):
    if not payload.tenant_id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Tenant ID is required")
    # plain user with no external identity; those come from the widget or an admin
    user = create_user(
        session,
        email=payload.email,
        password=payload.password,
        name=payload.name,
        tenant_id=payload.tenant_id,
    )
    return serialize_user(user)

@router.get("/profile")
def profile(user: User = Depends(resolve_current_user)):
    return {"user_id": user.id, "email": user.email, "role": user.role, "tenant_id": user.tenant_id}

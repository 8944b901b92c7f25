from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .access import Role


class ClaimStatus(str, Enum):
    OPEN = "OPEN"
    IN_REVIEW = "IN_REVIEW"
    CLOSED = "CLOSED"

class LoginRequest(BaseModel):
    email: str
    password: str

class RegisterRequest(BaseModel):
    email: str = Field(min_length=3)
    name: str = Field(min_length=2)
    password: str = Field(min_length=6)
    tenant_id: Optional[str] = None

class UserCreate(BaseModel):
    email: str = Field(min_length=3)
    name: str = Field(min_length=2)
    password: str = Field(min_length=6)
    role: Optional[Role] = None
    tenant_id: Optional[str] = None
    external_id: Optional[str] = None

class UserUpdate(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=6)
    role: Optional[Role] = None
    tenant_id: Optional[str] = None
    external_id: Optional[str] = None

class TenantCreate(BaseModel):
    name: str = Field(min_length=1)
    logo: Optional[str] = None  # base64 data url

class TenantUpdate(BaseModel):
    name: Optional[str] = None
    logo: Optional[str] = None

class ClaimCreate(BaseModel):
    identification_number: Optional[str] = None
    status: Optional[ClaimStatus] = None
    data: Dict[str, Any]

class ClaimUpdate(BaseModel):
    identification_number: Optional[str] = None
    status: Optional[ClaimStatus] = None
    data: Optional[Dict[str, Any]] = None

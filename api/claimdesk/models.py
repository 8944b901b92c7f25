import uuid
from typing import List, Optional
from datetime import datetime, timezone
from sqlalchemy import JSON, Column, Index, Text
from sqlmodel import SQLModel, Field as ORMField, Relationship


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tenant(SQLModel, table=True):
    id: str = ORMField(default_factory=_uuid, primary_key=True)
    name: str
    logo: Optional[str] = ORMField(default=None, sa_column=Column(Text, nullable=True))
    api_key: Optional[str] = ORMField(default=None, unique=True, index=True)

    users: List["User"] = Relationship(back_populates="tenant")

class User(SQLModel, table=True):
    __table_args__ = (Index("uq_user_tenant_external", "tenant_id", "external_id", unique=True),)

    id: str = ORMField(default_factory=_uuid, primary_key=True)
    email: str = ORMField(unique=True, index=True)
    name: str
    password_hash: str
    role: str = "user"  # user|admin|super_admin
    tenant_id: str = ORMField(foreign_key="tenant.id", index=True)
    external_id: Optional[str] = ORMField(default=None, index=True)
    created_at: datetime = ORMField(default_factory=utcnow)
    updated_at: datetime = ORMField(default_factory=utcnow)

    tenant: Optional[Tenant] = Relationship(back_populates="users")
    claims: List["Claim"] = Relationship(back_populates="user")

class Claim(SQLModel, table=True):
    id: str = ORMField(default_factory=_uuid, primary_key=True)
    identification_number: str = ORMField(unique=True, index=True)
    status: str = "OPEN"  # OPEN|IN_REVIEW|CLOSED
    data: dict = ORMField(default_factory=dict, sa_column=Column(JSON, nullable=False))
    user_id: str = ORMField(foreign_key="user.id", index=True)
    created_at: datetime = ORMField(default_factory=utcnow)
    updated_at: datetime = ORMField(default_factory=utcnow)

    user: Optional[User] = Relationship(back_populates="claims")

class Config(SQLModel, table=True):
    id: str = ORMField(default_factory=_uuid, primary_key=True)
    tenant_id: str = ORMField(foreign_key="tenant.id", unique=True, index=True)
    data: str = ORMField(sa_column=Column(Text, nullable=False))  # serialized AppConfig

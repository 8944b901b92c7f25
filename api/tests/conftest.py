import os

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from claimdesk.main import app  # noqa: E402
from claimdesk import db as db_module  # noqa: E402
from claimdesk.access import Role  # noqa: E402
from claimdesk.auth import issue_access_token  # noqa: E402
from claimdesk.db import get_session  # noqa: E402
from claimdesk.form_schema import AppConfig  # noqa: E402
from claimdesk.models import Tenant, User  # noqa: E402
from claimdesk.utils import hash_password  # noqa: E402

PASSWORD = "password123"

SAMPLE_CONFIG = {
    "version": "2.0.0",
    "color": "indigo",
    "abTest": {"fileUploadMethod": "dialog"},
    "claimForm": {
        "steps": [
            {
                "id": "incident",
                "title": "Incident",
                "fields": [
                    {"id": "name", "type": "STRING", "label": "Full name", "required": True},
                    {"id": "incident_date", "type": "DATE", "label": "Date", "required": True},
                    {
                        "id": "amount",
                        "type": "AMOUNT",
                        "label": "Amount",
                        "required": True,
                        "validation": {"min": 0, "max": 10000},
                    },
                ],
            },
            {
                "id": "details",
                "title": "Details",
                "fields": [
                    {
                        "id": "category",
                        "type": "LIST",
                        "label": "Category",
                        "required": False,
                        "options": ["theft", "damage"],
                    },
                    {"id": "police_report", "type": "BOOLEAN", "label": "Police report filed", "required": False},
                    {"id": "receipt", "type": "FILE", "label": "Receipt", "required": False},
                ],
            },
        ]
    },
}

VALID_DATA = {"name": "Alice", "incident_date": "2024-05-01", "amount": 250}


@pytest.fixture(scope="session")
def test_engine(tmp_path_factory):
    db_path = tmp_path_factory.mktemp("data") / "test.db"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    return engine


@pytest.fixture
def setup_db(test_engine):
    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def session(test_engine, setup_db):
    with Session(test_engine) as session:
        yield session


@pytest.fixture
def client(test_engine, setup_db):
    db_module.engine = test_engine

    def override_session():
        with Session(test_engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_config():
    return AppConfig.model_validate(SAMPLE_CONFIG)


def make_tenant(session, name="Acme", api_key=None):
    tenant = Tenant(name=name, api_key=api_key or f"key-{name.lower()}")
    session.add(tenant)
    session.commit()
    session.refresh(tenant)
    return tenant


def make_user(session, tenant, email, role=Role.USER, external_id=None):
    user = User(
        email=email,
        name=email.split("@")[0],
        password_hash=hash_password(PASSWORD),
        role=role.value,
        tenant_id=tenant.id,
        external_id=external_id,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {issue_access_token(user)}"}


@pytest.fixture
def world(session):
    """Two tenants, each with an admin and two users, plus a super admin."""
    acme = make_tenant(session, "Acme")
    globex = make_tenant(session, "Globex")
    return {
        "acme": acme,
        "globex": globex,
        "root": make_user(session, acme, "root@example.com", Role.SUPER_ADMIN),
        "acme_admin": make_user(session, acme, "admin@acme.com", Role.ADMIN),
        "alice": make_user(session, acme, "alice@acme.com"),
        "bob": make_user(session, acme, "bob@acme.com"),
        "globex_admin": make_user(session, globex, "admin@globex.com", Role.ADMIN),
        "gina": make_user(session, globex, "gina@globex.com"),
    }

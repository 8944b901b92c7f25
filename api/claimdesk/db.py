import logging

from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy import text, inspect
from sqlalchemy.exc import NoSuchTableError
from .config import DATABASE_URL

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(DATABASE_URL, echo=False, pool_pre_ping=True, connect_args=_connect_args(DATABASE_URL))

def init_db():
    from .models import Tenant, User, Claim, Config
    SQLModel.metadata.create_all(engine)
    _ensure_external_identity_unique_index()

def get_session():
    with Session(engine) as session:
        yield session


def _ensure_external_identity_unique_index():
    """One shadow account per (tenant, external id). NULL external ids never collide."""
    inspector = inspect(engine)
    try:
        indexes = inspector.get_indexes("user")
    except NoSuchTableError:
        return
    if any(idx.get("name") == "uq_user_tenant_external" for idx in indexes):
        return
    with engine.begin() as conn:
        duplicates = conn.execute(
            text(
                'SELECT tenant_id, external_id FROM "user" WHERE external_id IS NOT NULL '
                "GROUP BY tenant_id, external_id HAVING COUNT(*) > 1"
            )
        ).fetchall()
        if duplicates:
            pairs = ", ".join(f"{row[0]}/{row[1]}" for row in duplicates)
            logger.warning(
                "duplicate external identities detected; resolve before enforcing uniqueness: %s",
                pairs,
            )
            return
        conn.execute(
            text('CREATE UNIQUE INDEX IF NOT EXISTS uq_user_tenant_external ON "user"(tenant_id, external_id)')
        )

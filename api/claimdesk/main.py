from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .config import CORS_ORIGINS
from .db import init_db
from .errors import register_error_handlers
from .logging_config import configure_logging
from .routers import admin, app_config, auth, claims, tenants, users

configure_logging()

app = FastAPI(title="ClaimDesk API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

@app.on_event("startup")
def on_startup():
    init_db()

API_PREFIX = "/api/v1"

app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["auth"])
app.include_router(admin.router, prefix=f"{API_PREFIX}/admin", tags=["admin"])
app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["users"])
app.include_router(tenants.router, prefix=f"{API_PREFIX}/tenants", tags=["tenants"])
app.include_router(app_config.router, prefix=f"{API_PREFIX}/config", tags=["config"])
app.include_router(claims.router, prefix=f"{API_PREFIX}/claims", tags=["claims"])

@app.get("/")
def root():
    return {"ok": True, "service": "claimdesk-api"}

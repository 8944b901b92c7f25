"""
Per-tenant form configuration storage.

A tenant has at most one ``Config`` row whose ``data`` column holds the
serialized ``AppConfig``; saving overwrites it. Tenants without a row get
the default configuration.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError
from sqlmodel import Session, select

from .errors import ConfigValidationError
from .form_schema import AppConfig, default_app_config, ensure_valid_config
from .models import Config

logger = logging.getLogger(__name__)


def load_config(session: Session, tenant_id: str) -> AppConfig:
    record = session.exec(select(Config).where(Config.tenant_id == tenant_id)).first()
    if record is None:
        return default_app_config()
    return AppConfig.model_validate_json(record.data)


def save_config(session: Session, tenant_id: str, config: AppConfig) -> AppConfig:
    try:
        ensure_valid_config(config)
    except ConfigValidationError as exc:
        logger.warning("rejected config with %d violation(s)", len(exc.violations), extra={"tenant_id": tenant_id})
        raise
    record = session.exec(select(Config).where(Config.tenant_id == tenant_id)).first()
    if record is None:
        record = Config(tenant_id=tenant_id, data=config.to_json())
    else:
        record.data = config.to_json()
    session.add(record)
    session.commit()
    logger.info("config version %s saved", config.version, extra={"tenant_id": tenant_id})
    return config


def read_config_file(path) -> AppConfig:
    """Parse a JSON config file, falling back to the default config when it can't be read."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
        return AppConfig.model_validate(json.loads(raw))
    except (OSError, ValueError, ValidationError) as exc:
        logger.error("could not load config from %s: %s", path, exc)
        return default_app_config()

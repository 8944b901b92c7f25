"""Seed a tenant's claim-form configuration from a JSON file.

    python -m claimdesk.scripts.load_config <tenant_id> [path/to/app-config.json]
"""

import argparse
import logging

from sqlmodel import Session

from claimdesk.accounts import ensure_tenant
from claimdesk.config import DEFAULT_CONFIG_PATH
from claimdesk.config_store import read_config_file, save_config
from claimdesk import db
from claimdesk.errors import ClaimDeskError
from claimdesk.logging_config import configure_logging

logger = logging.getLogger("claimdesk.scripts.load_config")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("tenant_id")
    parser.add_argument("path", nargs="?", default=DEFAULT_CONFIG_PATH)
    args = parser.parse_args(argv)

    configure_logging()
    db.init_db()
    config = read_config_file(args.path)
    with Session(db.engine) as session:
        try:
            ensure_tenant(session, args.tenant_id)
            save_config(session, args.tenant_id, config)
        except ClaimDeskError as exc:
            logger.error("config not saved: %s", exc)
            for violation in getattr(exc, "violations", []):
                logger.error("  %s: %s", violation.path, violation.reason)
            return 1
    logger.info("loaded %d steps for tenant %s", len(config.steps), args.tenant_id)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

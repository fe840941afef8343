"""
CLI entrypoint that clears expired device sessions. Run from cron, e.g.:

  python -m app.purge_sessions

Hourly: 0 * * * * cd /path/to/backoffice && .venv/bin/python -m app.purge_sessions
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.services.devices import DeviceRegistry

logger = logging.getLogger(__name__)


def main() -> int:
    """Clear refresh tokens whose device expiry has passed."""
    settings = get_settings()
    configure_logging(settings)
    if not settings.SESSION_PURGE_ENABLED:
        logger.info("Session purge disabled (SESSION_PURGE_ENABLED=false)")
        return 0
    db = SessionLocal()
    try:
        cleared = DeviceRegistry(db).purge_expired()
        logger.info("Session purge completed: devices_cleared=%s", cleared)
        return 0
    except Exception as e:
        logger.exception("Session purge failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

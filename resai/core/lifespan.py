import logging
from contextlib import asynccontextmanager

from resai.core.config import settings
from resai.db.session import SessionLocal, init_db
from resai.services.user_service import seed_admin

logger = logging.getLogger(__name__)


def _seed_admin_from_env() -> None:
    if not (settings.admin_email and settings.admin_password):
        return
    db = SessionLocal()
    try:
        seed_admin(db, settings.admin_email, settings.admin_password)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app):
    init_db()
    _seed_admin_from_env()
    logger.info("startup_complete env=%s prefix=%s", settings.env, settings.api_prefix)
    yield

"""Create all tables. Run on app startup."""
import logging

from app.db.base import Base
from app.db.session import engine
from app.models import patient, stock, prescription  # noqa: F401 - register models

logger = logging.getLogger(__name__)


def init_db(bind=None):
    target = bind if bind is not None else engine
    Base.metadata.create_all(bind=target)
    logger.info(f"[DB] Tables ready on {target.url.render_as_string(hide_password=True)}")

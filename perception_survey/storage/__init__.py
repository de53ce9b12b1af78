"""
Survey persistence.

``build_store`` runs the startup capability check and returns the one
store the application uses.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from perception_survey.core.config import Settings, create_db_engine, create_session_factory
from perception_survey.models import Base
from perception_survey.storage.base import (
    DEFAULT_CLIENT_ID,
    LOCAL_SESSION_ID,
    StoredResponse,
    StoredSession,
    SurveyStore,
    VisibilityOverride,
)
from perception_survey.storage.database import DatabaseSurveyStore
from perception_survey.storage.fallback import FallbackSurveyStore
from perception_survey.storage.local import LocalKeyValueStore, LocalSurveyStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> SurveyStore:
    """
    Pick the store for this process.

    - No DATABASE_URL: local storage only
    - DATABASE_URL set but the database cannot be reached: local storage only
    - Otherwise: database with per-call local fallback
    """
    local = LocalSurveyStore(LocalKeyValueStore(settings.LOCAL_STORAGE_PATH))

    engine = create_db_engine(settings.DATABASE_URL)
    if engine is None:
        logger.warning("DATABASE_URL is not configured, using local storage only mode")
        return local

    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as exc:
        logger.error(f"Remote store is unreachable, using local storage only mode: {exc}")
        return local

    logger.info("Remote store connected, local storage is used as fallback")
    return FallbackSurveyStore(DatabaseSurveyStore(create_session_factory(engine)), local)


__all__ = [
    "DEFAULT_CLIENT_ID",
    "LOCAL_SESSION_ID",
    "StoredResponse",
    "StoredSession",
    "SurveyStore",
    "VisibilityOverride",
    "DatabaseSurveyStore",
    "FallbackSurveyStore",
    "LocalKeyValueStore",
    "LocalSurveyStore",
    "build_store",
]

import logging
from typing import List, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from pydantic_settings import BaseSettings


# =====================================================================
# SETTINGS
# =====================================================================


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Client Perception Survey API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Remote store. Unset means local storage only mode.
    DATABASE_URL: Optional[str] = None

    # Local key-value fallback store
    LOCAL_STORAGE_PATH: str = "local_storage.json"

    # Admin dashboard
    ADMIN_PASSWORD: str = "admin123"

    # JWT
    SECRET_KEY: str = "Surveysecretkey"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Client identity cookie
    USER_ID_COOKIE: str = "survey_user_id"

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()


# =====================================================================
# LOGGING
# =====================================================================


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    """Configure root logging once for the API process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# =====================================================================
# DATABASE
# =====================================================================

Base = declarative_base()


def create_db_engine(database_url: Optional[str]) -> Optional[Engine]:
    """Create the engine for the remote store, or None when not configured."""
    if not database_url:
        return None

    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=(
            {"check_same_thread": False} if "sqlite" in database_url else {}
        ),
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

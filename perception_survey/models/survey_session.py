# models/survey_session.py
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime
from perception_survey.core.config import Base


class SurveySession(Base):
    __tablename__ = "survey_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # One session per user
    user_id = Column(String(64), unique=True, nullable=False, index=True)
    started_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime, nullable=True)
    user_agent = Column(String(512), nullable=True)
    ip_address = Column(String(64), nullable=True)

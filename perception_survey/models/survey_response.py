# models/survey_response.py
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, DateTime, Text, UniqueConstraint
from perception_survey.core.config import Base


class SurveyResponse(Base):
    """
    One rating per (activity, user). Upserted in place, history is not kept.
    """

    __tablename__ = "survey_responses"
    __table_args__ = (
        UniqueConstraint("activity_id", "user_id", name="uq_survey_responses_activity_user"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    activity_id = Column(Integer, nullable=False, index=True)
    rating = Column(String(16), nullable=False)  # love | neutral | hate
    comment = Column(Text, nullable=True)
    user_id = Column(String(64), nullable=False, index=True)
    session_id = Column(String(36), nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

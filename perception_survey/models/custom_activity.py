# models/custom_activity.py
from sqlalchemy import Column, String, Integer, Text
from perception_survey.core.config import Base


class CustomActivity(Base):
    """Admin-maintained catalog that replaces the default activities when non-empty."""

    __tablename__ = "custom_activities"

    id = Column(Integer, primary_key=True, autoincrement=False)
    pillar = Column(Integer, nullable=False)
    pillar_name = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)

# models/client_visibility.py
from sqlalchemy import Column, String, Integer, Boolean, UniqueConstraint
from perception_survey.core.config import Base


class ClientActivityVisibility(Base):
    """Per-client (or "default" for everyone) activity visibility override."""

    __tablename__ = "client_activity_visibility"
    __table_args__ = (
        UniqueConstraint("client_id", "activity_id", name="uq_client_activity_visibility"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(String(64), nullable=False, index=True)
    activity_id = Column(Integer, nullable=False)
    is_hidden = Column(Boolean, nullable=False, default=False)

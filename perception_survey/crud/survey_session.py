# crud/survey_session.py
from typing import Optional, List
from datetime import datetime, timezone
from sqlalchemy.orm import Session

from perception_survey.models.survey_session import SurveySession


class CRUDSurveySession:
    """CRUD operations for SurveySession model."""

    def get(self, db: Session, id: str) -> Optional[SurveySession]:
        return db.query(SurveySession).filter(SurveySession.id == id).first()

    def get_by_user_id(self, db: Session, user_id: str) -> Optional[SurveySession]:
        """Get the single session of a user."""
        return db.query(SurveySession).filter(SurveySession.user_id == user_id).first()

    def get_all(self, db: Session) -> List[SurveySession]:
        """Get all sessions, newest first."""
        return db.query(SurveySession).order_by(SurveySession.started_at.desc()).all()

    def create(
        self,
        db: Session,
        *,
        user_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> SurveySession:
        db_obj = SurveySession(user_id=user_id, user_agent=user_agent, ip_address=ip_address)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_or_create(
        self,
        db: Session,
        *,
        user_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> SurveySession:
        """Reuse the user's session if one exists, otherwise create it."""
        existing = self.get_by_user_id(db, user_id=user_id)
        if existing:
            return existing
        return self.create(db, user_id=user_id, user_agent=user_agent, ip_address=ip_address)

    def mark_complete(self, db: Session, *, id: str) -> Optional[SurveySession]:
        """Stamp completed_at on a session."""
        db_obj = self.get(db, id=id)
        if db_obj:
            db_obj.completed_at = datetime.now(timezone.utc)
            db.commit()
            db.refresh(db_obj)
        return db_obj

    def mark_incomplete(self, db: Session, *, id: str) -> Optional[SurveySession]:
        db_obj = self.get(db, id=id)
        if db_obj:
            db_obj.completed_at = None
            db.commit()
            db.refresh(db_obj)
        return db_obj


crud_survey_session = CRUDSurveySession()

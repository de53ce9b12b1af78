# crud/survey_response.py
from typing import Optional, List
from datetime import datetime, timezone
from sqlalchemy.orm import Session

from perception_survey.models.survey_response import SurveyResponse


class CRUDSurveyResponse:
    """CRUD operations for SurveyResponse model."""

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get(self, db: Session, *, user_id: str, activity_id: int) -> Optional[SurveyResponse]:
        """Get the response of one user for one activity."""
        return (
            db.query(SurveyResponse)
            .filter(
                SurveyResponse.user_id == user_id,
                SurveyResponse.activity_id == activity_id,
            )
            .first()
        )

    def get_by_user_id(self, db: Session, user_id: str) -> List[SurveyResponse]:
        """Get all responses of a user, newest first."""
        return (
            db.query(SurveyResponse)
            .filter(SurveyResponse.user_id == user_id)
            .order_by(SurveyResponse.created_at.desc())
            .all()
        )

    def get_all(self, db: Session) -> List[SurveyResponse]:
        """Get every response of every user, newest first."""
        return db.query(SurveyResponse).order_by(SurveyResponse.created_at.desc()).all()

    # =====================================================================
    # WRITE OPERATIONS
    # =====================================================================

    def upsert(
        self,
        db: Session,
        *,
        user_id: str,
        activity_id: int,
        rating: str,
        comment: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> SurveyResponse:
        """Insert or update the response keyed by (activity_id, user_id)."""
        db_obj = self.get(db, user_id=user_id, activity_id=activity_id)

        if db_obj is None:
            db_obj = SurveyResponse(
                user_id=user_id,
                activity_id=activity_id,
                rating=rating,
                comment=comment,
                session_id=session_id,
            )
            db.add(db_obj)
        else:
            db_obj.rating = rating
            db_obj.comment = comment
            db_obj.session_id = session_id
            db_obj.updated_at = datetime.now(timezone.utc)

        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # DELETE OPERATIONS
    # =====================================================================

    def delete(self, db: Session, *, user_id: str, activity_id: int) -> int:
        """Delete one response. Returns the number of deleted rows."""
        deleted = (
            db.query(SurveyResponse)
            .filter(
                SurveyResponse.user_id == user_id,
                SurveyResponse.activity_id == activity_id,
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    def delete_by_user_id(self, db: Session, *, user_id: str) -> int:
        """Delete every response of a user."""
        deleted = (
            db.query(SurveyResponse)
            .filter(SurveyResponse.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted


crud_survey_response = CRUDSurveyResponse()

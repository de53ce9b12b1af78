"""SurveyStore backed by the relational database."""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import sessionmaker

from perception_survey.crud.client_visibility import crud_client_visibility
from perception_survey.crud.custom_activity import crud_custom_activity
from perception_survey.crud.survey_response import crud_survey_response
from perception_survey.crud.survey_session import crud_survey_session
from perception_survey.models import SurveyResponse, SurveySession
from perception_survey.schemas.activity import Activity
from perception_survey.schemas.survey import Rating
from perception_survey.storage.base import (
    StoredResponse,
    StoredSession,
    SurveyStore,
    VisibilityOverride,
)

logger = logging.getLogger(__name__)

_MISSING_TABLE_MARKERS = ("no such table", "does not exist", "undefinedtable")


def is_missing_table_error(exc: Exception) -> bool:
    """True when a query failed because its table has not been created."""
    if not isinstance(exc, (ProgrammingError, OperationalError)):
        return False
    message = str(getattr(exc, "orig", exc)).lower()
    return any(marker in message for marker in _MISSING_TABLE_MARKERS)


def _to_response(row: SurveyResponse) -> StoredResponse:
    return StoredResponse(
        id=row.id,
        activity_id=row.activity_id,
        rating=Rating(row.rating),
        user_id=row.user_id,
        comment=row.comment,
        timestamp=row.updated_at or row.created_at,
    )


def _to_session(row: SurveySession) -> StoredSession:
    return StoredSession(
        id=row.id,
        user_id=row.user_id,
        started_at=row.started_at,
        completed_at=row.completed_at,
    )


class DatabaseSurveyStore(SurveyStore):
    """
    SurveyStore over SQLAlchemy.

    Errors are not caught here; ``FallbackSurveyStore`` decides what a
    failure means.
    """

    name = "database"

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    # -----------------------------------------------------------------
    # Ratings
    # -----------------------------------------------------------------

    def load_responses(
        self, user_id: str, activity_ids: Iterable[int]
    ) -> Dict[int, Optional[StoredResponse]]:
        with self._session_factory() as db:
            rows = crud_survey_response.get_by_user_id(db, user_id=user_id)
            fetched = [_to_response(row) for row in rows]

        responses: Dict[int, Optional[StoredResponse]] = {
            activity_id: None for activity_id in activity_ids
        }
        for response in fetched:
            responses[response.activity_id] = response
        return responses

    def get_response(self, user_id: str, activity_id: int) -> Optional[StoredResponse]:
        with self._session_factory() as db:
            row = crud_survey_response.get(db, user_id=user_id, activity_id=activity_id)
            return _to_response(row) if row else None

    def save_response(
        self,
        user_id: str,
        activity_id: int,
        rating: Optional[Rating],
        comment: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> None:
        with self._session_factory() as db:
            if rating is None:
                logger.debug(f"Deleting rating for activity {activity_id} of {user_id}")
                crud_survey_response.delete(db, user_id=user_id, activity_id=activity_id)
                return

            crud_survey_response.upsert(
                db,
                user_id=user_id,
                activity_id=activity_id,
                rating=Rating(rating).value,
                comment=comment,
                session_id=session_id,
            )

    def clear_responses(self, user_id: str) -> None:
        with self._session_factory() as db:
            crud_survey_response.delete_by_user_id(db, user_id=user_id)

    def list_user_responses(self, user_id: str) -> List[StoredResponse]:
        with self._session_factory() as db:
            return [_to_response(row) for row in crud_survey_response.get_by_user_id(db, user_id=user_id)]

    def list_all_responses(self) -> List[StoredResponse]:
        with self._session_factory() as db:
            return [_to_response(row) for row in crud_survey_response.get_all(db)]

    # -----------------------------------------------------------------
    # Sessions
    # -----------------------------------------------------------------

    def get_session(self, user_id: str) -> Optional[StoredSession]:
        with self._session_factory() as db:
            row = crud_survey_session.get_by_user_id(db, user_id=user_id)
            return _to_session(row) if row else None

    def get_or_create_session(
        self,
        user_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> StoredSession:
        with self._session_factory() as db:
            row = crud_survey_session.get_or_create(
                db, user_id=user_id, user_agent=user_agent, ip_address=ip_address
            )
            return _to_session(row)

    def mark_session_complete(self, session: StoredSession) -> None:
        with self._session_factory() as db:
            crud_survey_session.mark_complete(db, id=session.id)

    def mark_session_incomplete(self, session: StoredSession) -> None:
        with self._session_factory() as db:
            crud_survey_session.mark_incomplete(db, id=session.id)

    def list_sessions(self) -> List[StoredSession]:
        with self._session_factory() as db:
            sessions = [_to_session(row) for row in crud_survey_session.get_all(db)]
            responses = [_to_response(row) for row in crud_survey_response.get_all(db)]

        by_user: Dict[str, List[StoredResponse]] = defaultdict(list)
        for response in responses:
            by_user[response.user_id].append(response)

        for session in sessions:
            session.responses = by_user.get(session.user_id, [])
        return sessions

    # -----------------------------------------------------------------
    # Activity catalog
    # -----------------------------------------------------------------

    def load_custom_activities(self) -> List[Activity]:
        with self._session_factory() as db:
            try:
                rows = crud_custom_activity.get_all(db)
            except (ProgrammingError, OperationalError) as exc:
                if not is_missing_table_error(exc):
                    raise
                logger.info("Custom activities table not found, using defaults")
                return []
            return [Activity.model_validate(row) for row in rows]

    def replace_custom_activities(self, activities: List[Activity]) -> None:
        with self._session_factory() as db:
            crud_custom_activity.replace_all(
                db, activities=[activity.model_dump() for activity in activities]
            )

    # -----------------------------------------------------------------
    # Visibility
    # -----------------------------------------------------------------

    def load_visibility(self, client_ids: Optional[List[str]] = None) -> List[VisibilityOverride]:
        with self._session_factory() as db:
            if client_ids is None:
                rows = crud_client_visibility.get_all(db)
            else:
                rows = crud_client_visibility.get_for_clients(db, client_ids=client_ids)
            return [
                VisibilityOverride(
                    client_id=row.client_id,
                    activity_id=row.activity_id,
                    hidden=bool(row.is_hidden),
                )
                for row in rows
            ]

    def set_visibility(self, client_id: str, activity_id: int, hidden: bool) -> None:
        with self._session_factory() as db:
            crud_client_visibility.upsert(
                db, client_id=client_id, activity_id=activity_id, is_hidden=hidden
            )

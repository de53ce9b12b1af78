"""Remote store with local fallback.

Every call goes to the database first. Failures are logged once and the
same operation is served by local storage instead; nothing is retried and
nothing is reported to the caller. Successful rating writes are mirrored
into local storage so a later outage still finds them.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from perception_survey.schemas.activity import Activity
from perception_survey.schemas.survey import Rating
from perception_survey.storage.base import (
    LOCAL_SESSION_ID,
    StoredResponse,
    StoredSession,
    SurveyStore,
    VisibilityOverride,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FallbackSurveyStore(SurveyStore):
    name = "fallback"

    def __init__(self, remote: SurveyStore, local: SurveyStore):
        self.remote = remote
        self.local = local

    def _attempt(self, operation: str, remote_call: Callable[[], T], local_call: Callable[[], T]) -> T:
        try:
            return remote_call()
        except SQLAlchemyError as exc:
            logger.error(f"Error in {operation} on remote store, falling back to local storage: {exc}")
            return local_call()

    # -----------------------------------------------------------------
    # Ratings
    # -----------------------------------------------------------------

    def load_responses(
        self, user_id: str, activity_ids: Iterable[int]
    ) -> Dict[int, Optional[StoredResponse]]:
        activity_ids = list(activity_ids)
        return self._attempt(
            "load_responses",
            lambda: self.remote.load_responses(user_id, activity_ids),
            lambda: self.local.load_responses(user_id, activity_ids),
        )

    def get_response(self, user_id: str, activity_id: int) -> Optional[StoredResponse]:
        return self._attempt(
            "get_response",
            lambda: self.remote.get_response(user_id, activity_id),
            lambda: self.local.get_response(user_id, activity_id),
        )

    def save_response(
        self,
        user_id: str,
        activity_id: int,
        rating: Optional[Rating],
        comment: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> None:
        try:
            self.remote.save_response(user_id, activity_id, rating, comment, session_id)
        except SQLAlchemyError as exc:
            logger.error(f"Error saving rating to remote store, falling back to local storage: {exc}")

        # Written either way: as a backup of the remote write, or instead of it.
        self.local.save_response(user_id, activity_id, rating, comment, session_id)

    def clear_responses(self, user_id: str) -> None:
        try:
            self.remote.clear_responses(user_id)
        except SQLAlchemyError as exc:
            logger.error(f"Error clearing responses on remote store: {exc}")

        self.local.clear_responses(user_id)

    def list_user_responses(self, user_id: str) -> List[StoredResponse]:
        return self._attempt(
            "list_user_responses",
            lambda: self.remote.list_user_responses(user_id),
            lambda: self.local.list_user_responses(user_id),
        )

    def list_all_responses(self) -> List[StoredResponse]:
        return self._attempt(
            "list_all_responses",
            self.remote.list_all_responses,
            self.local.list_all_responses,
        )

    # -----------------------------------------------------------------
    # Sessions
    # -----------------------------------------------------------------

    def get_session(self, user_id: str) -> Optional[StoredSession]:
        return self._attempt(
            "get_session",
            lambda: self.remote.get_session(user_id),
            lambda: self.local.get_session(user_id),
        )

    def get_or_create_session(
        self,
        user_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> StoredSession:
        return self._attempt(
            "get_or_create_session",
            lambda: self.remote.get_or_create_session(user_id, user_agent, ip_address),
            lambda: self.local.get_or_create_session(user_id, user_agent, ip_address),
        )

    def mark_session_complete(self, session: StoredSession) -> None:
        if session.id == LOCAL_SESSION_ID:
            self.local.mark_session_complete(session)
            return

        try:
            self.remote.mark_session_complete(session)
        except SQLAlchemyError as exc:
            logger.error(f"Error marking session complete: {exc}")

    def mark_session_incomplete(self, session: StoredSession) -> None:
        if session.id == LOCAL_SESSION_ID:
            self.local.mark_session_incomplete(session)
            return

        try:
            self.remote.mark_session_incomplete(session)
        except SQLAlchemyError as exc:
            logger.error(f"Error clearing session completion: {exc}")

    def list_sessions(self) -> List[StoredSession]:
        return self._attempt("list_sessions", self.remote.list_sessions, self.local.list_sessions)

    # -----------------------------------------------------------------
    # Activity catalog
    # -----------------------------------------------------------------

    def load_custom_activities(self) -> List[Activity]:
        return self._attempt(
            "load_custom_activities",
            self.remote.load_custom_activities,
            self.local.load_custom_activities,
        )

    def replace_custom_activities(self, activities: List[Activity]) -> None:
        self._attempt(
            "replace_custom_activities",
            lambda: self.remote.replace_custom_activities(activities),
            lambda: self.local.replace_custom_activities(activities),
        )

    # -----------------------------------------------------------------
    # Visibility
    # -----------------------------------------------------------------

    def load_visibility(self, client_ids: Optional[List[str]] = None) -> List[VisibilityOverride]:
        return self._attempt(
            "load_visibility",
            lambda: self.remote.load_visibility(client_ids),
            lambda: self.local.load_visibility(client_ids),
        )

    def set_visibility(self, client_id: str, activity_id: int, hidden: bool) -> None:
        self._attempt(
            "set_visibility",
            lambda: self.remote.set_visibility(client_id, activity_id, hidden),
            lambda: self.local.set_visibility(client_id, activity_id, hidden),
        )

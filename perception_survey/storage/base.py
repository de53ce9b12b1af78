"""
Base classes for survey persistence.

The survey talks to one ``SurveyStore`` chosen at startup:

- ``DatabaseSurveyStore``: the relational backend (SQLAlchemy)
- ``LocalSurveyStore``: a file-backed key-value store, the stand-in for the
  browser's local storage
- ``FallbackSurveyStore``: the database, degrading to local storage per call

Callers never branch on which one they got.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from perception_survey.schemas.activity import Activity
from perception_survey.schemas.survey import Rating


# Client id of the global visibility defaults
DEFAULT_CLIENT_ID = "default"

# Session id used when no remote session could be created
LOCAL_SESSION_ID = "local-session"


@dataclass
class StoredResponse:
    """A persisted rating of one activity by one user."""
    activity_id: int
    rating: Rating
    user_id: str
    comment: Optional[str] = None
    timestamp: Optional[datetime] = None
    id: Optional[str] = None


@dataclass
class StoredSession:
    """A survey-taking session. There is at most one per user."""
    id: str
    user_id: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    responses: List[StoredResponse] = field(default_factory=list)


@dataclass
class VisibilityOverride:
    client_id: str
    activity_id: int
    hidden: bool


class SurveyStore(ABC):
    """
    Persistence interface for ratings, sessions, the custom catalog and
    visibility overrides.

    Writes are overwrite-per-key: one response per (user, activity), one
    override per (client, activity). There is no versioning.
    """

    name: str = "abstract"

    # -----------------------------------------------------------------
    # Ratings
    # -----------------------------------------------------------------

    @abstractmethod
    def load_responses(
        self, user_id: str, activity_ids: Iterable[int]
    ) -> Dict[int, Optional[StoredResponse]]:
        """
        Bulk load a user's responses.

        Every requested activity is present in the result, None when unrated.
        """
        pass

    @abstractmethod
    def get_response(self, user_id: str, activity_id: int) -> Optional[StoredResponse]:
        pass

    @abstractmethod
    def save_response(
        self,
        user_id: str,
        activity_id: int,
        rating: Optional[Rating],
        comment: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> None:
        """Upsert a response. A None rating deletes it."""
        pass

    @abstractmethod
    def clear_responses(self, user_id: str) -> None:
        """Delete every response of a user."""
        pass

    @abstractmethod
    def list_user_responses(self, user_id: str) -> List[StoredResponse]:
        pass

    @abstractmethod
    def list_all_responses(self) -> List[StoredResponse]:
        pass

    # -----------------------------------------------------------------
    # Sessions
    # -----------------------------------------------------------------

    @abstractmethod
    def get_session(self, user_id: str) -> Optional[StoredSession]:
        pass

    @abstractmethod
    def get_or_create_session(
        self,
        user_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> StoredSession:
        pass

    @abstractmethod
    def mark_session_complete(self, session: StoredSession) -> None:
        pass

    @abstractmethod
    def mark_session_incomplete(self, session: StoredSession) -> None:
        """Clear completed_at, e.g. after the client resets their ratings."""
        pass

    @abstractmethod
    def list_sessions(self) -> List[StoredSession]:
        """All sessions, newest first, each with its user's responses."""
        pass

    # -----------------------------------------------------------------
    # Activity catalog
    # -----------------------------------------------------------------

    @abstractmethod
    def load_custom_activities(self) -> List[Activity]:
        """The admin-maintained catalog ordered by id. Empty means use defaults."""
        pass

    @abstractmethod
    def replace_custom_activities(self, activities: List[Activity]) -> None:
        pass

    # -----------------------------------------------------------------
    # Visibility
    # -----------------------------------------------------------------

    @abstractmethod
    def load_visibility(self, client_ids: Optional[List[str]] = None) -> List[VisibilityOverride]:
        """Overrides for the given clients, or all overrides when None."""
        pass

    @abstractmethod
    def set_visibility(self, client_id: str, activity_id: int, hidden: bool) -> None:
        pass

# =====================================================================
# services/survey.py - the client-facing survey
# =====================================================================

import logging
from typing import Dict, List, Optional, Tuple

from perception_survey.core.exceptions import NotFoundError
from perception_survey.schemas.activity import Activity
from perception_survey.schemas.survey import (
    ActivityRating,
    Rating,
    RatingChangeResult,
    SessionOut,
    SurveyStats,
    SurveyView,
)
from perception_survey.services.catalog import catalog_service
from perception_survey.services.export import export_filename, survey_csv
from perception_survey.services.stats import compute_stats, is_complete, pillar_sections
from perception_survey.storage.base import StoredResponse, SurveyStore

logger = logging.getLogger(__name__)

SURVEY_EXPORT_PREFIX = "client-perception-survey"


class SurveyService:
    """Service layer for rating activities and reading progress."""

    def __init__(self):
        self.catalog = catalog_service

    # =====================================================================
    # HELPERS
    # =====================================================================

    def _visible_activity(
        self, visible: List[Activity], activity_id: int
    ) -> Activity:
        for activity in visible:
            if activity.id == activity_id:
                return activity
        raise NotFoundError(f"Activity {activity_id} not found")

    def _load(
        self, store: SurveyStore, user_id: str
    ) -> Tuple[List[Activity], Dict[int, Optional[StoredResponse]]]:
        visible = self.catalog.get_visible_activities(store, user_id)
        responses = store.load_responses(user_id, [a.id for a in visible])
        return visible, responses

    @staticmethod
    def _ratings(responses: Dict[int, Optional[StoredResponse]]) -> Dict[int, Optional[Rating]]:
        return {
            activity_id: response.rating if response else None
            for activity_id, response in responses.items()
        }

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_activities(self, store: SurveyStore, user_id: str) -> List[Activity]:
        return self.catalog.get_visible_activities(store, user_id)

    def load_ratings(self, store: SurveyStore, user_id: str) -> Dict[int, Optional[Rating]]:
        """Rating of every visible activity, None when unrated."""
        _, responses = self._load(store, user_id)
        return self._ratings(responses)

    def get_rating(self, store: SurveyStore, user_id: str, activity_id: int) -> ActivityRating:
        visible = self.catalog.get_visible_activities(store, user_id)
        self._visible_activity(visible, activity_id)

        response = store.get_response(user_id, activity_id)
        return ActivityRating(
            activity_id=activity_id,
            rating=response.rating if response else None,
            comment=response.comment if response else None,
            rated_at=response.timestamp if response else None,
        )

    def get_stats(self, store: SurveyStore, user_id: str) -> Tuple[SurveyStats, bool]:
        visible, responses = self._load(store, user_id)
        stats = compute_stats(self._ratings(responses), visible)
        return stats, is_complete(stats, visible)

    def get_view(self, store: SurveyStore, user_id: str) -> SurveyView:
        """Pillars, ratings, stats, and the loved activities once complete."""
        visible, responses = self._load(store, user_id)
        ratings = self._ratings(responses)
        stats = compute_stats(ratings, visible)
        complete = is_complete(stats, visible)

        return SurveyView(
            user_id=user_id,
            stats=stats,
            is_complete=complete,
            pillars=pillar_sections(visible, responses),
            loved_activities=(
                [a for a in visible if ratings.get(a.id) == Rating.love] if complete else []
            ),
        )

    def get_session(self, store: SurveyStore, user_id: str) -> SessionOut:
        session = store.get_session(user_id)
        if session is None:
            raise NotFoundError("No survey session for this client yet")
        return SessionOut(
            id=session.id,
            user_id=session.user_id,
            started_at=session.started_at,
            completed_at=session.completed_at,
        )

    # =====================================================================
    # WRITE OPERATIONS
    # =====================================================================

    def set_rating(
        self,
        store: SurveyStore,
        user_id: str,
        activity_id: int,
        rating: Optional[Rating],
        comment: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        keep_comment: bool = False,
    ) -> RatingChangeResult:
        """
        Persist a rating (None clears it) and return the new progress.

        With keep_comment the stored comment survives a rating change and
        `comment` is ignored. The returned rating is the requested one whether the remote write
        succeeded or the value only reached local storage.
        """
        visible = self.catalog.get_visible_activities(store, user_id)
        self._visible_activity(visible, activity_id)

        logger.info(f"Saving rating: activity={activity_id} rating={rating} user={user_id}")

        session_id = None
        if rating is not None:
            session = store.get_or_create_session(user_id, user_agent, ip_address)
            session_id = session.id
            if keep_comment:
                current = store.get_response(user_id, activity_id)
                comment = current.comment if current else None
        else:
            comment = None

        activity_ids = [a.id for a in visible]
        was_complete = is_complete(
            compute_stats(self._ratings(store.load_responses(user_id, activity_ids)), visible),
            visible,
        )

        store.save_response(user_id, activity_id, rating, comment, session_id)

        responses = store.load_responses(user_id, activity_ids)
        stats = compute_stats(self._ratings(responses), visible)
        complete = is_complete(stats, visible)
        if complete and not was_complete:
            self._mark_complete(store, user_id)

        return RatingChangeResult(
            activity_id=activity_id,
            rating=rating,
            comment=comment,
            stats=stats,
            is_complete=complete,
        )

    def toggle_rating(
        self,
        store: SurveyStore,
        user_id: str,
        activity_id: int,
        rating: Rating,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> RatingChangeResult:
        """Choosing the rating the client already gave clears it."""
        current = store.get_response(user_id, activity_id)
        if current is not None and current.rating == rating:
            new_rating, comment = None, None
        else:
            new_rating, comment = rating, (current.comment if current else None)

        return self.set_rating(
            store, user_id, activity_id, new_rating, comment, user_agent, ip_address
        )

    def _mark_complete(self, store: SurveyStore, user_id: str) -> None:
        """Stamp completed_at, replacing the stamp of an earlier completion."""
        session = store.get_session(user_id)
        if session is None:
            return
        store.mark_session_complete(session)
        logger.info(f"Survey completed by {user_id}")

    def reset(self, store: SurveyStore, user_id: str) -> SurveyView:
        """Delete every rating of the client and reopen their session."""
        store.clear_responses(user_id)
        session = store.get_session(user_id)
        if session is not None and session.completed_at is not None:
            store.mark_session_incomplete(session)
        return self.get_view(store, user_id)

    # =====================================================================
    # EXPORT
    # =====================================================================

    def export_csv(self, store: SurveyStore, user_id: str) -> Tuple[str, str]:
        """Return (filename, csv content) for the client's own responses."""
        visible, responses = self._load(store, user_id)
        return export_filename(SURVEY_EXPORT_PREFIX), survey_csv(visible, responses)


survey_service = SurveyService()

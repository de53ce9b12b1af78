# =====================================================================
# services/admin.py - password-gated dashboard
# =====================================================================

import logging
from typing import Tuple

from perception_survey.core.exceptions import UnauthorizedError
from perception_survey.core.security import (
    ADMIN_SUBJECT,
    check_admin_password,
    create_access_token,
)
from perception_survey.schemas.admin import (
    AnalyticsOut,
    ClientSummary,
    ClientsOverview,
    TokenResponse,
    TopService,
)
from perception_survey.schemas.survey import Rating
from perception_survey.services.catalog import catalog_service
from perception_survey.services.export import all_responses_csv, export_filename
from perception_survey.services.stats import rating_analytics, round_half_up
from perception_survey.storage.base import SurveyStore

logger = logging.getLogger(__name__)

ALL_RESPONSES_EXPORT_PREFIX = "all-survey-responses"
TOP_SERVICES_LIMIT = 5


class AdminService:
    """Service layer for the admin dashboard."""

    def __init__(self):
        self.catalog = catalog_service

    # =====================================================================
    # AUTHENTICATION
    # =====================================================================

    def login(self, password: str) -> TokenResponse:
        if not check_admin_password(password):
            logger.warning("Rejected admin login attempt")
            raise UnauthorizedError("Incorrect password")
        return TokenResponse(access_token=create_access_token({"sub": ADMIN_SUBJECT}))

    # =====================================================================
    # CLIENT RESPONSES
    # =====================================================================

    def get_clients_overview(self, store: SurveyStore) -> ClientsOverview:
        """One summary per session, newest first."""
        activities = self.catalog.get_activities(store)
        names = {activity.id: activity.name for activity in activities}
        catalog_size = len(activities)

        clients = []
        for session in store.list_sessions():
            loved = [r for r in session.responses if r.rating == Rating.love]
            top_services = [
                TopService(
                    activity_id=r.activity_id,
                    activity_name=names.get(r.activity_id, "Unknown"),
                    rating=r.rating,
                )
                for r in loved[:TOP_SERVICES_LIMIT]
            ]
            total = len(session.responses)
            clients.append(
                ClientSummary(
                    user_id=session.user_id,
                    total_responses=total,
                    response_percentage=(
                        round_half_up(100 * total / catalog_size) if catalog_size else 0
                    ),
                    completed_at=session.completed_at,
                    top_services=top_services,
                )
            )

        completed = sum(1 for c in clients if c.completed_at is not None)
        return ClientsOverview(
            total_clients=len(clients),
            completed=completed,
            in_progress=len(clients) - completed,
            catalog_size=catalog_size,
            clients=clients,
        )

    # =====================================================================
    # ANALYTICS & EXPORT
    # =====================================================================

    def get_analytics(self, store: SurveyStore) -> AnalyticsOut:
        return rating_analytics(store.list_all_responses(), self.catalog.get_activities(store))

    def export_all_csv(self, store: SurveyStore) -> Tuple[str, str]:
        """Return (filename, csv content) with every client's responses."""
        content = all_responses_csv(store.list_all_responses(), self.catalog.get_activities(store))
        return export_filename(ALL_RESPONSES_EXPORT_PREFIX), content


admin_service = AdminService()

# =====================================================================
# services/catalog.py - activity catalog and client visibility
# =====================================================================

import logging
from typing import Dict, List, Optional, Set

from perception_survey.core.exceptions import NotFoundError, ValidationError
from perception_survey.data.activity_catalog import DEFAULT_ACTIVITIES, pillar_name
from perception_survey.schemas.activity import Activity, ActivityCreate, ActivityUpdate
from perception_survey.schemas.admin import ActivityVisibility, ClientVisibilityOut
from perception_survey.storage.base import DEFAULT_CLIENT_ID, SurveyStore, VisibilityOverride

logger = logging.getLogger(__name__)


def default_activities() -> List[Activity]:
    return [Activity(**activity) for activity in DEFAULT_ACTIVITIES]


def resolve_hidden(
    overrides: List[VisibilityOverride], client_id: str
) -> Dict[int, str]:
    """
    Map activity id -> source of the override that hides it.

    Precedence: the client's own override, then the "default" override,
    otherwise visible.
    """
    defaults = {o.activity_id: o.hidden for o in overrides if o.client_id == DEFAULT_CLIENT_ID}
    explicit = {o.activity_id: o.hidden for o in overrides if o.client_id == client_id}

    hidden: Dict[int, str] = {}
    for activity_id in set(defaults) | set(explicit):
        if activity_id in explicit:
            if explicit[activity_id]:
                hidden[activity_id] = "client"
        elif defaults[activity_id]:
            hidden[activity_id] = DEFAULT_CLIENT_ID
    return hidden


class CatalogService:
    """Service layer for the activity catalog and per-client visibility."""

    # =====================================================================
    # CATALOG READ OPERATIONS
    # =====================================================================

    def get_activities(self, store: SurveyStore) -> List[Activity]:
        """The custom catalog when one is stored, otherwise the defaults."""
        custom = store.load_custom_activities()
        if custom:
            return custom
        return default_activities()

    def get_activity(self, store: SurveyStore, activity_id: int) -> Activity:
        for activity in self.get_activities(store):
            if activity.id == activity_id:
                return activity
        raise NotFoundError(f"Activity {activity_id} not found")

    def get_visible_activities(self, store: SurveyStore, client_id: str) -> List[Activity]:
        """Catalog entries shown to one client, in catalog order."""
        activities = self.get_activities(store)
        overrides = store.load_visibility([client_id, DEFAULT_CLIENT_ID])
        hidden = resolve_hidden(overrides, client_id)
        return [activity for activity in activities if activity.id not in hidden]

    # =====================================================================
    # CATALOG WRITE OPERATIONS
    # =====================================================================

    def _save(self, store: SurveyStore, activities: List[Activity]) -> List[Activity]:
        store.replace_custom_activities(activities)
        logger.info(f"Activities saved: {len(activities)} activities")
        return activities

    def add_activity(self, store: SurveyStore, data: ActivityCreate) -> Activity:
        """Append an activity with id = highest id + 1."""
        activities = self.get_activities(store)
        next_id = max((a.id for a in activities), default=0) + 1

        activity = Activity(
            id=next_id,
            pillar=data.pillar,
            pillar_name=pillar_name(data.pillar),
            name=data.name.strip(),
            description=data.description.strip(),
        )
        if not activity.name or not activity.description:
            raise ValidationError("Activity name and description are required")

        self._save(store, activities + [activity])
        return activity

    def update_activity(
        self, store: SurveyStore, activity_id: int, data: ActivityUpdate
    ) -> Activity:
        """Edit name, description or pillar. The pillar name follows the pillar."""
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)

        activities = self.get_activities(store)
        updated: Optional[Activity] = None
        for index, activity in enumerate(activities):
            if activity.id != activity_id:
                continue
            if "pillar" in update_data:
                update_data["pillar_name"] = pillar_name(update_data["pillar"])
            updated = activity.model_copy(update=update_data)
            activities[index] = updated
            break

        if updated is None:
            raise NotFoundError(f"Activity {activity_id} not found")

        self._save(store, activities)
        return updated

    def delete_activity(self, store: SurveyStore, activity_id: int) -> List[Activity]:
        activities = self.get_activities(store)
        remaining = [a for a in activities if a.id != activity_id]
        if len(remaining) == len(activities):
            raise NotFoundError(f"Activity {activity_id} not found")
        return self._save(store, remaining)

    def reset_to_defaults(self, store: SurveyStore) -> List[Activity]:
        return self._save(store, default_activities())

    # =====================================================================
    # VISIBILITY OPERATIONS
    # =====================================================================

    def get_visibility_settings(self, store: SurveyStore) -> Dict[str, Dict[int, bool]]:
        """client_id -> activity_id -> hidden, for every stored override."""
        settings: Dict[str, Dict[int, bool]] = {}
        for override in store.load_visibility():
            settings.setdefault(override.client_id, {})[override.activity_id] = override.hidden
        return settings

    def get_client_visibility(self, store: SurveyStore, client_id: str) -> ClientVisibilityOut:
        activities = self.get_activities(store)
        overrides = store.load_visibility([client_id, DEFAULT_CLIENT_ID])
        hidden = resolve_hidden(overrides, client_id)

        explicit: Set[int] = {o.activity_id for o in overrides if o.client_id == client_id}
        defaulted: Set[int] = {o.activity_id for o in overrides if o.client_id == DEFAULT_CLIENT_ID}

        items = []
        for activity in activities:
            if activity.id in explicit:
                source = "client"
            elif activity.id in defaulted:
                source = DEFAULT_CLIENT_ID
            else:
                source = None
            items.append(
                ActivityVisibility(**activity.model_dump(), hidden=activity.id in hidden, source=source)
            )

        return ClientVisibilityOut(
            client_id=client_id,
            visible_count=sum(1 for item in items if not item.hidden),
            total=len(items),
            activities=items,
        )

    def set_visibility(
        self, store: SurveyStore, client_id: str, activity_id: int, hidden: bool
    ) -> ClientVisibilityOut:
        """Write an override for one client, or for everyone with client_id "default"."""
        self.get_activity(store, activity_id)
        store.set_visibility(client_id, activity_id, hidden)
        return self.get_client_visibility(store, client_id)

    def toggle_visibility(
        self, store: SurveyStore, client_id: str, activity_id: int
    ) -> ClientVisibilityOut:
        """Flip what the client currently sees, as an override of their own."""
        self.get_activity(store, activity_id)
        overrides = store.load_visibility([client_id, DEFAULT_CLIENT_ID])
        currently_hidden = activity_id in resolve_hidden(overrides, client_id)
        store.set_visibility(client_id, activity_id, not currently_hidden)
        return self.get_client_visibility(store, client_id)


catalog_service = CatalogService()

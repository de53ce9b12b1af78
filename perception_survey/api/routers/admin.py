# perception_survey/api/routers/admin.py
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from perception_survey.api.deps import get_store
from perception_survey.core.security import get_current_admin
from perception_survey.schemas.activity import Activity, ActivityCreate, ActivityUpdate
from perception_survey.schemas.admin import (
    AdminLoginRequest,
    AnalyticsOut,
    ClientsOverview,
    ClientVisibilityOut,
    TokenResponse,
    VisibilitySettingsOut,
    VisibilityUpdate,
)
from perception_survey.services.admin import admin_service
from perception_survey.services.catalog import catalog_service
from perception_survey.storage.base import SurveyStore

router = APIRouter(prefix="/admin", tags=["Admin Dashboard"])


# =====================================================================
# PUBLIC ENDPOINTS - No authentication required
# =====================================================================


@router.post("/login", response_model=TokenResponse, summary="Unlock the admin dashboard")
def login(payload: AdminLoginRequest):
    """
    Exchange the admin password for a bearer token.

    Returns 401 "Incorrect password" on mismatch.
    """
    return admin_service.login(payload.password)


# =====================================================================
# CLIENT RESPONSES
# =====================================================================


@router.get("/clients", response_model=ClientsOverview, summary="Client responses")
def get_clients(
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    """One summary per client with their top loved services."""
    return admin_service.get_clients_overview(store)


@router.get("/analytics", response_model=AnalyticsOut, summary="Response analytics")
def get_analytics(
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    """Rating counts and percentages per activity across all clients."""
    return admin_service.get_analytics(store)


@router.get("/export", summary="Download all responses as CSV")
def export_all(
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    filename, content = admin_service.export_all_csv(store)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# =====================================================================
# TASK MANAGEMENT - the activity catalog
# =====================================================================


@router.get("/activities", response_model=List[Activity], summary="List all activities")
def list_activities(
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    return catalog_service.get_activities(store)


@router.post(
    "/activities",
    response_model=Activity,
    status_code=status.HTTP_201_CREATED,
    summary="Add an activity",
)
def add_activity(
    payload: ActivityCreate,
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    return catalog_service.add_activity(store, payload)


@router.patch("/activities/{activity_id}", response_model=Activity, summary="Edit an activity")
def update_activity(
    activity_id: int,
    payload: ActivityUpdate,
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    return catalog_service.update_activity(store, activity_id, payload)


@router.delete(
    "/activities/{activity_id}",
    response_model=List[Activity],
    summary="Delete an activity",
)
def delete_activity(
    activity_id: int,
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    """Returns the remaining catalog."""
    return catalog_service.delete_activity(store, activity_id)


@router.post(
    "/activities/reset",
    response_model=List[Activity],
    summary="Reset activities to defaults",
)
def reset_activities(
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    return catalog_service.reset_to_defaults(store)


# =====================================================================
# CLIENT VISIBILITY
# =====================================================================


@router.get("/visibility", response_model=VisibilitySettingsOut, summary="All visibility overrides")
def get_visibility_settings(
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    return VisibilitySettingsOut(settings=catalog_service.get_visibility_settings(store))


@router.get(
    "/visibility/{client_id}",
    response_model=ClientVisibilityOut,
    summary="Activities as one client sees them",
)
def get_client_visibility(
    client_id: str,
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    """Use client id "default" for the overrides that apply to every client."""
    return catalog_service.get_client_visibility(store, client_id)


@router.put(
    "/visibility/{client_id}/{activity_id}",
    response_model=ClientVisibilityOut,
    summary="Show or hide an activity",
)
def set_visibility(
    client_id: str,
    activity_id: int,
    payload: VisibilityUpdate,
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    return catalog_service.set_visibility(store, client_id, activity_id, payload.hidden)


@router.post(
    "/visibility/{client_id}/{activity_id}/toggle",
    response_model=ClientVisibilityOut,
    summary="Toggle an activity for a client",
)
def toggle_visibility(
    client_id: str,
    activity_id: int,
    _: str = Depends(get_current_admin),
    store: SurveyStore = Depends(get_store),
):
    return catalog_service.toggle_visibility(store, client_id, activity_id)

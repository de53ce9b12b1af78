# perception_survey/api/deps.py
import re
import secrets
import string
import time
from typing import Optional

from fastapi import Header, Request, Response

from perception_survey.core.config import settings
from perception_survey.storage.base import DEFAULT_CLIENT_ID, SurveyStore
from perception_survey.storage.local import SHARED_SCOPE


USER_ID_HEADER = "X-Survey-User"
USER_ID_COOKIE_MAX_AGE = 60 * 60 * 24 * 365

_USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-]{1,64}$")
_BASE36 = string.digits + string.ascii_lowercase

# Ids that name shared storage scopes, never a client
RESERVED_USER_IDS = frozenset({SHARED_SCOPE, DEFAULT_CLIENT_ID})


def generate_user_id() -> str:
    """Anonymous client id: user_<epoch ms>_<9 base36 chars>."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"user_{int(time.time() * 1000)}_{suffix}"


def is_valid_user_id(user_id: Optional[str]) -> bool:
    return (
        bool(user_id)
        and _USER_ID_PATTERN.match(user_id) is not None
        and user_id not in RESERVED_USER_IDS
    )


def set_user_cookie(response: Response, user_id: str) -> None:
    response.set_cookie(
        settings.USER_ID_COOKIE,
        user_id,
        max_age=USER_ID_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
    )


def get_store(request: Request) -> SurveyStore:
    """The store picked at startup."""
    return request.app.state.store


def get_user_id(
    request: Request,
    response: Response,
    x_survey_user: Optional[str] = Header(None, alias=USER_ID_HEADER),
) -> str:
    """
    Identify the survey client by header or cookie, creating an id on first visit.

    The id is (re)sent as a cookie so the client keeps it.
    """
    user_id = x_survey_user or request.cookies.get(settings.USER_ID_COOKIE)
    if not is_valid_user_id(user_id):
        user_id = generate_user_id()

    set_user_cookie(response, user_id)
    return user_id


def client_details(request: Request) -> dict:
    """User agent and address recorded on new sessions."""
    return {
        "user_agent": request.headers.get("user-agent"),
        "ip_address": request.client.host if request.client else None,
    }

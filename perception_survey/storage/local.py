"""Local key-value storage.

A JSON file holding string values per scope, the server-side stand-in for
the browser's ``localStorage``. Each client id is one scope; the admin
catalog and visibility overrides live in a shared scope. Anything that fails
to parse is treated as missing.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from perception_survey.core.exceptions import ServiceError
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

SHARED_SCOPE = "__shared__"

RATING_PREFIX = "rating_"
COMMENT_PREFIX = "comment_"
RATED_AT_PREFIX = "rated_at_"

SESSION_STARTED_KEY = "session_started_at"
SESSION_COMPLETED_KEY = "session_completed_at"

CUSTOM_ACTIVITIES_KEY = "custom_activities"
VISIBILITY_KEY = "client_activity_visibility"


def _parse_rating(value: Optional[str]) -> Optional[Rating]:
    if value is None:
        return None
    try:
        return Rating(value)
    except ValueError:
        return None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class LocalKeyValueStore:
    """String key-value pairs grouped by scope, persisted to one JSON file."""

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = threading.RLock()

    def _read(self) -> Dict[str, Dict[str, str]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"Local storage at {self.path} is unreadable, treating as empty: {exc}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {
            scope: values
            for scope, values in data.items()
            if isinstance(values, dict)
        }

    def _write(self, data: Dict[str, Dict[str, str]]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            logger.error(f"Failed to write local storage at {self.path}: {exc}")
            raise ServiceError(f"Local storage is not writable: {exc}") from exc

    def get_item(self, scope: str, key: str) -> Optional[str]:
        with self._lock:
            value = self._read().get(scope, {}).get(key)
        return value if isinstance(value, str) else None

    def set_item(self, scope: str, key: str, value: str) -> None:
        self.set_items(scope, {key: value})

    def set_items(
        self, scope: str, values: Dict[str, str], remove: Iterable[str] = ()
    ) -> None:
        """Set values and drop the keys in `remove` in a single write."""
        with self._lock:
            data = self._read()
            scoped = data.setdefault(scope, {})
            scoped.update(values)
            for key in remove:
                scoped.pop(key, None)
            self._write(data)

    def update_item(
        self, scope: str, key: str, update: Callable[[Optional[str]], str]
    ) -> str:
        """Replace a value with update(current value) while holding the lock."""
        with self._lock:
            data = self._read()
            values = data.setdefault(scope, {})
            current = values.get(key)
            values[key] = update(current if isinstance(current, str) else None)
            self._write(data)
            return values[key]

    def remove_item(self, scope: str, key: str) -> None:
        self.remove_items(scope, [key])

    def remove_items(self, scope: str, keys: Iterable[str]) -> None:
        with self._lock:
            data = self._read()
            values = data.get(scope)
            if not values:
                return
            for key in keys:
                values.pop(key, None)
            if not values:
                del data[scope]
            self._write(data)

    def items(self, scope: str) -> Dict[str, str]:
        with self._lock:
            values = self._read().get(scope, {})
        return {k: v for k, v in values.items() if isinstance(v, str)}

    def scopes(self) -> List[str]:
        with self._lock:
            return list(self._read().keys())


class LocalSurveyStore(SurveyStore):
    """SurveyStore over a LocalKeyValueStore."""

    name = "local"

    def __init__(self, kv: LocalKeyValueStore):
        self.kv = kv

    # -----------------------------------------------------------------
    # Ratings
    # -----------------------------------------------------------------

    def _response_from_items(
        self, user_id: str, activity_id: int, items: Dict[str, str]
    ) -> Optional[StoredResponse]:
        rating = _parse_rating(items.get(f"{RATING_PREFIX}{activity_id}"))
        if rating is None:
            return None
        return StoredResponse(
            activity_id=activity_id,
            rating=rating,
            user_id=user_id,
            comment=items.get(f"{COMMENT_PREFIX}{activity_id}"),
            timestamp=_parse_datetime(items.get(f"{RATED_AT_PREFIX}{activity_id}")),
        )

    def load_responses(
        self, user_id: str, activity_ids: Iterable[int]
    ) -> Dict[int, Optional[StoredResponse]]:
        items = self.kv.items(user_id)
        return {
            activity_id: self._response_from_items(user_id, activity_id, items)
            for activity_id in activity_ids
        }

    def get_response(self, user_id: str, activity_id: int) -> Optional[StoredResponse]:
        return self._response_from_items(user_id, activity_id, self.kv.items(user_id))

    def save_response(
        self,
        user_id: str,
        activity_id: int,
        rating: Optional[Rating],
        comment: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> None:
        if rating is None:
            self.kv.remove_items(
                user_id,
                [
                    f"{RATING_PREFIX}{activity_id}",
                    f"{COMMENT_PREFIX}{activity_id}",
                    f"{RATED_AT_PREFIX}{activity_id}",
                ],
            )
            return

        values = {
            f"{RATING_PREFIX}{activity_id}": Rating(rating).value,
            f"{RATED_AT_PREFIX}{activity_id}": _now(),
        }
        comment_key = f"{COMMENT_PREFIX}{activity_id}"
        if comment:
            values[comment_key] = comment
            self.kv.set_items(user_id, values)
        else:
            self.kv.set_items(user_id, values, remove=[comment_key])

    def clear_responses(self, user_id: str) -> None:
        prefixes = (RATING_PREFIX, COMMENT_PREFIX, RATED_AT_PREFIX)
        keys = [key for key in self.kv.items(user_id) if key.startswith(prefixes)]
        self.kv.remove_items(user_id, keys)

    def _rated_activity_ids(self, items: Dict[str, str]) -> List[int]:
        activity_ids = []
        for key in items:
            if not key.startswith(RATING_PREFIX):
                continue
            try:
                activity_ids.append(int(key[len(RATING_PREFIX):]))
            except ValueError:
                continue
        return sorted(activity_ids)

    def list_user_responses(self, user_id: str) -> List[StoredResponse]:
        items = self.kv.items(user_id)
        responses = [
            self._response_from_items(user_id, activity_id, items)
            for activity_id in self._rated_activity_ids(items)
        ]
        return [r for r in responses if r is not None]

    def _client_scopes(self) -> List[str]:
        return [scope for scope in self.kv.scopes() if scope != SHARED_SCOPE]

    def list_all_responses(self) -> List[StoredResponse]:
        responses = []
        for user_id in self._client_scopes():
            responses.extend(self.list_user_responses(user_id))
        return responses

    # -----------------------------------------------------------------
    # Sessions
    # -----------------------------------------------------------------

    def get_session(self, user_id: str) -> Optional[StoredSession]:
        items = self.kv.items(user_id)
        started_at = items.get(SESSION_STARTED_KEY)
        if started_at is None:
            return None
        return StoredSession(
            id=LOCAL_SESSION_ID,
            user_id=user_id,
            started_at=_parse_datetime(started_at),
            completed_at=_parse_datetime(items.get(SESSION_COMPLETED_KEY)),
        )

    def get_or_create_session(
        self,
        user_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> StoredSession:
        session = self.get_session(user_id)
        if session is None:
            self.kv.set_item(user_id, SESSION_STARTED_KEY, _now())
            session = self.get_session(user_id)
        return session

    def mark_session_complete(self, session: StoredSession) -> None:
        self.kv.set_item(session.user_id, SESSION_COMPLETED_KEY, _now())

    def mark_session_incomplete(self, session: StoredSession) -> None:
        self.kv.remove_item(session.user_id, SESSION_COMPLETED_KEY)

    def list_sessions(self) -> List[StoredSession]:
        sessions = []
        for user_id in self._client_scopes():
            responses = self.list_user_responses(user_id)
            session = self.get_session(user_id)
            if session is None:
                if not responses:
                    continue
                session = StoredSession(id=LOCAL_SESSION_ID, user_id=user_id)
            session.responses = responses
            sessions.append(session)

        epoch = datetime.min.replace(tzinfo=timezone.utc)
        sessions.sort(key=lambda s: s.started_at or epoch, reverse=True)
        return sessions

    # -----------------------------------------------------------------
    # Activity catalog
    # -----------------------------------------------------------------

    def load_custom_activities(self) -> List[Activity]:
        raw = self.kv.get_item(SHARED_SCOPE, CUSTOM_ACTIVITIES_KEY)
        if not raw:
            return []
        try:
            rows = json.loads(raw)
            activities = [Activity.model_validate(row) for row in rows]
        except (ValueError, TypeError) as exc:
            logger.warning(f"Stored custom activities are unreadable, using defaults: {exc}")
            return []
        return sorted(activities, key=lambda a: a.id)

    def replace_custom_activities(self, activities: List[Activity]) -> None:
        payload = json.dumps([activity.model_dump() for activity in activities])
        self.kv.set_item(SHARED_SCOPE, CUSTOM_ACTIVITIES_KEY, payload)

    # -----------------------------------------------------------------
    # Visibility
    # -----------------------------------------------------------------

    @staticmethod
    def _parse_visibility(raw: Optional[str]) -> Dict[str, Dict[str, bool]]:
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def load_visibility(self, client_ids: Optional[List[str]] = None) -> List[VisibilityOverride]:
        overrides = []
        stored = self._parse_visibility(self.kv.get_item(SHARED_SCOPE, VISIBILITY_KEY))
        for client_id, activities in stored.items():
            if client_ids is not None and client_id not in client_ids:
                continue
            if not isinstance(activities, dict):
                continue
            for activity_id, hidden in activities.items():
                try:
                    overrides.append(
                        VisibilityOverride(client_id=client_id, activity_id=int(activity_id), hidden=bool(hidden))
                    )
                except ValueError:
                    continue
        return overrides

    def set_visibility(self, client_id: str, activity_id: int, hidden: bool) -> None:
        def apply(raw: Optional[str]) -> str:
            data = self._parse_visibility(raw)
            activities = data.get(client_id)
            if not isinstance(activities, dict):
                activities = {}
            activities[str(activity_id)] = hidden
            data[client_id] = activities
            return json.dumps(data)

        self.kv.update_item(SHARED_SCOPE, VISIBILITY_KEY, apply)

"""
Tests for the activity catalog and per-client visibility
"""
import pytest

from perception_survey.core.exceptions import NotFoundError, ValidationError
from perception_survey.data.activity_catalog import DEFAULT_ACTIVITIES
from perception_survey.schemas.activity import ActivityCreate, ActivityUpdate
from perception_survey.services.catalog import catalog_service, resolve_hidden
from perception_survey.storage.base import VisibilityOverride


CLIENT = "user_1700000000000_abcdefghi"


class TestDefaults:
    def test_default_catalog_shape(self):
        assert len(DEFAULT_ACTIVITIES) == 24
        assert [a["id"] for a in DEFAULT_ACTIVITIES] == list(range(1, 25))
        for pillar in (1, 2, 3, 4):
            assert sum(1 for a in DEFAULT_ACTIVITIES if a["pillar"] == pillar) == 6

    def test_defaults_when_nothing_is_stored(self, local_store):
        activities = catalog_service.get_activities(local_store)
        assert len(activities) == 24
        assert activities[0].pillar_name == "Content & Communication"

    def test_custom_catalog_replaces_defaults(self, local_store, small_catalog):
        local_store.replace_custom_activities(small_catalog)
        assert [a.name for a in catalog_service.get_activities(local_store)] == ["A", "B", "C"]

    def test_unknown_activity(self, local_store):
        with pytest.raises(NotFoundError):
            catalog_service.get_activity(local_store, 999)


class TestCatalogEditing:
    def test_add_uses_next_id_and_pillar_name(self, local_store, small_catalog):
        local_store.replace_custom_activities(small_catalog)

        added = catalog_service.add_activity(
            local_store, ActivityCreate(pillar=4, name=" Check-ins ", description="Quarterly calls")
        )

        assert added.id == 4
        assert added.name == "Check-ins"
        assert added.pillar_name == "Ongoing Relationship"
        assert len(catalog_service.get_activities(local_store)) == 4

    def test_blank_name_is_rejected(self, local_store):
        with pytest.raises(ValidationError):
            catalog_service.add_activity(
                local_store, ActivityCreate(pillar=1, name="   ", description="Something")
            )

    def test_update_moves_pillar(self, local_store, small_catalog):
        local_store.replace_custom_activities(small_catalog)

        updated = catalog_service.update_activity(local_store, 1, ActivityUpdate(pillar=3))

        assert updated.name == "A"
        assert updated.pillar == 3
        assert updated.pillar_name == "Proactive Outreach"
        assert catalog_service.get_activity(local_store, 1).pillar == 3

    def test_update_unknown(self, local_store):
        with pytest.raises(NotFoundError):
            catalog_service.update_activity(local_store, 999, ActivityUpdate(name="X"))

    def test_delete_and_reset(self, local_store, small_catalog):
        local_store.replace_custom_activities(small_catalog)

        remaining = catalog_service.delete_activity(local_store, 2)
        assert [a.id for a in remaining] == [1, 3]

        with pytest.raises(NotFoundError):
            catalog_service.delete_activity(local_store, 2)

        assert len(catalog_service.reset_to_defaults(local_store)) == 24


class TestVisibility:
    def test_client_override_wins_over_default(self):
        overrides = [
            VisibilityOverride(client_id="default", activity_id=1, hidden=True),
            VisibilityOverride(client_id="default", activity_id=2, hidden=True),
            VisibilityOverride(client_id=CLIENT, activity_id=2, hidden=False),
            VisibilityOverride(client_id=CLIENT, activity_id=3, hidden=True),
        ]

        assert resolve_hidden(overrides, CLIENT) == {1: "default", 3: "client"}
        assert resolve_hidden(overrides, "someone_else") == {1: "default", 2: "default"}

    def test_visible_activities_keep_catalog_order(self, local_store, small_catalog):
        local_store.replace_custom_activities(small_catalog)
        local_store.set_visibility("default", 2, True)

        visible = catalog_service.get_visible_activities(local_store, CLIENT)

        assert [a.id for a in visible] == [1, 3]

    def test_client_view_reports_source(self, local_store, small_catalog):
        local_store.replace_custom_activities(small_catalog)
        catalog_service.set_visibility(local_store, "default", 1, True)
        view = catalog_service.set_visibility(local_store, CLIENT, 3, True)

        assert view.visible_count == 1
        assert view.total == 3
        assert [(a.id, a.hidden, a.source) for a in view.activities] == [
            (1, True, "default"),
            (2, False, None),
            (3, True, "client"),
        ]

    def test_toggle_flips_effective_state(self, local_store, small_catalog):
        local_store.replace_custom_activities(small_catalog)
        local_store.set_visibility("default", 1, True)

        view = catalog_service.toggle_visibility(local_store, CLIENT, 1)
        assert view.activities[0].hidden is False
        assert view.activities[0].source == "client"

        view = catalog_service.toggle_visibility(local_store, CLIENT, 1)
        assert view.activities[0].hidden is True

    def test_visibility_for_unknown_activity(self, local_store):
        with pytest.raises(NotFoundError):
            catalog_service.set_visibility(local_store, CLIENT, 999, True)

    def test_settings_map(self, local_store):
        local_store.set_visibility("default", 1, True)
        local_store.set_visibility(CLIENT, 1, False)

        assert catalog_service.get_visibility_settings(local_store) == {
            "default": {1: True},
            CLIENT: {1: False},
        }

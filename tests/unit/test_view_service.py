"""
Unit tests for view configurations and per-user page preferences.
"""

import pytest
from sqlalchemy.exc import OperationalError

from gridengine.cache.keys import UserPreferencesKey
from gridengine.core.database import seed_preset_views
from gridengine.core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from gridengine.views.models import UserPagePreference, View
from gridengine.views.schemas import (
    UNSELECTED_DISPLAY_ORDER,
    UserPageViewRequest,
    ViewConfigurationCreate,
    ViewConfigurationUpdate,
    ViewFieldSelection,
)


def selection(*names, unselected=()):
    fields = [ViewFieldSelection(field_name=n, is_selected=True, display_order=i + 1) for i, n in enumerate(names)]
    fields += [ViewFieldSelection(field_name=n, is_selected=False, display_order=0) for n in unselected]
    return fields


class TestDefaultView:
    def test_user_without_preference_gets_default(self, view_service, catalog):
        config = view_service.get_for_user_page(42, "AcquisitionIndex")

        catalog_names = [f.field_name for f in catalog.get_fields("Acquisition")]
        assert config.view_id is None
        assert config.view_name == "Default"
        assert [f.field_name for f in config.fields] == catalog_names
        assert all(f.is_selected for f in config.fields)
        assert [f.display_order for f in config.fields] == list(range(1, len(catalog_names) + 1))

    def test_unknown_page(self, view_service):
        with pytest.raises(NotFoundError):
            view_service.get_for_user_page(42, "LeaseIndex")


class TestViewCrud:
    def test_create_stores_selected_fields_only(self, view_service):
        config = view_service.create(
            ViewConfigurationCreate(
                module="Buyer",
                view_name="Compact",
                fields=selection("BuyerName", "City", unselected=("ZipCode",)),
            )
        )
        assert config.view_id is not None
        assert config.selected_field_names() == ["BuyerName", "City"]
        unselected = [f for f in config.fields if not f.is_selected]
        assert "ZipCode" in [f.field_name for f in unselected]
        assert {f.display_order for f in unselected} == {UNSELECTED_DISPLAY_ORDER}

    def test_selected_fields_are_renumbered(self, view_service):
        fields = [
            ViewFieldSelection(field_name="City", display_order=40),
            ViewFieldSelection(field_name="BuyerName", display_order=10),
        ]
        config = view_service.create(ViewConfigurationCreate(module="Buyer", view_name="Ordered", fields=fields))
        selected = [f for f in config.fields if f.is_selected]
        assert [(f.field_name, f.display_order) for f in selected] == [("BuyerName", 1), ("City", 2)]

    def test_duplicate_name_conflicts(self, view_service):
        view_service.create(ViewConfigurationCreate(module="Buyer", view_name="Mine", fields=selection("BuyerName")))
        with pytest.raises(ConflictError):
            view_service.create(ViewConfigurationCreate(module="Buyer", view_name="Mine", fields=selection("City")))

    @pytest.mark.parametrize("name", ["Default", "My view #12"])
    def test_reserved_names_rejected(self, view_service, name):
        with pytest.raises(ValidationError):
            view_service.create(ViewConfigurationCreate(module="Buyer", view_name=name, fields=selection("City")))

    @pytest.mark.parametrize("name", ["", "   ", "x" * 201])
    def test_invalid_names_rejected_without_schema_validation(self, view_service, name):
        # model_construct skips the pydantic validators, as a library caller might
        config = ViewConfigurationCreate.model_construct(module="Buyer", view_name=name, fields=selection("City"))
        with pytest.raises(ValidationError):
            view_service.create(config)
        assert view_service.list_views("Buyer") == []

    def test_blank_rename_rejected(self, view_service):
        created = view_service.create(
            ViewConfigurationCreate(module="Buyer", view_name="Keep me", fields=selection("City"))
        )
        with pytest.raises(ValidationError):
            view_service.update(created.view_id, ViewConfigurationUpdate.model_construct(view_name="  ", fields=None))
        assert view_service.get(created.view_id).view_name == "Keep me"

    def test_names_are_stored_trimmed(self, view_service):
        config = view_service.create(
            ViewConfigurationCreate.model_construct(module="Buyer", view_name="  Padded  ", fields=selection("City"))
        )
        assert config.view_name == "Padded"

    def test_unknown_field_rejected(self, view_service):
        with pytest.raises(ValidationError):
            view_service.create(ViewConfigurationCreate(module="Buyer", view_name="Bad", fields=selection("Secret")))

    def test_update_replaces_fields(self, view_service):
        created = view_service.create(
            ViewConfigurationCreate(module="Buyer", view_name="Edit me", fields=selection("BuyerName"))
        )
        updated = view_service.update(
            created.view_id, ViewConfigurationUpdate(view_name="Edited", fields=selection("City", "StateCode"))
        )
        assert updated.view_name == "Edited"
        assert updated.selected_field_names() == ["City", "StateCode"]

    def test_list_views_reflects_writes(self, view_service):
        assert view_service.list_views("Buyer") == []
        view_service.create(ViewConfigurationCreate(module="Buyer", view_name="Listed", fields=selection("City")))
        assert [v.view_name for v in view_service.list_views("Buyer")] == ["Listed"]


class TestUserPageViews:
    def test_set_then_get_round_trip(self, view_service):
        saved = view_service.set_for_user_page(
            42, "AcquisitionIndex", UserPageViewRequest(fields=selection("AcquisitionNumber", "Buyer"))
        )
        loaded = view_service.get_for_user_page(42, "AcquisitionIndex")

        assert loaded == saved
        assert loaded.selected_field_names() == ["AcquisitionNumber", "Buyer"]
        assert loaded.view_name == f"User 42 - AcquisitionIndex #{loaded.view_id}"

    def test_generated_names_are_unique_per_user(self, view_service):
        first = view_service.set_for_user_page(1, "BuyerIndex", UserPageViewRequest(fields=selection("City")))
        second = view_service.set_for_user_page(2, "BuyerIndex", UserPageViewRequest(fields=selection("City")))
        assert first.view_name != second.view_name

    def test_last_write_wins(self, view_service, db_session):
        view_service.set_for_user_page(7, "BuyerIndex", UserPageViewRequest(fields=selection("City")))
        view_service.set_for_user_page(7, "BuyerIndex", UserPageViewRequest(fields=selection("BuyerName")))

        assert db_session.query(UserPagePreference).filter_by(user_id="7").count() == 1
        assert view_service.get_for_user_page(7, "BuyerIndex").selected_field_names() == ["BuyerName"]

    def test_point_at_existing_view(self, view_service):
        shared = view_service.create(
            ViewConfigurationCreate(module="Buyer", view_name="Shared", fields=selection("BuyerName", "City"))
        )
        config = view_service.set_for_user_page(9, "BuyerIndex", UserPageViewRequest(view_id=shared.view_id))
        assert config.view_id == shared.view_id

    def test_view_from_other_module_rejected(self, view_service):
        other = view_service.create(
            ViewConfigurationCreate(module="County", view_name="Counties", fields=selection("CountyName"))
        )
        with pytest.raises(ValidationError):
            view_service.set_for_user_page(9, "BuyerIndex", UserPageViewRequest(view_id=other.view_id))

    def test_preference_write_invalidates_user_cache(self, view_service, view_cache, cache):
        assert view_cache.load_user_preferences(5) == {}
        config = view_service.set_for_user_page(5, "BuyerIndex", UserPageViewRequest(fields=selection("City")))
        # the stale empty map was dropped, then reloaded with the new preference
        assert cache.get(UserPreferencesKey("5")) == {"BuyerIndex": config.view_id}

    def test_preference_write_drops_cached_map(self, view_service, view_cache, monkeypatch):
        invalidated = []
        monkeypatch.setattr(view_cache, "invalidate_user", invalidated.append)
        view_service.set_for_user_page(5, "BuyerIndex", UserPageViewRequest(fields=selection("City")))
        assert invalidated == ["5"]

    def test_concurrent_first_preference_write_is_overwritten(self, view_service, db_session, monkeypatch):
        """Another request inserts the preference between our read and our commit"""
        first = view_service.set_for_user_page(7, "BuyerIndex", UserPageViewRequest(fields=selection("City")))

        real_lookup = view_service.preference_dao.get_for_user_page
        calls = []

        def stale_then_real(user_id, page_name):
            calls.append((user_id, page_name))
            return None if len(calls) == 1 else real_lookup(user_id, page_name)

        monkeypatch.setattr(view_service.preference_dao, "get_for_user_page", stale_then_real)
        second = view_service.set_for_user_page(7, "BuyerIndex", UserPageViewRequest(fields=selection("BuyerName")))

        assert len(calls) == 2
        assert second.view_id != first.view_id
        rows = db_session.query(UserPagePreference).filter_by(user_id="7").all()
        assert [row.view_id for row in rows] == [second.view_id]
        assert view_service.get_for_user_page(7, "BuyerIndex").selected_field_names() == ["BuyerName"]

    def test_flush_failure_is_a_storage_error(self, view_service, db_session, monkeypatch):
        def broken_flush(*args, **kwargs):
            raise OperationalError("INSERT INTO views", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "flush", broken_flush)
        with pytest.raises(StorageError):
            view_service.set_for_user_page(8, "BuyerIndex", UserPageViewRequest(fields=selection("City")))
        monkeypatch.undo()

        assert db_session.query(View).count() == 0
        assert db_session.query(UserPagePreference).count() == 0

    def test_deleting_view_falls_back_to_default(self, view_service, db_session):
        config = view_service.set_for_user_page(3, "BuyerIndex", UserPageViewRequest(fields=selection("City")))
        assert view_service.get_for_user_page(3, "BuyerIndex").view_id == config.view_id

        view_service.delete(config.view_id)

        assert db_session.query(UserPagePreference).count() == 0
        assert view_service.get_for_user_page(3, "BuyerIndex").view_id is None

    def test_catalog_fields_missing_from_view_are_appended_unselected(self, view_service, catalog):
        config = view_service.set_for_user_page(4, "BuyerIndex", UserPageViewRequest(fields=selection("City")))
        names = [f.field_name for f in config.fields]
        assert names[0] == "City"
        assert sorted(names) == sorted(f.field_name for f in catalog.get_fields("Buyer"))
        assert all(f.display_order == UNSELECTED_DISPLAY_ORDER for f in config.fields[1:])


class TestPresetViews:
    def test_presets_are_listed_and_resolvable(self, view_service, db_session, view_cache):
        assert seed_preset_views(db_session) == 4
        view_cache.invalidate_module_views("Acquisition")

        views = {v.view_name: v.view_id for v in view_service.list_views("Acquisition")}
        assert set(views) == {"Summary View", "Financial View", "Title View", "Acreage View"}
        summary = view_service.get(views["Summary View"])
        assert summary.selected_field_names() == ["AcquisitionID", "Buyer", "TotalBonus", "EffectiveDate"]

    def test_seeding_is_idempotent(self, db_session):
        seed_preset_views(db_session)
        assert seed_preset_views(db_session) == 0
        assert db_session.query(View).filter_by(module="Acquisition").count() == 4

    def test_presets_are_not_seeded_for_other_modules(self, view_service, db_session):
        seed_preset_views(db_session)
        assert view_service.list_views("Buyer") == []

    def test_user_can_pick_a_preset(self, view_service, db_session):
        seed_preset_views(db_session)
        title = next(v for v in view_service.list_views("Acquisition") if v.view_name == "Title View")
        config = view_service.set_for_user_page(11, "AcquisitionIndex", UserPageViewRequest(view_id=title.view_id))
        assert config.selected_field_names() == ["AcquisitionID", "DealStatus", "Liens"]

"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_booking_schema(self):
        from booking_engine.schemas.booking_schema import BookingStatus, OCCUPYING_STATUSES
        assert BookingStatus.NO_SHOW == "no_show"
        assert BookingStatus.COMPLETED in OCCUPYING_STATUSES

    def test_import_catalog_schema(self):
        from booking_engine.schemas.catalog_schema import PetSize, Provider
        assert PetSize.GIANT == "giant"
        assert Provider.model_fields["capacity"].default == 1

    def test_import_availability_schema(self):
        from booking_engine.schemas.availability_schema import DateException
        from tests.conftest import MONDAY
        assert DateException(date=MONDAY, timezone="UTC").is_closed


class TestSchedulingImports:
    def test_import_pipeline_stages(self):
        from booking_engine.scheduling.availability import resolve_availability
        from booking_engine.scheduling.conflicts import ConflictFilter
        from booking_engine.scheduling.slots import SlotGenerator
        assert callable(resolve_availability)
        assert ConflictFilter is not None
        assert SlotGenerator(step_minutes=5).step.total_seconds() == 300

    def test_import_commit(self):
        from booking_engine.scheduling.commit import BookingCommitCoordinator, CommitResult
        assert callable(BookingCommitCoordinator)
        assert CommitResult.__dataclass_fields__["replayed"].default is False


class TestPackageReexports:
    def test_api_package(self):
        from booking_engine.api import (
            acreate_booking, alist_slots, cancel_booking, create_booking, list_slots,
        )
        assert callable(list_slots) and callable(create_booking)

    def test_store_package(self):
        from booking_engine.store import BookingStore, InMemoryBookingStore, provider_key
        assert issubclass(InMemoryBookingStore, BookingStore)
        assert provider_key("p") == ("p", None)

    def test_evaluation_package(self):
        from booking_engine.evaluation import ScheduleAuditor, ViolationKind
        assert len(ViolationKind) == 2


class TestConfigImport:
    def test_import_config(self):
        from booking_engine.config import settings
        assert settings.scheduling.slot_step_minutes >= 1
        assert settings.scheduling.max_range_days >= 1
        assert settings.commit.lock_timeout_seconds > 0


class TestDemoCatalog:
    def test_demo_store_builds(self):
        from booking_engine.demo_data import build_demo_store
        store = build_demo_store()
        assert store.get_provider("paws-salon").capacity == 2
        assert store.get_pet("pet-rex").category == "dog"

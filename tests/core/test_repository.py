"""Tests for the GenericRepository class."""

from __future__ import annotations

import threading
from datetime import datetime

import pytest
from sqlalchemy import text

from repokit.config import EngineOptions
from repokit.errors import IntegrityError, QueryError, RecordNotFoundError, SchemaError
from repokit.models import FullEntity
from repokit.repository import GenericRepository
from tests._support.entities import Device, NoTimestamp, Reading


def _devices(count: int) -> list[Device]:
    return [Device(name=f"dev-{i}", port=8000 + i, summary="edge" if i % 2 else "core") for i in range(count)]


class TestConstruction:
    def test_table_created(self, device_repo: GenericRepository[Device]):
        assert device_repo.table.name == "device"
        assert device_repo.entity_type is Device

    def test_engine_is_shared(self, memory_engine, device_repo: GenericRepository[Device]):
        assert device_repo.engine is memory_engine

    def test_bad_entity(self, memory_engine):
        with pytest.raises(SchemaError):
            GenericRepository(memory_engine, NoTimestamp)

    def test_preserve_field_case_option(self, memory_engine):
        repo = GenericRepository(memory_engine, FullEntity, options=EngineOptions(preserve_field_case=True))
        assert repo.table.name == "FullEntity"

    def test_repr(self, device_repo: GenericRepository[Device]):
        assert repr(device_repo) == "GenericRepository(Device, table='device')"


class TestCreate:
    def test_round_trip(self, device_repo: GenericRepository[Device]):
        before = datetime.now()
        device = device_repo.create(Device(name="gateway", port=502, full_info="{}"))
        after = datetime.now()

        assert device.id is not None
        assert before <= device.last_time <= after
        assert device_repo.get_model(device.id) == device

    def test_ids_are_assigned_in_order(self, device_repo: GenericRepository[Device]):
        first = device_repo.create(Device(name="a"))
        second = device_repo.create(Device(name="b"))
        assert second.id > first.id

    def test_explicit_id(self, device_repo: GenericRepository[Device]):
        device = device_repo.create(Device(id=42, name="pinned"))
        assert device.id == 42
        assert device_repo.get_model(42).name == "pinned"

    def test_zero_id_is_unset(self, device_repo: GenericRepository[Device]):
        device = device_repo.create(Device(id=0, name="zero"))
        assert device.id > 0

    def test_caller_timestamp_kept(self, device_repo: GenericRepository[Device]):
        stamped = datetime(2021, 6, 1, 8, 0, 0)
        device = device_repo.create(Device(name="old", last_time=stamped))
        assert device_repo.get_model(device.id).last_time == stamped

    def test_unique_violation(self, device_repo: GenericRepository[Device]):
        device_repo.create(Device(serial="SN-1"))
        with pytest.raises(IntegrityError) as exc_info:
            device_repo.create(Device(serial="SN-1"))
        assert exc_info.value.context.table == "device"

    def test_various_column_types(self, memory_engine):
        repo = GenericRepository(memory_engine, Reading)
        taken = datetime(2024, 1, 2, 3, 4, 5, 678901)
        reading = repo.create(Reading(value=21.5, ok=False, payload={"unit": "C"}, taken_at=taken))
        assert repo.get_model(reading.id) == reading


class TestCreateList:
    def test_inserts_all(self, device_repo: GenericRepository[Device]):
        devices = device_repo.create_list(_devices(5))
        assert [d.id for d in devices] == [1, 2, 3, 4, 5]
        assert device_repo.get_count() == 5

    def test_one_timestamp_for_the_batch(self, device_repo: GenericRepository[Device]):
        devices = device_repo.create_list(_devices(3))
        assert len({d.last_time for d in devices}) == 1

    def test_empty_batch(self, device_repo: GenericRepository[Device]):
        assert device_repo.create_list([]) == []

    def test_failure_rolls_back_everything(self, device_repo: GenericRepository[Device]):
        device_repo.create(Device(name="existing"))
        with pytest.raises(IntegrityError):
            device_repo.create_list([Device(name="ok", serial="SN-9"), Device(name="dup", serial="SN-9")])
        assert device_repo.get_count() == 1
        assert device_repo.get_conditions("name = ?", "ok") == []

    def test_failure_rolls_back_on_file_database(self, file_device_repo: GenericRepository[Device]):
        with pytest.raises(IntegrityError):
            file_device_repo.create_list([Device(serial="A"), Device(serial="B"), Device(serial="A")])
        assert file_device_repo.get_count() == 0

    def test_failure_leaves_generated_ids_unset(self, device_repo: GenericRepository[Device]):
        devices = [Device(serial="A"), Device(serial="A")]
        with pytest.raises(IntegrityError):
            device_repo.create_list(devices)
        assert [d.id for d in devices] == [None, None]

    def test_retry_after_failure_gets_fresh_ids(self, device_repo: GenericRepository[Device]):
        devices = [Device(serial="A"), Device(serial="A")]
        with pytest.raises(IntegrityError):
            device_repo.create_list(devices)
        device_repo.create(Device(name="other"))
        devices[1].serial = "B"
        device_repo.create_list(devices)
        assert device_repo.get_count() == 3
        assert {d.id for d in devices} == {2, 3}


class TestUpdate:
    def test_overwrites_all_fields(self, device_repo: GenericRepository[Device]):
        device = device_repo.create(Device(name="before", port=1))
        device.name = "after"
        device.port = 2
        device_repo.update(device)
        assert device_repo.get_model(device.id) == device

    def test_missing_row_raises(self, device_repo: GenericRepository[Device]):
        with pytest.raises(RecordNotFoundError, match="update record does not exist") as exc_info:
            device_repo.update(Device(id=999, name="ghost"))
        assert exc_info.value.entity_id == 999

    def test_unset_id_raises(self, device_repo: GenericRepository[Device]):
        with pytest.raises(RecordNotFoundError):
            device_repo.update(Device(name="no id"))

    def test_unchanged_values_still_match(self, device_repo: GenericRepository[Device]):
        device = device_repo.create(Device(name="same"))
        device_repo.update(device)
        device_repo.update(device)


class TestUpdateList:
    def test_updates_all(self, device_repo: GenericRepository[Device]):
        devices = device_repo.create_list(_devices(3))
        for d in devices:
            d.summary = "patched"
        device_repo.update_list(devices)
        assert device_repo.get_count("summary = ?", "patched") == 3

    def test_missing_row_aborts_batch(self, device_repo: GenericRepository[Device]):
        device = device_repo.create(Device(name="original"))
        device.name = "changed"
        with pytest.raises(RecordNotFoundError):
            device_repo.update_list([device, Device(id=999)])
        assert device_repo.get_model(device.id).name == "original"


class TestSave:
    def test_inserts_new(self, device_repo: GenericRepository[Device]):
        device = device_repo.save(Device(name="fresh"))
        assert device.id is not None
        assert device_repo.get_count() == 1

    def test_updates_existing(self, device_repo: GenericRepository[Device]):
        device = device_repo.create(Device(name="v1"))
        device.name = "v2"
        device_repo.save(device)
        assert device_repo.get_count() == 1
        assert device_repo.get_model(device.id).name == "v2"

    def test_unknown_id_is_inserted(self, device_repo: GenericRepository[Device]):
        device_repo.save(Device(id=50, name="pinned"))
        assert device_repo.get_model(50).name == "pinned"

    def test_save_list_mixes_inserts_and_updates(self, device_repo: GenericRepository[Device]):
        existing = device_repo.create(Device(name="old"))
        existing.name = "renamed"
        saved = device_repo.save_list([existing, Device(name="new")])
        assert device_repo.get_count() == 2
        assert device_repo.get_model(existing.id).name == "renamed"
        assert saved[1].id is not None

    def test_save_list_rolls_back(self, device_repo: GenericRepository[Device]):
        with pytest.raises(IntegrityError):
            device_repo.save_list([Device(serial="X"), Device(serial="X")])
        assert device_repo.get_count() == 0

    def test_save_list_failure_keeps_caller_ids(self, device_repo: GenericRepository[Device]):
        existing = device_repo.create(Device(name="kept", serial="K"))
        devices = [existing, Device(serial="X"), Device(serial="X")]
        with pytest.raises(IntegrityError):
            device_repo.save_list(devices)
        assert [d.id for d in devices] == [existing.id, None, None]


class TestDelete:
    def test_delete(self, device_repo: GenericRepository[Device]):
        device = device_repo.create(Device(name="doomed"))
        assert device_repo.delete(device.id) == 1
        assert device_repo.get_model(device.id) is None

    def test_absent_id_is_not_an_error(self, device_repo: GenericRepository[Device]):
        assert device_repo.delete(12345) == 0

    def test_delete_twice(self, device_repo: GenericRepository[Device]):
        device = device_repo.create(Device())
        device_repo.delete(device.id)
        assert device_repo.delete(device.id) == 0

    def test_delete_condition(self, device_repo: GenericRepository[Device]):
        device_repo.create_list(_devices(6))
        assert device_repo.delete_condition("summary = ?", "edge") == 3
        assert device_repo.get_count() == 3
        assert device_repo.delete_condition("summary = ?", "nothing") == 0


class TestSingleReads:
    def test_get_model_absent(self, device_repo: GenericRepository[Device]):
        assert device_repo.get_model(1) is None

    def test_check_exist(self, device_repo: GenericRepository[Device]):
        device = device_repo.create(Device())
        assert device_repo.check_exist(device.id) is True
        assert device_repo.check_exist(device.id + 1) is False


class TestListReads:
    def test_get_all_ordered_by_id(self, device_repo: GenericRepository[Device]):
        device_repo.create_list([Device(id=3), Device(id=1), Device(id=2)])
        assert [d.id for d in device_repo.get_all()] == [1, 2, 3]

    def test_get_all_empty(self, device_repo: GenericRepository[Device]):
        assert device_repo.get_all() == []

    def test_pagination_covers_every_row_once(self, device_repo: GenericRepository[Device]):
        device_repo.create_list(_devices(10))
        page_size = 3
        seen: list[int] = []
        for page in range(4):
            seen.extend(d.id for d in device_repo.get_list(page * page_size, page_size))
        assert seen == list(range(1, 11))

    def test_page_past_the_end(self, device_repo: GenericRepository[Device]):
        device_repo.create_list(_devices(2))
        assert device_repo.get_list(10, 5) == []

    def test_unbounded_page(self, device_repo: GenericRepository[Device]):
        device_repo.create_list(_devices(4))
        assert len(device_repo.get_list(1, 0)) == 3
        assert len(device_repo.get_list(0, -1)) == 4


class TestConditionReads:
    @pytest.fixture(autouse=True)
    def seed(self, device_repo: GenericRepository[Device]) -> None:
        device_repo.create_list(_devices(6))

    def test_get_condition(self, device_repo: GenericRepository[Device]):
        device = device_repo.get_condition("name = ?", "dev-4")
        assert device.port == 8004

    def test_get_condition_absent(self, device_repo: GenericRepository[Device]):
        assert device_repo.get_condition("name = ?", "missing") is None

    def test_get_condition_order(self, device_repo: GenericRepository[Device]):
        device = device_repo.get_condition_order("port DESC", "summary = ?", "core")
        assert device.name == "dev-4"

    def test_get_conditions(self, device_repo: GenericRepository[Device]):
        assert {d.name for d in device_repo.get_conditions("summary = ? AND port > ?", "edge", 8001)} == {"dev-3", "dev-5"}

    def test_get_conditions_empty(self, device_repo: GenericRepository[Device]):
        assert device_repo.get_conditions("port > ?", 9000) == []

    def test_get_conditions_order(self, device_repo: GenericRepository[Device]):
        names = [d.name for d in device_repo.get_conditions_order("port DESC", "summary = ?", "edge")]
        assert names == ["dev-5", "dev-3", "dev-1"]

    def test_get_conditions_limit(self, device_repo: GenericRepository[Device]):
        assert len(device_repo.get_conditions_limit(2, "port >= ?", 8000)) == 2
        assert len(device_repo.get_conditions_limit(0, "port >= ?", 8000)) == 6

    def test_in_list_argument(self, device_repo: GenericRepository[Device]):
        devices = device_repo.get_conditions("id IN ?", [1, 3, 5])
        assert sorted(d.id for d in devices) == [1, 3, 5]

    def test_literal_with_colon_and_question_mark(self, device_repo: GenericRepository[Device]):
        device_repo.create(Device(name="10:30?", port=1))
        assert device_repo.get_condition("name = '10:30?' AND port = ?", 1) is not None

    def test_placeholder_mismatch(self, device_repo: GenericRepository[Device]):
        with pytest.raises(QueryError):
            device_repo.get_conditions("name = ? AND port = ?", "dev-1")

    def test_bad_column(self, device_repo: GenericRepository[Device]):
        with pytest.raises(QueryError):
            device_repo.get_conditions("no_such_column = ?", 1)


class TestCount:
    def test_count_all(self, device_repo: GenericRepository[Device]):
        assert device_repo.get_count() == 0
        device_repo.create_list(_devices(4))
        assert device_repo.get_count() == 4

    @pytest.mark.parametrize(
        ("predicate", "args"),
        [("summary = ?", ("edge",)), ("port > ?", (8001,)), ("id IN ?", ([1, 2, 9],)), ("1 = 0", ())],
    )
    def test_count_matches_conditions(self, device_repo: GenericRepository[Device], predicate, args):
        device_repo.create_list(_devices(5))
        assert device_repo.get_count(predicate, *args) == len(device_repo.get_conditions(predicate, *args))

    def test_bad_predicate_counts_zero(self, device_repo: GenericRepository[Device]):
        device_repo.create(Device())
        assert device_repo.get_count("no_such_column = ?", 1) == 0
        assert device_repo.get_count("id = ? AND id = ?", 1) == 0


class TestOperationErrors:
    @pytest.fixture
    def dropped(self, memory_engine, device_repo: GenericRepository[Device]) -> GenericRepository[Device]:
        device_repo.create(Device())
        with memory_engine.begin() as conn:
            conn.execute(text("DROP TABLE device"))
        return device_repo

    def test_reads_raise_query_error(self, dropped: GenericRepository[Device]):
        with pytest.raises(QueryError) as exc_info:
            dropped.get_model(1)
        assert exc_info.value.cause is not None

    def test_writes_raise_query_error(self, dropped: GenericRepository[Device]):
        with pytest.raises(QueryError):
            dropped.create(Device())

    def test_best_effort_reads(self, dropped: GenericRepository[Device]):
        assert dropped.check_exist(1) is False
        assert dropped.get_count() == 0


class TestSkipDefaultTransaction:
    def test_single_writes(self, autocommit_repo: GenericRepository[Device]):
        device = autocommit_repo.create(Device(name="auto"))
        device.name = "auto-2"
        autocommit_repo.update(device)
        assert autocommit_repo.get_model(device.id).name == "auto-2"
        assert autocommit_repo.delete(device.id) == 1

    def test_batches_stay_atomic(self, autocommit_repo: GenericRepository[Device]):
        with pytest.raises(IntegrityError):
            autocommit_repo.create_list([Device(serial="Z"), Device(serial="Z")])
        assert autocommit_repo.get_count() == 0


class TestConcurrency:
    def test_shared_repository_across_threads(self, file_device_repo: GenericRepository[Device]):
        errors: list[Exception] = []

        def worker(n: int) -> None:
            try:
                for i in range(10):
                    file_device_repo.create(Device(name=f"t{n}-{i}"))
            except Exception as e:  # pragma: no cover - reported below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert file_device_repo.get_count() == 40
        assert len({d.id for d in file_device_repo.get_all()}) == 40

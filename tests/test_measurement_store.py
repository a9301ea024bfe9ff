"""Unit tests for the mock measurement store."""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from threading import Barrier

import pytest

from datastore.measurement_store import MockMeasurementStore
from models.records import GatewayRecord, SensorRecord
from services.errors import ConflictError, NotFoundError

_BASE = datetime(2023, 10, 1, 12, 0, tzinfo=timezone.utc)
_GW1 = GatewayRecord(mac_address="gw-1")
_GW2 = GatewayRecord(mac_address="gw-2")
_S1 = SensorRecord(mac_address="s1")
_S2 = SensorRecord(mac_address="s2")
_S3 = SensorRecord(mac_address="s3")


def _populated_store(path=None) -> MockMeasurementStore:
    store = MockMeasurementStore(persistence_path=path)
    store.create_reading(_BASE, _S1, _GW1, 1.0)
    store.create_reading(_BASE + timedelta(minutes=1), _S1, _GW1, 2.0)
    store.create_reading(_BASE + timedelta(minutes=2), _S2, _GW1, 3.0)
    store.create_reading(_BASE + timedelta(minutes=3), _S3, _GW2, 4.0)
    return store


def _all_readings(store: MockMeasurementStore):
    return store.get_readings_by_gateway_set([_GW1, _GW2])


def test_duplicate_reading_is_a_conflict_not_an_overwrite() -> None:
    store = _populated_store()

    with pytest.raises(ConflictError):
        store.create_reading(_BASE, _S1, _GW1, 100.0)

    values = [r.value for r in store.get_readings_by_single_sensor(_GW1, _S1)]
    assert values == [1.0, 2.0]


def test_same_instant_in_another_timezone_is_a_conflict() -> None:
    store = _populated_store()
    same_instant = _BASE.astimezone(timezone(timedelta(hours=2)))

    with pytest.raises(ConflictError):
        store.create_reading(same_instant, _S1, _GW1, 5.0)


def test_naive_timestamps_are_stored_as_utc() -> None:
    store = MockMeasurementStore()

    record = store.create_reading(datetime(2023, 10, 1, 12, 0), _S1, _GW1, 1.0)

    assert record.created_at == _BASE


def test_blank_identities_are_not_found() -> None:
    store = MockMeasurementStore()

    with pytest.raises(NotFoundError):
        store.create_reading(_BASE, SensorRecord(mac_address=""), _GW1, 1.0)
    with pytest.raises(NotFoundError):
        store.get_readings_by_single_sensor(GatewayRecord(mac_address=""), _S1)


def test_gateway_set_query_tolerates_missing_entries() -> None:
    store = _populated_store()

    records = store.get_readings_by_gateway_set([None, _GW1], [None, "s2", ""])

    assert [(r.sensor_mac_address, r.value) for r in records] == [("s2", 3.0)]


def test_gateway_set_query_without_sensor_filter_spans_gateways() -> None:
    store = _populated_store()

    records = store.get_readings_by_gateway_set([_GW1, _GW2])

    assert len(records) == 4
    assert store.get_readings_by_gateway_set([]) == []


def test_window_filters_are_inclusive_and_one_sided() -> None:
    store = _populated_store()
    gateways = [_GW1, _GW2]

    assert len(store.get_readings_by_gateway_set(gateways, None, _BASE, _BASE + timedelta(minutes=3))) == 4
    assert len(store.get_readings_by_gateway_set(gateways, None, _BASE + timedelta(minutes=2))) == 2
    assert len(store.get_readings_by_gateway_set(gateways, None, None, _BASE)) == 1
    assert store.get_readings_by_gateway_set(gateways, None, _BASE + timedelta(minutes=3), _BASE) == []


def test_returned_records_are_copies() -> None:
    store = _populated_store()

    record = store.get_readings_by_single_sensor(_GW1, _S1)[0]
    record.value = 999.0

    assert store.get_readings_by_single_sensor(_GW1, _S1)[0].value == 1.0


def test_remove_readings_drops_only_given_sensors() -> None:
    store = _populated_store()

    removed = store.remove_readings(["s1", "unknown"])

    assert removed == 2
    assert [r.sensor_mac_address for r in _all_readings(store)] == ["s2", "s3"]


def test_persists_to_disk_and_reloads(tmp_path) -> None:
    path = tmp_path / "measurements.json"
    _populated_store(path)

    payload = json.loads(path.read_text())
    assert len(payload) == 4
    assert {row["sensorMacAddress"] for row in payload} == {"s1", "s2", "s3"}

    reloaded = MockMeasurementStore(persistence_path=path)
    assert len(_all_readings(reloaded)) == 4
    with pytest.raises(ConflictError):
        reloaded.create_reading(_BASE, _S1, _GW1, 1.0)


def test_unreadable_rows_are_skipped_on_load(tmp_path) -> None:
    path = tmp_path / "measurements.json"
    path.write_text(
        json.dumps(
            [
                {"createdAt": "not-a-date", "sensorMacAddress": "s1", "gatewayMacAddress": "gw-1", "value": 1},
                {"createdAt": "2023-10-01T12:00:00Z", "sensorMacAddress": "s1", "gatewayMacAddress": "gw-1", "value": 2},
            ]
        )
    )

    store = MockMeasurementStore(persistence_path=path)

    assert [r.value for r in store.get_readings_by_single_sensor(_GW1, _S1)] == [2.0]


def test_concurrent_creates_for_same_key_store_exactly_one() -> None:
    store = MockMeasurementStore()
    workers = 8
    barrier = Barrier(workers)

    def create(value: float):
        barrier.wait()
        try:
            return store.create_reading(_BASE, _S1, _GW1, value)
        except ConflictError as exc:
            return exc

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(create, [float(index) for index in range(workers)]))

    created = [result for result in results if not isinstance(result, ConflictError)]
    assert len(created) == 1
    assert sum(isinstance(result, ConflictError) for result in results) == workers - 1
    stored = _all_readings(store)
    assert len(stored) == 1
    assert stored[0].value == created[0].value


def test_rename_sensor_moves_readings_to_new_key() -> None:
    store = _populated_store()

    moved = store.rename_sensor("s1", "s9")

    assert moved == 2
    assert store.get_readings_by_single_sensor(_GW1, _S1) == []
    renamed = store.get_readings_by_single_sensor(_GW1, SensorRecord(mac_address="s9"))
    assert [r.value for r in renamed] == [1.0, 2.0]
    with pytest.raises(ConflictError):
        store.create_reading(_BASE, SensorRecord(mac_address="s9"), _GW1, 7.0)


def test_rename_gateway_moves_readings(tmp_path) -> None:
    path = tmp_path / "measurements.json"
    store = _populated_store(path)

    moved = store.rename_gateway("gw-1", "gw-9")

    assert moved == 3
    assert store.get_readings_by_gateway_set([_GW1]) == []
    assert len(store.get_readings_by_gateway_set([GatewayRecord(mac_address="gw-9")])) == 3
    reloaded = MockMeasurementStore(persistence_path=path)
    assert len(reloaded.get_readings_by_gateway_set([GatewayRecord(mac_address="gw-9")])) == 3

"""Unit tests for per-sensor grouping of readings."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from datastore.measurement_store import MockMeasurementStore
from models.records import GatewayRecord, MeasurementRecord, SensorRecord
from services.aggregator import Aggregator, group_readings, target_sensor_macs

_BASE = datetime(2023, 10, 1, 12, 0, tzinfo=timezone.utc)


def _hierarchy() -> list[GatewayRecord]:
    return [
        GatewayRecord(
            mac_address="gw-1",
            sensors=[SensorRecord(mac_address="s1"), SensorRecord(mac_address="s2")],
        ),
        GatewayRecord(mac_address="gw-2", sensors=[SensorRecord(mac_address="s3")]),
    ]


def _store_with_readings(gateways: list[GatewayRecord]) -> MockMeasurementStore:
    store = MockMeasurementStore()
    gw1, _ = gateways
    s1, s2 = gw1.sensors
    store.create_reading(_BASE, s1, gw1, 25.5)
    store.create_reading(_BASE + timedelta(minutes=5), s1, gw1, 60.0)
    store.create_reading(_BASE + timedelta(minutes=10), s2, gw1, 22.0)
    return store


def test_target_sensor_macs_defaults_to_whole_scope() -> None:
    assert target_sensor_macs(_hierarchy()) == ["s1", "s2", "s3"]


def test_target_sensor_macs_drops_unknown_requested_macs() -> None:
    assert target_sensor_macs(_hierarchy(), ["s3", "unknown"]) == ["s3"]


def test_target_sensor_macs_ignores_missing_gateways() -> None:
    gateways = [None, *_hierarchy()]

    assert target_sensor_macs(gateways) == ["s1", "s2", "s3"]


def test_group_readings_materializes_empty_groups() -> None:
    records = [
        MeasurementRecord(_BASE, "s1", "gw-1", 1.0),
        MeasurementRecord(_BASE, "s2", "gw-1", 2.0),
        MeasurementRecord(_BASE, "s9", "gw-1", 9.0),
    ]

    groups = group_readings(records, ["s1", "s2", "s3"])

    by_mac = {group.sensor_mac_address: group for group in groups}
    assert set(by_mac) == {"s1", "s2", "s3"}
    assert [m.value for m in by_mac["s1"].measurements] == [1.0]
    assert by_mac["s3"].measurements == []
    assert all(group.stats is None for group in groups)


def test_group_by_sensor_includes_sensors_without_readings() -> None:
    gateways = _hierarchy()
    aggregator = Aggregator(_store_with_readings(gateways))

    groups = aggregator.group_by_sensor(gateways)

    counts = {group.sensor_mac_address: len(group.measurements) for group in groups}
    assert counts == {"s1": 2, "s2": 1, "s3": 0}
    assert all(m.is_outlier is False for g in groups for m in g.measurements)


def test_group_by_sensor_respects_sensor_filter_and_window() -> None:
    gateways = _hierarchy()
    aggregator = Aggregator(_store_with_readings(gateways))

    groups = aggregator.group_by_sensor(
        gateways,
        ["s1"],
        start_date=_BASE + timedelta(minutes=1),
        end_date=_BASE + timedelta(minutes=30),
    )

    assert len(groups) == 1
    assert groups[0].sensor_mac_address == "s1"
    assert [m.value for m in groups[0].measurements] == [60.0]


def test_group_by_sensor_with_empty_scope_returns_no_groups() -> None:
    aggregator = Aggregator(MockMeasurementStore())

    assert aggregator.group_by_sensor([GatewayRecord(mac_address="gw-empty")]) == []
    assert aggregator.group_by_sensor([]) == []

"""Unit tests for the mock network hierarchy store."""

from __future__ import annotations

import json

import pytest

from datastore.network_store import MockNetworkStore
from models.records import SensorRecord
from services.errors import ConflictError, NotFoundError


def _populated_store(path=None) -> MockNetworkStore:
    store = MockNetworkStore(persistence_path=path)
    store.create_network("NET01", "Alpha", "first network")
    store.create_gateway("NET01", "gw-1", "Gateway 1")
    store.create_sensor("NET01", "gw-1", SensorRecord(mac_address="s1", variable="temperature", unit="C"))
    return store


def test_network_lookup_eagerly_loads_hierarchy() -> None:
    store = _populated_store()

    network = store.get_network_by_code("NET01")

    assert network.name == "Alpha"
    gateway = network.find_gateway("gw-1")
    assert gateway is not None
    assert gateway.find_sensor("s1").unit == "C"


def test_lookups_return_deep_copies() -> None:
    store = _populated_store()

    network = store.get_network_by_code("NET01")
    network.gateways[0].sensors.clear()

    assert store.get_network_by_code("NET01").gateways[0].sensors


def test_missing_entities_raise_not_found() -> None:
    store = _populated_store()

    with pytest.raises(NotFoundError, match="NET99"):
        store.get_network_by_code("NET99")
    with pytest.raises(NotFoundError, match="gw-9"):
        store.get_gateway("NET01", "gw-9")
    with pytest.raises(NotFoundError, match="s9"):
        store.get_sensor("NET01", "gw-1", "s9")
    with pytest.raises(NotFoundError):
        store.create_gateway("NET99", "gw-2")


def test_duplicates_raise_conflict() -> None:
    store = _populated_store()
    store.create_network("NET02")

    with pytest.raises(ConflictError):
        store.create_network("NET01")
    with pytest.raises(ConflictError):
        store.create_gateway("NET02", "gw-1")
    store.create_gateway("NET02", "gw-2")
    with pytest.raises(ConflictError):
        store.create_sensor("NET02", "gw-2", SensorRecord(mac_address="s1"))


def test_delete_returns_removed_subtree() -> None:
    store = _populated_store()

    removed = store.delete_network("NET01")

    assert [s.mac_address for g in removed.gateways for s in g.sensors] == ["s1"]
    assert store.list_networks() == []


def test_persists_to_disk_and_reloads(tmp_path) -> None:
    path = tmp_path / "networks.json"
    _populated_store(path)

    payload = json.loads(path.read_text())
    assert payload["NET01"]["gateways"][0]["sensors"][0]["mac_address"] == "s1"

    reloaded = MockNetworkStore(persistence_path=path)
    sensor = reloaded.get_sensor("NET01", "gw-1", "s1")
    assert sensor.variable == "temperature"


def test_corrupt_file_starts_empty(tmp_path) -> None:
    path = tmp_path / "networks.json"
    path.write_text("{not json")

    store = MockNetworkStore(persistence_path=path)

    assert store.list_networks() == []


def test_update_network_renames_code_and_keeps_hierarchy() -> None:
    store = _populated_store()

    updated = store.update_network("NET01", {"code": "NET02", "name": "Beta"})

    assert (updated.code, updated.name, updated.description) == ("NET02", "Beta", "first network")
    assert store.get_network_by_code("NET02").find_gateway("gw-1") is not None
    with pytest.raises(NotFoundError):
        store.get_network_by_code("NET01")


def test_update_gateway_and_sensor_apply_partial_changes() -> None:
    store = _populated_store()

    store.update_gateway("NET01", "gw-1", {"mac_address": "gw-9", "description": "moved"})
    store.update_sensor("NET01", "gw-9", "s1", {"unit": "K"})

    gateway = store.get_gateway("NET01", "gw-9")
    assert (gateway.name, gateway.description) == ("Gateway 1", "moved")
    sensor = store.get_sensor("NET01", "gw-9", "s1")
    assert (sensor.variable, sensor.unit) == ("temperature", "K")


def test_updates_conflict_on_taken_identity() -> None:
    store = _populated_store()
    store.create_network("NET02")
    store.create_gateway("NET02", "gw-2")
    store.create_sensor("NET02", "gw-2", SensorRecord(mac_address="s2"))

    with pytest.raises(ConflictError):
        store.update_network("NET01", {"code": "NET02"})
    with pytest.raises(ConflictError):
        store.update_gateway("NET01", "gw-1", {"mac_address": "gw-2"})
    with pytest.raises(ConflictError):
        store.update_sensor("NET01", "gw-1", "s1", {"mac_address": "s2"})

    store.update_network("NET01", {"code": "NET01", "name": "Same code"})
    assert store.get_network_by_code("NET01").name == "Same code"


def test_updates_are_scoped_to_the_hierarchy() -> None:
    store = _populated_store()
    store.create_network("NET02")

    with pytest.raises(NotFoundError):
        store.update_network("NET99", {"name": "x"})
    with pytest.raises(NotFoundError):
        store.update_gateway("NET02", "gw-1", {"name": "x"})
    with pytest.raises(NotFoundError):
        store.update_sensor("NET01", "gw-1", "s9", {"name": "x"})

from __future__ import annotations

import copy
import json
from dataclasses import asdict
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional

from models.records import GatewayRecord, NetworkRecord, SensorRecord
from services.errors import ConflictError, NotFoundError
from settings import get_settings


class MockNetworkStore:
    """In-memory network → gateway → sensor hierarchy with optional JSON persistence.

    Lookups return deep copies with the whole hierarchy eagerly loaded, so
    callers can resolve gateways and sensors without further queries.
    """

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self._networks: Dict[str, NetworkRecord] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def list_networks(self) -> List[NetworkRecord]:
        with self._lock:
            return [copy.deepcopy(network) for network in self._networks.values()]

    def get_network_by_code(self, code: str) -> NetworkRecord:
        with self._lock:
            return copy.deepcopy(self._require_network(code))

    def create_network(self, code: str, name: str = "", description: str = "") -> NetworkRecord:
        with self._lock:
            if code in self._networks:
                raise ConflictError(f"Network with code '{code}' already exists")
            network = NetworkRecord(code=code, name=name, description=description)
            self._networks[code] = network
            self._persist()
            return copy.deepcopy(network)

    def delete_network(self, code: str) -> NetworkRecord:
        with self._lock:
            network = self._require_network(code)
            del self._networks[code]
            self._persist()
            return network

    def update_network(self, code: str, changes: Dict[str, Any]) -> NetworkRecord:
        """Apply ``changes`` to a network; a new ``code`` must not be taken."""
        with self._lock:
            network = self._require_network(code)
            new_code = changes.get("code") or code
            if new_code != code and new_code in self._networks:
                raise ConflictError(f"Network with code '{new_code}' already exists")
            _apply(network, changes)
            network.code = new_code
            self._networks = {
                (new_code if key == code else key): value for key, value in self._networks.items()
            }
            self._persist()
            return copy.deepcopy(network)

    def list_gateways(self, network_code: str) -> List[GatewayRecord]:
        with self._lock:
            return copy.deepcopy(self._require_network(network_code).gateways)

    def get_gateway(self, network_code: str, mac_address: str) -> GatewayRecord:
        with self._lock:
            network = self._require_network(network_code)
            return copy.deepcopy(self._require_gateway(network, mac_address))

    def create_gateway(
        self,
        network_code: str,
        mac_address: str,
        name: str = "",
        description: str = "",
    ) -> GatewayRecord:
        with self._lock:
            network = self._require_network(network_code)
            if self._gateway_exists(mac_address):
                raise ConflictError(f"Gateway with MAC address '{mac_address}' already exists")
            gateway = GatewayRecord(mac_address=mac_address, name=name, description=description)
            network.gateways.append(gateway)
            self._persist()
            return copy.deepcopy(gateway)

    def delete_gateway(self, network_code: str, mac_address: str) -> GatewayRecord:
        with self._lock:
            network = self._require_network(network_code)
            gateway = self._require_gateway(network, mac_address)
            network.gateways.remove(gateway)
            self._persist()
            return gateway

    def update_gateway(
        self, network_code: str, mac_address: str, changes: Dict[str, Any]
    ) -> GatewayRecord:
        with self._lock:
            network = self._require_network(network_code)
            gateway = self._require_gateway(network, mac_address)
            new_mac = changes.get("mac_address") or mac_address
            if new_mac != mac_address and self._gateway_exists(new_mac):
                raise ConflictError(f"Gateway with MAC address '{new_mac}' already exists")
            _apply(gateway, changes)
            gateway.mac_address = new_mac
            self._persist()
            return copy.deepcopy(gateway)

    def list_sensors(self, network_code: str, gateway_mac: str) -> List[SensorRecord]:
        with self._lock:
            network = self._require_network(network_code)
            return copy.deepcopy(self._require_gateway(network, gateway_mac).sensors)

    def get_sensor(self, network_code: str, gateway_mac: str, mac_address: str) -> SensorRecord:
        with self._lock:
            network = self._require_network(network_code)
            gateway = self._require_gateway(network, gateway_mac)
            return copy.deepcopy(self._require_sensor(gateway, mac_address))

    def create_sensor(self, network_code: str, gateway_mac: str, sensor: SensorRecord) -> SensorRecord:
        with self._lock:
            network = self._require_network(network_code)
            gateway = self._require_gateway(network, gateway_mac)
            if self._sensor_exists(sensor.mac_address):
                raise ConflictError(
                    f"Sensor with MAC address '{sensor.mac_address}' already exists"
                )
            stored = copy.deepcopy(sensor)
            gateway.sensors.append(stored)
            self._persist()
            return copy.deepcopy(stored)

    def update_sensor(
        self,
        network_code: str,
        gateway_mac: str,
        mac_address: str,
        changes: Dict[str, Any],
    ) -> SensorRecord:
        with self._lock:
            network = self._require_network(network_code)
            gateway = self._require_gateway(network, gateway_mac)
            sensor = self._require_sensor(gateway, mac_address)
            new_mac = changes.get("mac_address") or mac_address
            if new_mac != mac_address and self._sensor_exists(new_mac):
                raise ConflictError(f"Sensor with MAC address '{new_mac}' already exists")
            _apply(sensor, changes)
            sensor.mac_address = new_mac
            self._persist()
            return copy.deepcopy(sensor)

    def delete_sensor(self, network_code: str, gateway_mac: str, mac_address: str) -> SensorRecord:
        with self._lock:
            network = self._require_network(network_code)
            gateway = self._require_gateway(network, gateway_mac)
            sensor = self._require_sensor(gateway, mac_address)
            gateway.sensors.remove(sensor)
            self._persist()
            return sensor

    def _require_network(self, code: str) -> NetworkRecord:
        network = self._networks.get(code)
        if network is None:
            raise NotFoundError(f"Network with code '{code}' not found")
        return network

    @staticmethod
    def _require_gateway(network: NetworkRecord, mac_address: str) -> GatewayRecord:
        gateway = network.find_gateway(mac_address)
        if gateway is None:
            raise NotFoundError(f"Gateway with MAC address '{mac_address}' not found")
        return gateway

    @staticmethod
    def _require_sensor(gateway: GatewayRecord, mac_address: str) -> SensorRecord:
        sensor = gateway.find_sensor(mac_address)
        if sensor is None:
            raise NotFoundError(f"Sensor with MAC address '{mac_address}' not found")
        return sensor

    def _gateway_exists(self, mac_address: str) -> bool:
        return any(
            network.find_gateway(mac_address) is not None for network in self._networks.values()
        )

    def _sensor_exists(self, mac_address: str) -> bool:
        return any(
            gateway.find_sensor(mac_address) is not None
            for network in self._networks.values()
            for gateway in network.gateways
        )

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {code: asdict(network) for code, network in self._networks.items()}
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = {}

        for code, payload in data.items():
            self._networks[code] = _network_from_dict(payload)


def _apply(record: Any, changes: Dict[str, Any]) -> None:
    for name, value in changes.items():
        if value is not None and hasattr(record, name):
            setattr(record, name, value)


def _network_from_dict(payload: Dict[str, Any]) -> NetworkRecord:
    gateways = [
        GatewayRecord(
            mac_address=gateway["mac_address"],
            name=gateway.get("name", ""),
            description=gateway.get("description", ""),
            sensors=[SensorRecord(**sensor) for sensor in gateway.get("sensors", [])],
        )
        for gateway in payload.get("gateways", [])
    ]
    return NetworkRecord(
        code=payload["code"],
        name=payload.get("name", ""),
        description=payload.get("description", ""),
        gateways=gateways,
    )


@lru_cache
def build_default_network_store(path: Optional[str] = None) -> MockNetworkStore:
    settings = get_settings()
    store_path = settings.network_store_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return MockNetworkStore(persistence_path=persistence)

"""Network, gateway and sensor management."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List

from app.schemas import Gateway, GatewayUpdate, Network, NetworkUpdate, Sensor, SensorUpdate
from datastore.measurement_store import MockMeasurementStore, build_default_measurement_store
from datastore.network_store import MockNetworkStore, build_default_network_store
from models.records import SensorRecord
from services.mapper import map_gateway, map_network, map_sensor

logger = logging.getLogger(__name__)


class NetworkService:
    """Thin CRUD over the hierarchy.

    Deletions cascade to stored readings, and renaming a gateway or sensor
    carries its readings over to the new MAC address.
    """

    def __init__(
        self,
        network_store: MockNetworkStore,
        measurement_store: MockMeasurementStore,
    ) -> None:
        self.network_store = network_store
        self.measurement_store = measurement_store

    def list_networks(self) -> List[Network]:
        return [map_network(network) for network in self.network_store.list_networks()]

    def get_network(self, code: str) -> Network:
        return map_network(self.network_store.get_network_by_code(code))

    def create_network(self, network: Network) -> None:
        self.network_store.create_network(network.code, network.name, network.description)
        logger.info("Created network", extra={"network_code": network.code})

    def delete_network(self, code: str) -> None:
        removed = self.network_store.delete_network(code)
        macs = [sensor.mac_address for gateway in removed.gateways for sensor in gateway.sensors]
        dropped = self.measurement_store.remove_readings(macs)
        logger.info(
            "Deleted network",
            extra={"network_code": code, "sensor_count": len(macs), "measurement_count": dropped},
        )

    def update_network(self, code: str, update: NetworkUpdate) -> None:
        updated = self.network_store.update_network(code, update.model_dump(exclude_none=True))
        logger.info("Updated network", extra={"network_code": updated.code})

    def list_gateways(self, network_code: str) -> List[Gateway]:
        return [map_gateway(gateway) for gateway in self.network_store.list_gateways(network_code)]

    def get_gateway(self, network_code: str, gateway_mac: str) -> Gateway:
        return map_gateway(self.network_store.get_gateway(network_code, gateway_mac))

    def create_gateway(self, network_code: str, gateway: Gateway) -> None:
        self.network_store.create_gateway(
            network_code, gateway.mac_address, gateway.name, gateway.description
        )
        logger.info(
            "Created gateway",
            extra={"network_code": network_code, "gateway_mac": gateway.mac_address},
        )

    def delete_gateway(self, network_code: str, gateway_mac: str) -> None:
        removed = self.network_store.delete_gateway(network_code, gateway_mac)
        dropped = self.measurement_store.remove_readings(
            sensor.mac_address for sensor in removed.sensors
        )
        logger.info(
            "Deleted gateway",
            extra={"network_code": network_code, "gateway_mac": gateway_mac, "measurement_count": dropped},
        )

    def update_gateway(self, network_code: str, gateway_mac: str, update: GatewayUpdate) -> None:
        updated = self.network_store.update_gateway(
            network_code, gateway_mac, update.model_dump(exclude_none=True)
        )
        moved = 0
        if updated.mac_address != gateway_mac:
            moved = self.measurement_store.rename_gateway(gateway_mac, updated.mac_address)
        logger.info(
            "Updated gateway",
            extra={
                "network_code": network_code,
                "gateway_mac": updated.mac_address,
                "measurement_count": moved,
            },
        )

    def list_sensors(self, network_code: str, gateway_mac: str) -> List[Sensor]:
        return [map_sensor(sensor) for sensor in self.network_store.list_sensors(network_code, gateway_mac)]

    def get_sensor(self, network_code: str, gateway_mac: str, sensor_mac: str) -> Sensor:
        return map_sensor(self.network_store.get_sensor(network_code, gateway_mac, sensor_mac))

    def create_sensor(self, network_code: str, gateway_mac: str, sensor: Sensor) -> None:
        record = SensorRecord(
            mac_address=sensor.mac_address,
            name=sensor.name,
            description=sensor.description,
            variable=sensor.variable,
            unit=sensor.unit,
        )
        self.network_store.create_sensor(network_code, gateway_mac, record)
        logger.info(
            "Created sensor",
            extra={"network_code": network_code, "gateway_mac": gateway_mac, "sensor_mac": sensor.mac_address},
        )

    def update_sensor(
        self, network_code: str, gateway_mac: str, sensor_mac: str, update: SensorUpdate
    ) -> None:
        updated = self.network_store.update_sensor(
            network_code, gateway_mac, sensor_mac, update.model_dump(exclude_none=True)
        )
        moved = 0
        if updated.mac_address != sensor_mac:
            moved = self.measurement_store.rename_sensor(sensor_mac, updated.mac_address)
        logger.info(
            "Updated sensor",
            extra={
                "network_code": network_code,
                "gateway_mac": gateway_mac,
                "sensor_mac": updated.mac_address,
                "measurement_count": moved,
            },
        )

    def delete_sensor(self, network_code: str, gateway_mac: str, sensor_mac: str) -> None:
        self.network_store.delete_sensor(network_code, gateway_mac, sensor_mac)
        dropped = self.measurement_store.remove_readings([sensor_mac])
        logger.info(
            "Deleted sensor",
            extra={"sensor_mac": sensor_mac, "measurement_count": dropped},
        )


@lru_cache
def build_default_network_service() -> NetworkService:
    return NetworkService(
        network_store=build_default_network_store(),
        measurement_store=build_default_measurement_store(),
    )

"""Measurement queries: readings, statistics and outliers per sensor."""

from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from app.schemas import Measurements, Stats
from datastore.measurement_store import MockMeasurementStore, build_default_measurement_store
from datastore.network_store import MockNetworkStore, build_default_network_store
from models.records import GatewayRecord, NetworkRecord, SensorRecord
from services.aggregator import Aggregator
from services.dates import parse_date_param
from services.errors import NotFoundError
from services.mapper import create_measurements_group, map_measurements
from services.statistics import compute_stats_for_window, only_outliers

logger = logging.getLogger(__name__)


def resolve_sensor(
    network: NetworkRecord, gateway_mac: str, sensor_mac: str
) -> Tuple[GatewayRecord, SensorRecord]:
    """Find a gateway and its sensor in the network's eagerly loaded hierarchy."""
    gateway = network.find_gateway(gateway_mac)
    if gateway is None:
        raise NotFoundError(f"Gateway {gateway_mac} not found")
    sensor = gateway.find_sensor(sensor_mac)
    if sensor is None:
        raise NotFoundError(f"Sensor {sensor_mac} not found")
    return gateway, sensor


class MeasurementService:
    """Use-cases over the readings of a network, a gateway or a single sensor."""

    def __init__(
        self,
        network_store: MockNetworkStore,
        measurement_store: MockMeasurementStore,
        aggregator: Optional[Aggregator] = None,
    ) -> None:
        self.network_store = network_store
        self.measurement_store = measurement_store
        self.aggregator = aggregator or Aggregator(measurement_store)

    def get_network_measurements(
        self,
        network_code: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        sensor_macs: Optional[Sequence[str]] = None,
    ) -> List[Measurements]:
        network = self.network_store.get_network_by_code(network_code)
        start, end = self._parse_window(start_date, end_date)

        groups = self.aggregator.group_by_sensor(network.gateways, sensor_macs, start, end)
        for group in groups:
            group.stats = compute_stats_for_window(group.measurements or [], start, end)

        logger.debug(
            "Computed network measurements",
            extra={
                "network_code": network_code,
                "start_date": start,
                "end_date": end,
                "sensor_count": len(groups),
            },
        )
        return groups

    def get_network_stats(
        self,
        network_code: str,
        sensor_macs: Optional[Sequence[str]] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Measurements]:
        groups = self.get_network_measurements(network_code, start_date, end_date, sensor_macs)
        return [create_measurements_group(group.sensor_mac_address, stats=group.stats) for group in groups]

    def get_network_outliers(
        self,
        network_code: str,
        sensor_macs: Optional[Sequence[str]] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Measurements]:
        groups = self.get_network_measurements(network_code, start_date, end_date, sensor_macs)
        for group in groups:
            group.measurements = only_outliers(group.measurements or [], group.stats)
        return groups

    def get_sensor_measurements_with_stats(
        self,
        network_code: str,
        gateway_mac: str,
        sensor_mac: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Measurements:
        network = self.network_store.get_network_by_code(network_code)
        start, end = self._parse_window(start_date, end_date)
        gateway, sensor = resolve_sensor(network, gateway_mac, sensor_mac)

        records = self.measurement_store.get_readings_by_single_sensor(gateway, sensor, start, end)
        readings = map_measurements(records)
        stats = compute_stats_for_window(readings, start, end)
        logger.debug(
            "Computed sensor measurements",
            extra={
                "network_code": network_code,
                "sensor_mac": sensor_mac,
                "start_date": start,
                "end_date": end,
                "measurement_count": len(readings),
            },
        )
        return create_measurements_group(sensor_mac, readings, stats)

    def get_sensor_stats(
        self,
        network_code: str,
        gateway_mac: str,
        sensor_mac: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Stats:
        group = self.get_sensor_measurements_with_stats(
            network_code, gateway_mac, sensor_mac, start_date, end_date
        )
        return group.stats

    def get_sensor_outliers(
        self,
        network_code: str,
        gateway_mac: str,
        sensor_mac: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Measurements:
        group = self.get_sensor_measurements_with_stats(
            network_code, gateway_mac, sensor_mac, start_date, end_date
        )
        group.measurements = only_outliers(group.measurements or [], group.stats)
        logger.debug(
            "Flagged sensor outliers",
            extra={
                "network_code": network_code,
                "sensor_mac": sensor_mac,
                "outlier_count": len(group.measurements),
            },
        )
        return group

    def create_sensor_measurement(
        self,
        network_code: str,
        gateway_mac: str,
        sensor_mac: str,
        created_at: datetime,
        value: float,
    ) -> None:
        network = self.network_store.get_network_by_code(network_code)
        gateway, sensor = resolve_sensor(network, gateway_mac, sensor_mac)
        self.measurement_store.create_reading(created_at, sensor, gateway, value)
        logger.info(
            "Stored measurement",
            extra={"network_code": network_code, "gateway_mac": gateway_mac, "sensor_mac": sensor_mac},
        )

    @staticmethod
    def _parse_window(
        start_date: Optional[str], end_date: Optional[str]
    ) -> Tuple[Optional[datetime], Optional[datetime]]:
        return parse_date_param(start_date, "startDate"), parse_date_param(end_date, "endDate")


@lru_cache
def build_default_measurement_service() -> MeasurementService:
    """Factory that wires the service with the default mock stores."""
    return MeasurementService(
        network_store=build_default_network_store(),
        measurement_store=build_default_measurement_store(),
    )

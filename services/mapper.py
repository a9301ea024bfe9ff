"""Conversions from stored records to API schemas."""

from __future__ import annotations

from typing import Iterable, List, Optional

from app.schemas import Gateway, Measurement, Measurements, Network, Sensor, Stats
from models.records import GatewayRecord, MeasurementRecord, NetworkRecord, SensorRecord


def map_measurement(record: MeasurementRecord) -> Measurement:
    # isOutlier is never stored; it starts false and is set when flagging.
    if record.created_at is None or record.value is None:
        return Measurement()
    return Measurement(created_at=record.created_at, value=record.value, is_outlier=False)


def map_measurements(records: Iterable[MeasurementRecord]) -> List[Measurement]:
    return [map_measurement(record) for record in records]


def create_measurements_group(
    sensor_mac_address: str,
    measurements: Optional[List[Measurement]] = None,
    stats: Optional[Stats] = None,
) -> Measurements:
    return Measurements(
        sensor_mac_address=sensor_mac_address,
        measurements=measurements,
        stats=stats,
    )


def map_sensor(record: SensorRecord) -> Sensor:
    return Sensor(
        mac_address=record.mac_address,
        name=record.name,
        description=record.description,
        variable=record.variable,
        unit=record.unit,
    )


def map_gateway(record: GatewayRecord) -> Gateway:
    return Gateway(
        mac_address=record.mac_address,
        name=record.name,
        description=record.description,
        sensors=[map_sensor(sensor) for sensor in record.sensors],
    )


def map_network(record: NetworkRecord) -> Network:
    return Network(
        code=record.code,
        name=record.name,
        description=record.description,
        gateways=[map_gateway(gateway) for gateway in record.gateways],
    )

"""Grouping of raw readings by sensor."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from app.schemas import Measurements
from datastore.measurement_store import MockMeasurementStore
from models.records import GatewayRecord, MeasurementRecord
from services.mapper import create_measurements_group, map_measurements

logger = logging.getLogger(__name__)


def target_sensor_macs(
    gateways: Iterable[Optional[GatewayRecord]],
    requested: Optional[Sequence[str]] = None,
) -> List[str]:
    """Sensors in scope, narrowed to ``requested`` when it is non-empty.

    Requested MACs that do not belong to the scope are dropped silently.
    """
    in_scope = [sensor.mac_address for gateway in gateways if gateway for sensor in gateway.sensors]
    if requested:
        wanted = set(requested)
        in_scope = [mac for mac in in_scope if mac in wanted]
    return list(dict.fromkeys(in_scope))


def group_readings(
    records: Iterable[MeasurementRecord],
    target_macs: Iterable[str],
) -> List[Measurements]:
    """Build one group per target sensor, empty when it has no readings."""
    grouped: Dict[str, List[MeasurementRecord]] = {mac: [] for mac in target_macs}
    for record in records:
        bucket = grouped.get(record.sensor_mac_address)
        if bucket is not None:
            bucket.append(record)
    return [
        create_measurements_group(mac, map_measurements(bucket))
        for mac, bucket in grouped.items()
    ]


class Aggregator:
    """Fetches readings for a set of gateways and groups them per sensor."""

    def __init__(self, measurement_store: MockMeasurementStore) -> None:
        self.measurement_store = measurement_store

    def group_by_sensor(
        self,
        gateways: Sequence[Optional[GatewayRecord]],
        sensor_macs: Optional[Sequence[str]] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Measurements]:
        targets = target_sensor_macs(gateways, sensor_macs)
        if not targets:
            return []

        records = self.measurement_store.get_readings_by_gateway_set(
            gateways, targets, start_date, end_date
        )
        logger.debug(
            "Grouped readings by sensor",
            extra={"sensor_count": len(targets), "measurement_count": len(records)},
        )
        return group_readings(records, targets)

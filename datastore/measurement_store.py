from __future__ import annotations

import copy
import json
import logging
from dataclasses import replace
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, List, Optional, Tuple

from models.records import GatewayRecord, MeasurementRecord, SensorRecord
from services.dates import ensure_utc, parse_timestamp
from services.errors import ConflictError, NotFoundError
from settings import get_settings

logger = logging.getLogger(__name__)

_Key = Tuple[str, datetime]


def _in_window(
    created_at: Optional[datetime],
    start_date: Optional[datetime],
    end_date: Optional[datetime],
) -> bool:
    # Both bounds are inclusive; an inverted window matches nothing.
    if created_at is None:
        return start_date is None and end_date is None
    if start_date is not None and created_at < start_date:
        return False
    if end_date is not None and created_at > end_date:
        return False
    return True


class MockMeasurementStore:
    """Reading table keyed by ``(sensor MAC, createdAt)``.

    Readings are immutable once stored: creating a second reading for the
    same key is a conflict, never an overwrite.
    """

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self._items: Dict[_Key, MeasurementRecord] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def get_readings_by_single_sensor(
        self,
        gateway: GatewayRecord,
        sensor: SensorRecord,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[MeasurementRecord]:
        if not gateway.mac_address or not sensor.mac_address:
            raise NotFoundError("Gateway or sensor MAC address is missing")
        return self._select(
            lambda record: record.gateway_mac_address == gateway.mac_address
            and record.sensor_mac_address == sensor.mac_address,
            start_date,
            end_date,
        )

    def get_readings_by_gateway_set(
        self,
        gateways: Iterable[Optional[GatewayRecord]],
        sensor_macs: Optional[Iterable[Optional[str]]] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[MeasurementRecord]:
        gateway_macs = {gateway.mac_address for gateway in gateways if gateway}
        if not gateway_macs:
            return []
        allowed = {mac for mac in sensor_macs or () if mac}

        def matches(record: MeasurementRecord) -> bool:
            if record.gateway_mac_address not in gateway_macs:
                return False
            return not allowed or record.sensor_mac_address in allowed

        return self._select(matches, start_date, end_date)

    def create_reading(
        self,
        created_at: datetime,
        sensor: SensorRecord,
        gateway: GatewayRecord,
        value: float,
    ) -> MeasurementRecord:
        if not sensor.mac_address or not gateway.mac_address:
            raise NotFoundError("Gateway or sensor MAC address is missing")

        record = MeasurementRecord(
            created_at=ensure_utc(created_at),
            sensor_mac_address=sensor.mac_address,
            gateway_mac_address=gateway.mac_address,
            value=value,
        )
        key = (record.sensor_mac_address, record.created_at)
        with self._lock:
            if key in self._items:
                raise ConflictError(
                    "Measurement already exists for this sensor at the specified time"
                )
            self._items[key] = record
            self._persist()
        return copy.copy(record)

    def remove_readings(self, sensor_macs: Iterable[str]) -> int:
        """Delete every reading of the given sensors; returns how many were dropped."""
        targets = set(sensor_macs)
        with self._lock:
            doomed = [key for key in self._items if key[0] in targets]
            for key in doomed:
                del self._items[key]
            if doomed:
                self._persist()
        return len(doomed)

    def rename_gateway(self, old_mac: str, new_mac: str) -> int:
        """Point the readings of ``old_mac`` at ``new_mac``; returns how many moved."""
        with self._lock:
            moved = 0
            for key, record in self._items.items():
                if record.gateway_mac_address == old_mac:
                    self._items[key] = replace(record, gateway_mac_address=new_mac)
                    moved += 1
            if moved:
                self._persist()
        return moved

    def rename_sensor(self, old_mac: str, new_mac: str) -> int:
        with self._lock:
            moved = [key for key in self._items if key[0] == old_mac]
            for key in moved:
                record = self._items.pop(key)
                self._items[(new_mac, key[1])] = replace(record, sensor_mac_address=new_mac)
            if moved:
                self._persist()
        return len(moved)

    def _select(self, predicate, start_date, end_date) -> List[MeasurementRecord]:
        with self._lock:
            selected = [
                copy.copy(record)
                for record in self._items.values()
                if predicate(record) and _in_window(record.created_at, start_date, end_date)
            ]
        selected.sort(key=lambda record: (record.sensor_mac_address, record.created_at))
        return selected

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [
            {
                "createdAt": record.created_at.isoformat(),
                "sensorMacAddress": record.sensor_mac_address,
                "gatewayMacAddress": record.gateway_mac_address,
                "value": record.value,
            }
            for record in self._items.values()
        ]
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = []

        for row in data:
            try:
                record = MeasurementRecord(
                    created_at=parse_timestamp(row["createdAt"]),
                    sensor_mac_address=row["sensorMacAddress"],
                    gateway_mac_address=row["gatewayMacAddress"],
                    value=float(row["value"]),
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable stored measurement", extra={"reason": str(exc)})
                continue
            self._items[(record.sensor_mac_address, record.created_at)] = record


@lru_cache
def build_default_measurement_store(path: Optional[str] = None) -> MockMeasurementStore:
    settings = get_settings()
    store_path = settings.measurement_store_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return MockMeasurementStore(persistence_path=persistence)

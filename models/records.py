"""Stored entities shared across the stores and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(slots=True)
class SensorRecord:
    """A sensor attached to exactly one gateway."""

    mac_address: str
    name: str = ""
    description: str = ""
    variable: str = ""
    unit: str = ""


@dataclass(slots=True)
class GatewayRecord:
    """A gateway with its sensors eagerly loaded."""

    mac_address: str
    name: str = ""
    description: str = ""
    sensors: List[SensorRecord] = field(default_factory=list)

    def find_sensor(self, mac_address: str) -> Optional[SensorRecord]:
        return next((s for s in self.sensors if s.mac_address == mac_address), None)


@dataclass(slots=True)
class NetworkRecord:
    """A network with its gateways (and their sensors) eagerly loaded."""

    code: str
    name: str = ""
    description: str = ""
    gateways: List[GatewayRecord] = field(default_factory=list)

    def find_gateway(self, mac_address: str) -> Optional[GatewayRecord]:
        return next((g for g in self.gateways if g.mac_address == mac_address), None)


@dataclass(slots=True)
class MeasurementRecord:
    """A persisted reading; identity is ``(sensor_mac_address, created_at)``."""

    created_at: Optional[datetime]
    sensor_mac_address: str
    gateway_mac_address: str
    value: Optional[float]

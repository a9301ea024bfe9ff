"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model exchanging camelCase JSON while exposing snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Measurement(ApiModel):
    """A single reading as returned to clients.

    Every field is optional: a stored row lacking a timestamp or a value is
    mapped to an empty placeholder that statistics ignore.
    """

    created_at: Optional[datetime] = None
    value: Optional[float] = None
    is_outlier: Optional[bool] = None


class Stats(ApiModel):
    """Descriptive statistics for the readings of one sensor within a window."""

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    mean: float = 0.0
    variance: float = 0.0
    upper_threshold: float = 0.0
    lower_threshold: float = 0.0


class Measurements(ApiModel):
    """Per-sensor bundle of readings and the statistics computed over them."""

    sensor_mac_address: str
    measurements: Optional[List[Measurement]] = None
    stats: Optional[Stats] = None


class MeasurementCreate(ApiModel):
    """Request body for storing a reading."""

    created_at: datetime
    value: float = Field(..., allow_inf_nan=False)


class Sensor(ApiModel):
    mac_address: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    variable: str = ""
    unit: str = ""


class Gateway(ApiModel):
    mac_address: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    sensors: Optional[List[Sensor]] = None


class Network(ApiModel):
    code: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    gateways: Optional[List[Gateway]] = None


class NetworkUpdate(ApiModel):
    """Partial update of a network; omitted fields keep their value."""

    code: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = None
    description: Optional[str] = None


class GatewayUpdate(ApiModel):
    mac_address: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = None
    description: Optional[str] = None


class SensorUpdate(ApiModel):
    mac_address: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = None
    description: Optional[str] = None
    variable: Optional[str] = None
    unit: Optional[str] = None

"""HTTP route definitions for measurement queries and ingestion."""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from app.schemas import MeasurementCreate, Measurements, Stats
from services.errors import ConflictError, InvalidInputError, NotFoundError, ServiceError
from services.measurements import MeasurementService, build_default_measurement_service

logger = logging.getLogger(__name__)

router = APIRouter()
health_router = APIRouter()

_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
)

_SENSOR_PATH = "/{network_code}/gateways/{gateway_mac}/sensors/{sensor_mac}"


def get_measurement_service() -> MeasurementService:
    return build_default_measurement_service()


def http_error(exc: ServiceError) -> HTTPException:
    """Translate a service failure into the matching HTTP error."""
    for kind, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, kind):
            logger.warning("Request rejected", extra={"status": status_code, "reason": str(exc)})
            return HTTPException(status_code=status_code, detail=str(exc))
    logger.error("Unmapped service error", extra={"reason": str(exc)})
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


def split_sensor_macs(values: Optional[List[str]]) -> Optional[List[str]]:
    """Accept repeated and comma separated ``sensorMacs`` query values."""
    if not values:
        return None
    macs = [part.strip() for value in values for part in value.split(",")]
    return [mac for mac in macs if mac] or None


@router.get(
    "/{network_code}/measurements",
    response_model=List[Measurements],
    response_model_exclude_none=True,
    summary="Retrieve readings and statistics for a set of sensors of a network.",
)
async def get_network_measurements(
    network_code: str,
    sensor_macs: Optional[List[str]] = Query(None, alias="sensorMacs"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    service: MeasurementService = Depends(get_measurement_service),
) -> List[Measurements]:
    try:
        return service.get_network_measurements(
            network_code, start_date, end_date, split_sensor_macs(sensor_macs)
        )
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.get(
    "/{network_code}/stats",
    response_model=List[Measurements],
    response_model_exclude_none=True,
    summary="Retrieve statistics for a set of sensors of a network.",
)
async def get_network_stats(
    network_code: str,
    sensor_macs: Optional[List[str]] = Query(None, alias="sensorMacs"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    service: MeasurementService = Depends(get_measurement_service),
) -> List[Measurements]:
    try:
        return service.get_network_stats(
            network_code, split_sensor_macs(sensor_macs), start_date, end_date
        )
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.get(
    "/{network_code}/outliers",
    response_model=List[Measurements],
    response_model_exclude_none=True,
    summary="Retrieve only outlier readings for a set of sensors of a network.",
)
async def get_network_outliers(
    network_code: str,
    sensor_macs: Optional[List[str]] = Query(None, alias="sensorMacs"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    service: MeasurementService = Depends(get_measurement_service),
) -> List[Measurements]:
    try:
        return service.get_network_outliers(
            network_code, split_sensor_macs(sensor_macs), start_date, end_date
        )
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post(
    f"{_SENSOR_PATH}/measurements",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    summary="Store one reading or a batch of readings for a sensor.",
)
async def create_sensor_measurements(
    network_code: str,
    gateway_mac: str,
    sensor_mac: str,
    payload: Union[List[MeasurementCreate], MeasurementCreate] = Body(...),
    service: MeasurementService = Depends(get_measurement_service),
) -> Response:
    batch = payload if isinstance(payload, list) else [payload]
    try:
        for item in batch:
            service.create_sensor_measurement(
                network_code, gateway_mac, sensor_mac, item.created_at, item.value
            )
    except ServiceError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_201_CREATED)


@router.get(
    f"{_SENSOR_PATH}/measurements",
    response_model=Measurements,
    response_model_exclude_none=True,
    summary="Retrieve readings and statistics for a specific sensor.",
)
async def get_sensor_measurements(
    network_code: str,
    gateway_mac: str,
    sensor_mac: str,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    service: MeasurementService = Depends(get_measurement_service),
) -> Measurements:
    try:
        return service.get_sensor_measurements_with_stats(
            network_code, gateway_mac, sensor_mac, start_date, end_date
        )
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.get(
    f"{_SENSOR_PATH}/stats",
    response_model=Stats,
    response_model_exclude_none=True,
    summary="Retrieve statistics for a specific sensor.",
)
async def get_sensor_stats(
    network_code: str,
    gateway_mac: str,
    sensor_mac: str,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    service: MeasurementService = Depends(get_measurement_service),
) -> Stats:
    try:
        return service.get_sensor_stats(network_code, gateway_mac, sensor_mac, start_date, end_date)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.get(
    f"{_SENSOR_PATH}/outliers",
    response_model=Measurements,
    response_model_exclude_none=True,
    summary="Retrieve only outlier readings for a specific sensor.",
)
async def get_sensor_outliers(
    network_code: str,
    gateway_mac: str,
    sensor_mac: str,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    service: MeasurementService = Depends(get_measurement_service),
) -> Measurements:
    try:
        return service.get_sensor_outliers(
            network_code, gateway_mac, sensor_mac, start_date, end_date
        )
    except ServiceError as exc:
        raise http_error(exc) from exc


@health_router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}

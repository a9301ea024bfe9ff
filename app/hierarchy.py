"""HTTP routes managing networks, gateways and sensors."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from app.api import http_error
from app.schemas import Gateway, GatewayUpdate, Network, NetworkUpdate, Sensor, SensorUpdate
from services.errors import ServiceError
from services.networks import NetworkService, build_default_network_service

router = APIRouter()


def get_network_service() -> NetworkService:
    return build_default_network_service()


@router.get("", response_model=List[Network], response_model_exclude_none=True)
async def list_networks(service: NetworkService = Depends(get_network_service)) -> List[Network]:
    return service.list_networks()


@router.post("", status_code=status.HTTP_201_CREATED, response_class=Response)
async def create_network(
    network: Network,
    service: NetworkService = Depends(get_network_service),
) -> Response:
    try:
        service.create_network(network)
    except ServiceError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/{network_code}", response_model=Network, response_model_exclude_none=True)
async def get_network(
    network_code: str,
    service: NetworkService = Depends(get_network_service),
) -> Network:
    try:
        return service.get_network(network_code)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.delete("/{network_code}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_network(
    network_code: str,
    service: NetworkService = Depends(get_network_service),
) -> Response:
    try:
        service.delete_network(network_code)
    except ServiceError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{network_code}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def update_network(
    network_code: str,
    update: NetworkUpdate,
    service: NetworkService = Depends(get_network_service),
) -> Response:
    try:
        service.update_network(network_code, update)
    except ServiceError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{network_code}/gateways",
    response_model=List[Gateway],
    response_model_exclude_none=True,
)
async def list_gateways(
    network_code: str,
    service: NetworkService = Depends(get_network_service),
) -> List[Gateway]:
    try:
        return service.list_gateways(network_code)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post(
    "/{network_code}/gateways",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
)
async def create_gateway(
    network_code: str,
    gateway: Gateway,
    service: NetworkService = Depends(get_network_service),
) -> Response:
    try:
        service.create_gateway(network_code, gateway)
    except ServiceError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_201_CREATED)


@router.get(
    "/{network_code}/gateways/{gateway_mac}",
    response_model=Gateway,
    response_model_exclude_none=True,
)
async def get_gateway(
    network_code: str,
    gateway_mac: str,
    service: NetworkService = Depends(get_network_service),
) -> Gateway:
    try:
        return service.get_gateway(network_code, gateway_mac)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.delete(
    "/{network_code}/gateways/{gateway_mac}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_gateway(
    network_code: str,
    gateway_mac: str,
    service: NetworkService = Depends(get_network_service),
) -> Response:
    try:
        service.delete_gateway(network_code, gateway_mac)
    except ServiceError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{network_code}/gateways/{gateway_mac}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def update_gateway(
    network_code: str,
    gateway_mac: str,
    update: GatewayUpdate,
    service: NetworkService = Depends(get_network_service),
) -> Response:
    try:
        service.update_gateway(network_code, gateway_mac, update)
    except ServiceError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{network_code}/gateways/{gateway_mac}/sensors",
    response_model=List[Sensor],
    response_model_exclude_none=True,
)
async def list_sensors(
    network_code: str,
    gateway_mac: str,
    service: NetworkService = Depends(get_network_service),
) -> List[Sensor]:
    try:
        return service.list_sensors(network_code, gateway_mac)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post(
    "/{network_code}/gateways/{gateway_mac}/sensors",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
)
async def create_sensor(
    network_code: str,
    gateway_mac: str,
    sensor: Sensor,
    service: NetworkService = Depends(get_network_service),
) -> Response:
    try:
        service.create_sensor(network_code, gateway_mac, sensor)
    except ServiceError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_201_CREATED)


@router.get(
    "/{network_code}/gateways/{gateway_mac}/sensors/{sensor_mac}",
    response_model=Sensor,
    response_model_exclude_none=True,
)
async def get_sensor(
    network_code: str,
    gateway_mac: str,
    sensor_mac: str,
    service: NetworkService = Depends(get_network_service),
) -> Sensor:
    try:
        return service.get_sensor(network_code, gateway_mac, sensor_mac)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.delete(
    "/{network_code}/gateways/{gateway_mac}/sensors/{sensor_mac}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_sensor(
    network_code: str,
    gateway_mac: str,
    sensor_mac: str,
    service: NetworkService = Depends(get_network_service),
) -> Response:
    try:
        service.delete_sensor(network_code, gateway_mac, sensor_mac)
    except ServiceError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{network_code}/gateways/{gateway_mac}/sensors/{sensor_mac}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def update_sensor(
    network_code: str,
    gateway_mac: str,
    sensor_mac: str,
    update: SensorUpdate,
    service: NetworkService = Depends(get_network_service),
) -> Response:
    try:
        service.update_sensor(network_code, gateway_mac, sensor_mac, update)
    except ServiceError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the measurements service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def get_network_measurements(
        self,
        network_code: str,
        sensor_macs: Sequence[str] = (),
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        return self._get(
            f"{self._network_path(network_code)}/measurements",
            self._window_params(start_date, end_date, sensor_macs),
        )

    def get_network_stats(
        self,
        network_code: str,
        sensor_macs: Sequence[str] = (),
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        return self._get(
            f"{self._network_path(network_code)}/stats",
            self._window_params(start_date, end_date, sensor_macs),
        )

    def get_network_outliers(
        self,
        network_code: str,
        sensor_macs: Sequence[str] = (),
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        return self._get(
            f"{self._network_path(network_code)}/outliers",
            self._window_params(start_date, end_date, sensor_macs),
        )

    def get_sensor_stats(
        self,
        network_code: str,
        gateway_mac: str,
        sensor_mac: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        return self._get(
            f"{self._sensor_path(network_code, gateway_mac, sensor_mac)}/stats",
            self._window_params(start_date, end_date),
        )

    def upload_measurements(
        self,
        network_code: str,
        gateway_mac: str,
        sensor_mac: str,
        measurements: List[Dict[str, Any]],
    ) -> None:
        try:
            response = self._client.post(
                f"{self._sensor_path(network_code, gateway_mac, sensor_mac)}/measurements",
                json=measurements,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)

    def _get(self, path: str, params: List[tuple[str, str]]) -> Any:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def _network_path(self, network_code: str) -> str:
        return f"{self._config.api_prefix}/networks/{network_code}"

    def _sensor_path(self, network_code: str, gateway_mac: str, sensor_mac: str) -> str:
        return f"{self._network_path(network_code)}/gateways/{gateway_mac}/sensors/{sensor_mac}"

    @staticmethod
    def _window_params(
        start_date: Optional[str],
        end_date: Optional[str],
        sensor_macs: Sequence[str] = (),
    ) -> List[tuple[str, str]]:
        params = [("sensorMacs", mac) for mac in sensor_macs]
        if start_date:
            params.append(("startDate", start_date))
        if end_date:
            params.append(("endDate", end_date))
        return params

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

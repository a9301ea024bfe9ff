from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_NETWORK_STORE_PATH_ENV = "NETWORK_STORE_PERSISTENCE_PATH"
_MEASUREMENT_STORE_PATH_ENV = "MEASUREMENT_STORE_PERSISTENCE_PATH"
_API_PREFIX_ENV = "API_PREFIX"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    network_store_path: Optional[str]
    measurement_store_path: Optional[str]
    api_prefix: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_api_prefix(default: str) -> str:
    prefix = _read_str_env(_API_PREFIX_ENV, default).rstrip("/")
    if not prefix:
        return ""
    return prefix if prefix.startswith("/") else f"/{prefix}"


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        network_store_path=_read_optional_env(_NETWORK_STORE_PATH_ENV, "./tmp/networks.json"),
        measurement_store_path=_read_optional_env(
            _MEASUREMENT_STORE_PATH_ENV, "./tmp/measurements.json"
        ),
        api_prefix=_read_api_prefix("/api/v1"),
        log_level=_read_log_level("INFO"),
    )

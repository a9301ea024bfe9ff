"""Error kinds raised by the stores and services."""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for failures the routing layer translates into responses."""


class NotFoundError(ServiceError):
    """A network, gateway or sensor does not resolve within its scope."""


class ConflictError(ServiceError):
    """An entity with the same identity already exists."""


class InvalidInputError(ServiceError):
    """Caller supplied a value that cannot be interpreted, e.g. a bad date."""

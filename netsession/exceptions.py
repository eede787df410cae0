"""Custom exceptions for netsession."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class NetSessionException(Exception):
    """Base class for netsession exceptions."""

    message: str
    http_status: int = 400
    details: dict[str, object] | None = None

    def __str__(self) -> str:  # pragma: no cover - dataclass str wrapper
        return self.message


@dataclass
class AuthenticationRejected(NetSessionException):
    """Raised when a presented NetworkSession credential is refused.

    The message is deliberately generic; the precise reason code lives in
    ``details`` and is only meant for the audit log.
    """

    message: str = "Network session authentication failed"
    http_status: int = 401


@dataclass
class RequestRejected(NetSessionException):
    """Raised when a credential arrives over a transport it may not use."""

    http_status: int = 400


@dataclass
class Unauthenticated(NetSessionException):
    """Raised when no provider established an identity."""

    message: str = "Authentication required"
    http_status: int = 401


@dataclass
class Forbidden(NetSessionException):
    """Raised when the session lacks a right the endpoint needs."""

    http_status: int = 403


@dataclass
class BadConfig(NetSessionException):
    """Raised when a settings file cannot be parsed or validated."""

    http_status: int = 422

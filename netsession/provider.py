"""Session provider adapter for host authentication pipelines."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Protocol

from .audit import AuditLogger
from .config import Settings
from .credentials import AUTH_HEADER, extract
from .engine import NetworkSessionEngine
from .exceptions import AuthenticationRejected, RequestRejected
from .types import Ambiguous, Authenticated, ConfigError, Metrics, NoCredential, SessionInfo


@dataclass(frozen=True)
class IncomingRequest:
    """The parts of an HTTP request a session provider looks at."""

    headers: Mapping[str, str] = field(default_factory=dict)
    ip: str = ""
    https: bool = True
    is_api: bool = True

    def header(self, name: str) -> Optional[str]:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


class SessionProvider(Protocol):
    priority: int

    def provide_session_info(self, request: IncomingRequest) -> Optional[SessionInfo]: ...


class NetworkSessionProvider:
    """Authenticates API requests from trusted networks carrying a shared secret.

    The set of rights available to sessions from this provider can be
    capped through ``allowed_user_rights``. Sessions are computed per
    request and never persisted.
    """

    def __init__(self, settings: Settings, *, audit: AuditLogger | None = None) -> None:
        self.settings = settings
        self.priority = settings.priority
        self.engine = NetworkSessionEngine(settings)
        self.audit = audit or AuditLogger(settings.logging, settings.tenant_id)
        self.metrics = Metrics()

    def provide_session_info(self, request: IncomingRequest) -> Optional[SessionInfo]:
        token = extract(request.header(AUTH_HEADER))
        if token is None:
            self.metrics.record(NoCredential())
            self.audit.log(ip=request.ip, decision="pass")
            return None

        if not request.is_api:
            raise self._reject_request(request, "networksession-only-api-request",
                                       "NetworkSession credentials are only accepted on API requests")
        if not request.https:
            raise self._reject_request(request, "networksession-only-https",
                                       "NetworkSession credentials are only accepted over https")

        outcome = self.engine.evaluate(token, request.ip)
        self.metrics.record(outcome)
        if isinstance(outcome, Authenticated):
            self.audit.log(
                ip=request.ip,
                decision="authenticated",
                username=outcome.username,
                session_id=outcome.session_id,
                entry=outcome.index,
            )
            return SessionInfo(
                priority=self.priority,
                session_id=outcome.session_id,
                username=outcome.username,
                provider=self,
            )

        entry: Optional[int] = None
        if isinstance(outcome, ConfigError):
            entry = outcome.index
        elif isinstance(outcome, Ambiguous):
            entry = outcome.second
        self.audit.log(ip=request.ip, decision="reject", code=outcome.code, entry=entry)
        raise AuthenticationRejected(details={"code": outcome.code})

    def _reject_request(self, request: IncomingRequest, code: str, message: str) -> RequestRejected:
        self.metrics.rejected += 1
        self.audit.log(ip=request.ip, decision="reject", code=code)
        return RequestRejected(message=message, details={"code": code})

    def new_session_info(self, session_id: Optional[str] = None) -> None:
        # Sessions can only come from a request's credential.
        return None

    def get_allowed_user_rights(self, session: SessionInfo) -> Optional[list[str]]:
        """Rights allowed while ``session`` is active, or None to allow all."""

        if session.provider is not self:
            raise ValueError("Session's provider isn't this provider")
        rights = self.settings.allowed_user_rights
        return None if rights is None else list(rights)

    def can_always_autocreate(self) -> bool:
        return self.settings.can_always_autocreate

    def persists_session_id(self) -> bool:
        # session id is calculated, not persisted
        return False

    def can_change_user(self) -> bool:
        return False

    def prevent_sessions_for_user(self, username: str) -> None:
        # Only predefined users exist; nothing to revoke.
        return None

    def persist_session(self, session: SessionInfo, response: Any) -> None:
        return None

    def unpersist_session(self, response: Any) -> None:
        return None


class SessionProviderChain:
    """Consults providers by descending priority; the first answer wins.

    A provider returning None defers to the next one. Rejections raised by
    a provider end the chain.
    """

    def __init__(self, providers: Iterable[SessionProvider]) -> None:
        self.providers = sorted(providers, key=lambda provider: provider.priority, reverse=True)

    def provide_session_info(self, request: IncomingRequest) -> Optional[SessionInfo]:
        for provider in self.providers:
            info = provider.provide_session_info(request)
            if info is not None:
                return info
        return None

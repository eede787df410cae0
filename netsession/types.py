"""Shared data structures for netsession."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, Union

ConfigErrorKind = Literal["ip_ranges", "token", "username"]


@dataclass(frozen=True, slots=True)
class NoCredential:
    """No NetworkSession credential was presented; other mechanisms may try."""


@dataclass(frozen=True, slots=True)
class NoMatch:
    """A credential was presented but no entry accepted it."""

    code: ClassVar[str] = "networksession-no-token-match"


@dataclass(frozen=True, slots=True)
class Ambiguous:
    """Two entries matched the same (token, ip) pair."""

    first: int
    second: int

    code: ClassVar[str] = "networksession-invalid-config-multiple-matches"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """An entry of the principal table is structurally invalid."""

    kind: ConfigErrorKind
    index: int
    entry: Any = field(default=None, repr=False, compare=False)

    @property
    def code(self) -> str:
        return "networksession-invalid-config-" + self.kind.replace("_", "-")


@dataclass(frozen=True, slots=True)
class Authenticated:
    """Exactly one entry matched."""

    username: str
    session_id: str
    index: int = 0


AuthenticationOutcome = Union[NoCredential, NoMatch, Ambiguous, ConfigError, Authenticated]


@dataclass(frozen=True, slots=True)
class SessionInfo:
    """Ephemeral identity binding handed to the host for one request."""

    priority: int
    session_id: str
    username: str
    provider: Any = field(default=None, repr=False, compare=False)
    id_is_safe: bool = True
    persisted: bool = False
    force_use: bool = True


@dataclass(slots=True)
class Metrics:
    """Simple counter metrics for the service control plane."""

    authenticated: int = 0
    passed: int = 0
    rejected: int = 0
    config_errors: int = 0

    def record(self, outcome: AuthenticationOutcome) -> None:
        if isinstance(outcome, Authenticated):
            self.authenticated += 1
        elif isinstance(outcome, NoCredential):
            self.passed += 1
        else:
            self.rejected += 1
            if isinstance(outcome, (ConfigError, Ambiguous)):
                self.config_errors += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "authenticated": self.authenticated,
            "passed": self.passed,
            "rejected": self.rejected,
            "config_errors": self.config_errors,
        }


"""Principal table evaluation."""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from . import iprange
from .session import derive_session_id
from .types import (
    Ambiguous,
    Authenticated,
    AuthenticationOutcome,
    ConfigError,
    ConfigErrorKind,
    NoCredential,
    NoMatch,
)


@dataclass(frozen=True, slots=True)
class PrincipalConfig:
    """One configured (username, token, ip_ranges) binding."""

    username: str
    token: str = field(repr=False)
    ip_ranges: tuple[str, ...] = ()


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def entry_problem(entry: Any) -> Optional[ConfigErrorKind]:
    """Return the first structurally invalid field of ``entry``, if any.

    Only the shape is checked. Individual range specifiers that fail to
    parse are left to the range matcher, where they never match.
    """

    if not isinstance(_field(entry, "ip_ranges"), (list, tuple)):
        return "ip_ranges"
    if not _non_empty_string(_field(entry, "token")):
        return "token"
    if not _non_empty_string(_field(entry, "username")):
        return "username"
    return None


def tokens_equal(expected: str, provided: str) -> bool:
    """Constant-time token comparison."""

    return hmac.compare_digest(
        expected.encode("utf-8", "surrogatepass"),
        provided.encode("utf-8", "surrogatepass"),
    )


def evaluate(
    bearer_token: Optional[str],
    source_ip: str,
    table: Iterable[Any],
    tenant_id: str,
    *,
    alg: str = "sha256",
    secret_key: str | None = None,
) -> AuthenticationOutcome:
    """Decide which principal, if any, the request authenticates as.

    The table is scanned left to right. The first structurally invalid
    entry ends the scan with ``ConfigError`` even if an earlier entry
    already matched, and a second matching entry ends it with
    ``Ambiguous``. Without a bearer token the table is not consulted.
    """

    if bearer_token is None:
        return NoCredential()

    matched: Optional[tuple[int, Any]] = None
    for index, entry in enumerate(table):
        problem = entry_problem(entry)
        if problem is not None:
            return ConfigError(kind=problem, index=index, entry=entry)
        if not tokens_equal(_field(entry, "token"), bearer_token):
            continue
        if not iprange.matches(source_ip, _field(entry, "ip_ranges")):
            continue
        if matched is not None:
            return Ambiguous(first=matched[0], second=index)
        matched = (index, entry)

    if matched is None:
        return NoMatch()

    index, entry = matched
    username = _field(entry, "username")
    session_id = derive_session_id(
        tenant_id,
        username,
        _field(entry, "token"),
        alg=alg,
        secret_key=secret_key,
    )
    return Authenticated(username=username, session_id=session_id, index=index)

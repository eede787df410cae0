"""Request authentication engine."""

from __future__ import annotations

import copy
from typing import Any, Optional

from .config import Settings
from .credentials import extract
from .matcher import evaluate
from .types import AuthenticationOutcome


class NetworkSessionEngine:
    """Evaluates requests against a snapshot of the principal table.

    The table is deep-copied at construction so that one evaluation never
    observes a half-updated configuration. Instances hold no mutable state
    and may be shared between threads.
    """

    def __init__(self, settings: Settings) -> None:
        self.tenant_id = settings.tenant_id
        self.table: tuple[Any, ...] = tuple(copy.deepcopy(settings.users))
        self._alg = settings.session.alg
        self._secret_key = settings.session.secret_key

    def evaluate(self, bearer_token: Optional[str], source_ip: str) -> AuthenticationOutcome:
        return evaluate(
            bearer_token,
            source_ip,
            self.table,
            self.tenant_id,
            alg=self._alg,
            secret_key=self._secret_key,
        )

    def authenticate(self, authorization: Optional[str], source_ip: str) -> AuthenticationOutcome:
        """Extract the credential from a raw header value and evaluate it."""

        return self.evaluate(extract(authorization), source_ip)

"""Capping of user rights for network sessions."""

from __future__ import annotations

from typing import Iterable, Optional


class RightsCap:
    """Limits rights to a configured allow-list; None means uncapped."""

    def __init__(self, allowed: Optional[Iterable[str]]) -> None:
        self.allowed = None if allowed is None else frozenset(allowed)

    def is_allowed(self, right: str) -> bool:
        if self.allowed is None:
            return True
        return right in self.allowed

    def cap(self, rights: Iterable[str]) -> list[str]:
        return [right for right in rights if self.is_allowed(right)]

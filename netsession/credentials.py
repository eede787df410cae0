"""Authorization header parsing."""

from __future__ import annotations

AUTH_HEADER = "Authorization"
AUTH_SCHEME = "NetworkSession"


def _scheme_matches(scheme: str) -> bool:
    # ASCII-only fold; str.lower() would also accept e.g. KELVIN SIGN for "k".
    return scheme.isascii() and scheme.lower() == AUTH_SCHEME.lower()


def extract(authorization: str | None) -> str | None:
    """Return the bearer value of a ``NetworkSession`` authorization header.

    Anything that is not this scheme yields None so that other
    authenticators get a chance at the request. The value after the first
    space is returned verbatim.
    """

    if authorization is None:
        return None
    scheme, sep, rest = authorization.partition(" ")
    if not sep or not _scheme_matches(scheme):
        return None
    return rest

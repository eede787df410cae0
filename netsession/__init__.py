"""netsession package authenticating API requests from trusted networks."""

from .config import Settings, load_settings
from .engine import NetworkSessionEngine
from .exceptions import AuthenticationRejected, BadConfig, RequestRejected
from .provider import IncomingRequest, NetworkSessionProvider, SessionProviderChain

__all__ = [
    "Settings",
    "load_settings",
    "NetworkSessionEngine",
    "NetworkSessionProvider",
    "SessionProviderChain",
    "IncomingRequest",
    "AuthenticationRejected",
    "BadConfig",
    "RequestRejected",
]

"""MCP stdio-to-HTTP bridge - relays line-delimited JSON-RPC to a streamable-HTTP MCP server."""

__version__ = "1.1.0"

from .bridge import LineBridge, RelayOutcome
from .config import BridgeConfig
from .exceptions import BridgeError, ConfigError, ProbeError, ResponseParseError, TransportError
from .lifecycle import LifecycleController, LifecycleState
from .normalizer import RawResponse, ResponseKind, normalize
from .session import SessionStore
from .transport import TransportClient

__all__ = [
    "BridgeConfig",
    "BridgeError",
    "ConfigError",
    "LifecycleController",
    "LifecycleState",
    "LineBridge",
    "ProbeError",
    "RawResponse",
    "RelayOutcome",
    "ResponseKind",
    "ResponseParseError",
    "SessionStore",
    "TransportClient",
    "TransportError",
    "normalize",
]

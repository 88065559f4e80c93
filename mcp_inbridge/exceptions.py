"""Exceptions for the MCP stdio bridge."""

from typing import Optional


class BridgeError(Exception):
    """Base exception for bridge errors."""
    pass


class ConfigError(BridgeError):
    """Required configuration is missing or invalid."""
    pass


class TransportError(BridgeError):
    """Relay call to the MCP server failed (timeout, connection, 5xx)."""
    def __init__(self, message, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProbeError(BridgeError):
    """Startup liveness check failed."""
    pass


class ResponseParseError(BridgeError):
    """Response body is neither JSON nor event-stream framed JSON."""
    def __init__(self, message, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

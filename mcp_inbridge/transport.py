"""HTTP transport to the streamable-HTTP MCP server."""

import logging
from typing import Any, Optional

import requests

from . import __version__
from .config import BridgeConfig
from .exceptions import ProbeError, TransportError
from .normalizer import SESSION_HEADER, RawResponse

logger = logging.getLogger(__name__)

ACCEPT = "application/json, text/event-stream"
USER_AGENT = f"mcp-inbridge/{__version__}"


class TransportClient:
    """
    Sends relay, liveness and teardown calls to the MCP server.

    Usage:
        transport = TransportClient(BridgeConfig(server_url="http://mcp:8080"))
        transport.probe()
        raw = transport.call({"jsonrpc": "2.0", "method": "initialize", "id": 1})
    """

    def __init__(self, config: BridgeConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.http = session if session is not None else requests.Session()
        self.http.verify = config.verify_ssl
        self.http.headers["User-Agent"] = USER_AGENT

    def _headers(self, session_id: Optional[str]) -> dict:
        headers = {"Content-Type": "application/json"}
        if session_id:
            headers[SESSION_HEADER] = session_id
        return headers

    def call(self, request: Any, session_id: Optional[str] = None) -> RawResponse:
        """
        POST one JSON-RPC message to the bridge endpoint.

        Args:
            request: Parsed JSON-RPC message, forwarded as-is
            session_id: Active session id, if any

        Returns:
            The raw reply for any status below 500

        Raises:
            TransportError: On timeout, connection failure or a 5xx status
        """
        url = self.config.endpoint_url
        headers = self._headers(session_id)
        headers["Accept"] = ACCEPT

        try:
            response = self.http.post(
                url,
                json=request,
                headers=headers,
                timeout=self.config.request_timeout,
            )
        except requests.exceptions.Timeout:
            raise TransportError(f"Request to {url} timed out after {self.config.request_timeout}s")
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Failed to connect to MCP server: {e}")
        except requests.exceptions.RequestException as e:
            raise TransportError(f"HTTP request to MCP server failed: {e}")

        if response.status_code >= 500:
            raise TransportError(
                f"MCP server error: HTTP {response.status_code} {response.reason or ''}".rstrip(),
                status_code=response.status_code,
            )

        return to_raw_response(response)

    def probe(self) -> None:
        """
        GET the liveness path.

        Raises:
            ProbeError: If the server is unreachable or unhealthy
        """
        url = self.config.health_url
        try:
            response = self.http.get(url, timeout=self.config.probe_timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise ProbeError(f"Health check failed: {e}")

    def terminate(self, session_id: str, timeout: Optional[float] = None) -> bool:
        """
        DELETE the session. Best effort; failures are logged, never raised.

        Returns:
            True if the server acknowledged the teardown
        """
        url = self.config.endpoint_url
        timeout = timeout if timeout is not None else self.config.teardown_timeout
        try:
            response = self.http.delete(url, headers=self._headers(session_id), timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Failed to terminate session {session_id}: {e}")
            return False
        logger.info("Session terminated")
        return True

    def close(self) -> None:
        self.http.close()


def to_raw_response(response: requests.Response) -> RawResponse:
    """Capture a requests response; JSON bodies are parsed when declared."""
    content_type = response.headers.get("Content-Type", "")
    if "charset" not in content_type.lower():
        # requests assumes ISO-8859-1 for text/* without a charset
        response.encoding = "utf-8"
    body: Any = response.text
    parsed = False
    if "application/json" in content_type.lower() and body.strip():
        try:
            body = response.json()
            parsed = True
        except ValueError:
            body = response.text
    return RawResponse(
        status_code=response.status_code, headers=response.headers, body=body, parsed=parsed
    )

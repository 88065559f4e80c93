"""
Bridge lifecycle: liveness check, bridging, session teardown.

    STARTING --probe ok--> RUNNING --signal/EOF--> DRAINING --> STOPPED
    STARTING --probe failed--> exit 1
"""

import logging
import signal
import sys
from enum import Enum
from typing import Iterable, Optional, TextIO

from . import __version__
from .bridge import LineBridge
from .config import BridgeConfig
from .exceptions import ProbeError
from .session import SessionStore
from .transport import TransportClient

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class LifecycleState(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class TerminationRequested(Exception):
    """Raised from the signal handler to break out of a blocking read."""
    def __init__(self, signum: int):
        super().__init__(f"signal {signum}")
        self.signum = signum


class LifecycleController:
    """Owns startup, the bridge loop and best-effort session teardown."""

    def __init__(
        self,
        config: BridgeConfig,
        transport: TransportClient,
        session: SessionStore,
        bridge: LineBridge,
        diagnostics: Optional[TextIO] = None,
    ):
        self.config = config
        self.transport = transport
        self.session = session
        self.bridge = bridge
        self.diagnostics = diagnostics if diagnostics is not None else sys.stderr
        self.state = LifecycleState.STARTING

    def _say(self, message: str = "") -> None:
        print(message, file=self.diagnostics, flush=True)

    def start(self) -> bool:
        """Run the liveness check. Returns True if the bridge may run."""
        try:
            self.transport.probe()
        except ProbeError as e:
            self._say(f"Cannot connect to MCP server: {self.config.server_url}")
            self._say(f"Error: {e}")
            self._say()
            self._say("Please check:")
            self._say("- Server URL is correct")
            self._say("- MCP server is running")
            self._say("- Network connectivity")
            return False

        self._say(f"MCP Server connected: {self.config.server_url}")
        self._say(f"mcp-inbridge v{__version__} - Streamable HTTP mode")
        self.state = LifecycleState.RUNNING
        return True

    def handle_signal(self, signum, frame=None) -> None:
        """
        Termination signal handler.

        A relay in flight on the reading thread is allowed to finish;
        otherwise the blocking read is interrupted right away. Repeated
        signals only log, so replies still being flushed are not cut short.
        """
        if self.state is not LifecycleState.RUNNING:
            return
        if self.bridge.stop_requested:
            logger.info(f"Received signal {signum}, shutdown already in progress")
            return
        logger.info(f"Received signal {signum}, shutting down")
        self.bridge.request_stop()
        if not self.bridge.busy:
            raise TerminationRequested(signum)

    def install_signal_handlers(self) -> None:
        signal.signal(signal.SIGINT, self.handle_signal)
        signal.signal(signal.SIGTERM, self.handle_signal)

    def drain(self) -> None:
        """Tear down the active session, if any. Never raises."""
        if self.state in (LifecycleState.DRAINING, LifecycleState.STOPPED):
            return
        self.state = LifecycleState.DRAINING
        session_id = self.session.current()
        if session_id:
            self.transport.terminate(session_id, timeout=self.config.teardown_timeout)
        self.transport.close()
        self.state = LifecycleState.STOPPED

    def run(
        self,
        input_stream: Optional[Iterable[str]] = None,
        output_stream: Optional[TextIO] = None,
        install_signals: bool = True,
    ) -> int:
        """
        Probe, bridge until EOF or a termination signal, then tear down.

        Returns:
            Process exit code
        """
        if not self.start():
            return EXIT_FAILURE

        if install_signals:
            self.install_signal_handlers()

        try:
            answered = self.bridge.run(input_stream, output_stream)
            logger.info(f"Input closed after {answered} line(s)")
        except TerminationRequested as e:
            logger.debug(f"Bridge loop interrupted by {e}")
        finally:
            self.drain()

        return EXIT_OK

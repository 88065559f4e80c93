"""
Line bridge: one JSON-RPC line in, one JSON-RPC line out.

Each stdin line is parsed, relayed to the MCP server and normalized. Any
failure along the way becomes a JSON-RPC internal error carrying the
request id (or null when the line could not be parsed), so no input line
is ever dropped.
"""

import json
import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, Optional, TextIO

from .normalizer import normalize
from .session import SessionStore
from .transport import TransportClient

logger = logging.getLogger(__name__)

INTERNAL_ERROR = -32603


@dataclass
class RelayOutcome:
    """Result of relaying one line: a JSON value or a failure message."""
    request_id: Any = None
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_message(self) -> Any:
        if self.ok:
            return self.value
        return error_response(self.request_id, self.error)


def error_response(request_id: Any, message: str, code: int = INTERNAL_ERROR) -> dict:
    """Build a JSON-RPC error response."""
    return {
        "jsonrpc": "2.0",
        "error": {"code": code, "message": message},
        "id": request_id,
    }


def _describe(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


class LineBridge:
    """Relays stdin JSON-RPC lines to the MCP server, in order."""

    def __init__(self, transport: TransportClient, session: SessionStore, max_workers: int = 1):
        self.transport = transport
        self.session = session
        self.max_workers = max_workers
        self._busy = threading.Event()
        self._stop = threading.Event()

    @property
    def busy(self) -> bool:
        """True while the reading thread holds a line or is writing replies."""
        return self._busy.is_set()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def request_stop(self) -> None:
        """Stop reading after the line in flight has been answered."""
        self._stop.set()

    def relay_line(self, line: str) -> RelayOutcome:
        """Parse, relay and normalize one line. Never raises."""
        request_id = None
        try:
            request = json.loads(line)
            if isinstance(request, dict):
                request_id = request.get("id")
                method = request.get("method")
            else:
                method = None

            session_id = self.session.current()
            logger.info(
                f"Request to: {self.transport.config.endpoint_url} | Method: {method} | "
                f"Session: {session_id or 'none'}"
            )

            raw = self.transport.call(request, session_id)
            self.session.adopt(raw.session_id)
            return RelayOutcome(request_id=request_id, value=normalize(raw))
        except Exception as e:
            logger.error(f"Relay failed (id={request_id}): {e}")
            return RelayOutcome(request_id=request_id, error=_describe(e))

    def process_line(self, line: str) -> str:
        """Relay one line and serialize the reply as a single output line."""
        # ASCII escapes keep lone surrogates from the input writable on any stdout
        return json.dumps(self.relay_line(line).to_message())

    def run(self, input_stream: Optional[Iterable[str]] = None, output_stream: Optional[TextIO] = None) -> int:
        """
        Bridge until EOF or a stop request.

        Returns:
            Number of lines answered
        """
        input_stream = input_stream if input_stream is not None else sys.stdin
        output_stream = output_stream if output_stream is not None else sys.stdout
        if self.max_workers > 1:
            return self._run_pooled(input_stream, output_stream)

        answered = 0
        line = None
        try:
            for line in input_stream:
                self._busy.set()
                try:
                    self._emit(output_stream, self.process_line(line.rstrip("\r\n")))
                    line = None
                finally:
                    self._busy.clear()
                answered += 1
                if self.stop_requested:
                    break
        except BaseException:
            # interrupted after a line was read but before it was relayed
            if line is not None and self.stop_requested:
                self._busy.set()
                try:
                    self._emit(output_stream, self.process_line(line.rstrip("\r\n")))
                finally:
                    self._busy.clear()
            raise
        return answered

    def _run_pooled(self, input_stream: Iterable[str], output_stream: TextIO) -> int:
        """
        Relay lines concurrently, emitting replies in input order.

        Each line is submitted tagged with its sequence number; replies
        are written strictly by sequence so output i always answers input i.
        Replies are flushed as soon as they are next in line, also while
        the reader waits for input. Relays already in flight when reading is
        interrupted still finish and are written before this returns or
        re-raises.
        """
        pending = {}
        emit_lock = threading.Lock()
        next_seq = 0
        answered = 0

        def drain(block: bool = False) -> None:
            nonlocal answered
            with emit_lock:
                while answered in pending and (block or pending[answered].done()):
                    self._emit(output_stream, pending.pop(answered).result())
                    answered += 1

        def submit(pool: ThreadPoolExecutor, text: str) -> None:
            nonlocal next_seq
            future = pool.submit(self.process_line, text.rstrip("\r\n"))
            with emit_lock:
                pending[next_seq] = future
                next_seq += 1
            future.add_done_callback(lambda _: drain())

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="relay") as pool:
            line = None
            try:
                for line in input_stream:
                    self._busy.set()
                    try:
                        submit(pool, line)
                        line = None
                    finally:
                        self._busy.clear()
                    if self.stop_requested:
                        break
            except BaseException:
                if line is not None and self.stop_requested:
                    submit(pool, line)
                raise
            finally:
                self._busy.set()
                try:
                    drain(block=True)
                finally:
                    self._busy.clear()
        return answered

    @staticmethod
    def _emit(output_stream: TextIO, text: str) -> None:
        output_stream.write(text + "\n")
        output_stream.flush()

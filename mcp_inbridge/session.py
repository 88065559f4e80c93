"""Process-wide MCP session identifier."""

import logging
from threading import Lock
from typing import Optional

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Holds at most one session id for the lifetime of the process.

    The first non-empty id offered wins; later ids are ignored so the
    bridge never switches sessions mid-stream.
    """

    def __init__(self):
        self._session_id: Optional[str] = None
        self._lock = Lock()

    def current(self) -> Optional[str]:
        """Active session id, or None."""
        return self._session_id

    def adopt(self, candidate: Optional[str]) -> bool:
        """
        Store `candidate` if no session is held yet.

        Returns:
            True if the candidate became the active session
        """
        if not candidate:
            return False
        with self._lock:
            if self._session_id is not None:
                if candidate != self._session_id:
                    logger.debug(f"Ignoring session id {candidate}, keeping {self._session_id}")
                return False
            self._session_id = candidate
        logger.info(f"Session established: {candidate}")
        return True

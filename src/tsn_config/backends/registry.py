"""Protocol identifier to backend registry.

Built once at start-up and handed to the orchestration engine; each test
builds its own.
"""
import logging
import threading
from typing import Optional

from .base import ProtocolBackend

logger = logging.getLogger(__name__)


class BackendRegistry:
    """One protocol backend per management protocol."""

    def __init__(self):
        self._backends: dict[str, ProtocolBackend] = {}
        self._lock = threading.Lock()

    def register(self, protocol: str, backend: ProtocolBackend) -> None:
        key = protocol.lower()
        with self._lock:
            if key in self._backends:
                raise ValueError(f"Backend for protocol '{key}' already registered")
            self._backends[key] = backend
        logger.info(f"Registered backend for protocol '{key}'")

    def get(self, protocol: Optional[str]) -> Optional[ProtocolBackend]:
        if not protocol:
            return None
        with self._lock:
            return self._backends.get(protocol.lower())

    def protocols(self) -> list[str]:
        with self._lock:
            return sorted(self._backends)

    def __contains__(self, protocol: str) -> bool:
        return self.get(protocol) is not None

"""Fixture-based simulation transport (no hardware required).

Loads scenarios from ``fixtures/simulation_scenarios.json``.  Each
scenario maps a PID (two hex digits) to the adapter response bytes and
may script send or receive failures for specific PIDs.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog

from elm327diag.errors import (
    TransportOpenError,
    TransportReceiveError,
    TransportSendError,
)
from elm327diag.transport.base import RawMessage, Transport

logger = structlog.get_logger(__name__)

_FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"


class SimulationTransport(Transport):
    """Answers Mode 1 requests from a JSON fixture scenario."""

    def __init__(self, scenario: str = "healthy") -> None:
        super().__init__()
        self._scenario_name = scenario
        self._scenario: Dict[str, Any] = {}
        self._open = False
        self._pending: Optional[str] = None
        self._sent: List[bytes] = []

    @property
    def sent_requests(self) -> List[bytes]:
        """Every request passed to :meth:`send`, in order."""
        return list(self._sent)

    # -- lifecycle ----------------------------------------------------------

    async def open(self) -> None:
        scenarios = _load_scenarios()
        if self._scenario_name not in scenarios:
            available = ", ".join(sorted(scenarios))
            raise TransportOpenError(
                f"Unknown simulation scenario '{self._scenario_name}'. "
                f"Available: {available}"
            )
        self._scenario = scenarios[self._scenario_name]
        self._open = True
        logger.info("simulation_opened", scenario=self._scenario_name)

    async def close(self) -> None:
        self._open = False
        self._pending = None

    def is_open(self) -> bool:
        return self._open

    # -- request / response -------------------------------------------------

    async def send(self, request: bytes) -> None:
        if not self._open:
            raise TransportSendError("SimulationTransport is not open")
        self._sent.append(request)
        pid = _pid_of(request)
        if pid in self._scenario.get("send_failures", []):
            raise TransportSendError(f"simulated send failure for PID {pid}")
        self._pending = pid

    async def receive(self) -> RawMessage:
        if not self._open:
            raise TransportReceiveError("SimulationTransport is not open")
        pid, self._pending = self._pending, None
        if pid is None:
            raise TransportReceiveError("no request pending")
        if pid in self._scenario.get("receive_failures", []):
            raise TransportReceiveError(
                f"timed out after {self.timeout_ms} ms waiting for PID {pid}"
            )
        response = self._scenario.get("responses", {}).get(pid)
        if response is None:
            raise TransportReceiveError(f"NO DATA for PID {pid}")
        return RawMessage(bytes.fromhex(response))

    async def flush(self) -> None:
        self._pending = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_scenarios_cache: Optional[Dict[str, Any]] = None


def _load_scenarios() -> Dict[str, Any]:
    global _scenarios_cache
    if _scenarios_cache is None:
        path = _FIXTURES_DIR / "simulation_scenarios.json"
        with open(path, encoding="utf-8") as fh:
            _scenarios_cache = json.load(fh)
    return _scenarios_cache


def _pid_of(request: bytes) -> str:
    """Extract the PID hex digits from an encoded request like ``b"010C\\r"``."""
    text = request.decode("ascii").strip().replace(" ", "").upper()
    return text[2:4]

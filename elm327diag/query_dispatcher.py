"""One acquisition sweep over the active catalog entries.

For each active entry, in slot order: build a Mode 1 request, send it,
wait for the response, decode payload bytes 2 and 3, release the
response, emit the reading, flush the adapter.  The first transport
failure ends the sweep; readings gathered so far are kept and the error
is handed back in the :class:`SweepResult`.  Nothing is retried.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import structlog

from elm327diag.errors import TransportError
from elm327diag.pid_catalog import PidCatalog, PidDefinition, Unit
from elm327diag.report_writer import ReportWriter
from elm327diag.transport.base import OBD_MODE_CURRENT_DATA, Transport
from elm327diag.unit_converter import decode

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Output dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Reading:
    """A decoded value for one catalog entry."""

    name: str
    value: float
    request_code: int
    unit: Optional[Unit] = None


@dataclass(frozen=True)
class SweepResult:
    """Readings in production order plus the error that ended the sweep."""

    readings: Tuple[Reading, ...]
    error: Optional[TransportError] = None

    @property
    def ok(self) -> bool:
        """Return ``True`` when every active entry was read."""
        return self.error is None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def query_pid(transport: Transport, entry: PidDefinition) -> Reading:
    """Run one request/response/decode cycle for *entry*.

    Raises ``TransportSendError`` / ``TransportReceiveError`` unchanged.
    """
    request = transport.build_request(OBD_MODE_CURRENT_DATA, entry.request_code)
    await transport.send(request)
    message = await transport.receive()
    try:
        a, b = message.payload_bytes()
        value = decode(entry.decode_rule, a, b)
    finally:
        transport.release_message(message)
    return Reading(
        name=entry.name,
        value=value,
        request_code=entry.request_code,
        unit=entry.unit,
    )


async def run_sweep(
    catalog: PidCatalog,
    transport: Transport,
    writer: Optional[ReportWriter] = None,
) -> SweepResult:
    """Query every active entry of *catalog* through *transport*.

    Parameters
    ----------
    catalog:
        Built catalog; only active entries are queried.
    transport:
        An opened transport.
    writer:
        Optional open report; each reading is written as soon as it is
        decoded.  ``OutputSinkError`` from the writer propagates.
    """
    readings: List[Reading] = []
    logger.info("sweep_started")

    for entry in catalog.active_entries():
        try:
            reading = await query_pid(transport, entry)
        except TransportError as exc:
            return _aborted(entry, readings, exc)

        readings.append(reading)
        if writer is not None:
            writer.write(reading.name, reading.value)
        logger.debug(
            "pid_decoded",
            pid=f"{reading.request_code:02X}",
            name=reading.name,
            value=reading.value,
            unit=reading.unit.value if reading.unit else None,
        )

        try:
            await transport.flush()
        except TransportError as exc:
            return _aborted(entry, readings, exc)

    logger.info("sweep_finished", readings=len(readings))
    return SweepResult(readings=tuple(readings))


def _aborted(
    entry: PidDefinition, readings: List[Reading], exc: TransportError
) -> SweepResult:
    logger.error(
        "sweep_aborted",
        pid=f"{entry.request_code:02X}",
        name=entry.name,
        error_kind=type(exc).__name__,
        error=str(exc),
        completed=len(readings),
    )
    return SweepResult(readings=tuple(readings), error=exc)

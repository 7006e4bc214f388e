"""Top-level orchestration of a single diagnostics run."""

from __future__ import annotations

import structlog

from elm327diag.config import DiagSettings
from elm327diag.pid_catalog import build_catalog
from elm327diag.query_dispatcher import SweepResult, run_sweep
from elm327diag.report_writer import ReportWriter
from elm327diag.transport.base import Transport

logger = structlog.get_logger(__name__)


def create_transport(settings: DiagSettings) -> Transport:
    """Factory: return the right transport for the current config.

    ``SerialTransport`` is imported lazily so simulation mode works
    without pyserial installed.
    """
    if settings.is_simulation:
        from elm327diag.transport.simulation import SimulationTransport

        return SimulationTransport(scenario=settings.elm_sim_scenario)

    from elm327diag.transport.serial_elm import SerialTransport

    return SerialTransport(
        device=settings.elm_device,
        baudrate=settings.elm_baudrate,
        protocol=settings.elm_protocol,
    )


async def run_diagnostics(settings: DiagSettings) -> SweepResult:
    """Open the adapter and the report, run one sweep, close both.

    Raises the sweep's transport error after cleanup, so a partial
    report is always closed before the caller sees the failure.
    """
    transport = create_transport(settings)
    await transport.open()
    try:
        transport.set_timeout(settings.elm_timeout_ms)
        catalog = build_catalog()
        logger.info(
            "catalog_built",
            slots=len(catalog),
            active=sum(1 for _ in catalog.active_entries()),
        )
        with ReportWriter(settings.output_file) as writer:
            result = await run_sweep(catalog, transport, writer)
    finally:
        await transport.close()

    if result.error is not None:
        raise result.error
    return result

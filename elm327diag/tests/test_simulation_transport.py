"""Tests for elm327diag.transport.simulation -- SimulationTransport."""

from __future__ import annotations

import pytest

from elm327diag.errors import (
    TransportOpenError,
    TransportReceiveError,
    TransportSendError,
)
from elm327diag.transport.base import OBD_MODE_CURRENT_DATA
from elm327diag.transport.simulation import SimulationTransport


async def _open(scenario: str) -> SimulationTransport:
    transport = SimulationTransport(scenario=scenario)
    await transport.open()
    return transport


@pytest.mark.asyncio
async def test_open_close_lifecycle() -> None:
    transport = SimulationTransport(scenario="healthy")
    assert not transport.is_open()

    await transport.open()
    assert transport.is_open()

    await transport.close()
    assert not transport.is_open()


@pytest.mark.asyncio
async def test_unknown_scenario_raises() -> None:
    transport = SimulationTransport(scenario="nonexistent")
    with pytest.raises(TransportOpenError, match="Unknown simulation scenario"):
        await transport.open()


@pytest.mark.asyncio
async def test_request_response_cycle() -> None:
    transport = await _open("healthy")
    request = transport.build_request(OBD_MODE_CURRENT_DATA, 0x0C)
    assert request == b"010C\r"

    await transport.send(request)
    message = await transport.receive()
    assert message.data == bytes([0x41, 0x0C, 0x1A, 0x2C])
    assert message.payload_bytes() == (0x1A, 0x2C)
    assert transport.sent_requests == [b"010C\r"]


@pytest.mark.asyncio
async def test_receive_without_send_raises() -> None:
    transport = await _open("healthy")
    with pytest.raises(TransportReceiveError, match="no request pending"):
        await transport.receive()


@pytest.mark.asyncio
async def test_flush_discards_pending_request() -> None:
    transport = await _open("healthy")
    await transport.send(transport.build_request(OBD_MODE_CURRENT_DATA, 0x05))
    await transport.flush()
    with pytest.raises(TransportReceiveError):
        await transport.receive()


@pytest.mark.asyncio
async def test_scripted_receive_failure() -> None:
    transport = await _open("receive_timeout")
    transport.set_timeout(3000)
    await transport.send(transport.build_request(OBD_MODE_CURRENT_DATA, 0x0C))
    with pytest.raises(TransportReceiveError, match="3000 ms"):
        await transport.receive()


@pytest.mark.asyncio
async def test_scripted_send_failure() -> None:
    transport = await _open("send_failure")
    with pytest.raises(TransportSendError):
        await transport.send(transport.build_request(OBD_MODE_CURRENT_DATA, 0x05))


@pytest.mark.asyncio
async def test_unsupported_pid_is_no_data() -> None:
    transport = await _open("no_fuel_pressure")
    await transport.send(transport.build_request(OBD_MODE_CURRENT_DATA, 0x0A))
    with pytest.raises(TransportReceiveError, match="NO DATA"):
        await transport.receive()


@pytest.mark.asyncio
async def test_send_while_closed_raises() -> None:
    transport = SimulationTransport(scenario="healthy")
    with pytest.raises(TransportSendError, match="not open"):
        await transport.send(b"0105\r")


def test_set_timeout_rejects_non_positive() -> None:
    transport = SimulationTransport()
    with pytest.raises(ValueError):
        transport.set_timeout(0)

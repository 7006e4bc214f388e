"""Shared pytest fixtures for elm327diag tests."""

from __future__ import annotations

from typing import Callable, Dict, Generator, List, Optional, Union

import pytest

from elm327diag.errors import TransportReceiveError, TransportSendError
from elm327diag.pid_catalog import DataType, PidCatalog, PidDefinition, Unit
from elm327diag.transport.base import RawMessage, Transport
from elm327diag.unit_converter import DecodeRule

Script = Dict[int, Union[bytes, Exception]]


class ScriptedTransport(Transport):
    """In-memory transport answering from a ``{pid: response}`` script.

    A response may be an exception instance: ``TransportSendError`` is
    raised from :meth:`send`, anything else from :meth:`receive`.
    """

    def __init__(self, script: Script) -> None:
        super().__init__()
        self._script = script
        self._pending: Optional[int] = None
        self.opened = False
        self.closed = False
        self.calls: List[str] = []
        self.released: List[RawMessage] = []

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    def is_open(self) -> bool:
        return self.opened and not self.closed

    async def send(self, request: bytes) -> None:
        pid = int(request.decode("ascii").strip()[2:4], 16)
        self.calls.append(f"send:{pid:02X}")
        outcome = self._script.get(pid)
        if isinstance(outcome, TransportSendError):
            raise outcome
        self._pending = pid

    async def receive(self) -> RawMessage:
        pid, self._pending = self._pending, None
        self.calls.append(f"receive:{pid:02X}")
        outcome = self._script.get(pid) if pid is not None else None
        if outcome is None:
            raise TransportReceiveError("NO DATA")
        if isinstance(outcome, Exception):
            raise outcome
        return RawMessage(outcome)

    async def flush(self) -> None:
        self.calls.append("flush")

    def release_message(self, message: RawMessage) -> None:
        self.released.append(message)


@pytest.fixture(autouse=True)
def _reset_scenario_cache() -> Generator[None, None, None]:
    """Clear the simulation scenario cache between tests."""
    from elm327diag.transport import simulation

    simulation._scenarios_cache = None
    yield
    simulation._scenarios_cache = None


@pytest.fixture()
def make_transport() -> Callable[[Script], ScriptedTransport]:
    return ScriptedTransport


@pytest.fixture()
def three_pid_catalog() -> PidCatalog:
    """Coolant temperature, engine speed, vehicle speed -- plus one inactive slot."""
    return PidCatalog(
        (
            PidDefinition(
                request_code=0x05,
                name="Engine Coolant Temperature",
                payload_width=1,
                valid_range=(-40, 215),
                unit=Unit.CELSIUS,
            ),
            PidDefinition(request_code=0x06, name="Short Term Fuel Trim (Bank 1)"),
            PidDefinition(
                request_code=0x0C,
                name="Engine Speed",
                payload_width=2,
                datatype=DataType.REAL,
                valid_range=(0, 16383.75),
                unit=Unit.RPM,
                decode_rule=DecodeRule.RPM,
            ),
            PidDefinition(
                request_code=0x0D,
                name="Vehicle Speed",
                payload_width=1,
                valid_range=(0, 255),
                unit=Unit.KILOMETERS_PER_HOUR,
            ),
        )
    )


@pytest.fixture()
def three_pid_script() -> Script:
    return {
        0x05: bytes([0x41, 0x05, 95, 0]),
        0x0C: bytes([0x41, 0x0C, 0x1A, 0x2C]),
        0x0D: bytes([0x41, 0x0D, 60, 0]),
    }


class DiskFullHandle:
    """Wraps a real file handle; ``write`` fails once *ok_writes* are used up."""

    def __init__(self, fh, ok_writes: int) -> None:
        self._fh = fh
        self._ok_writes = ok_writes

    def write(self, text: str) -> int:
        if self._ok_writes <= 0:
            raise OSError(28, "No space left on device")
        self._ok_writes -= 1
        return self._fh.write(text)

    def flush(self) -> None:
        self._fh.flush()

    def close(self) -> None:
        self._fh.close()


@pytest.fixture()
def disk_full_handle() -> type:
    return DiskFullHandle

"""SerialTransport -- ELM327 adapter over pyserial.

``pyserial`` is imported lazily inside :meth:`SerialTransport.open` so
that simulation mode works without it installed.  All blocking I/O is
offloaded to a thread via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import re
import time
from typing import Any, List, Optional

import structlog

from elm327diag.errors import (
    TransportOpenError,
    TransportReceiveError,
    TransportSendError,
)
from elm327diag.transport.base import PAYLOAD_OFFSET, RawMessage, Transport

logger = structlog.get_logger(__name__)

_PROMPT = b">"
_INIT_TIMEOUT_S = 5.0
_READ_SLICE_S = 0.05

# Adapter replies that mean "no usable answer".
_ERROR_MARKERS = (
    "NO DATA",
    "UNABLE TO CONNECT",
    "STOPPED",
    "CAN ERROR",
    "BUS ERROR",
    "BUS BUSY",
    "DATA ERROR",
    "BUFFER FULL",
    "?",
)

_HEX_LINE = re.compile(r"^(?:[0-9A-F]{2})+$")


class SerialTransport(Transport):
    """Talks to an ELM327 on a serial device (USB, RFCOMM or pty)."""

    def __init__(self, device: str, baudrate: int = 38400, protocol: str = "0") -> None:
        super().__init__()
        self._device = device
        self._baudrate = baudrate
        self._protocol = protocol
        self._serial: Any = None  # pyserial module (lazy)
        self._port: Any = None  # serial.Serial instance
        self._pending: Optional[bytes] = None
        self._rx = bytearray()

    # -- lifecycle ----------------------------------------------------------

    async def open(self) -> None:
        self._serial = _import_serial()
        logger.info("connection_initialising", device=self._device, baudrate=self._baudrate)
        try:
            self._port = await asyncio.to_thread(
                self._serial.Serial,
                self._device,
                baudrate=self._baudrate,
                timeout=_READ_SLICE_S,
            )
        except (self._serial.SerialException, OSError, ValueError) as exc:
            raise TransportOpenError(f"cannot open {self._device}: {exc}") from exc

        try:
            for command in _init_commands(self._protocol):
                reply = await asyncio.to_thread(self._command, command)
                logger.debug("elm_init_reply", command=command, reply=reply)
                if reply is None or "?" in _reply_lines(reply):
                    raise TransportOpenError(
                        f"adapter rejected {command!r} (reply: {reply!r})"
                    )
        except (self._serial.SerialException, OSError) as exc:
            await self.close()
            raise TransportOpenError(f"adapter initialisation failed: {exc}") from exc
        except TransportOpenError:
            await self.close()
            raise
        logger.info("connection_ready", device=self._device, protocol=self._protocol)

    async def close(self) -> None:
        if self._port is not None:
            port, self._port = self._port, None
            await asyncio.to_thread(port.close)
        self._pending = None
        self._rx.clear()

    def is_open(self) -> bool:
        return self._port is not None and bool(getattr(self._port, "is_open", True))

    # -- request / response -------------------------------------------------

    async def send(self, request: bytes) -> None:
        if not self.is_open():
            raise TransportSendError(f"{self._device} is not open")
        try:
            await asyncio.to_thread(self._write, request)
        except (self._serial.SerialException, OSError) as exc:
            raise TransportSendError(f"write to {self._device} failed: {exc}") from exc
        self._pending = request

    async def receive(self) -> RawMessage:
        if not self.is_open():
            raise TransportReceiveError(f"{self._device} is not open")
        request, self._pending = self._pending, None
        if request is None:
            raise TransportReceiveError("no request pending")
        try:
            text = await asyncio.to_thread(self._read_until_prompt, self.timeout_ms / 1000)
        except (self._serial.SerialException, OSError) as exc:
            raise TransportReceiveError(f"read from {self._device} failed: {exc}") from exc
        if text is None:
            raise TransportReceiveError(
                f"timed out after {self.timeout_ms} ms waiting for {request!r}"
            )
        return parse_response(text, request)

    async def flush(self) -> None:
        if not self.is_open():
            return
        try:
            await asyncio.to_thread(self._reset_buffers)
        except (self._serial.SerialException, OSError) as exc:
            raise TransportSendError(f"flush of {self._device} failed: {exc}") from exc

    def release_message(self, message: RawMessage) -> None:
        self._rx.clear()

    # -- internal (run in worker thread) ------------------------------------

    def _write(self, data: bytes) -> None:
        self._port.write(data)
        self._port.flush()

    def _reset_buffers(self) -> None:
        self._port.reset_input_buffer()
        self._port.reset_output_buffer()
        self._rx.clear()

    def _read_until_prompt(self, timeout_s: float) -> Optional[str]:
        """Accumulate bytes until the ``>`` prompt; ``None`` on timeout."""
        self._rx.clear()
        deadline = time.monotonic() + timeout_s
        while time.monotonic() < deadline:
            chunk = self._port.read(self._port.in_waiting or 1)
            if chunk:
                self._rx.extend(chunk)
                if _PROMPT in self._rx:
                    return self._rx.decode("ascii", errors="ignore")
        return None

    def _command(self, command: str) -> Optional[str]:
        """Send an AT command and return the adapter's reply text."""
        self._reset_buffers()
        self._write(f"{command}\r".encode("ascii"))
        return self._read_until_prompt(_INIT_TIMEOUT_S)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _import_serial() -> Any:
    """Lazy-import pyserial so it's only needed for real adapters."""
    try:
        import serial  # type: ignore[import-untyped]
        return serial
    except ImportError as exc:
        raise ImportError(
            "pyserial is required for serial adapters. "
            "Install it with: pip install pyserial"
        ) from exc


def _init_commands(protocol: str) -> List[str]:
    # reset, echo off, linefeeds off, headers off, select protocol
    return ["ATZ", "ATE0", "ATL0", "ATH0", f"ATSP{protocol}"]


def _reply_lines(text: str) -> List[str]:
    cleaned = text.replace(">", "").replace("\r", "\n")
    return [line.strip() for line in cleaned.split("\n") if line.strip()]


def parse_response(text: str, request: bytes) -> RawMessage:
    """Turn the adapter's reply to *request* into a :class:`RawMessage`.

    Accepts spaced (``41 0C 1A 2C``) and compact (``410C1A2C``) hex.
    Raises ``TransportReceiveError`` for error replies, empty replies, or
    replies that do not echo the requested mode and PID.
    """
    req = request.decode("ascii").strip().replace(" ", "").upper()
    mode, pid = int(req[0:2], 16), int(req[2:4], 16)

    for line in _reply_lines(text):
        upper = line.upper()
        if upper.startswith("BUS INIT"):
            if "ERROR" in upper:
                raise TransportReceiveError(f"adapter replied {line!r} to {req}")
            continue
        if upper.startswith("SEARCHING"):
            continue
        if any(marker in upper for marker in _ERROR_MARKERS):
            raise TransportReceiveError(f"adapter replied {line!r} to {req}")
        compact = upper.replace(" ", "")
        if not _HEX_LINE.match(compact):
            continue
        data = bytes.fromhex(compact)
        if len(data) > PAYLOAD_OFFSET and data[0] == mode + 0x40 and data[1] == pid:
            return RawMessage(data)

    raise TransportReceiveError(f"no valid response to {req} in {text!r}")

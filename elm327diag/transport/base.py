"""Abstract base class for ELM327 transports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

from elm327diag.errors import TransportReceiveError

OBD_MODE_CURRENT_DATA = 0x01

# Mode and PID echo precede the payload in every Mode 1 response.
PAYLOAD_OFFSET = 2


@dataclass(frozen=True)
class RawMessage:
    """One adapter response, e.g. ``41 0C 1A 2C``."""

    data: bytes

    def payload_bytes(self) -> Tuple[int, int]:
        """Return the two bytes after the mode/PID echo.

        Single-byte responses read the missing second byte as ``0``.
        Raises ``TransportReceiveError`` when there is no payload at all.
        """
        if len(self.data) <= PAYLOAD_OFFSET:
            raise TransportReceiveError(
                f"response {self.data.hex(' ')!r} carries no payload"
            )
        a = self.data[PAYLOAD_OFFSET]
        b = self.data[PAYLOAD_OFFSET + 1] if len(self.data) > PAYLOAD_OFFSET + 1 else 0
        return a, b


class Transport(ABC):
    """Narrow request/response interface to an ELM327 adapter.

    Concrete implementations: ``SimulationTransport`` (fixture-based) and
    ``SerialTransport`` (pyserial hardware wrapper).
    """

    def __init__(self) -> None:
        self._timeout_ms = 3000

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    def set_timeout(self, milliseconds: int) -> None:
        """Set the receive timeout applied to every subsequent request."""
        if milliseconds <= 0:
            raise ValueError(f"timeout must be positive, got {milliseconds}")
        self._timeout_ms = milliseconds

    def build_request(self, mode: int, pid: int) -> bytes:
        """Encode a request the way ELM327 expects it: ASCII hex + CR."""
        return f"{mode:02X}{pid:02X}\r".encode("ascii")

    def release_message(self, message: RawMessage) -> None:
        """Drop any adapter-side state held for *message*."""

    # -- lifecycle ----------------------------------------------------------

    @abstractmethod
    async def open(self) -> None:
        """Open and initialise the adapter.

        Raises ``TransportOpenError`` on failure.
        """

    @abstractmethod
    async def close(self) -> None:
        """Shut the adapter down.  Safe to call more than once."""

    @abstractmethod
    def is_open(self) -> bool:
        """Return ``True`` while the adapter is usable."""

    # -- request / response -------------------------------------------------

    @abstractmethod
    async def send(self, request: bytes) -> None:
        """Dispatch *request*.  Raises ``TransportSendError`` on failure."""

    @abstractmethod
    async def receive(self) -> RawMessage:
        """Wait up to :attr:`timeout_ms` for the response.

        Raises ``TransportReceiveError`` when nothing valid arrives.
        """

    @abstractmethod
    async def flush(self) -> None:
        """Discard any pending input so it cannot leak into the next query."""

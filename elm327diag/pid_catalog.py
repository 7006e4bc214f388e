"""Static catalog of the OBD-II Mode 1 PIDs this tool knows about.

The catalog is a fixed sequence of 25 slots; slot *n* describes PID *n*.
Only slots with a non-zero payload width are *active* and get queried.
The remaining slots keep their SAE J1979 name for reference but are
never sent to the vehicle.

``valid_range`` and ``datatype`` are informational: decoding does not
clamp or round.  Ranges are expressed in the units the vehicle reports
(kPa for the pressure PIDs).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from elm327diag.unit_converter import DecodeRule

SLOT_COUNT = 25


class DataType(str, Enum):
    """Numeric domain of a decoded value."""

    INTEGER = "integer"
    REAL = "real"


class Unit(str, Enum):
    """Physical unit of a decoded value."""

    PERCENT = "%"
    RPM = "rpm"
    CELSIUS = "degC"
    PASCAL = "Pa"
    KILOMETERS_PER_HOUR = "km/h"


@dataclass(frozen=True)
class PidDefinition:
    """Metadata for a single Mode 1 parameter."""

    request_code: int
    name: str
    payload_width: int = 0  # 0 = placeholder slot, never queried
    datatype: DataType = DataType.INTEGER
    valid_range: Optional[Tuple[float, float]] = None  # None for bit-encoded PIDs
    unit: Optional[Unit] = None
    decode_rule: DecodeRule = DecodeRule.IDENTITY

    @property
    def active(self) -> bool:
        """Return ``True`` when the slot is queried during a sweep."""
        return self.payload_width > 0


class PidCatalog:
    """Read-only, ordered collection of :class:`PidDefinition` slots."""

    def __init__(self, entries: Tuple[PidDefinition, ...]) -> None:
        self._entries = tuple(entries)
        self._by_code: Dict[int, PidDefinition] = {
            entry.request_code: entry for entry in self._entries
        }

    def __iter__(self) -> Iterator[PidDefinition]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PidCatalog):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    @property
    def entries(self) -> Tuple[PidDefinition, ...]:
        return self._entries

    def active_entries(self) -> Iterator[PidDefinition]:
        """Yield active entries in ascending slot order.

        Each call returns a fresh generator, so the sequence can be
        walked as many times as needed.
        """
        return (entry for entry in self._entries if entry.active)

    def get(self, request_code: int) -> Optional[PidDefinition]:
        """Return the definition for *request_code*, or ``None``."""
        return self._by_code.get(request_code)


# ---------------------------------------------------------------------------
# Reference names (SAE J1979, PIDs 0x00 - 0x18)
# ---------------------------------------------------------------------------

_REFERENCE_NAMES: Tuple[str, ...] = (
    "PIDs Supported [01 - 20]",
    "Monitor Status Since DTCs Cleared",
    "Freeze DTC",
    "Fuel System Status",
    "Calculated Engine Load",
    "Engine Coolant Temperature",
    "Short Term Fuel Trim (Bank 1)",
    "Long Term Fuel Trim (Bank 1)",
    "Short Term Fuel Trim (Bank 2)",
    "Long Term Fuel Trim (Bank 2)",
    "Fuel Gauge Pressure",
    "Intake Manifold Absolute Pressure",
    "Engine Speed",
    "Vehicle Speed",
    "Timing Advance",
    "Intake Air Temperature",
    "Mass Air Flow Sensor Air Flow Rate",
    "Throttle Position",
    "Commanded Secondary Air Status",
    "Oxygen Sensors Present (2 Banks)",
    "Oxygen Sensor 1 (Voltage)",
    "Oxygen Sensor 2 (Voltage)",
    "Oxygen Sensor 3 (Voltage)",
    "Oxygen Sensor 4 (Voltage)",
    "Oxygen Sensor 5 (Voltage)",
)

# Parameters actually queried during a sweep.
_SUPPORTED: Tuple[PidDefinition, ...] = (
    PidDefinition(
        request_code=0x03,
        name="Fuel System Status",
        payload_width=1,
        datatype=DataType.INTEGER,
    ),
    PidDefinition(
        request_code=0x04,
        name="Calculated Engine Load",
        payload_width=1,
        datatype=DataType.INTEGER,
        valid_range=(0, 100),
        unit=Unit.PERCENT,
    ),
    PidDefinition(
        request_code=0x05,
        name="Engine Coolant Temperature",
        payload_width=1,
        datatype=DataType.INTEGER,
        valid_range=(-40, 215),
        unit=Unit.CELSIUS,
    ),
    PidDefinition(
        request_code=0x0A,
        name="Fuel Gauge Pressure",
        payload_width=1,
        datatype=DataType.INTEGER,
        valid_range=(0, 765),
        unit=Unit.PASCAL,
    ),
    PidDefinition(
        request_code=0x0B,
        name="Intake Manifold Absolute Pressure",
        payload_width=1,
        datatype=DataType.INTEGER,
        valid_range=(0, 255),
        unit=Unit.PASCAL,
    ),
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
        datatype=DataType.INTEGER,
        valid_range=(0, 255),
        unit=Unit.KILOMETERS_PER_HOUR,
    ),
)


def build_catalog() -> PidCatalog:
    """Build the slot table.

    Pure function of module constants, so repeated calls return equal
    catalogs.
    """
    supported = {entry.request_code: entry for entry in _SUPPORTED}
    slots = tuple(
        supported.get(code, PidDefinition(request_code=code, name=_REFERENCE_NAMES[code]))
        for code in range(SLOT_COUNT)
    )
    return PidCatalog(slots)

"""elm327diag -- one-shot OBD-II Mode 1 diagnostics for ELM327 adapters.

Queries a fixed catalog of current-data PIDs through an ELM327 serial
adapter (or the fixture-based simulator) and writes one
``<name>, <value>`` line per decoded reading to a text report.
"""

__version__ = "0.0.1"

"""Adapter transport layer.

Provides the ``Transport`` ABC with two concrete implementations:

* ``SimulationTransport`` -- fixture-based, no hardware required.
* ``SerialTransport``     -- ELM327 over pyserial (lazy-imported).
"""

from elm327diag.transport.base import OBD_MODE_CURRENT_DATA, RawMessage, Transport

__all__ = ["OBD_MODE_CURRENT_DATA", "RawMessage", "Transport"]

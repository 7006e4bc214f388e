"""Runtime configuration via environment variables.

Uses pydantic-settings so every field can be overridden with an env var
(``ELM_DEVICE``, ``OUTPUT_FILE``, ``LOG_LEVEL`` ...) or a ``.env`` file.
Command-line flags are applied on top by ``__main__``.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class DiagSettings(BaseSettings):
    """elm327diag runtime settings."""

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    # -- adapter ------------------------------------------------------------
    elm_device: str = Field(
        default="/dev/pts/8",
        description="Serial device of the ELM327, or 'sim' for simulation mode",
    )
    elm_baudrate: int = Field(default=38400, description="Serial baud rate")
    elm_timeout_ms: int = Field(
        default=3000,
        gt=0,
        description="Receive timeout applied to every request",
    )
    elm_protocol: str = Field(
        default="0",
        description="ELM327 protocol number for ATSP ('0' = automatic)",
    )

    # -- simulation ---------------------------------------------------------
    elm_sim_scenario: str = Field(
        default="healthy",
        description="Simulation scenario name (from simulation_scenarios.json)",
    )

    # -- output -------------------------------------------------------------
    output_file: str = Field(
        default="carstats.csv",
        description="Path of the report written by the sweep",
    )

    # -- behaviour ----------------------------------------------------------
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="console",
        description="Log output format: 'console' or 'json'",
    )

    # -- derived ------------------------------------------------------------
    @property
    def is_simulation(self) -> bool:
        """Return ``True`` when the run uses the simulation transport."""
        return self.elm_device.strip().lower() == "sim"

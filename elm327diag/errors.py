"""Error kinds surfaced by a diagnostics run.

Every error carries the process exit status ``__main__`` uses for it.
Send failures exit with 1 and receive failures with 2 so wrapper
scripts can tell them apart.
"""

from __future__ import annotations


class DiagError(Exception):
    """Base class for all elm327diag failures."""

    exit_code: int = 1


class UsageError(DiagError):
    """Malformed or absent command-line arguments."""

    exit_code = 1


class OutputSinkError(DiagError):
    """The report file could not be opened or written."""

    exit_code = 3


class TransportError(DiagError):
    """Base class for adapter-level failures."""


class TransportOpenError(TransportError):
    """The adapter could not be opened or initialised."""

    exit_code = 4


class TransportSendError(TransportError):
    """A request could not be dispatched to the adapter."""

    exit_code = 1


class TransportReceiveError(TransportError):
    """No valid response arrived within the configured timeout."""

    exit_code = 2

"""Line-oriented report sink.

Writes one ``<name>, <value>`` line per reading, value rendered like C's
``%f``.  No header row.  Every line is flushed as it is written so an
aborted sweep still leaves a readable prefix on disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import IO, Optional, Union

import structlog

from elm327diag.errors import OutputSinkError

logger = structlog.get_logger(__name__)


def format_line(name: str, value: float) -> str:
    return f"{name}, {value:f}\n"


class ReportWriter:
    """Context-managed text report.  Opens on enter, closes once on exit."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._fh: Optional[IO[str]] = None
        self._lines = 0

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lines_written(self) -> int:
        return self._lines

    def open(self) -> None:
        try:
            self._fh = open(self._path, "w", encoding="utf-8", newline="\n")
        except OSError as exc:
            raise OutputSinkError(f"cannot open report {self._path}: {exc}") from exc

    def close(self) -> None:
        if self._fh is None:
            return
        fh, self._fh = self._fh, None
        try:
            fh.close()
        except OSError as exc:
            raise OutputSinkError(f"cannot close report {self._path}: {exc}") from exc
        logger.info("report_closed", path=str(self._path), lines=self._lines)

    def write(self, name: str, value: float) -> None:
        """Append one reading."""
        if self._fh is None:
            raise OutputSinkError(f"report {self._path} is not open")
        try:
            self._fh.write(format_line(name, value))
            self._fh.flush()
        except OSError as exc:
            raise OutputSinkError(f"cannot write report {self._path}: {exc}") from exc
        self._lines += 1

    def __enter__(self) -> "ReportWriter":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

from __future__ import annotations

import logging
import sys
from typing import Protocol, TextIO


_LOGGER_NAME = "stacked_bar_chart"
_COLORS = {
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
}
_RESET = "\x1b[0m"


class ChartLog(Protocol):
    def output(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class _PrefixFormatter(logging.Formatter):
    def __init__(self, *, color: bool) -> None:
        super().__init__("%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        text = f"{record.levelname.lower()}: {super().format(record)}"
        color = _COLORS.get(record.levelno) if self.color else None
        if color:
            return f"{color}{text}{_RESET}"
        return text


class ConsoleChartLog:
    """Regular output on stdout, diagnostics on stderr via ``logging``."""

    def __init__(
        self,
        *,
        color: bool = True,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self._stdout = stdout if stdout is not None else sys.stdout
        self._logger = logging.getLogger(_LOGGER_NAME)
        self._logger.propagate = False
        self._logger.setLevel(logging.INFO)
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
        self._formatter = _PrefixFormatter(color=color)
        handler = logging.StreamHandler(stderr if stderr is not None else sys.stderr)
        handler.setFormatter(self._formatter)
        self._logger.addHandler(handler)

    def set_color(self, enabled: bool) -> None:
        self._formatter.color = enabled

    def output(self, message: str) -> None:
        print(message, file=self._stdout)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)


class MemoryChartLog:
    def __init__(self) -> None:
        self.outputs: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def output(self, message: str) -> None:
        self.outputs.append(message)

    def warning(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

"""
Injected logging capability.

Components never reach for a module-level logger; they receive a ``Log`` and
report progress through ``info``/``warn``. Production code passes a
``StdlibLog`` that routes to the standard logging module, tests pass a
``RecordingLog`` to inspect messages or a ``SilentLog`` to drop them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Protocol


class Log(Protocol):
    """Progress sink accepted by every pipeline component."""

    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...


@dataclass(frozen=True)
class LogMessage:
    """A single recorded log call.

    Attributes:
        level: Severity the message was emitted at.
        message: Log message payload.
    """

    level: Literal["info", "warning"]
    message: str


class StdlibLog:
    """Log implementation backed by ``logging.getLogger``."""

    def __init__(self, logger_name: str = "protoshade") -> None:
        self._logger = logging.getLogger(logger_name)

    @property
    def name(self) -> str:
        return self._logger.name

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warn(self, message: str) -> None:
        self._logger.warning(message)


class RecordingLog:
    """Test log that keeps every message in order.

    Example:
        >>> log = RecordingLog()
        >>> log.info("Compiling a.proto")
        >>> log.infos
        ['Compiling a.proto']
    """

    def __init__(self) -> None:
        self.messages: list[LogMessage] = []

    def info(self, message: str) -> None:
        self.messages.append(LogMessage(level="info", message=message))

    def warn(self, message: str) -> None:
        self.messages.append(LogMessage(level="warning", message=message))

    @property
    def infos(self) -> list[str]:
        return [m.message for m in self.messages if m.level == "info"]

    @property
    def warnings(self) -> list[str]:
        return [m.message for m in self.messages if m.level == "warning"]


class SilentLog:
    """Log that discards everything."""

    def info(self, message: str) -> None:
        return None

    def warn(self, message: str) -> None:
        return None


def configure_logging(verbosity: int = 0) -> None:
    """Install a root handler for command-line use.

    ``verbosity`` below zero shows warnings only, zero shows progress, above
    zero adds debug output.
    """
    level = logging.WARNING if verbosity < 0 else logging.INFO if verbosity == 0 else logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


__all__ = ["Log", "LogMessage", "RecordingLog", "SilentLog", "StdlibLog", "configure_logging"]

"""A small structured logging interface with Info and Debug levels."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

_NO_VALUE = "<no value>"


class Logger(ABC):
    """Logs messages, optionally supplemented by alternating keys and values."""

    @abstractmethod
    def info(self, msg: str, *args: Any) -> None:
        """Log a message operators are likely to care about."""

    @abstractmethod
    def debug(self, msg: str, *args: Any) -> None:
        """Log a message useful when debugging."""

    @abstractmethod
    def with_values(self, *args: Any) -> Logger:
        """Return a logger that adds the supplied keys and values to every message."""


@dataclass(frozen=True)
class NopLogger(Logger):
    """A logger that does nothing."""

    def info(self, msg: str, *args: Any) -> None:
        pass

    def debug(self, msg: str, *args: Any) -> None:
        pass

    def with_values(self, *args: Any) -> Logger:
        return NopLogger()


def _pairs(args: tuple[Any, ...]) -> tuple[tuple[Any, Any], ...]:
    keys = args[0::2]
    values = args[1::2]
    pairs = list(zip(keys, values))
    if len(keys) > len(values):
        pairs.append((keys[-1], _NO_VALUE))
    return tuple(pairs)


@dataclass(frozen=True)
class StdlibLogger(Logger):
    """A logger backed by :mod:`logging`; debug messages go out at DEBUG level."""

    log: logging.Logger
    values: tuple[tuple[Any, Any], ...] = ()

    def _emit(self, level: int, msg: str, args: tuple[Any, ...]) -> None:
        if not self.log.isEnabledFor(level):
            return
        pairs = self.values + _pairs(args)
        rendered = " ".join([msg, *(f"{k}={v}" for k, v in pairs)])
        self.log.log(level, "%s", rendered, extra={"key_values": dict(pairs)})

    def info(self, msg: str, *args: Any) -> None:
        self._emit(logging.INFO, msg, args)

    def debug(self, msg: str, *args: Any) -> None:
        self._emit(logging.DEBUG, msg, args)

    def with_values(self, *args: Any) -> Logger:
        return StdlibLogger(self.log, self.values + _pairs(args))


def new_nop_logger() -> Logger:
    """Return a logger that does nothing."""
    return NopLogger()


def new_logger(log: logging.Logger) -> Logger:
    """Return a logger that writes through the supplied standard logger."""
    return StdlibLogger(log)
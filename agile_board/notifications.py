"""User-facing notifications (toasts)."""

from collections.abc import Callable
from dataclasses import dataclass

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class Toast:
    """A single notification shown to the user."""

    level: str
    message: str


class Notifier:
    """Collects toasts and forwards them to an optional sink.

    The CLI passes ``print``-like sinks; tests inspect ``history``.
    """

    def __init__(self, sink: Callable[[Toast], None] | None = None) -> None:
        self.sink = sink
        self.history: list[Toast] = []

    def _emit(self, level: str, message: str) -> Toast:
        toast = Toast(level=level, message=message)
        self.history.append(toast)
        logger.debug("Toast", level=level, message=message)
        if self.sink is not None:
            self.sink(toast)
        return toast

    def success(self, message: str) -> Toast:
        return self._emit("success", message)

    def error(self, message: str) -> Toast:
        return self._emit("error", message)

    def info(self, message: str) -> Toast:
        return self._emit("info", message)

    def messages(self, level: str | None = None) -> list[str]:
        """Return the messages shown so far, optionally for one level."""
        return [t.message for t in self.history if level is None or t.level == level]

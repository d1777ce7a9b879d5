"""Logger capability used by the loader.

The loader never writes to a global logger directly.  Instead the resolved
:class:`~safejson_loader.config.LoaderConfig` carries a *logger capability*:
any object exposing some of ``debug``, ``info``, ``warning`` (or ``warn``)
and ``error``, each called as ``method(message, meta)``.  Missing methods are
skipped silently.

:class:`StdlibLogger` is the default capability.  It formats events onto the
package's stdlib logger, which has a ``NullHandler`` attached in
``safejson_loader/__init__.py`` and therefore stays silent until the host
application configures logging.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal, Protocol

LOGGER_NAME = "safejson_loader"

LogLevel = Literal["debug", "info", "warning", "error"]

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class LoaderLogger(Protocol):
    """Structural type for logger capabilities.

    Implementations may omit any method; :func:`log_event` skips what is
    not there.
    """

    def debug(self, message: str, meta: Mapping[str, Any] | None = None) -> None: ...

    def info(self, message: str, meta: Mapping[str, Any] | None = None) -> None: ...

    def warning(self, message: str, meta: Mapping[str, Any] | None = None) -> None: ...

    def error(self, message: str, meta: Mapping[str, Any] | None = None) -> None: ...


class StdlibLogger:
    """Adapt a :class:`logging.Logger` to the loader's capability shape.

    Messages are rendered pipe-delimited, e.g.
    ``safejson_loader | Local JSON file loaded | file_path=/data/a.json``.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(LOGGER_NAME)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def debug(self, message: str, meta: Mapping[str, Any] | None = None) -> None:
        self._emit("debug", message, meta)

    def info(self, message: str, meta: Mapping[str, Any] | None = None) -> None:
        self._emit("info", message, meta)

    def warning(self, message: str, meta: Mapping[str, Any] | None = None) -> None:
        self._emit("warning", message, meta)

    def error(self, message: str, meta: Mapping[str, Any] | None = None) -> None:
        self._emit("error", message, meta)

    def _emit(self, level: str, message: str, meta: Mapping[str, Any] | None) -> None:
        levelno = _LEVELS[level]
        if not self._logger.isEnabledFor(levelno):
            return
        fields = " | ".join(f"{key}={value}" for key, value in (meta or {}).items())
        if fields:
            self._logger.log(levelno, "%s | %s | %s", LOGGER_NAME, message, fields)
        else:
            self._logger.log(levelno, "%s | %s", LOGGER_NAME, message)


def log_event(
    sink: Any,
    level: LogLevel,
    message: str,
    meta: Mapping[str, Any] | None = None,
) -> None:
    """Send one event to *sink*, tolerating capabilities without *level*.

    ``warning`` falls back to a ``warn`` method when the sink only has that
    spelling.
    """
    if sink is None:
        return
    method = getattr(sink, level, None)
    if method is None and level == "warning":
        method = getattr(sink, "warn", None)
    if callable(method):
        method(message, dict(meta) if meta else None)

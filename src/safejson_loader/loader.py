"""Public entry point: classify an input and load it safely.

Routes one input through the loading pipeline:

1. Validate the input (non-empty string or path-like) before any I/O.
2. Resolve the :class:`LoaderConfig` and build one shared
   :class:`ConcurrencyLimiter` for the call.
3. ``http(s)://`` inputs go to the remote reader.  An index document fans
   out to its listed URLs; any other document becomes a single record.
4. Everything else is a local path: a ``.json`` file, or a directory of
   them.
5. Return the aggregated :class:`LoadedFile` records.

The loader enforces **all-or-nothing** semantics: any failure raises
:class:`LoaderError` and no partial result is returned.
"""

from __future__ import annotations

import asyncio
import os
import stat
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from safejson_loader.config import LoaderConfig
from safejson_loader.errors import ErrorCode, LoaderError
from safejson_loader.limiter import ConcurrencyLimiter
from safejson_loader.local import is_json_file, load_local_directory, load_local_json_file
from safejson_loader.log import log_event
from safejson_loader.models import LoadedFile
from safejson_loader.remote import (
    build_remote_file,
    fetch_remote_json,
    is_http_url,
    is_remote_index,
    load_remote_index,
)

_DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "User-Agent": "safejson-loader",
}

LoaderOptions = LoaderConfig | Mapping[str, Any] | None


def _coerce_input(value: Any) -> str:
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if not isinstance(value, str) or not value:
        raise LoaderError(
            ErrorCode.E_INPUT_VALIDATION_ERROR,
            "Input path/URL must be a non-empty string.",
        )
    if "\x00" in value:
        raise LoaderError(
            ErrorCode.E_INPUT_VALIDATION_ERROR,
            "Input path/URL must not contain NUL bytes.",
        )
    return value


def _resolve_config(options: LoaderOptions, overrides: dict[str, Any]) -> LoaderConfig:
    try:
        return LoaderConfig.resolve(options, **overrides)
    except (ValidationError, TypeError) as exc:
        raise LoaderError(
            ErrorCode.E_INPUT_VALIDATION_ERROR,
            f"Invalid loader options: {exc}",
        ) from exc


async def load_safe_json_resources(
    source: Any,
    options: LoaderOptions = None,
    **overrides: Any,
) -> list[LoadedFile]:
    """Load one or more JSON resources from *source*.

    *source* may be a local ``.json`` file, a local directory (all ``.json``
    files directly inside it), a remote URL returning JSON, or a remote URL
    acting as an index of JSON URLs (an array or ``{"files": [...]}``).

    Every returned document has been stripped of prototype-pollution keys,
    depth-checked against ``max_json_depth`` and size/count-checked against
    the configured limits.  No schema validation is performed.

    Parameters
    ----------
    source:
        Path or URL.  ``os.PathLike`` objects are accepted.
    options:
        A :class:`LoaderConfig`, a mapping of its field names, or *None*.
    **overrides:
        Individual ``LoaderConfig`` fields; these win over *options*.

    Returns
    -------
    list[LoadedFile]
        Records in enumeration order (directory listing / index order).

    Raises
    ------
    LoaderError
        On any validation, policy, I/O or transport failure.
    """
    source_str = _coerce_input(source)
    config = _resolve_config(options, overrides)
    limiter = ConcurrencyLimiter(config.max_concurrency)

    try:
        if is_http_url(source_str):
            return await _load_remote(source_str, config, limiter)
        return await _load_local(source_str, config, limiter)
    except LoaderError as exc:
        log_event(
            config.logger,
            "error",
            "JSON load failed",
            {"source": exc.source or source_str, "code": exc.code.value},
        )
        raise


async def _load_remote(
    url: str,
    config: LoaderConfig,
    limiter: ConcurrencyLimiter,
) -> list[LoadedFile]:
    if config.http_client is not None:
        return await _load_remote_with(url, config, limiter, config.http_client)

    async with httpx.AsyncClient(
        timeout=config.http_timeout_seconds,
        headers=_DEFAULT_HEADERS.copy(),
        follow_redirects=True,
    ) as client:
        return await _load_remote_with(url, config, limiter, client)


async def _load_remote_with(
    url: str,
    config: LoaderConfig,
    limiter: ConcurrencyLimiter,
    client: httpx.AsyncClient,
) -> list[LoadedFile]:
    data = await fetch_remote_json(url, config, client)
    if is_remote_index(data):
        return await load_remote_index(url, data, config, limiter, client)
    return [build_remote_file(url, data, config)]


async def _load_local(
    path: str,
    config: LoaderConfig,
    limiter: ConcurrencyLimiter,
) -> list[LoadedFile]:
    resolved = os.path.abspath(path)

    try:
        stats = await asyncio.to_thread(os.stat, resolved)
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise LoaderError(
            ErrorCode.E_LOCAL_PATH_NOT_FOUND,
            f"Local path does not exist: {resolved}",
            source=resolved,
        ) from exc
    except ValueError as exc:
        raise LoaderError(
            ErrorCode.E_INPUT_VALIDATION_ERROR,
            f"Invalid local path {resolved!r}: {exc}",
            source=resolved,
        ) from exc
    except OSError as exc:
        raise LoaderError(
            ErrorCode.E_LOCAL_IO_ERROR,
            f"Cannot stat local path {resolved}: {exc}",
            source=resolved,
        ) from exc

    if stat.S_ISREG(stats.st_mode):
        if not is_json_file(resolved):
            raise LoaderError(
                ErrorCode.E_LOCAL_FILE_EXTENSION_ERROR,
                f"File is not a .json file: {resolved}",
                source=resolved,
            )
        return [await load_local_json_file(resolved, config)]

    if stat.S_ISDIR(stats.st_mode):
        return await load_local_directory(resolved, config, limiter)

    raise LoaderError(
        ErrorCode.E_LOCAL_PATH_TYPE_ERROR,
        f"Unsupported path type: {resolved}",
        source=resolved,
    )


def load_safe_json_resources_sync(
    source: Any,
    options: LoaderOptions = None,
    **overrides: Any,
) -> list[LoadedFile]:
    """Blocking wrapper around :func:`load_safe_json_resources`.

    Runs the coroutine with ``asyncio.run()``; must not be called from a
    running event loop.
    """
    return asyncio.run(load_safe_json_resources(source, options, **overrides))

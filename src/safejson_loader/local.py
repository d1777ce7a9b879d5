"""Local filesystem reader: single JSON files and directories of them.

Size and count limits are checked from ``stat``/directory listings before any
file content is read.  All blocking filesystem calls are offloaded with
``asyncio.to_thread()`` so directory loads interleave under the shared
:class:`~safejson_loader.limiter.ConcurrencyLimiter`.
"""

from __future__ import annotations

import asyncio
import functools
import os

from safejson_loader.config import LoaderConfig
from safejson_loader.errors import ErrorCode, LoaderError
from safejson_loader.limiter import ConcurrencyLimiter
from safejson_loader.log import log_event
from safejson_loader.models import LoadedFile, SkippedFile
from safejson_loader.sanitizer import calculate_depth, parse_json, sanitize_prototype_pollution


def is_json_file(path: str) -> bool:
    """Return True if *path* ends with ``.json`` (case-insensitive)."""
    return os.path.splitext(path)[1].lower() == ".json"


def _read_limited(file_path: str, limit: int) -> bytes:
    """Read at most ``limit + 1`` bytes so growth after ``stat`` is detectable."""
    with open(file_path, "rb") as fh:
        return fh.read(limit + 1)


def _list_json_files(dir_path: str) -> list[str]:
    with os.scandir(dir_path) as entries:
        names = sorted(
            entry.name
            for entry in entries
            if is_json_file(entry.name) and entry.is_file()
        )
    return [os.path.join(dir_path, name) for name in names]


def _too_large(file_path: str, size: int, config: LoaderConfig) -> LoaderError:
    config.notify_skipped(
        SkippedFile(
            source=file_path,
            reason=f"File exceeds max_file_bytes={config.max_file_bytes}",
        )
    )
    log_event(
        config.logger,
        "warning",
        "Skipping local file due to size limit",
        {"file_path": file_path, "size": size, "max_file_bytes": config.max_file_bytes},
    )
    return LoaderError(
        ErrorCode.E_LOCAL_FILE_TOO_LARGE,
        f"Local file too large: {file_path} ({size} bytes > {config.max_file_bytes}).",
        source=file_path,
    )


async def load_local_json_file(file_path: str, config: LoaderConfig) -> LoadedFile:
    """Load, sanitize and depth-check one local JSON file.

    Parameters
    ----------
    file_path:
        Absolute path to the file.  The extension is not re-checked here.
    config:
        Resolved loader configuration.

    Returns
    -------
    LoadedFile
        The sanitized document, after ``on_file_loaded`` has been called.

    Raises
    ------
    LoaderError
        ``E_LOCAL_FILE_TOO_LARGE``, ``E_LOCAL_IO_ERROR``,
        ``E_LOCAL_JSON_PARSE_ERROR``, ``E_LOCAL_JSON_DEPTH_EXCEEDED`` or
        ``E_JSON_DEPTH_SANITATION_LIMIT``.
    """
    try:
        stats = await asyncio.to_thread(os.stat, file_path)
    except OSError as exc:
        raise LoaderError(
            ErrorCode.E_LOCAL_IO_ERROR,
            f"Cannot stat file {file_path}: {exc}",
            source=file_path,
        ) from exc

    if stats.st_size > config.max_file_bytes:
        raise _too_large(file_path, stats.st_size, config)

    try:
        content = await asyncio.to_thread(_read_limited, file_path, config.max_file_bytes)
    except OSError as exc:
        raise LoaderError(
            ErrorCode.E_LOCAL_IO_ERROR,
            f"Cannot read file {file_path}: {exc}",
            source=file_path,
        ) from exc

    if len(content) > config.max_file_bytes:
        raise _too_large(file_path, len(content), config)

    try:
        raw = parse_json(content)
    except ValueError as exc:
        raise LoaderError(
            ErrorCode.E_LOCAL_JSON_PARSE_ERROR,
            f"Invalid JSON in file {file_path}: {exc}",
            source=file_path,
        ) from exc

    sanitized = sanitize_prototype_pollution(raw)

    depth = calculate_depth(sanitized)
    if depth > config.max_json_depth:
        raise LoaderError(
            ErrorCode.E_LOCAL_JSON_DEPTH_EXCEEDED,
            f"Local JSON in {file_path} exceeds max_json_depth="
            f"{config.max_json_depth} (depth={depth}).",
            source=file_path,
        )

    loaded = LoadedFile(name=os.path.basename(file_path), data=sanitized, source=file_path)
    config.notify_loaded(loaded)
    log_event(config.logger, "info", "Local JSON file loaded", {"file_path": file_path})
    return loaded


async def load_local_directory(
    dir_path: str,
    config: LoaderConfig,
    limiter: ConcurrencyLimiter,
) -> list[LoadedFile]:
    """Load every ``.json`` file directly inside *dir_path*.

    Candidates are enumerated in name order.  The file-count limit is
    checked on the listing alone; the total-size limit is accumulated from
    ``stat`` in enumeration order and fails as soon as it is crossed.  Files
    are then loaded through *limiter*.  Any single failure fails the whole
    directory.
    """
    try:
        file_paths = await asyncio.to_thread(_list_json_files, dir_path)
    except OSError as exc:
        raise LoaderError(
            ErrorCode.E_LOCAL_IO_ERROR,
            f"Cannot list directory {dir_path}: {exc}",
            source=dir_path,
        ) from exc

    if not file_paths:
        log_event(config.logger, "debug", "No JSON files found in directory", {"dir_path": dir_path})
        return []

    if len(file_paths) > config.max_files:
        raise LoaderError(
            ErrorCode.E_LOCAL_DIR_TOO_MANY_FILES,
            f"Directory {dir_path} contains {len(file_paths)} JSON files, "
            f"exceeding max_files={config.max_files}.",
            source=dir_path,
        )

    total_size = 0
    for file_path in file_paths:
        try:
            stats = await asyncio.to_thread(os.stat, file_path)
        except OSError as exc:
            raise LoaderError(
                ErrorCode.E_LOCAL_IO_ERROR,
                f"Cannot stat file {file_path}: {exc}",
                source=file_path,
            ) from exc
        total_size += stats.st_size
        if total_size > config.max_total_bytes:
            raise LoaderError(
                ErrorCode.E_LOCAL_DIR_TOTAL_TOO_LARGE,
                f"Total size of JSON files in {dir_path} exceeds "
                f"max_total_bytes={config.max_total_bytes}.",
                source=dir_path,
            )

    log_event(
        config.logger,
        "debug",
        "Loading local directory",
        {"dir_path": dir_path, "file_count": len(file_paths), "total_size": total_size},
    )

    return await limiter.admit_all(
        [functools.partial(load_local_json_file, file_path, config) for file_path in file_paths]
    )

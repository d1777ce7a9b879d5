"""Remote reader: JSON documents and index documents over HTTP(S).

A remote document is fetched with a timeout, gated on status and
content-type before its body is parsed, then sanitized and depth-checked
exactly like a local file.  A top-level array, or an object with a ``files``
array, is an *index*: a list of further document URLs fetched through the
shared :class:`~safejson_loader.limiter.ConcurrencyLimiter`.

``httpx`` exceptions never leave this module; they are chained onto a
:class:`~safejson_loader.errors.LoaderError`.
"""

from __future__ import annotations

import asyncio
import functools
import posixpath
import re
from typing import Any
from urllib.parse import unquote, urlsplit

import httpx

from safejson_loader.config import LoaderConfig
from safejson_loader.errors import ErrorCode, LoaderError
from safejson_loader.limiter import ConcurrencyLimiter
from safejson_loader.log import log_event
from safejson_loader.models import LoadedFile
from safejson_loader.sanitizer import calculate_depth, parse_json, sanitize_prototype_pollution

_HTTP_URL_RE = re.compile(r"^https?://", re.IGNORECASE)

JSON_MEDIA_TYPE = "application/json"


def is_http_url(value: str) -> bool:
    """Return True if *value* starts with ``http://`` or ``https://``."""
    return bool(_HTTP_URL_RE.match(value))


def url_basename(url: str) -> str:
    """Display name for *url*: the last path segment, or the host if none."""
    parts = urlsplit(url)
    name = posixpath.basename(unquote(parts.path))
    return name or parts.netloc


def is_json_content_type(content_type: str, loose: bool) -> bool:
    """Check a ``Content-Type`` header value.

    Loose mode accepts anything mentioning ``json`` (``application/ld+json``,
    ``text/json``...).  Strict mode requires the ``application/json`` media
    type, with or without parameters such as ``charset``.
    """
    lowered = content_type.lower()
    if loose:
        return "json" in lowered
    return lowered.split(";", 1)[0].strip() == JSON_MEDIA_TYPE


def is_remote_index(value: Any) -> bool:
    """Return True if a fetched document has the shape of an index."""
    return isinstance(value, list) or (
        isinstance(value, dict) and isinstance(value.get("files"), list)
    )


async def _download(url: str, config: LoaderConfig, client: httpx.AsyncClient) -> bytes:
    """Stream *url*, gate on status and content-type, then read the body."""
    async with client.stream("GET", url, timeout=config.http_timeout_seconds) as response:
        if not response.is_success:
            raise LoaderError(
                ErrorCode.E_REMOTE_FETCH_STATUS_ERROR,
                f"Remote fetch failed at {url}: {response.status_code} {response.reason_phrase}",
                source=url,
                status_code=response.status_code,
            )

        content_type = response.headers.get("content-type", "")
        if not is_json_content_type(content_type, config.loose_content_type):
            raise LoaderError(
                ErrorCode.E_REMOTE_CONTENT_TYPE_ERROR,
                f"Remote URL does not advertise JSON content-type at {url}: '{content_type}'",
                source=url,
            )

        return await response.aread()


async def fetch_remote_json(url: str, config: LoaderConfig, client: httpx.AsyncClient) -> Any:
    """GET *url* and return its sanitized JSON body.

    The body is only read once status and content-type have been accepted.

    Raises
    ------
    LoaderError
        ``E_REMOTE_FETCH_ERROR`` on timeout or transport failure,
        ``E_REMOTE_FETCH_STATUS_ERROR`` on a non-2xx status,
        ``E_REMOTE_CONTENT_TYPE_ERROR`` when the response is not advertised
        as JSON, ``E_REMOTE_JSON_PARSE_ERROR`` on an invalid body and
        ``E_REMOTE_JSON_DEPTH_EXCEEDED`` past ``max_json_depth``.
    """
    timeout = config.http_timeout_seconds
    try:
        body = await asyncio.wait_for(_download(url, config, client), timeout=timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise LoaderError(
            ErrorCode.E_REMOTE_FETCH_ERROR,
            f"Failed to fetch remote JSON at {url}: timed out after "
            f"{config.http_timeout_ms} ms",
            source=url,
        ) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise LoaderError(
            ErrorCode.E_REMOTE_FETCH_ERROR,
            f"Failed to fetch remote JSON at {url}: {exc}",
            source=url,
        ) from exc

    try:
        raw = parse_json(body)
    except ValueError as exc:
        raise LoaderError(
            ErrorCode.E_REMOTE_JSON_PARSE_ERROR,
            f"Invalid JSON at {url}: {exc}",
            source=url,
        ) from exc

    sanitized = sanitize_prototype_pollution(raw)

    depth = calculate_depth(sanitized)
    if depth > config.max_json_depth:
        raise LoaderError(
            ErrorCode.E_REMOTE_JSON_DEPTH_EXCEEDED,
            f"Remote JSON at {url} exceeds max_json_depth="
            f"{config.max_json_depth} (depth={depth}).",
            source=url,
        )

    return sanitized


def build_remote_file(url: str, data: Any, config: LoaderConfig) -> LoadedFile:
    """Wrap an already-sanitized remote document and fire ``on_file_loaded``."""
    loaded = LoadedFile(name=url_basename(url), data=data, source=url)
    config.notify_loaded(loaded)
    log_event(config.logger, "info", "Remote JSON file loaded", {"url": url})
    return loaded


async def load_remote_file(url: str, config: LoaderConfig, client: httpx.AsyncClient) -> LoadedFile:
    """Fetch one terminal document listed by an index."""
    data = await fetch_remote_json(url, config, client)
    return build_remote_file(url, data, config)


async def load_remote_index(
    index_url: str,
    index_value: Any,
    config: LoaderConfig,
    limiter: ConcurrencyLimiter,
    client: httpx.AsyncClient,
) -> list[LoadedFile]:
    """Fan out over the URLs listed in an index document.

    Non-string entries are dropped.  The URL count and the shape of every
    URL are validated before the first fetch.  Listed documents are loaded
    as terminal documents (indexes are not followed recursively) and
    returned in index order.  Any single failure fails the whole index.
    """
    if isinstance(index_value, list):
        file_list = index_value
    elif isinstance(index_value, dict) and isinstance(index_value.get("files"), list):
        file_list = index_value["files"]
    else:
        raise LoaderError(
            ErrorCode.E_REMOTE_INDEX_FORMAT_ERROR,
            f"Remote directory index {index_url} must return an array or {{ files: [] }}.",
            source=index_url,
        )

    urls = [item for item in file_list if isinstance(item, str)]

    if not urls:
        log_event(config.logger, "debug", "Remote index lists no files", {"index_url": index_url})
        return []

    if len(urls) > config.max_files:
        raise LoaderError(
            ErrorCode.E_REMOTE_INDEX_TOO_MANY_FILES,
            f"Remote directory index at {index_url} lists {len(urls)} files, "
            f"exceeding max_files={config.max_files}.",
            source=index_url,
        )

    for file_url in urls:
        if not is_http_url(file_url):
            raise LoaderError(
                ErrorCode.E_REMOTE_INDEX_INVALID_URL,
                f"Invalid remote file URL in index at {index_url}: {file_url}",
                source=index_url,
            )

    log_event(
        config.logger,
        "debug",
        "Loading remote index",
        {"index_url": index_url, "file_count": len(urls)},
    )

    return await limiter.admit_all(
        [functools.partial(load_remote_file, file_url, config, client) for file_url in urls]
    )

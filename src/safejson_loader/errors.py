"""Error codes and the single exception type for safejson-loader.

``ErrorCode`` enumerates every failure the loader can report.
``LoaderError`` carries one of those codes plus a human-readable message and
optional location context (the offending path/URL and, for HTTP failures,
the status code).
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for safe JSON loading.

    Values equal their names so they are stable strings suitable for
    metrics and alerting.  Every code is fatal to the enclosing load.
    """

    # Input / standalone sanitizer
    E_INPUT_VALIDATION_ERROR = "E_INPUT_VALIDATION_ERROR"
    E_JSON_PARSE_ERROR = "E_JSON_PARSE_ERROR"
    E_JSON_DEPTH_SANITATION_LIMIT = "E_JSON_DEPTH_SANITATION_LIMIT"

    # Local paths
    E_LOCAL_PATH_NOT_FOUND = "E_LOCAL_PATH_NOT_FOUND"
    E_LOCAL_PATH_TYPE_ERROR = "E_LOCAL_PATH_TYPE_ERROR"
    E_LOCAL_FILE_EXTENSION_ERROR = "E_LOCAL_FILE_EXTENSION_ERROR"
    E_LOCAL_FILE_TOO_LARGE = "E_LOCAL_FILE_TOO_LARGE"
    E_LOCAL_IO_ERROR = "E_LOCAL_IO_ERROR"
    E_LOCAL_JSON_PARSE_ERROR = "E_LOCAL_JSON_PARSE_ERROR"
    E_LOCAL_JSON_DEPTH_EXCEEDED = "E_LOCAL_JSON_DEPTH_EXCEEDED"
    E_LOCAL_DIR_TOO_MANY_FILES = "E_LOCAL_DIR_TOO_MANY_FILES"
    E_LOCAL_DIR_TOTAL_TOO_LARGE = "E_LOCAL_DIR_TOTAL_TOO_LARGE"

    # Remote URLs
    E_REMOTE_FETCH_ERROR = "E_REMOTE_FETCH_ERROR"
    E_REMOTE_FETCH_STATUS_ERROR = "E_REMOTE_FETCH_STATUS_ERROR"
    E_REMOTE_CONTENT_TYPE_ERROR = "E_REMOTE_CONTENT_TYPE_ERROR"
    E_REMOTE_JSON_PARSE_ERROR = "E_REMOTE_JSON_PARSE_ERROR"
    E_REMOTE_JSON_DEPTH_EXCEEDED = "E_REMOTE_JSON_DEPTH_EXCEEDED"

    # Remote indexes
    E_REMOTE_INDEX_FORMAT_ERROR = "E_REMOTE_INDEX_FORMAT_ERROR"
    E_REMOTE_INDEX_TOO_MANY_FILES = "E_REMOTE_INDEX_TOO_MANY_FILES"
    E_REMOTE_INDEX_INVALID_URL = "E_REMOTE_INDEX_INVALID_URL"


class LoaderError(Exception):
    """Structured failure raised by every loader operation.

    Parameters
    ----------
    code:
        One of :class:`ErrorCode`.
    message:
        Human-readable description.
    source:
        The path or URL being processed when the failure occurred, if any.
    status_code:
        HTTP status for ``E_REMOTE_FETCH_STATUS_ERROR``.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        source: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.source = source
        self.status_code = status_code

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"LoaderError(code={self.code.value!r}, message={self.message!r})"

"""safejson-loader -- defensive JSON loading from files, directories and URLs.

Public API re-exports for convenient access.
"""

import logging

from safejson_loader.config import LoaderConfig
from safejson_loader.errors import ErrorCode, LoaderError
from safejson_loader.limiter import ConcurrencyLimiter
from safejson_loader.loader import load_safe_json_resources, load_safe_json_resources_sync
from safejson_loader.log import LOGGER_NAME, LoaderLogger, StdlibLogger
from safejson_loader.models import JsonValue, LoadedFile, SkippedFile
from safejson_loader.sanitizer import (
    POLLUTION_KEYS,
    SANITIZE_MAX_DEPTH,
    calculate_depth,
    parse_and_sanitize,
    sanitize_prototype_pollution,
)

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())

__all__ = [
    # Entry points
    "load_safe_json_resources",
    "load_safe_json_resources_sync",
    # Sanitizer
    "sanitize_prototype_pollution",
    "parse_and_sanitize",
    "calculate_depth",
    "POLLUTION_KEYS",
    "SANITIZE_MAX_DEPTH",
    # Config / models
    "LoaderConfig",
    "LoadedFile",
    "SkippedFile",
    "JsonValue",
    # Errors
    "ErrorCode",
    "LoaderError",
    # Plumbing
    "ConcurrencyLimiter",
    "LoaderLogger",
    "StdlibLogger",
]

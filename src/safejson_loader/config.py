"""Configuration model for safejson-loader.

Provides ``LoaderConfig`` with every limit defaulted.  One instance is
resolved per call to :func:`~safejson_loader.loader.load_safe_json_resources`
and never mutated afterward.  Scalar overrides can be loaded from YAML or
JSON files via the ``from_file()`` classmethod.
"""

from __future__ import annotations

import json
import pathlib
from collections.abc import Callable, Mapping
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from safejson_loader.log import StdlibLogger
from safejson_loader.models import LoadedFile, SkippedFile

MIB = 1024 * 1024


class LoaderConfig(BaseModel):
    """All loader limits and hooks with their defaults."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # --- Volume limits ---
    max_files: int = Field(default=100, ge=0)
    max_total_bytes: int = Field(default=10 * MIB, ge=0)
    max_file_bytes: int = Field(default=2 * MIB, ge=0)

    # --- Structure limits ---
    max_json_depth: int = Field(default=50, ge=0)

    # --- Remote ---
    http_timeout_ms: int = Field(default=8000, gt=0)
    loose_content_type: bool = True
    http_client: httpx.AsyncClient | None = None

    # --- Scheduling ---
    max_concurrency: int = Field(default=5, ge=1)

    # --- Hooks / logging ---
    on_file_loaded: Callable[[LoadedFile], Any] | None = None
    on_file_skipped: Callable[[SkippedFile], Any] | None = None
    logger: Any = Field(default_factory=StdlibLogger)

    @property
    def http_timeout_seconds(self) -> float:
        return self.http_timeout_ms / 1000.0

    def notify_loaded(self, file: LoadedFile) -> None:
        if self.on_file_loaded is not None:
            self.on_file_loaded(file)

    def notify_skipped(self, skipped: SkippedFile) -> None:
        if self.on_file_skipped is not None:
            self.on_file_skipped(skipped)

    @classmethod
    def resolve(
        cls,
        options: LoaderConfig | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> LoaderConfig:
        """Merge caller-supplied *options* and keyword *overrides* onto defaults.

        *options* may be ``None``, an existing ``LoaderConfig`` or a mapping of
        field names.  Keyword overrides win over *options*.
        """
        if isinstance(options, LoaderConfig):
            if not overrides:
                return options
            data: dict[str, Any] = dict(options)
        elif options is None:
            data = {}
        elif isinstance(options, Mapping):
            data = dict(options)
        else:
            raise TypeError(
                "options must be a LoaderConfig, a mapping, or None; "
                f"got {type(options).__name__}"
            )
        data.update(overrides)
        return cls(**data)

    @classmethod
    def from_file(cls, path: str) -> LoaderConfig:
        """Load configuration from a YAML or JSON file.

        File format is detected by extension: ``.yaml`` / ``.yml`` for YAML,
        ``.json`` for JSON.  Any keys present in the file override the
        corresponding defaults; keys not present retain their defaults.
        Hooks, the logger and the HTTP client cannot be set from a file.
        """
        file_path = pathlib.Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        suffix = file_path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            try:
                import yaml  # type: ignore[import-untyped]
            except ImportError as exc:
                raise ImportError(
                    "pyyaml is required to load YAML config files. "
                    "Install it with: pip install 'safejson-loader[yaml]'"
                ) from exc
            with open(file_path) as fh:
                data = yaml.safe_load(fh)
        elif suffix == ".json":
            with open(file_path) as fh:
                data = json.load(fh)
        else:
            raise ValueError(
                f"Unsupported config file extension '{suffix}'. "
                "Use .yaml, .yml, or .json."
            )

        if data is None:
            data = {}

        for key in ("on_file_loaded", "on_file_skipped", "logger", "http_client"):
            if key in data:
                raise ValueError(f"'{key}' cannot be set from a config file")

        return cls(**data)

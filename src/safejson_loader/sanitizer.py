"""Prototype-pollution sanitizer and depth accounting for parsed JSON.

Provides ``sanitize_prototype_pollution()`` to rebuild a parsed JSON value
without pollution-capable keys, ``calculate_depth()`` to measure structural
depth after sanitization, and ``parse_and_sanitize()`` for raw text.

Depth is counted the same way everywhere: the root is depth 0 and every
descent into an array element or object value adds 1.  The sanitizer's own
bound (``SANITIZE_MAX_DEPTH``) is a circuit breaker far above any sensible
policy limit; the caller-facing ``max_json_depth`` is enforced separately on
the sanitized result.
"""

from __future__ import annotations

import json
from typing import Any

from safejson_loader.errors import ErrorCode, LoaderError

POLLUTION_KEYS: frozenset[str] = frozenset({"__proto__", "constructor", "prototype"})

SANITIZE_MAX_DEPTH = 500


def sanitize_prototype_pollution(value: Any, max_depth: int = SANITIZE_MAX_DEPTH) -> Any:
    """Return a deep copy of *value* with pollution-set keys stripped.

    Every object is rebuilt as a fresh ``dict`` holding only its own
    non-polluting keys, so lookups on the result can never reach anything
    that was not explicitly copied.  Arrays keep their order and length.
    Scalars are returned unchanged.

    Parameters
    ----------
    value:
        An already-parsed JSON value.
    max_depth:
        Circuit-breaker bound.  The walk fails as soon as it reaches a node
        deeper than this, or deeper than the interpreter can recurse.

    Raises
    ------
    LoaderError
        ``E_JSON_DEPTH_SANITATION_LIMIT`` when the bound is exceeded.
    """
    try:
        return _sanitize(value, 0, max_depth)
    except RecursionError as exc:
        raise LoaderError(
            ErrorCode.E_JSON_DEPTH_SANITATION_LIMIT,
            "Maximum JSON depth exceeded during sanitation "
            "(interpreter recursion limit reached).",
        ) from exc


def _sanitize(value: Any, depth: int, max_depth: int) -> Any:
    if depth > max_depth:
        raise LoaderError(
            ErrorCode.E_JSON_DEPTH_SANITATION_LIMIT,
            f"Maximum JSON depth exceeded during sanitation (depth > {max_depth}).",
        )

    if isinstance(value, list):
        sanitized: list[Any] = []
        for item in value:
            sanitized.append(_sanitize(item, depth + 1, max_depth))
        return sanitized

    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for key, item in value.items():
            if key in POLLUTION_KEYS:
                continue
            out[key] = _sanitize(item, depth + 1, max_depth)
        return out

    return value


def calculate_depth(value: Any, current_depth: int = 0) -> int:
    """Return the maximum nesting depth of a JSON value.

    Scalars, ``None`` and empty containers contribute no depth of their own.
    The walk uses an explicit stack, so arbitrarily deep values are measured
    without recursion.
    """
    deepest = current_depth
    stack: list[tuple[Any, int]] = [(value, current_depth)]
    while stack:
        node, depth = stack.pop()
        if depth > deepest:
            deepest = depth
        if isinstance(node, list):
            stack.extend((item, depth + 1) for item in node)
        elif isinstance(node, dict):
            stack.extend((item, depth + 1) for item in node.values())
    return deepest


def _reject_non_standard_constant(constant: str) -> Any:
    """Reject non-standard JSON constants (NaN, Infinity, -Infinity)."""
    raise ValueError(
        f"Non-standard JSON constant not allowed: {constant!r}. "
        "JSON does not support NaN or Infinity."
    )


def parse_json(text: str | bytes) -> Any:
    """Parse strict JSON from *text*.

    Bytes are decoded as UTF-8.  ``NaN``/``Infinity`` literals are rejected
    and interpreter recursion exhaustion on absurdly nested input is reported
    as a parse failure.

    Raises
    ------
    ValueError
        With the parser's message on any failure.
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError(f"Invalid UTF-8: {exc}") from exc
    try:
        return json.loads(text, parse_constant=_reject_non_standard_constant)
    except json.JSONDecodeError as exc:
        raise ValueError(str(exc)) from exc
    except RecursionError as exc:
        raise ValueError("JSON nesting too deep to parse") from exc


def parse_and_sanitize(text: str | bytes, max_depth: int = SANITIZE_MAX_DEPTH) -> Any:
    """Parse raw JSON *text* and return the sanitized value.

    Raises
    ------
    LoaderError
        ``E_JSON_PARSE_ERROR`` on invalid JSON, or
        ``E_JSON_DEPTH_SANITATION_LIMIT`` from the sanitizer.
    """
    try:
        raw = parse_json(text)
    except ValueError as exc:
        raise LoaderError(ErrorCode.E_JSON_PARSE_ERROR, f"Invalid JSON: {exc}") from exc
    return sanitize_prototype_pollution(raw, max_depth=max_depth)

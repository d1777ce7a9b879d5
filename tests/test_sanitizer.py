"""Unit tests for safejson_loader.sanitizer -- pollution stripping and depth."""

from __future__ import annotations

import copy

import pytest

from safejson_loader.errors import ErrorCode, LoaderError
from safejson_loader.sanitizer import (
    POLLUTION_KEYS,
    SANITIZE_MAX_DEPTH,
    calculate_depth,
    parse_and_sanitize,
    parse_json,
    sanitize_prototype_pollution,
)


def _nested_lists(depth: int):
    value: object = 0
    for _ in range(depth):
        value = [value]
    return value


class TestPollutionStripping:
    """Pollution-set keys are removed at every level."""

    @pytest.mark.parametrize("key", sorted(POLLUTION_KEYS))
    def test_top_level_key_removed(self, key: str):
        result = sanitize_prototype_pollution({key: {"isAdmin": True}, "ok": 1})
        assert result == {"ok": 1}
        assert key not in result
        assert result.get(key) is None

    def test_nested_keys_removed(self, sample_json_nested):
        result = sanitize_prototype_pollution(sample_json_nested)
        assert result == {
            "user": {"name": "Alice", "address": {"city": "Springfield"}},
            "items": [{"id": 1}, {"id": 2}],
            "active": True,
        }

    def test_objects_are_plain_dicts(self, sample_json_nested):
        result = sanitize_prototype_pollution(sample_json_nested)
        assert type(result) is dict
        assert type(result["user"]) is dict
        assert type(result["items"][0]) is dict

    def test_pollution_values_untouched(self):
        data = {"note": "__proto__", "tags": ["constructor", "prototype"]}
        assert sanitize_prototype_pollution(data) == data

    def test_input_not_mutated(self, sample_json_nested):
        before = copy.deepcopy(sample_json_nested)
        sanitize_prototype_pollution(sample_json_nested)
        assert sample_json_nested == before

    def test_result_shares_no_containers_with_input(self):
        inner = {"a": [1, 2]}
        data = {"inner": inner}
        result = sanitize_prototype_pollution(data)
        assert result is not data
        assert result["inner"] is not inner
        assert result["inner"]["a"] is not inner["a"]


class TestStructurePreserved:
    """Sanitization is a structural round-trip modulo stripped keys."""

    @pytest.mark.parametrize("value", [None, True, False, 0, -3, 2.5, "", "text"])
    def test_scalars_pass_through(self, value):
        assert sanitize_prototype_pollution(value) == value

    def test_array_order_and_length(self):
        data = [3, "b", None, [1, {"x": 1}], {"y": [True]}]
        result = sanitize_prototype_pollution(data)
        assert result == data
        assert len(result) == len(data)

    def test_clean_document_round_trips(self):
        data = {"a": {"b": [1, 2, {"c": None}]}, "d": "e", "f": 1.5}
        assert sanitize_prototype_pollution(data) == data

    def test_key_order_preserved(self):
        data = {"z": 1, "__proto__": 0, "a": 2, "m": 3}
        assert list(sanitize_prototype_pollution(data)) == ["z", "a", "m"]

    def test_idempotent(self, sample_json_nested):
        once = sanitize_prototype_pollution(sample_json_nested)
        twice = sanitize_prototype_pollution(once)
        assert twice == once


class TestCircuitBreaker:
    """The sanitizer's own depth bound."""

    def test_at_bound_succeeds(self):
        data = {"a": {"b": 1}}
        assert sanitize_prototype_pollution(data, max_depth=2) == data

    def test_past_bound_fails(self):
        with pytest.raises(LoaderError) as exc_info:
            sanitize_prototype_pollution({"a": {"b": {"c": 1}}}, max_depth=2)
        assert exc_info.value.code == ErrorCode.E_JSON_DEPTH_SANITATION_LIMIT

    def test_default_bound(self):
        sanitize_prototype_pollution(_nested_lists(SANITIZE_MAX_DEPTH))
        with pytest.raises(LoaderError) as exc_info:
            sanitize_prototype_pollution(_nested_lists(SANITIZE_MAX_DEPTH + 1))
        assert exc_info.value.code == ErrorCode.E_JSON_DEPTH_SANITATION_LIMIT

    def test_default_bound_far_above_policy_default(self):
        assert SANITIZE_MAX_DEPTH >= 10 * 50

    def test_bound_above_interpreter_limit(self):
        with pytest.raises(LoaderError) as exc_info:
            sanitize_prototype_pollution(_nested_lists(3000), max_depth=10000)
        assert exc_info.value.code == ErrorCode.E_JSON_DEPTH_SANITATION_LIMIT
        assert isinstance(exc_info.value.__cause__, RecursionError)


class TestCalculateDepth:
    """Tests for calculate_depth()."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, 0),
            ("s", 0),
            (1, 0),
            ({}, 0),
            ([], 0),
            ({"a": 1}, 1),
            ([1, 2, 3], 1),
            ([[1]], 2),
            ({"a": {"b": [1]}}, 3),
            ({"a": 1, "b": {"c": {"d": None}}}, 3),
        ],
    )
    def test_depth(self, value, expected):
        assert calculate_depth(value) == expected

    def test_deep_list(self):
        assert calculate_depth(_nested_lists(40)) == 40

    def test_deeper_than_interpreter_limit(self):
        assert calculate_depth(_nested_lists(3000)) == 3000

    def test_starting_depth(self):
        assert calculate_depth({"a": [1]}, current_depth=5) == 7


class TestParseAndSanitize:
    """Tests for the raw-text entry point."""

    def test_proto_payload_is_emptied(self):
        result = parse_and_sanitize('{"user":{"__proto__":{"isAdmin":true}}}')
        assert result == {"user": {}}
        assert result["user"].get("isAdmin") is None

    def test_bytes_input(self):
        assert parse_and_sanitize(b'{"a": [1, 2]}') == {"a": [1, 2]}

    def test_invalid_json(self):
        with pytest.raises(LoaderError) as exc_info:
            parse_and_sanitize("{not valid json}")
        assert exc_info.value.code == ErrorCode.E_JSON_PARSE_ERROR

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_standard_constants_rejected(self, literal: str):
        with pytest.raises(LoaderError) as exc_info:
            parse_and_sanitize(f'{{"a": {literal}}}')
        assert exc_info.value.code == ErrorCode.E_JSON_PARSE_ERROR

    def test_max_depth_forwarded(self):
        with pytest.raises(LoaderError) as exc_info:
            parse_and_sanitize("[[[1]]]", max_depth=2)
        assert exc_info.value.code == ErrorCode.E_JSON_DEPTH_SANITATION_LIMIT


class TestParseJson:
    """Tests for the strict parser shared by the readers."""

    def test_invalid_utf8(self):
        with pytest.raises(ValueError, match="UTF-8"):
            parse_json(b'{"a": "\xff"}')

    def test_parser_message_kept(self):
        with pytest.raises(ValueError, match="Expecting"):
            parse_json("{")

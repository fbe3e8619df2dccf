# tests/test_normalize.py
from __future__ import annotations

import json
import pytest

from zodika.core.normalize import extract_mapping, normalize, parse_aspects

PAYLOAD = {
    "conjunction": [{"planet1": {"name": "sun"}, "planet2": {"name": "moon"}}],
    "sextil": [{"planet1": {"name": "venus"}, "planet2": {"name": "mars"}}],
    "meta": {"source": "ephemeris"},
}


def test_native_mapping() -> None:
    r = parse_aspects(PAYLOAD)
    assert r.parsed_ok is True
    assert r.shape == "mapping"
    assert list(r.aspects) == ["conjunction", "sextile"]
    assert r.ignored_keys == ("meta",)
    assert r.count == 2

def test_json_string() -> None:
    r = parse_aspects(json.dumps(PAYLOAD))
    assert r.shape == "json"
    assert r.aspects["sextile"][0]["planet1"]["name"] == "venus"

def test_json_embedded_in_prose() -> None:
    text = "Here are the aspects:\n```json\n" + json.dumps(PAYLOAD) + "\n```\nthanks"
    r = parse_aspects(text)
    assert r.parsed_ok
    assert r.shape == "embedded_json"
    assert r.count == 2

def test_bytes_are_decoded() -> None:
    assert parse_aspects(json.dumps(PAYLOAD).encode("utf-8")).count == 2

def test_array_of_single_key_objects_is_merged() -> None:
    raw = [{"square": [{"planet1": {"name": "sun"}, "planet2": {"name": "mars"}}]},
           {"trine": [{"planet1": {"name": "moon"}, "planet2": {"name": "jupiter"}}]},
           "noise"]
    r = parse_aspects(raw)
    assert r.shape == "array"
    assert list(r.aspects) == ["square", "trine"]
    assert parse_aspects(json.dumps(raw)).shape == "json_array"

def test_catalog_order_regardless_of_payload_order() -> None:
    raw = {"opposition": [], "trine": [], "conjunction": []}
    assert list(normalize(raw)) == ["conjunction", "trine", "opposition"]

@pytest.mark.parametrize("raw,shape", [
    ("not json", "invalid"),
    ("", "empty"),
    ("   ", "empty"),
    (None, "empty"),
    (42, "invalid"),
    ("{broken", "invalid"),
    ("[1, 2, 3]", "json_array"),
])
def test_unusable_input_is_not_parsed(raw, shape) -> None:
    r = parse_aspects(raw)
    assert r.parsed_ok is False
    assert r.shape == shape
    assert r.aspects == {}

def test_decoded_but_no_known_keys_still_counts_as_parsed() -> None:
    r = parse_aspects({"quincunx": [{"planet1": {"name": "sun"}, "planet2": {"name": "moon"}}]})
    assert r.parsed_ok is True
    assert r.count == 0
    assert r.ignored_keys == ("quincunx",)

def test_non_list_values_and_non_mapping_records_dropped() -> None:
    raw = {"square": "sun-mars", "trine": [{"planet1": {"name": "sun"}, "planet2": {"name": "moon"}}, 7, None]}
    out = normalize(raw)
    assert out["square"] == []
    assert len(out["trine"]) == 1

def test_extract_mapping_copies_input() -> None:
    src = {"square": []}
    m, _ = extract_mapping(src)
    m["trine"] = []
    assert "trine" not in src

@pytest.mark.parametrize("raw", ["[" * 100000, "{" * 100000 + "}", '{"square": ' + "[" * 100000 + "]}"])
def test_deeply_nested_text_is_not_parsed(raw) -> None:
    r = parse_aspects(raw)
    assert r.parsed_ok is False
    assert r.aspects == {}

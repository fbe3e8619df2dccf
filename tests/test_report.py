# tests/test_report.py
from __future__ import annotations

import json
import logging
import pytest
from hypothesis import given, strategies as st

from zodika.core.aspects import CelestialPoint, detect_all, to_tagged_mapping
from zodika.core.report import build_report
from zodika.core.texts import default_resolver

TEXTS_LOGGER = "zodika.core.texts"


@pytest.fixture
def raw(pair):
    return {
        "square": [pair("sun", "moon", 10, 1)],
        "conjunction": [pair("mars", "venus", 2, None)],
        "trine": [pair("sun", "venus")],
        "opposition": [pair("moon", "saturn", 4, 10)],
    }


def test_full_report(raw, resolver) -> None:
    rep = build_report(raw, resolver)
    assert rep.parsed_ok is True
    assert rep.shape == "mapping"
    assert len(rep.slots) == 10

    assert [t["type"] for t in rep.top] == ["opposition", "square", "conjunction", "trine"]
    assert [t["score"] for t in rep.top] == pytest.approx([10.0, 10.0, 8.2, 7.5])
    assert rep.top[0] == {
        "title": "Moon house 4 in opposition to Saturn house 10",
        "score": 10.0,
        "type": "opposition",
        "p1": "moon",
        "p2": "saturn",
        "house1": 4,
        "house2": 10,
    }

    ph = rep.placeholders
    assert len(ph) == 20
    assert ph["aspect1_title"] == "Moon house 4 in opposition to Saturn house 10"
    assert ph["aspect1_text"] == ""
    assert ph["aspect2_title"] == "Sun house 10 in square with Moon house 1"
    assert ph["aspect2_text"] == "Will and feeling rub against each other."
    assert ph["aspect3_text"] == "Desire and affection join forces."
    assert ph["aspect4_text"] == "Will and affection are balanced."
    assert all(ph[f"aspect{i}_title"] == "" and ph[f"aspect{i}_text"] == "" for i in range(5, 11))

def test_missing_text_keeps_title_and_warns_once(pair, resolver, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger=TEXTS_LOGGER):
        rep = build_report({"opposition": [pair("moon", "saturn")]}, resolver)
    assert rep.slots[0].title == "Moon in opposition to Saturn"
    assert rep.slots[0].text == ""
    assert len([r for r in caplog.records if r.name == TEXTS_LOGGER and r.levelno == logging.WARNING]) == 1

@pytest.mark.parametrize("raw", ["not json", "[" * 100000])
def test_malformed_input_gives_empty_slots(raw, resolver) -> None:
    rep = build_report(raw, resolver)
    assert rep.parsed_ok is False
    assert rep.shape == "invalid"
    assert len(rep.slots) == 10
    assert all(s.title == "" and s.text == "" for s in rep.slots)
    assert set(rep.placeholders.values()) == {""}
    assert rep.top == []

def test_to_dict_shape_and_versions(raw, resolver) -> None:
    d = build_report(raw, resolver).to_dict()
    assert d["aspects_version"] == "v1.9"
    assert d["scoring_version"] == "v1.2"
    assert d["aspects_parsed_ok"] is True
    assert d["input_shape"] == "mapping"
    assert d["lang"] == "en"
    assert "debug_missing" not in d
    assert len(d["slots"]) == 10

def test_debug_lists_missing_texts(raw, resolver) -> None:
    d = build_report(raw, resolver, debug=True).to_dict()
    assert d["debug_missing"] == [{
        "pair": "moon|saturn",
        "aspect": "opposition",
        "tried": ["moon|saturn.opposition", "saturn|moon.opposition", "moon|saturn.opposition"],
        "reason": "missing_or_blank",
    }]

def test_limit_controls_slot_count(raw, resolver) -> None:
    rep = build_report(raw, resolver, limit=2)
    assert len(rep.slots) == 2
    assert sorted(rep.placeholders) == ["aspect1_text", "aspect1_title", "aspect2_text", "aspect2_title"]
    assert len(rep.top) == 2
    assert build_report(raw, resolver, limit=0).slots == []

def test_portuguese_titles(raw, resolver) -> None:
    rep = build_report(raw, resolver, lang="pt")
    assert rep.lang == "pt"
    assert rep.slots[1].title == "sol casa 10 em quadratura com lua casa 1"

def test_portuguese_report_with_bundled_texts(raw) -> None:
    rep = build_report(raw, default_resolver(lang="pt"), lang="pt")
    assert rep.slots[0].title == "lua casa 4 em oposição a saturno casa 10"
    assert rep.slots[0].text.startswith("lua em oposição a saturno indica")
    assert rep.slots[1].text.startswith("sol em quadratura com a lua indica")
    assert all(s.text for s in rep.slots if s.title)

def test_json_string_input(raw, resolver) -> None:
    rep = build_report(json.dumps(raw), resolver)
    assert rep.shape == "json"
    assert rep.slots[1].text == "Will and feeling rub against each other."

def test_detector_output_feeds_the_report(resolver) -> None:
    pts = [CelestialPoint("sun", 10.0, house=10), CelestialPoint("moon", 100.0, house=1)]
    rep = build_report(to_tagged_mapping(detect_all(pts)), resolver)
    assert rep.slots[0].title == "Sun in Aries house 10 in square with Moon in Cancer house 1"
    assert rep.slots[0].text == "Will and feeling rub against each other."

_junk = st.recursive(
    st.one_of(st.none(), st.booleans(), st.integers(), st.floats(), st.text(max_size=20)),
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(st.sampled_from(["square", "trine", "sextil", "planet1", "planet2", "name", "house", "x"]),
                        children, max_size=4),
    ),
    max_leaves=20,
)

@given(_junk, st.integers(min_value=0, max_value=12))
def test_report_is_fixed_width_for_any_input(raw, limit) -> None:
    from zodika.core.texts import TextResolver
    rep = build_report(raw, TextResolver({}), limit=limit)
    assert len(rep.slots) == limit
    assert len(rep.placeholders) == 2 * limit
    assert len(rep.top) <= limit

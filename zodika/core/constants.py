# zodika/core/constants.py
# -*- coding: utf-8 -*-
"""
Zodika — Core constants & small helpers

Purpose
-------
Single source of truth for:
- body ids & aliases
- the aspect catalog (angle, orb category, glyph, render color)
- ranking precedence between aspect types
- body labels & connector phrases (en / pt)
- zodiac signs
- tiny angle helpers (wrap / separation / sign lookup)

Design
------
- Pure-Python, no external dependencies.
- Safe to import from any core module.
- Functions are pure; constants are immutable (tuples / MappingProxyType).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal, Mapping, Optional, Tuple

__all__ = [
    # bodies
    "BODY_IDS", "ANGLE_POINTS", "BODY_ALIASES", "canonical_body", "is_angle_pair",
    # aspects
    "AspectName", "OrbCategory", "AspectDef", "ASPECT_CATALOG", "ASPECTS_BY_NAME",
    "ASPECT_NAMES", "TYPE_PRECEDENCE", "type_rank", "canonical_aspect",
    # vocabulary
    "BODY_LABELS", "TYPE_LABELS", "TYPE_CONNECTORS", "SUPPORTED_LANGS", "DEFAULT_LANG", "normalize_lang",
    # signs
    "SIGNS", "sign_of",
    # helpers
    "wrap_deg", "abs_sep_deg", "floor_to_minute",
]

# ── canonical bodies ─────────────────────────────────────────────────────────
BODY_IDS: Tuple[str, ...] = (
    "sun", "moon", "mercury", "venus", "mars",
    "jupiter", "saturn", "uranus", "neptune", "pluto",
    "trueNode", "chiron", "lilith",
    "ascendant", "mc",
)

# Chart-derived points: no house value, never aspect each other.
ANGLE_POINTS: Tuple[str, ...] = ("ascendant", "mc")

# Lower-cased aliases → canonical id. Canonical ids map to themselves.
BODY_ALIASES: Mapping[str, str] = MappingProxyType({
    **{b.lower(): b for b in BODY_IDS},
    "truenode": "trueNode",
    "true_node": "trueNode",
    "north_node": "trueNode",
    "northnode": "trueNode",
    "north node": "trueNode",
    "mean_node": "trueNode",
    "asc": "ascendant",
    "ac": "ascendant",
    "midheaven": "mc",
    "medium_coeli": "mc",
})


def canonical_body(name: object) -> str:
    """
    Map a raw body name to its canonical id. Unknown names are returned
    stripped but otherwise untouched, so callers can still key on them.
    """
    raw = str(name or "").strip()
    return BODY_ALIASES.get(raw.lower(), raw)


def is_angle_pair(a: str, b: str) -> bool:
    ca, cb = canonical_body(a), canonical_body(b)
    return ca != cb and ca in ANGLE_POINTS and cb in ANGLE_POINTS


# ── aspect catalog ───────────────────────────────────────────────────────────
AspectName = Literal["conjunction", "opposition", "square", "trine", "sextile"]
OrbCategory = Literal["major", "hard", "minor"]


@dataclass(frozen=True)
class AspectDef:
    name: str
    angle: float
    category: str   # which orb column applies
    symbol: str
    color: str      # line/glyph color used by chart renderers


# Detection order. With overlapping orb windows the first match wins.
ASPECT_CATALOG: Tuple[AspectDef, ...] = (
    AspectDef("conjunction", 0.0, "major", "☌", "#000000"),
    AspectDef("sextile", 60.0, "minor", "⚹", "#0000FF"),
    AspectDef("square", 90.0, "hard", "□", "#FF0000"),
    AspectDef("trine", 120.0, "hard", "△", "#0000FF"),
    AspectDef("opposition", 180.0, "major", "☍", "#FF0000"),
)

ASPECTS_BY_NAME: Mapping[str, AspectDef] = MappingProxyType({a.name: a for a in ASPECT_CATALOG})
ASPECT_NAMES: Tuple[str, ...] = tuple(a.name for a in ASPECT_CATALOG)

# Ranking tie-break: lower index ranks first.
TYPE_PRECEDENCE: Tuple[str, ...] = ("conjunction", "opposition", "square", "trine", "sextile")

_ASPECT_ALIASES: Mapping[str, str] = MappingProxyType({"sextil": "sextile"})


def canonical_aspect(name: object) -> str:
    """Lower-cased aspect key with known aliases folded in (e.g. 'sextil')."""
    a = str(name or "").strip().lower()
    return _ASPECT_ALIASES.get(a, a)


def type_rank(name: str) -> int:
    try:
        return TYPE_PRECEDENCE.index(name)
    except ValueError:
        return len(TYPE_PRECEDENCE)


# ── vocabulary ───────────────────────────────────────────────────────────────
SUPPORTED_LANGS: Tuple[str, ...] = ("en", "pt")
DEFAULT_LANG: str = "en"


def normalize_lang(raw: object) -> str:
    v = str(raw or "en").strip().lower()
    if v.startswith("pt"):
        return "pt"
    return "en"


BODY_LABELS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "en": MappingProxyType({
        "sun": "Sun", "moon": "Moon", "mercury": "Mercury", "venus": "Venus", "mars": "Mars",
        "jupiter": "Jupiter", "saturn": "Saturn", "uranus": "Uranus", "neptune": "Neptune",
        "pluto": "Pluto", "ascendant": "Ascendant", "mc": "Midheaven",
        "trueNode": "North Node", "chiron": "Chiron", "lilith": "Lilith",
    }),
    "pt": MappingProxyType({
        "sun": "sol", "moon": "lua", "mercury": "mercúrio", "venus": "vênus", "mars": "marte",
        "jupiter": "júpiter", "saturn": "saturno", "uranus": "urano", "neptune": "netuno",
        "pluto": "plutão", "ascendant": "ascendente", "mc": "meio do céu",
        "trueNode": "nodo norte", "chiron": "quíron", "lilith": "lilith",
    }),
})

TYPE_LABELS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "en": MappingProxyType({
        "conjunction": "conjunction", "opposition": "opposition", "square": "square",
        "trine": "trine", "sextile": "sextile",
    }),
    "pt": MappingProxyType({
        "conjunction": "conjunção", "opposition": "oposição", "square": "quadratura",
        "trine": "trígono", "sextile": "sextil",
    }),
})

TYPE_CONNECTORS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "en": MappingProxyType({
        "conjunction": "in conjunction with",
        "opposition": "in opposition to",
        "square": "in square with",
        "trine": "in trine with",
        "sextile": "in sextile with",
    }),
    "pt": MappingProxyType({
        "conjunction": "em conjunção com",
        "opposition": "em oposição a",
        "square": "em quadratura com",
        "trine": "em trígono com",
        "sextile": "em sextil com",
    }),
})

# ── signs ─────────────────────────────────────────────────────────────────────
SIGNS: Tuple[str, ...] = (
    "Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
    "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces",
)


def sign_of(lon_deg: float) -> Optional[str]:
    """Zodiac sign for an ecliptic longitude (30° sectors from 0° Aries)."""
    try:
        x = float(lon_deg)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(x):
        return None
    return SIGNS[int(wrap_deg(x) // 30.0) % 12]


# ── tiny angle helpers ────────────────────────────────────────────────────────
def wrap_deg(x: float) -> float:
    """
    Wrap any angle to [0, 360).
    """
    x = math.fmod(float(x), 360.0)
    return x + 360.0 if x < 0.0 else x


def abs_sep_deg(a: float, b: float) -> float:
    """
    Absolute smallest separation between angles a and b (deg, 0..180).
    """
    d = abs(wrap_deg(a) - wrap_deg(b))
    return 360.0 - d if d > 180.0 else d


# x * 60 can land just under a whole minute (4 + 5/60 gives 244.99999...)
_MINUTE_EPS = 1e-9


def floor_to_minute(lon_deg: float) -> float:
    """Truncate a longitude to whole arc-minutes (floor)."""
    return math.floor(float(lon_deg) * 60.0 + _MINUTE_EPS) / 60.0

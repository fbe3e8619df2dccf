# zodika/core/scoring.py
"""
Heuristic significance score for a tagged aspect.

    score = min(CAP, type_weight * max(body_weight(a), body_weight(b))
                     + max(house_bonus(house_a), house_bonus(house_b)))

The score only orders aspects within one report; it is not a physical quantity.
"""
from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import Any, List, Mapping, Sequence

from zodika.core.constants import ASPECTS_BY_NAME, canonical_aspect, canonical_body, is_angle_pair
from zodika.core.models import AspectInstance, PointRef

__all__ = [
    "SCORE_CAP",
    "TYPE_WEIGHTS",
    "BODY_WEIGHTS",
    "DEFAULT_BODY_WEIGHT",
    "type_weight",
    "body_weight",
    "house_bonus",
    "score",
    "score_records",
]

log = logging.getLogger(__name__)

SCORE_CAP: float = 10.0

TYPE_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "conjunction": 5.0,
    "opposition": 5.0,
    "square": 4.0,
    "trine": 3.0,
    "sextile": 3.0,
})

BODY_WEIGHTS: Mapping[str, float] = MappingProxyType({
    # angles & luminaries
    "ascendant": 2.5, "mc": 2.5, "sun": 2.5, "moon": 2.5,
    # personal
    "mercury": 1.6, "venus": 1.6, "mars": 1.6,
    # social
    "jupiter": 1.3, "saturn": 1.3,
    # outer
    "uranus": 1.2, "neptune": 1.2, "pluto": 1.2,
    # minor points
    "trueNode": 1.0, "chiron": 1.0, "lilith": 1.0,
})
DEFAULT_BODY_WEIGHT: float = 1.0

_ANGULAR = frozenset({1, 4, 7, 10})
_SUCCEDENT = frozenset({2, 5, 8, 11})
_CADENT = frozenset({3, 6, 9, 12})


def type_weight(aspect: str) -> float:
    name = canonical_aspect(aspect)
    if name not in ASPECTS_BY_NAME:
        raise ValueError(f"unknown aspect type: {aspect!r}")
    return TYPE_WEIGHTS[name]


def body_weight(body: Any) -> float:
    return BODY_WEIGHTS.get(canonical_body(body), DEFAULT_BODY_WEIGHT)


def house_bonus(house: Any) -> float:
    # Only real numbers count; strings, bools and NaN/inf give no bonus.
    if isinstance(house, bool) or not isinstance(house, (int, float)):
        return 0.0
    if not math.isfinite(house) or house != int(house):
        return 0.0
    h = int(house)
    if h in _ANGULAR:
        return 0.5
    if h in _SUCCEDENT:
        return 0.2
    if h in _CADENT:
        return 0.1
    return 0.0


def score(aspect: str, body_a: Any, house_a: Any, body_b: Any, house_b: Any) -> float:
    raw = type_weight(aspect) * max(body_weight(body_a), body_weight(body_b))
    raw += max(house_bonus(house_a), house_bonus(house_b))
    return min(SCORE_CAP, raw)


def score_records(aspects: Mapping[str, Sequence[Mapping[str, Any]]]) -> List[AspectInstance]:
    """
    Score every pair record of a normalized {type: [record, ...]} mapping.
    Records missing a body name on either side, and ascendant/mc pairs,
    are dropped silently.
    """
    out: List[AspectInstance] = []
    dropped = 0
    for type_name, records in aspects.items():
        name = canonical_aspect(type_name)
        if name not in ASPECTS_BY_NAME:
            continue
        for rec in records:
            p1 = PointRef.from_record(rec.get("planet1")) if isinstance(rec, Mapping) else None
            p2 = PointRef.from_record(rec.get("planet2")) if isinstance(rec, Mapping) else None
            if p1 is None or p2 is None or is_angle_pair(p1.name, p2.name):
                dropped += 1
                continue
            s = score(name, p1.name, p1.house, p2.name, p2.house)
            out.append(AspectInstance(type=name, p1=p1, p2=p2, score=s))
    if dropped:
        log.debug("dropped %d pair record(s): missing body name or angle pair", dropped)
    return out

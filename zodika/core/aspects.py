# zodika/core/aspects.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence
import itertools
import math

from zodika.core.constants import (
    ANGLE_POINTS,
    ASPECT_CATALOG,
    AspectDef,
    abs_sep_deg,
    canonical_body,
    floor_to_minute,
    is_angle_pair,
    sign_of,
)
from zodika.core.orbs import CHART_ORBS, OrbTable

__all__ = [
    "CelestialPoint",
    "DetectedAspect",
    "separation_deg",
    "match_aspect",
    "detect",          # PURE pair classifier (aspect name or None)
    "detect_all",      # every unordered pair of a chart
    "to_tagged_mapping",
    "aspect_grid",     # symbol/color matrix for table renderers
]

# ─────────────────────────────────────────────────────────────────────────────
# Data model
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CelestialPoint:
    name: str
    longitude: float
    sign: Optional[str] = None
    house: Optional[int] = None
    retrograde: bool = False

    @property
    def body(self) -> str:
        return canonical_body(self.name)

    @property
    def is_angle(self) -> bool:
        return self.body in ANGLE_POINTS

    def ref(self) -> Dict[str, Any]:
        """Pair-record side in the pre-tagged wire shape."""
        out: Dict[str, Any] = {"name": self.name}
        sign = self.sign or sign_of(self.longitude)
        if sign:
            out["sign"] = sign
        if self.house is not None and not self.is_angle:
            out["house"] = self.house
        return out


@dataclass(frozen=True)
class DetectedAspect:
    type: str
    p1: CelestialPoint
    p2: CelestialPoint
    separation_deg: float     # minute-floored circular separation, [0, 180]
    orb_deg: float            # averaged orb allowed for this pair/category
    delta_deg: float          # |separation - exact angle|

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "p1": self.p1.name,
            "p2": self.p2.name,
            "separation_deg": float(self.separation_deg),
            "orb_deg": float(self.orb_deg),
            "delta_deg": float(self.delta_deg),
        }


# ─────────────────────────────────────────────────────────────────────────────
# Geometry
# ─────────────────────────────────────────────────────────────────────────────

def _finite(x: Any) -> bool:
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        return False
    return math.isfinite(x)


def separation_deg(lon_a: float, lon_b: float) -> float:
    """Circular separation in [0, 180] after flooring both longitudes to the arc-minute."""
    sep = abs_sep_deg(floor_to_minute(lon_a), floor_to_minute(lon_b))
    # snap back onto the minute grid so orb edges compare exactly
    return round(sep * 60.0) / 60.0


def match_aspect(
    p1: CelestialPoint,
    p2: CelestialPoint,
    *,
    orbs: OrbTable = CHART_ORBS,
    catalog: Sequence[AspectDef] = ASPECT_CATALOG,
) -> Optional[DetectedAspect]:
    """
    First catalog entry whose orb window contains the pair's separation.
    Structural rejections (unknown body, angle pair, bad longitude, same body)
    yield None, never an exception.
    """
    if p1.body == p2.body or is_angle_pair(p1.name, p2.name):
        return None
    if not (_finite(p1.longitude) and _finite(p2.longitude)):
        return None
    if orbs.rule(p1.name) is None or orbs.rule(p2.name) is None:
        return None

    sep = separation_deg(p1.longitude, p2.longitude)
    for asp in catalog:
        orb = orbs.pair_orb(p1.name, p2.name, asp.category) or 0.0
        delta = abs(sep - asp.angle)
        if delta <= orb:
            return DetectedAspect(
                type=asp.name, p1=p1, p2=p2,
                separation_deg=sep, orb_deg=orb, delta_deg=delta,
            )
    return None


def detect(
    p1: CelestialPoint,
    p2: CelestialPoint,
    *,
    orbs: OrbTable = CHART_ORBS,
    catalog: Sequence[AspectDef] = ASPECT_CATALOG,
) -> Optional[str]:
    hit = match_aspect(p1, p2, orbs=orbs, catalog=catalog)
    return hit.type if hit else None


# ─────────────────────────────────────────────────────────────────────────────
# Chart-wide helpers
# ─────────────────────────────────────────────────────────────────────────────

def detect_all(
    points: Iterable[CelestialPoint],
    *,
    orbs: OrbTable = CHART_ORBS,
    catalog: Sequence[AspectDef] = ASPECT_CATALOG,
) -> List[DetectedAspect]:
    """All aspects between unordered pairs, in input pair order."""
    pts = list(points)
    out: List[DetectedAspect] = []
    for a, b in itertools.combinations(pts, 2):
        hit = match_aspect(a, b, orbs=orbs, catalog=catalog)
        if hit is not None:
            out.append(hit)
    return out


def to_tagged_mapping(detected: Iterable[DetectedAspect]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Pre-tagged shape consumed by the report path:
      {type: [{"planet1": {...}, "planet2": {...}}, ...]}
    Every catalog type is present, possibly with an empty list.
    """
    out: Dict[str, List[Dict[str, Any]]] = {a.name: [] for a in ASPECT_CATALOG}
    for hit in detected:
        out.setdefault(hit.type, []).append({"planet1": hit.p1.ref(), "planet2": hit.p2.ref()})
    return out


def aspect_grid(
    points: Sequence[CelestialPoint],
    *,
    orbs: OrbTable = CHART_ORBS,
    catalog: Sequence[AspectDef] = ASPECT_CATALOG,
) -> List[Dict[str, Any]]:
    """
    Lower-triangle matrix for table renderers: one row per point, one cell per
    earlier point. Cells carry the catalog glyph and color, or empty strings.
    """
    by_name = {a.name: a for a in catalog}
    rows: List[Dict[str, Any]] = []
    for i, row_pt in enumerate(points):
        cells: List[Dict[str, str]] = []
        for col_pt in points[:i]:
            name = detect(row_pt, col_pt, orbs=orbs, catalog=catalog)
            asp = by_name.get(name) if name else None
            cells.append({
                "with": col_pt.name,
                "type": asp.name if asp else "",
                "symbol": asp.symbol if asp else "",
                "color": asp.color if asp else "",
            })
        rows.append({"name": row_pt.name, "cells": cells})
    return rows


if __name__ == "__main__":
    pts = [CelestialPoint("sun", 10.0), CelestialPoint("moon", 100.0), CelestialPoint("mars", 190.5)]
    from pprint import pprint
    pprint([h.as_dict() for h in detect_all(pts)])

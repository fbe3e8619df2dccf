# zodika/core/orbs.py
"""
Per-body orb tolerances.

Each body carries three orb columns; the aspect's category picks the column:
  major → conjunction / opposition
  hard  → square / trine
  minor → sextile

A pair's effective orb is the arithmetic mean of both bodies' column values.
A body without a rule cannot take part in detection.

Two candidate default tables ship here because the chart renderer and the
aspect-table renderer historically disagreed; pick one by name.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from zodika.core.constants import canonical_body

__all__ = [
    "OrbRule",
    "OrbTable",
    "CHART_ORBS",
    "FLAT_ORBS",
    "ORB_TABLES",
    "DEFAULT_ORB_TABLE",
    "get_orb_table",
]


@dataclass(frozen=True)
class OrbRule:
    major: float
    hard: float
    minor: float

    def for_category(self, category: str) -> float:
        if category == "major":
            return self.major
        if category == "hard":
            return self.hard
        if category == "minor":
            return self.minor
        raise KeyError(f"unknown orb category: {category!r}")


class OrbTable(Mapping[str, OrbRule]):
    """Read-only body → OrbRule mapping keyed by canonical body id."""

    def __init__(self, name: str, rules: Mapping[str, OrbRule]):
        self.name = name
        self._rules: Mapping[str, OrbRule] = MappingProxyType(
            {canonical_body(k): v for k, v in rules.items()}
        )

    def __getitem__(self, body: str) -> OrbRule:
        return self._rules[canonical_body(body)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"OrbTable({self.name!r}, {len(self)} bodies)"

    def rule(self, body: str) -> Optional[OrbRule]:
        return self._rules.get(canonical_body(body))

    def pair_orb(self, a: str, b: str, category: str) -> Optional[float]:
        """Mean of both bodies' orbs for `category`; None if either body has no rule."""
        ra, rb = self.rule(a), self.rule(b)
        if ra is None or rb is None:
            return None
        return 0.5 * (ra.for_category(category) + rb.for_category(category))

    def with_overrides(self, overrides: Optional[Mapping[str, Any]]) -> "OrbTable":
        """
        New table with per-body overrides applied. Each override is a
        [major, hard, minor] triple; malformed entries are skipped.
        """
        if not overrides:
            return self
        merged: Dict[str, OrbRule] = dict(self._rules)
        for body, vals in overrides.items():
            rule = _rule_from(vals)
            if rule is not None:
                merged[canonical_body(body)] = rule
        return OrbTable(f"{self.name}+overrides", merged)


def _rule_from(vals: Any) -> Optional[OrbRule]:
    if isinstance(vals, Mapping):
        vals = [vals.get("major"), vals.get("hard"), vals.get("minor")]
    if not isinstance(vals, Sequence) or isinstance(vals, str) or len(vals) != 3:
        return None
    try:
        major, hard, minor = (float(v) for v in vals)
    except (TypeError, ValueError):
        return None
    if not all(math.isfinite(x) and x >= 0.0 for x in (major, hard, minor)):
        return None
    return OrbRule(major, hard, minor)


# Graded orbs: luminaries widest, minor points tightest.
CHART_ORBS = OrbTable("chart", {
    "sun":       OrbRule(10.0, 8.0, 6.0),
    "moon":      OrbRule(10.0, 8.0, 6.0),
    "mercury":   OrbRule(7.0, 6.0, 4.0),
    "venus":     OrbRule(7.0, 6.0, 4.0),
    "mars":      OrbRule(7.0, 6.0, 4.0),
    "jupiter":   OrbRule(6.0, 5.0, 4.0),
    "saturn":    OrbRule(6.0, 5.0, 4.0),
    "uranus":    OrbRule(5.0, 4.0, 3.0),
    "neptune":   OrbRule(5.0, 4.0, 3.0),
    "pluto":     OrbRule(5.0, 4.0, 3.0),
    "trueNode":  OrbRule(4.0, 3.0, 2.0),
    "chiron":    OrbRule(3.0, 2.0, 2.0),
    "lilith":    OrbRule(3.0, 2.0, 2.0),
    "ascendant": OrbRule(8.0, 6.0, 4.0),
    "mc":        OrbRule(8.0, 6.0, 4.0),
})

# Flat 6° everywhere, as used by the aspect-table renderer.
FLAT_ORBS = OrbTable("flat", {
    b: OrbRule(6.0, 6.0, 6.0) for b in CHART_ORBS
})

ORB_TABLES: Mapping[str, OrbTable] = MappingProxyType({
    CHART_ORBS.name: CHART_ORBS,
    FLAT_ORBS.name: FLAT_ORBS,
})

DEFAULT_ORB_TABLE = "chart"


def get_orb_table(name: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None) -> OrbTable:
    """Look up a named table (default 'chart'); raises KeyError for unknown names."""
    key = (name or DEFAULT_ORB_TABLE).strip().lower()
    try:
        table = ORB_TABLES[key]
    except KeyError:
        raise KeyError(f"unknown orb table {name!r}; choose one of {sorted(ORB_TABLES)}") from None
    return table.with_overrides(overrides)

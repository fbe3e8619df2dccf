# zodika/core/report.py
"""
Top-N aspect report.

Pipeline (pure, no I/O besides logging):
    raw payload → parse_aspects → score_records → rank → title + text → AspectReport

The report always exposes exactly `limit` slots; unused slots are empty strings.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from zodika.core.constants import DEFAULT_LANG, normalize_lang
from zodika.core.models import AspectInstance
from zodika.core.normalize import parse_aspects
from zodika.core.ranking import DEFAULT_LIMIT, CollationKey, rank, title_collation_key
from zodika.core.scoring import score_records
from zodika.core.texts import TextResolver
from zodika.core.titles import make_title
from zodika.version import SCORING_VERSION, TEXTS_VERSION

__all__ = ["ReportSlot", "AspectReport", "build_slots", "build_report"]


@dataclass(frozen=True)
class ReportSlot:
    title: str = ""
    text: str = ""

    @property
    def empty(self) -> bool:
        return not self.title


@dataclass
class AspectReport:
    slots: List[ReportSlot]
    top: List[Dict[str, Any]]
    parsed_ok: bool
    shape: str
    lang: str = DEFAULT_LANG
    missing: Optional[List[Dict[str, Any]]] = None
    texts_version: str = TEXTS_VERSION
    scoring_version: str = SCORING_VERSION
    ignored_keys: List[str] = field(default_factory=list)

    @property
    def placeholders(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for i, slot in enumerate(self.slots, start=1):
            out[f"aspect{i}_title"] = slot.title
            out[f"aspect{i}_text"] = slot.text
        return out

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "aspects_parsed_ok": self.parsed_ok,
            "input_shape": self.shape,
            "lang": self.lang,
            "placeholders": self.placeholders,
            "slots": [{"title": s.title, "text": s.text} for s in self.slots],
            "top_debug": list(self.top),
            "aspects_version": self.texts_version,
            "scoring_version": self.scoring_version,
        }
        if self.missing is not None:
            out["debug_missing"] = list(self.missing)
        return out


def _diagnostic(a: AspectInstance, title: str) -> Dict[str, Any]:
    return {
        "title": title,
        "score": float(a.score),
        "type": a.type,
        "p1": a.p1.name,
        "p2": a.p2.name,
        "house1": a.p1.house,
        "house2": a.p2.house,
    }


def build_slots(
    ranked: List[AspectInstance],
    limit: int,
    resolver: TextResolver,
    *,
    lang: str = DEFAULT_LANG,
    missing: Optional[List[Dict[str, Any]]] = None,
) -> List[ReportSlot]:
    """Exactly `limit` slots: ranked aspects first, then empty padding."""
    slots: List[ReportSlot] = []
    for a in ranked[:limit]:
        slots.append(ReportSlot(
            title=make_title(a, lang),
            text=resolver.resolve(a.p1.name, a.p2.name, a.type, missing=missing),
        ))
    slots.extend(ReportSlot() for _ in range(max(0, limit - len(slots))))
    return slots


def build_report(
    raw: Any,
    resolver: TextResolver,
    *,
    limit: int = DEFAULT_LIMIT,
    lang: str = DEFAULT_LANG,
    debug: bool = False,
    collation: CollationKey = title_collation_key,
) -> AspectReport:
    """
    Malformed input never raises: it yields parsed_ok=False and empty slots.
    Resolver/corpus failures are the caller's to handle before getting here.
    """
    lang = normalize_lang(lang)
    limit = max(0, int(limit))
    parsed = parse_aspects(raw)

    ranked = rank(score_records(parsed.aspects), limit, lang=lang, collation=collation)

    missing: Optional[List[Dict[str, Any]]] = [] if debug else None
    slots = build_slots(ranked, limit, resolver, lang=lang, missing=missing)
    top = [_diagnostic(a, slot.title) for a, slot in zip(ranked, slots)]

    return AspectReport(
        slots=slots,
        top=top,
        parsed_ok=parsed.parsed_ok,
        shape=parsed.shape,
        lang=lang,
        missing=missing,
        texts_version=resolver.version,
        ignored_keys=list(parsed.ignored_keys),
    )

# zodika/core/ranking.py
"""
Deduplicate and rank scored aspects.

Order: score desc → type precedence (conjunction, opposition, square, trine,
sextile) → title, case/diacritic-insensitive. The title collation lives in
`title_collation_key` so it can be swapped without touching the ranking.
"""
from __future__ import annotations

import unicodedata
from typing import Any, Callable, Dict, Iterable, List, Tuple

from zodika.core.constants import DEFAULT_LANG, type_rank
from zodika.core.models import AspectInstance
from zodika.core.titles import make_title

__all__ = [
    "DEFAULT_LIMIT",
    "CollationKey",
    "title_collation_key",
    "dedupe",
    "sort_instances",
    "rank",
]

DEFAULT_LIMIT = 10

CollationKey = Callable[[str], Any]


def title_collation_key(s: str) -> Tuple[str, str, str]:
    """
    Locale-neutral approximation of a case- and accent-insensitive collation:
    primary key folds diacritics and case, the rest break ties deterministically.
    """
    decomposed = unicodedata.normalize("NFKD", s)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), s.casefold(), s)


def dedupe(instances: Iterable[AspectInstance]) -> List[AspectInstance]:
    """Keep the highest-scoring instance per (type, sorted pair); first seen wins ties."""
    best: Dict[Tuple[str, str, str], AspectInstance] = {}
    for inst in instances:
        prev = best.get(inst.pair_key)
        if prev is None or inst.score > prev.score:
            best[inst.pair_key] = inst
    return list(best.values())


def sort_instances(
    instances: Iterable[AspectInstance],
    *,
    lang: str = DEFAULT_LANG,
    collation: CollationKey = title_collation_key,
) -> List[AspectInstance]:
    return sorted(
        instances,
        key=lambda a: (-a.score, type_rank(a.type), collation(make_title(a, lang))),
    )


def rank(
    instances: Iterable[AspectInstance],
    limit: int = DEFAULT_LIMIT,
    *,
    lang: str = DEFAULT_LANG,
    collation: CollationKey = title_collation_key,
) -> List[AspectInstance]:
    """Top `limit` unique aspects; shorter when fewer qualify (slot padding is the report's job)."""
    if limit <= 0:
        return []
    return sort_instances(dedupe(instances), lang=lang, collation=collation)[:limit]

# zodika/core/normalize.py
"""
Aspect payload normalizer.

Upstream workflows hand us pre-tagged aspects in whatever shape they happen to
produce: a native mapping, a JSON string (sometimes wrapped in prose or code
fences), or an array of single-key mappings. Two stages:

  1) extract_mapping(raw) → (mapping, shape)   best-effort decoding, never raises
  2) parse_aspects(raw)   → NormalizedAspects  catalog filtering into
                                               {type: [pair_record, ...]}

`parsed_ok` is False when nothing usable could be decoded, which callers must
report separately from "decoded fine but zero aspects".
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Sequence, Tuple

from zodika.core.constants import ASPECTS_BY_NAME, ASPECT_NAMES, canonical_aspect

__all__ = ["Shape", "NormalizedAspects", "extract_mapping", "parse_aspects", "normalize"]

log = logging.getLogger(__name__)

Shape = Literal["mapping", "json", "embedded_json", "json_array", "array", "empty", "invalid"]


@dataclass(frozen=True)
class NormalizedAspects:
    aspects: Dict[str, List[Dict[str, Any]]]
    parsed_ok: bool
    shape: str
    ignored_keys: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return sum(len(v) for v in self.aspects.values())


def _merge_objects(items: Sequence[Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for item in items:
        if isinstance(item, Mapping):
            out.update(item)
    return out


def _loads(s: str) -> Any:
    try:
        return json.loads(s)
    except (ValueError, RecursionError):
        # RecursionError: pathologically nested arrays/objects
        return None


def _extract_text(s: str) -> Tuple[Dict[str, Any], str]:
    s = s.strip()
    if not s:
        return {}, "empty"

    # first {...} block, possibly embedded in prose
    first, last = s.find("{"), s.rfind("}")
    if first != -1 and last > first:
        obj = _loads(s[first:last + 1])
        if isinstance(obj, Mapping):
            whole = first == 0 and last == len(s) - 1
            return dict(obj), "json" if whole else "embedded_json"

    obj = _loads(s)
    if isinstance(obj, Mapping):
        return dict(obj), "json"
    if isinstance(obj, list):
        return _merge_objects(obj), "json_array"
    return {}, "invalid"


def extract_mapping(raw: Any) -> Tuple[Dict[str, Any], str]:
    """Decode `raw` into a plain dict plus the shape tag it arrived in."""
    if raw is None:
        return {}, "empty"
    if isinstance(raw, Mapping):
        return dict(raw), "mapping"
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8", errors="replace")
    if isinstance(raw, str):
        return _extract_text(raw)
    if isinstance(raw, (list, tuple)):
        return _merge_objects(raw), "array"
    return {}, "invalid"


def parse_aspects(raw: Any) -> NormalizedAspects:
    mapping, shape = extract_mapping(raw)

    aspects: Dict[str, List[Dict[str, Any]]] = {}
    ignored: List[str] = []
    for key, records in mapping.items():
        name = canonical_aspect(key)
        if name not in ASPECTS_BY_NAME:
            ignored.append(str(key))
            continue
        if not isinstance(records, (list, tuple)):
            records = []
        aspects.setdefault(name, []).extend(dict(r) for r in records if isinstance(r, Mapping))

    # stable catalog order regardless of payload key order
    ordered = {n: aspects[n] for n in ASPECT_NAMES if n in aspects}
    if ignored:
        log.debug("ignored non-aspect keys: %s", ignored)
    return NormalizedAspects(
        aspects=ordered,
        parsed_ok=bool(mapping),
        shape=shape,
        ignored_keys=tuple(ignored),
    )


def normalize(raw: Any) -> Dict[str, List[Dict[str, Any]]]:
    """Canonical {aspect_type: [pair_record, ...]}; empty on anything unusable."""
    return parse_aspects(raw).aspects

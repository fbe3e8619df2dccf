# zodika/core/titles.py
"""Human-readable aspect titles, e.g. 'Sun in Leo house 10 in square with Moon in Scorpio house 1'."""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from zodika.core.constants import BODY_LABELS, DEFAULT_LANG, TYPE_CONNECTORS, normalize_lang
from zodika.core.models import AspectInstance, PointRef

__all__ = ["point_label", "format_side", "make_title"]

# "{label} in {sign} house {N}" pieces per language
_IN: Mapping[str, str] = MappingProxyType({"en": "in", "pt": "em"})
_HOUSE: Mapping[str, str] = MappingProxyType({"en": "house", "pt": "casa"})
_FALLBACK_CONNECTOR: Mapping[str, str] = MappingProxyType({"en": "with", "pt": "com"})


def point_label(p: PointRef, lang: str = DEFAULT_LANG) -> str:
    """Explicit label → static body table → raw identifier."""
    if p.label:
        return p.label
    labels = BODY_LABELS.get(normalize_lang(lang), BODY_LABELS[DEFAULT_LANG])
    return labels.get(p.body) or p.name


def _fmt_house(h) -> str:
    return str(h) if isinstance(h, int) else f"{h:g}"


def format_side(p: PointRef, lang: str = DEFAULT_LANG) -> str:
    lang = normalize_lang(lang)
    out = point_label(p, lang)
    if p.sign:
        out = f"{out} {_IN[lang]} {p.sign}"
    if p.house is not None and not p.is_angle:
        out = f"{out} {_HOUSE[lang]} {_fmt_house(p.house)}"
    return out


def make_title(a: AspectInstance, lang: str = DEFAULT_LANG) -> str:
    lang = normalize_lang(lang)
    link = TYPE_CONNECTORS[lang].get(a.type) or _FALLBACK_CONNECTOR[lang]
    return f"{format_side(a.p1, lang)} {link} {format_side(a.p2, lang)}"

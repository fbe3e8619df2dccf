# zodika/core/texts.py
"""
Interpretive text lookup.

The corpus is a static mapping keyed by sorted slug pairs:

    {"moon|sun": {"conjunction": "...", "square": "...", ...}, ...}

Raw body identifiers are slugged (diacritics stripped, lower-cased, whitespace
collapsed to '_', aliases folded) before lookup. A missing entry is never an
error: the resolver returns "" and logs one warning carrying the identifiers
exactly as received.
"""
from __future__ import annotations

import logging
import os
import re
import unicodedata
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from zodika.core.constants import DEFAULT_LANG, canonical_aspect, normalize_lang
from zodika.version import TEXTS_VERSION

__all__ = [
    "CorpusUnavailableError",
    "SLUG_ALIASES",
    "DEFAULT_CORPUS_PATH",
    "DEFAULT_CORPUS_PATHS",
    "slug",
    "pair_key",
    "load_corpus",
    "TextResolver",
    "default_resolver",
]

log = logging.getLogger(__name__)

_DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

# one bundled corpus per report language
DEFAULT_CORPUS_PATHS: Mapping[str, str] = MappingProxyType({
    "en": os.path.join(_DATA_DIR, "aspect_texts.yaml"),
    "pt": os.path.join(_DATA_DIR, "aspect_texts.pt.yaml"),
})
DEFAULT_CORPUS_PATH = DEFAULT_CORPUS_PATHS[DEFAULT_LANG]


class CorpusUnavailableError(RuntimeError):
    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(f"{code}: {message}")


# slug → dictionary slug
SLUG_ALIASES: Mapping[str, str] = MappingProxyType({
    "ascendant": "asc", "ac": "asc", "ascendente": "asc",
    "midheaven": "mc", "medium_coeli": "mc", "meio_do_ceu": "mc",
    "truenode": "north_node", "true_node": "north_node", "northnode": "north_node",
    "mean_node": "north_node", "nodo_norte": "north_node",
    # Portuguese body names
    "sol": "sun", "lua": "moon", "mercurio": "mercury", "marte": "mars",
    "saturno": "saturn", "urano": "uranus", "netuno": "neptune",
    "plutao": "pluto", "quiron": "chiron",
})

_WS = re.compile(r"\s+")


def slug(name: Any) -> str:
    raw = str(name or "")
    decomposed = unicodedata.normalize("NFKD", raw)
    s = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    s = _WS.sub("_", s.strip().lower())
    return SLUG_ALIASES.get(s, s)


def pair_key(a: str, b: str) -> str:
    return "|".join(sorted((a, b)))


def _is_asc_mc(s1: str, s2: str) -> bool:
    return {s1, s2} == {"asc", "mc"}


# ─────────────────────────────────────────────────────────────────────────────
# Corpus loading
# ─────────────────────────────────────────────────────────────────────────────

def _normalize_corpus(data: Mapping[str, Any]) -> Dict[str, Dict[str, str]]:
    out: Dict[str, Dict[str, str]] = {}
    for key, entry in data.items():
        parts = str(key).split("|")
        if len(parts) != 2 or not isinstance(entry, Mapping):
            log.warning("corpus entry skipped (bad key or shape): %r", key)
            continue
        node = out.setdefault(pair_key(slug(parts[0]), slug(parts[1])), {})
        for aspect, text in entry.items():
            node[canonical_aspect(aspect)] = text
    return out


def load_corpus(path: Optional[str] = None, lang: str = DEFAULT_LANG) -> Dict[str, Dict[str, str]]:
    """
    Read a YAML corpus from `path`, or the bundled one for `lang`.
    Any read/parse/shape failure is CorpusUnavailableError.
    """
    p = path or DEFAULT_CORPUS_PATHS[normalize_lang(lang)]
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise CorpusUnavailableError("corpus_unreadable", f"{p}: {e}") from e
    except yaml.YAMLError as e:
        raise CorpusUnavailableError("corpus_malformed", f"{p}: {e}") from e
    if not isinstance(data, Mapping):
        raise CorpusUnavailableError("corpus_malformed", f"{p}: top level must be a mapping")
    corpus = _normalize_corpus(data)
    log.info("aspect texts loaded from %s (%d pairs)", p, len(corpus))
    return corpus


# ─────────────────────────────────────────────────────────────────────────────
# Resolver
# ─────────────────────────────────────────────────────────────────────────────

class TextResolver:
    """Read-only text lookup over a normalized corpus."""

    def __init__(self, corpus: Mapping[str, Mapping[str, Any]], *, version: str = TEXTS_VERSION):
        if not isinstance(corpus, Mapping):
            raise CorpusUnavailableError("corpus_malformed", "corpus must be a mapping")
        self.version = version
        self._corpus: Mapping[str, Mapping[str, Any]] = MappingProxyType(
            {k: MappingProxyType(dict(v)) for k, v in _normalize_corpus(corpus).items()}
        )

    def __len__(self) -> int:
        return len(self._corpus)

    def _get(self, key: str, aspect: str) -> str:
        node = self._corpus.get(key)
        if node is None:
            return ""
        val = node.get(aspect)
        return val.strip() if isinstance(val, str) else ""

    def lookup(self, s1: str, s2: str, aspect: str) -> Tuple[str, List[str]]:
        """
        Try received order, swapped order, then sorted order.
        Returns (text, tried_keys); text is "" when nothing matched.
        Every attempt is listed, so the sorted key always repeats one of the
        first two.
        """
        a = canonical_aspect(aspect)
        tried: List[str] = []
        for key in (f"{s1}|{s2}", f"{s2}|{s1}", pair_key(s1, s2)):
            tried.append(key)
            text = self._get(key, a)
            if text:
                return text, tried
        return "", tried

    def resolve(
        self,
        body_a: Any,
        body_b: Any,
        aspect: Any,
        *,
        missing: Optional[List[Dict[str, Any]]] = None,
    ) -> str:
        """
        Interpretive text for (body_a, body_b, aspect), or "".
        When `missing` is a list, an entry describing each miss is appended.
        """
        s1, s2 = slug(body_a), slug(body_b)
        a = canonical_aspect(aspect)

        if _is_asc_mc(s1, s2):
            if missing is not None:
                missing.append({"pair": f"{s1}|{s2}", "aspect": a, "reason": "invalid_pair_asc_mc"})
            return ""

        text, tried = self.lookup(s1, s2, a)
        if text:
            return text

        log.warning("no aspect text for %r/%r (%s); tried %s", body_a, body_b, aspect, tried)
        if missing is not None:
            missing.append({
                "pair": f"{s1}|{s2}",
                "aspect": a,
                "tried": [f"{k}.{a}" for k in tried],
                "reason": "missing_or_blank",
            })
        return ""


@lru_cache(maxsize=8)
def default_resolver(path: Optional[str] = None, lang: str = DEFAULT_LANG) -> TextResolver:
    """Process-wide resolver per (corpus path, language); loaded on first use."""
    return TextResolver(load_corpus(path, normalize_lang(lang)))

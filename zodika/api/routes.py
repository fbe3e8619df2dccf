# zodika/api/routes.py
"""
Zodika — API Routes
- Ops: /api/health, /api/config
- Report: /api/aspects/report  (raw aspect mapping → ranked top-N slots + texts)
- Detect: /api/aspects/detect  (point longitudes → aspects, tagged mapping, grid)

Notes:
- Report payloads may arrive wrapped in a one-element array (workflow tools do this).
- Malformed aspect data is not an error: the report comes back with
  aspects_parsed_ok=false and empty slots. Only a missing field is a 400.
- Authentication is handled in front of this service.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request

from zodika.core.aspects import aspect_grid, detect_all, to_tagged_mapping
from zodika.core.constants import ASPECT_NAMES, normalize_lang
from zodika.core.orbs import ORB_TABLES, OrbTable, get_orb_table
from zodika.core.report import build_report
from zodika.core.texts import CorpusUnavailableError, TextResolver, default_resolver
from zodika.core.validators import ValidationError, parse_points_payload
from zodika.utils.config import MAX_REPORT_LIMIT, load_config
from zodika.utils.metrics import MET_MISSING_TEXT, MET_REPORTS
from zodika.version import SCORING_VERSION, TEXTS_VERSION, VERSION

log = logging.getLogger(__name__)
api = Blueprint("api", __name__)

DEBUG_VERBOSE = os.getenv("ZODIKA_DEBUG_VERBOSE", "0").lower() in ("1", "true", "yes", "on")

_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


# ───────────────────────── helpers ─────────────────────────
def _json_error(code: str, details: Any = None, http: int = 400):
    out: Dict[str, Any] = {"ok": False, "error": code}
    if details is not None:
        out["details"] = details
    return jsonify(out), http


def _cfg():
    cfg = getattr(current_app, "cfg", None)
    return cfg if cfg is not None else load_config()


def _resolver(lang: str) -> TextResolver:
    """App-injected resolver for `lang` if any, else the cached corpus configured for it."""
    injected = getattr(current_app, "resolvers", None) or {}
    res = injected.get(lang)
    if res is not None:
        return res
    return default_resolver(_cfg().texts.paths.get(lang), lang)


def _flag(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    return str(v).strip().lower() in _TRUTHY


def _dig(root: Any, *path: str) -> Any:
    cur = root
    for k in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(k)
    return cur


def _first_present(*vals: Any) -> Any:
    for v in vals:
        if v is not None:
            return v
    return None


def _raw_aspects(root: Any) -> Any:
    return _first_present(
        _dig(root, "aspects"),
        _dig(root, "aspectsPayload"),
        _dig(root, "body", "ephemeris", "aspects"),
        _dig(root, "json", "body", "ephemeris", "aspects"),
    )


def _limit(root: Any, default: int) -> int:
    raw = _first_present(request.args.get("limit"), _dig(root, "limit"))
    if raw is None or isinstance(raw, bool):
        return default
    try:
        n = int(raw)
    except (TypeError, ValueError):
        return default
    return max(0, min(n, MAX_REPORT_LIMIT))


def _orb_table(name: Optional[str]) -> OrbTable:
    cfg = _cfg()
    return get_orb_table(name or cfg.orbs.table, cfg.orbs.get("overrides") or None)


# ───────────────────────── health / ops ─────────────────────────
@api.get("/api/health")
def health():
    return jsonify({"ok": True, "status": "up", "version": VERSION}), 200


@api.get("/api/config")
def config_info():
    cfg = _cfg()
    return jsonify(
        {
            "ok": True,
            "report_limit": cfg.report.limit,
            "lang": normalize_lang(cfg.report.lang),
            "orb_table": cfg.orbs.table,
            "orb_tables": sorted(ORB_TABLES),
            "aspects": list(ASPECT_NAMES),
            "aspects_version": TEXTS_VERSION,
            "scoring_version": SCORING_VERSION,
            "version": VERSION,
        }
    ), 200


# ───────────────────────── report ─────────────────────────
@api.post("/api/aspects/report")
def aspects_report():
    body = request.get_json(force=True, silent=True)
    root = body[0] if isinstance(body, list) and body else body
    if not isinstance(root, dict):
        root = {}

    debug = _flag(request.args.get("debug")) or _flag(root.get("debug"))
    cfg = _cfg()
    lang = normalize_lang(
        _first_present(
            request.args.get("lang"),
            root.get("lang"),
            _dig(root, "query", "lang"),
            _dig(root, "body", "lang"),
            cfg.report.lang,
        )
    )

    raw = _raw_aspects(root)
    if raw is None or raw == "":
        return _json_error("missing_aspects", 'Missing "aspects" in body', 400)

    try:
        resolver = _resolver(lang)
    except CorpusUnavailableError as e:
        log.error("aspect texts unavailable: %s", e)
        return _json_error("texts_unavailable", e.code, 503)

    report = build_report(raw, resolver, limit=_limit(root, cfg.report.limit), lang=lang, debug=True)
    MET_REPORTS.labels(parsed_ok=str(report.parsed_ok).lower()).inc()
    for m in report.missing or ():
        if m.get("reason") == "missing_or_blank":
            MET_MISSING_TEXT.labels(aspect=m.get("aspect", "")).inc()

    out = report.to_dict()
    if not debug:
        out.pop("debug_missing", None)
    else:
        out["ignored_keys"] = list(report.ignored_keys)
    return jsonify({"ok": True, **out, "dict_loaded": len(resolver) > 0}), 200


# ───────────────────────── detect ─────────────────────────
@api.post("/api/aspects/detect")
def aspects_detect():
    body = request.get_json(force=True, silent=True)
    try:
        points = parse_points_payload(body)
    except ValidationError as e:
        return _json_error("validation_error", e.errors(), 400)

    table_name = body.get("orb_table") if isinstance(body.get("orb_table"), str) else None
    try:
        orbs = _orb_table(table_name)
    except KeyError as e:
        return _json_error("unknown_orb_table", str(e) if DEBUG_VERBOSE else table_name, 400)

    found = detect_all(points, orbs=orbs)
    return jsonify(
        {
            "ok": True,
            "orb_table": orbs.name,
            "count": len(found),
            "aspects": [a.as_dict() for a in found],
            "by_type": to_tagged_mapping(found),
            "grid": aspect_grid(points, orbs=orbs),
        }
    ), 200

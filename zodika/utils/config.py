# zodika/utils/config.py
import copy
import os

import yaml

MAX_REPORT_LIMIT = 50

DEFAULTS = {
    "report": {"limit": 10, "lang": "en"},
    "orbs": {"table": "chart", "overrides": {}},
    # None → the corpus bundled for that language
    "texts": {"paths": {"en": None, "pt": None}},
}


class AttrDict(dict):
    """Dict that also supports attribute access: cfg.report and cfg['report'] both work."""
    def __getattr__(self, item):
        try:
            return self[item]
        except KeyError as e:
            raise AttributeError(item) from e
    def __setattr__(self, key, value):
        self[key] = value

def _to_attr(obj):
    if isinstance(obj, dict):
        return AttrDict({k: _to_attr(v) for k, v in obj.items()})
    if isinstance(obj, list):
        return [_to_attr(x) for x in obj]
    return obj

def _merge(base, extra):
    for k, v in (extra or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _merge(base[k], v)
        else:
            base[k] = v
    return base

def _as_int(raw, default):
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, str) and not raw.strip():
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default

def _env_int(name, default):
    return _as_int(os.getenv(name), default)

def load_config(path=None):
    """
    Load YAML config from `path` (or $ZODIKA_CONFIG, default config/defaults.yaml)
    over the built-in defaults. A missing file just yields the defaults.
    Env overrides:
      - ZODIKA_ORB_TABLE     orbs.table
      - ZODIKA_LANG          report.lang
      - ZODIKA_REPORT_LIMIT  report.limit
      - ZODIKA_TEXTS         texts.paths.en
      - ZODIKA_TEXTS_PT      texts.paths.pt
    report.limit is coerced to an int in 0..50; anything else keeps the default.
    Returns an AttrDict for convenient access.
    """
    path = path or os.getenv("ZODIKA_CONFIG", "config/defaults.yaml")
    data = copy.deepcopy(DEFAULTS)
    if path and os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            _merge(data, yaml.safe_load(f) or {})

    if os.getenv("ZODIKA_ORB_TABLE"):
        data["orbs"]["table"] = os.environ["ZODIKA_ORB_TABLE"]
    if os.getenv("ZODIKA_LANG"):
        data["report"]["lang"] = os.environ["ZODIKA_LANG"]
    for lang, env in (("en", "ZODIKA_TEXTS"), ("pt", "ZODIKA_TEXTS_PT")):
        if os.getenv(env):
            data["texts"]["paths"][lang] = os.environ[env]

    limit = _as_int(data["report"]["limit"], DEFAULTS["report"]["limit"])
    limit = _env_int("ZODIKA_REPORT_LIMIT", limit)
    data["report"]["limit"] = max(0, min(limit, MAX_REPORT_LIMIT))

    return _to_attr(data)

# zodika/core/validators.py
from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional, Union

from zodika.core.aspects import CelestialPoint
from zodika.core.constants import ANGLE_POINTS, canonical_body, sign_of

# ───────────────────────── errors ─────────────────────────

class ValidationError(ValueError):
    """Structured validator error for the HTTP layer (has .errors())."""
    def __init__(self, details: Union[str, Dict[str, Any], List[Dict[str, Any]]]):
        if isinstance(details, str):
            self._details = [{"loc": [], "msg": details, "type": "value_error"}]
            super().__init__(details)
        elif isinstance(details, dict):
            self._details = [details]
            super().__init__(details.get("msg", "validation_error"))
        elif isinstance(details, list):
            self._details = details
            super().__init__(self._details[0]["msg"] if self._details else "validation_error")
        else:
            self._details = [{"loc": [], "msg": "validation_error", "type": "value_error"}]
            super().__init__("validation_error")

    def errors(self) -> List[Dict[str, Any]]:
        return list(self._details)


# ───────────────────────── helpers ─────────────────────────

def _err(loc: List[Any] | str, msg: str, typ: str = "value_error") -> Dict[str, Any]:
    return {"loc": [loc] if isinstance(loc, str) else loc, "msg": msg, "type": typ}

def _as_float(v: Any) -> Optional[float]:
    if isinstance(v, bool):
        return None
    try:
        if v is None:
            return None
        x = float(v)
        if not math.isfinite(x):
            return None
        return x
    except (TypeError, ValueError):
        return None

def _truthy(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    if val is None:
        return False
    s = str(val).strip().lower()
    return s in {"1", "true", "t", "yes", "y", "on", "r", "retrograde"}

def _house(v: Any) -> Optional[int]:
    x = _as_float(v)
    if x is None or not x.is_integer():
        return None
    h = int(x)
    return h if 1 <= h <= 12 else None


# ───────────────────────── points ─────────────────────────

def parse_point(name: Any, rec: Any) -> Optional[CelestialPoint]:
    """
    One position record → CelestialPoint, or None when it has no name.
    Unparseable longitudes become NaN so the detector rejects the point
    without dropping it from grids.
    """
    nm = str(name or "").strip()
    if not nm:
        return None
    if not isinstance(rec, Mapping):
        rec = {"longitude": rec}

    lon = None
    for key in ("longitude", "lon", "degree", "deg"):
        if key in rec:
            lon = _as_float(rec.get(key))
            break
    lon_f = lon if lon is not None else float("nan")

    sign = rec.get("sign")
    sign = sign.strip() if isinstance(sign, str) and sign.strip() else sign_of(lon_f)
    house = None if canonical_body(nm) in ANGLE_POINTS else _house(rec.get("house"))

    return CelestialPoint(
        name=nm,
        longitude=lon_f,
        sign=sign,
        house=house,
        retrograde=_truthy(rec.get("retrograde", rec.get("isRetrograde"))),
    )


def parse_points_payload(body: Any) -> List[CelestialPoint]:
    """
    Accepts
      {"points": [{"name": "sun", "longitude": 10.5, ...}, ...]}
      {"points": {"sun": 10.5, "moon": {"longitude": 100.0, "house": 4}, ...}}
    Structural problems raise ValidationError; nameless records are skipped.
    """
    if not isinstance(body, Mapping):
        raise ValidationError("payload must be an object")
    raw = body.get("points", body.get("planets"))
    if raw is None:
        raise ValidationError(_err("points", "required list or object", "value_error.missing"))

    out: List[CelestialPoint] = []
    if isinstance(raw, Mapping):
        for name, rec in raw.items():
            p = parse_point(name, rec)
            if p is not None:
                out.append(p)
    elif isinstance(raw, list):
        for i, rec in enumerate(raw):
            if not isinstance(rec, Mapping):
                raise ValidationError(_err(["points", i], "each point must be an object", "type_error.dict"))
            p = parse_point(rec.get("name"), rec)
            if p is not None:
                out.append(p)
    else:
        raise ValidationError(_err("points", "must be a list or an object", "type_error"))

    if len(out) < 2:
        raise ValidationError(_err("points", "at least two named points are required", "value_error.min_items"))
    return out

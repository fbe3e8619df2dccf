# zodika/core/models.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from zodika.core.constants import ANGLE_POINTS, canonical_body

__all__ = ["PointRef", "AspectInstance", "coerce_house"]

House = Union[int, float]


def coerce_house(value: Any) -> Optional[House]:
    """Finite real number → int when integral, float otherwise; anything else → None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value) if float(value).is_integer() else float(value)


@dataclass(frozen=True)
class PointRef:
    """One side of a tagged aspect, as received (label may be absent)."""
    name: str
    label: Optional[str] = None
    sign: Optional[str] = None
    house: Optional[House] = None

    @property
    def body(self) -> str:
        return canonical_body(self.name)

    @property
    def is_angle(self) -> bool:
        return self.body in ANGLE_POINTS

    @classmethod
    def from_record(cls, rec: Any) -> Optional["PointRef"]:
        """None when the record has no usable body name."""
        if not isinstance(rec, Mapping):
            return None
        name = rec.get("name")
        name = str(name).strip() if name is not None else ""
        if not name:
            return None
        label = rec.get("label")
        sign = rec.get("sign")
        # angle points never carry a house
        house = None if canonical_body(name) in ANGLE_POINTS else coerce_house(rec.get("house"))
        return cls(
            name=name,
            label=label if isinstance(label, str) and label.strip() else None,
            sign=sign if isinstance(sign, str) and sign.strip() else None,
            house=house,
        )


@dataclass(frozen=True)
class AspectInstance:
    type: str
    p1: PointRef
    p2: PointRef
    score: float

    @property
    def pair_key(self) -> Tuple[str, str, str]:
        """Order-independent identity: (type, *sorted names)."""
        a, b = sorted((self.p1.name, self.p2.name))
        return (self.type, a, b)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "score": float(self.score),
            "p1": {"name": self.p1.name, "label": self.p1.label, "sign": self.p1.sign, "house": self.p1.house},
            "p2": {"name": self.p2.name, "label": self.p2.label, "sign": self.p2.sign, "house": self.p2.house},
        }

# models/validation.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from models.leg import Leg


class CheckStatus(str, Enum):
    OK = "ok"
    BLOCKED = "blocked"
    ADVISORY = "advisory"


class CheckKind(str, Enum):
    COUNTRY = "country"
    RANGE = "range"
    DURATION = "duration"
    OVERLAP = "overlap"
    DUPLICATE = "duplicate"
    GAP = "gap"
    ORDER = "order"


@dataclass
class CheckResult:
    status: CheckStatus
    kind: Optional[CheckKind] = None
    message: str = ""
    # legs the result refers to: the conflict, the duplicates, or the gap pair
    legs: List[Leg] = field(default_factory=list)
    suggested_start: Optional[date] = None

    @classmethod
    def ok(cls) -> "CheckResult":
        return cls(CheckStatus.OK)

    @classmethod
    def blocked(cls, kind: CheckKind, message: str, **extra: Any) -> "CheckResult":
        return cls(CheckStatus.BLOCKED, kind, message, **extra)

    @classmethod
    def advisory(cls, kind: CheckKind, message: str, **extra: Any) -> "CheckResult":
        return cls(CheckStatus.ADVISORY, kind, message, **extra)

    @property
    def is_ok(self) -> bool:
        return self.status is CheckStatus.OK

    @property
    def is_blocked(self) -> bool:
        return self.status is CheckStatus.BLOCKED

    @property
    def count(self) -> int:
        return len(self.legs)

    def to_dict(self) -> Dict[str, Any]:
        if self.status is CheckStatus.OK:
            return {"ok": True}
        if self.status is CheckStatus.BLOCKED:
            return {"blocked": self.message, "kind": self.kind.value}
        out: Dict[str, Any] = {"advisory": self.kind.value, "message": self.message}
        if self.suggested_start:
            out["suggestedStart"] = self.suggested_start.isoformat()
        if self.kind is CheckKind.DUPLICATE:
            out["count"] = self.count
        return out

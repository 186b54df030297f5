from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from core.records import parse_day


RECENT_LIMIT_DEFAULT = 5
INSTRUCTOR_LIMIT_DEFAULT = 6
PLACEHOLDER = "N/A"


@dataclass(frozen=True)
class DashboardOptions:
    today: Optional[date] = None
    recent_limit: int = RECENT_LIMIT_DEFAULT
    instructor_limit: int = INSTRUCTOR_LIMIT_DEFAULT

    def reference_day(self) -> date:
        return self.today or date.today()


def _clamped_int(value: object, default: int, lo: int = 1, hi: int = 50) -> int:
    if value is None:
        return default
    try:
        out = int(value)
    except Exception:
        return default
    return max(lo, min(hi, out))


def normalize_options(raw: Optional[dict]) -> DashboardOptions:
    raw = raw or {}
    return DashboardOptions(
        today=parse_day(raw.get("today")),
        recent_limit=_clamped_int(raw.get("recent_limit"), RECENT_LIMIT_DEFAULT),
        instructor_limit=_clamped_int(raw.get("instructor_limit"), INSTRUCTOR_LIMIT_DEFAULT),
    )

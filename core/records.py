from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

import pandas as pd


RECORD_URL_RE = re.compile(r"/records/([^/?#\s]+)/?$")

INSTRUCTOR_FIELDS = {
    "name": "name",
    "email": "email",
}

ROOM_FIELDS = {
    "name": "name",
    "raumname": "name",
    "kapazitaet": "capacity",
    "capacity": "capacity",
}

PARTICIPANT_FIELDS = {
    "name": "name",
}

COURSE_FIELDS = {
    "titel": "title",
    "title": "title",
    "startdatum": "start_date",
    "start_date": "start_date",
    "enddatum": "end_date",
    "end_date": "end_date",
    "preis": "price",
    "price": "price",
    "dozent": "instructor_ref",
    "instructor": "instructor_ref",
    "raum": "room_ref",
    "room": "room_ref",
}

ENROLLMENT_FIELDS = {
    "bezahlt": "paid",
    "paid": "paid",
    "kurs": "course_ref",
    "course": "course_ref",
    "teilnehmer": "participant_ref",
    "participant": "participant_ref",
}


@dataclass(frozen=True)
class Instructor:
    record_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Room:
    record_id: str
    name: Optional[str] = None
    capacity: Optional[float] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Participant:
    record_id: str
    name: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Course:
    record_id: str
    title: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    price: Optional[float] = None
    instructor_ref: Any = None
    room_ref: Any = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Enrollment:
    record_id: str
    paid: bool = False
    course_ref: Any = None
    participant_ref: Any = None
    created_at: Optional[str] = None


def extract_record_id(value: Any) -> Optional[str]:
    """Normalize a relation field to a bare record id.

    Accepts a bare id, a LivingApps record URL (``.../records/<id>``), a mapping
    carrying ``record_id``/``id``/``url``, or a one-element list of those.
    Anything else resolves to ``None``.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return extract_record_id(value[0]) if len(value) == 1 else None
    if isinstance(value, Mapping):
        for key in ("record_id", "id", "url"):
            if value.get(key) is not None:
                return extract_record_id(value[key])
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None
    match = RECORD_URL_RE.search(s)
    if match:
        return match.group(1)
    if "/" in s:
        return None
    return s


def parse_day(value: Any) -> Optional[date]:
    """ISO date or datetime string -> calendar day, time of day dropped."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return None
    ts = pd.to_datetime(s, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.date()


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(out):
        return None
    return out


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "ja"}
    return bool(value)


def _mapped_fields(raw: Mapping[str, Any], mapping: Dict[str, str]) -> Dict[str, Any]:
    fields = raw.get("fields")
    if not isinstance(fields, Mapping):
        fields = {}
    out: Dict[str, Any] = {}
    for key, value in fields.items():
        target = mapping.get(key)
        if target is not None and out.get(target) is None:
            out[target] = value
    return out


def _record_id(raw: Mapping[str, Any]) -> str:
    rid = raw.get("record_id", raw.get("id"))
    return "" if rid is None else str(rid)


def parse_instructor(raw: Mapping[str, Any]) -> Instructor:
    f = _mapped_fields(raw, INSTRUCTOR_FIELDS)
    return Instructor(
        record_id=_record_id(raw),
        name=_as_str(f.get("name")),
        email=_as_str(f.get("email")),
        created_at=_as_str(raw.get("createdat")),
    )


def parse_room(raw: Mapping[str, Any]) -> Room:
    f = _mapped_fields(raw, ROOM_FIELDS)
    return Room(
        record_id=_record_id(raw),
        name=_as_str(f.get("name")),
        capacity=_as_float(f.get("capacity")),
        created_at=_as_str(raw.get("createdat")),
    )


def parse_participant(raw: Mapping[str, Any]) -> Participant:
    f = _mapped_fields(raw, PARTICIPANT_FIELDS)
    return Participant(
        record_id=_record_id(raw),
        name=_as_str(f.get("name")),
        created_at=_as_str(raw.get("createdat")),
    )


def parse_course(raw: Mapping[str, Any]) -> Course:
    f = _mapped_fields(raw, COURSE_FIELDS)
    return Course(
        record_id=_record_id(raw),
        title=_as_str(f.get("title")),
        start_date=_as_str(f.get("start_date")),
        end_date=_as_str(f.get("end_date")),
        price=_as_float(f.get("price")),
        instructor_ref=f.get("instructor_ref"),
        room_ref=f.get("room_ref"),
        created_at=_as_str(raw.get("createdat")),
    )


def parse_enrollment(raw: Mapping[str, Any]) -> Enrollment:
    f = _mapped_fields(raw, ENROLLMENT_FIELDS)
    return Enrollment(
        record_id=_record_id(raw),
        paid=_as_bool(f.get("paid")),
        course_ref=f.get("course_ref"),
        participant_ref=f.get("participant_ref"),
        created_at=_as_str(raw.get("createdat")),
    )


T = TypeVar("T")


def parse_records(payload: Any, parser: Callable[[Mapping[str, Any]], T]) -> List[T]:
    """Parse a collection response: a list of records or a ``{record_id: record}`` map."""
    if not payload:
        return []
    if isinstance(payload, Mapping):
        items = []
        for rid, raw in payload.items():
            if not isinstance(raw, Mapping):
                continue
            if raw.get("record_id") is None and raw.get("id") is None:
                raw = {**raw, "record_id": rid}
            items.append(raw)
    else:
        items = [raw for raw in payload if isinstance(raw, Mapping)]
    return [parser(raw) for raw in items]

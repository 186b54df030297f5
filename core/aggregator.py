"""Derived statistics for the course dashboard.

Pure functions over in-memory record collections; no I/O. Missing optional
fields degrade to 0, empty or the placeholder label instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from core.options import INSTRUCTOR_LIMIT_DEFAULT, PLACEHOLDER, RECENT_LIMIT_DEFAULT, DashboardOptions
from core.records import Course, Enrollment, Instructor, Participant, Room, extract_record_id, parse_day


@dataclass(frozen=True)
class PaymentSplit:
    paid_count: int = 0
    open_count: int = 0


@dataclass(frozen=True)
class InstructorCourseCount:
    label: str
    count: int


@dataclass(frozen=True)
class RecentCourseRow:
    record_id: str
    title: str
    instructor: str
    start_date: Optional[date]
    end_date: Optional[date]
    price: Optional[float]


@dataclass(frozen=True)
class DashboardData:
    instructors: List[Instructor] = field(default_factory=list)
    rooms: List[Room] = field(default_factory=list)
    participants: List[Participant] = field(default_factory=list)
    courses: List[Course] = field(default_factory=list)
    enrollments: List[Enrollment] = field(default_factory=list)
    load_failed: bool = False


@dataclass(frozen=True)
class DashboardSummary:
    today: date
    instructor_count: int
    participant_count: int
    course_count: int
    room_count: int
    enrollment_count: int
    active_course_count: int
    upcoming_course_count: int
    payment: PaymentSplit
    total_revenue: float
    total_capacity: float
    courses_per_instructor: List[InstructorCourseCount]
    recent_courses: List[RecentCourseRow]


def active_courses(courses: Iterable[Course], today: date) -> List[Course]:
    out: List[Course] = []
    for course in courses:
        start = parse_day(course.start_date)
        end = parse_day(course.end_date)
        if start is None or end is None:
            continue
        if start <= today <= end:
            out.append(course)
    return out


def upcoming_courses(courses: Iterable[Course], today: date) -> List[Course]:
    out: List[Course] = []
    for course in courses:
        start = parse_day(course.start_date)
        if start is not None and start > today:
            out.append(course)
    return out


def payment_split(enrollments: Sequence[Enrollment]) -> PaymentSplit:
    paid = sum(1 for e in enrollments if e.paid)
    return PaymentSplit(paid_count=paid, open_count=len(enrollments) - paid)


def _index_by_id(records: Iterable) -> Dict[str, object]:
    # First record wins on duplicate ids.
    index: Dict[str, object] = {}
    for record in records:
        key = extract_record_id(record.record_id)
        if key is not None:
            index.setdefault(key, record)
    return index


def total_revenue(enrollments: Iterable[Enrollment], courses: Iterable[Course]) -> float:
    by_id = _index_by_id(courses)
    total = 0.0
    for enrollment in enrollments:
        if not enrollment.paid:
            continue
        course_id = extract_record_id(enrollment.course_ref)
        if course_id is None:
            continue
        course = by_id.get(course_id)
        if course is None or course.price is None:
            continue
        total += course.price
    return total


def total_capacity(rooms: Iterable[Room]) -> float:
    return sum((r.capacity or 0) for r in rooms)


def instructor_label(name: Optional[str]) -> str:
    tokens = (name or "").split()
    return tokens[0] if tokens else PLACEHOLDER


def courses_per_instructor(
    instructors: Iterable[Instructor],
    courses: Iterable[Course],
    limit: int = INSTRUCTOR_LIMIT_DEFAULT,
) -> List[InstructorCourseCount]:
    counts: Dict[str, int] = {}
    for course in courses:
        ref = extract_record_id(course.instructor_ref)
        if ref is not None:
            counts[ref] = counts.get(ref, 0) + 1

    out: List[InstructorCourseCount] = []
    for instructor in instructors:
        count = counts.get(extract_record_id(instructor.record_id) or "", 0)
        if count > 0:
            out.append(InstructorCourseCount(label=instructor_label(instructor.name), count=count))
    return out[:limit]


def recent_courses(courses: Sequence[Course], limit: int = RECENT_LIMIT_DEFAULT) -> List[Course]:
    """First ``limit`` courses in the order the caller supplied them."""
    return list(courses[: max(0, limit)])


def recent_course_rows(
    instructors: Iterable[Instructor],
    courses: Sequence[Course],
    limit: int = RECENT_LIMIT_DEFAULT,
) -> List[RecentCourseRow]:
    by_id = _index_by_id(instructors)
    rows: List[RecentCourseRow] = []
    for course in recent_courses(courses, limit):
        instructor = by_id.get(extract_record_id(course.instructor_ref) or "")
        start = parse_day(course.start_date)
        end = parse_day(course.end_date)
        both = start is not None and end is not None
        rows.append(
            RecentCourseRow(
                record_id=course.record_id,
                title=course.title or PLACEHOLDER,
                instructor=(instructor.name if instructor is not None and instructor.name else PLACEHOLDER),
                start_date=start if both else None,
                end_date=end if both else None,
                price=course.price,
            )
        )
    return rows


def summarize(data: DashboardData, today: date, options: Optional[DashboardOptions] = None) -> DashboardSummary:
    options = options or DashboardOptions()
    return DashboardSummary(
        today=today,
        instructor_count=len(data.instructors),
        participant_count=len(data.participants),
        course_count=len(data.courses),
        room_count=len(data.rooms),
        enrollment_count=len(data.enrollments),
        active_course_count=len(active_courses(data.courses, today)),
        upcoming_course_count=len(upcoming_courses(data.courses, today)),
        payment=payment_split(data.enrollments),
        total_revenue=total_revenue(data.enrollments, data.courses),
        total_capacity=total_capacity(data.rooms),
        courses_per_instructor=courses_per_instructor(data.instructors, data.courses, options.instructor_limit),
        recent_courses=recent_course_rows(data.instructors, data.courses, options.recent_limit),
    )

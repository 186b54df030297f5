"""Shared pytest fixtures.

Fixture overview
----------------
today           fixed reference day (2024-01-15)
sample_data     small, fully populated DashboardData snapshot
fake_session    stand-in for requests.Session serving canned LivingApps payloads
"""

from __future__ import annotations

from datetime import date

import pytest
import requests

from core.aggregator import DashboardData
from core.records import Course, Enrollment, Instructor, Participant, Room

RECORD_URL = "https://my.living-apps.de/rest/apps/{app}/records/{rid}"


@pytest.fixture
def today() -> date:
    return date(2024, 1, 15)


@pytest.fixture
def sample_data() -> DashboardData:
    instructors = [
        Instructor(record_id="i1", name="Anna Muller"),
        Instructor(record_id="i2", name="Ben Schulz"),
        Instructor(record_id="i3", name=None),
    ]
    courses = [
        Course(record_id="c1", title="Python Basics", start_date="2024-01-01", end_date="2024-01-31", price=100.0,
               instructor_ref=RECORD_URL.format(app="dozenten", rid="i1")),
        Course(record_id="c2", title="Data Science", start_date="2024-02-01", end_date="2024-03-01", price=250.0,
               instructor_ref="i1"),
        Course(record_id="c3", title=None, start_date=None, end_date=None, price=None, instructor_ref="i3"),
    ]
    enrollments = [
        Enrollment(record_id="e1", paid=True, course_ref="c1"),
        Enrollment(record_id="e2", paid=True, course_ref=RECORD_URL.format(app="kurse", rid="c2")),
        Enrollment(record_id="e3", paid=False, course_ref="c2"),
        Enrollment(record_id="e4", paid=True, course_ref="c99"),
    ]
    return DashboardData(
        instructors=instructors,
        rooms=[Room(record_id="r1", capacity=20), Room(record_id="r2", capacity=None), Room(record_id="r3", capacity=12)],
        participants=[Participant(record_id="p1"), Participant(record_id="p2")],
        courses=courses,
        enrollments=enrollments,
    )


class FakeResponse:
    def __init__(self, payload, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class FakeSession:
    """Serves ``payloads[app_id]``; unknown apps answer 404."""

    def __init__(self, payloads: dict) -> None:
        self.payloads = payloads
        self.headers: dict = {}
        self.calls: list = []
        self.closed = False

    def get(self, url: str, timeout: float = None) -> FakeResponse:
        self.calls.append(url)
        app_id = url.rstrip("/").split("/")[-2]
        if app_id not in self.payloads:
            return FakeResponse(None, status_code=404)
        return FakeResponse(self.payloads[app_id])

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def livingapps_payloads() -> dict:
    return {
        "app-dozenten": {
            "i1": {"createdat": "2024-01-01T10:00:00", "fields": {"name": "Anna Muller", "email": "anna@example.org"}},
        },
        "app-raeume": [
            {"record_id": "r1", "fields": {"name": "A101", "kapazitaet": 25}},
            {"record_id": "r2", "fields": {"name": "B202", "kapazitaet": "15"}},
        ],
        "app-teilnehmer": {"p1": {"fields": {"name": "Carla"}}},
        "app-kurse": {
            "c1": {
                "fields": {
                    "titel": "Python Basics",
                    "startdatum": "2024-01-01",
                    "enddatum": "2024-01-31",
                    "preis": 100,
                    "dozent": "https://my.living-apps.de/rest/apps/app-dozenten/records/i1",
                }
            }
        },
        "app-anmeldungen": {
            "e1": {"fields": {"bezahlt": True, "kurs": "https://my.living-apps.de/rest/apps/app-kurse/records/c1"}},
            "e2": {"fields": {"bezahlt": False, "kurs": "https://my.living-apps.de/rest/apps/app-kurse/records/c1"}},
        },
    }


@pytest.fixture
def fake_session(livingapps_payloads) -> FakeSession:
    return FakeSession(livingapps_payloads)

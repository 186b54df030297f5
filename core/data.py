from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

import requests

from core.aggregator import DashboardData
from core.records import (
    Course,
    Enrollment,
    Instructor,
    Participant,
    Room,
    parse_course,
    parse_enrollment,
    parse_instructor,
    parse_participant,
    parse_records,
    parse_room,
)


logger = logging.getLogger(__name__)

BASE_URL_DEFAULT = "https://my.living-apps.de/rest"
TIMEOUT_DEFAULT = 15.0

# Env var suffix -> collection key.
APP_ENV_KEYS = {
    "INSTRUCTORS": "instructors",
    "ROOMS": "rooms",
    "PARTICIPANTS": "participants",
    "COURSES": "courses",
    "ENROLLMENTS": "enrollments",
}


@dataclass(frozen=True)
class LivingAppsConfig:
    base_url: str = BASE_URL_DEFAULT
    token: Optional[str] = None
    instructors_app: str = ""
    rooms_app: str = ""
    participants_app: str = ""
    courses_app: str = ""
    enrollments_app: str = ""
    timeout: float = TIMEOUT_DEFAULT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LivingAppsConfig":
        env = os.environ if environ is None else environ
        timeout = env.get("LIVINGAPPS_TIMEOUT")
        try:
            timeout_value = float(timeout) if timeout else TIMEOUT_DEFAULT
        except ValueError:
            logger.warning("Ignoring invalid LIVINGAPPS_TIMEOUT=%r", timeout)
            timeout_value = TIMEOUT_DEFAULT
        apps = {f"{key}_app": env.get(f"LIVINGAPPS_APP_{suffix}", "") for suffix, key in APP_ENV_KEYS.items()}
        return cls(
            base_url=(env.get("LIVINGAPPS_BASE_URL") or BASE_URL_DEFAULT).rstrip("/"),
            token=env.get("LIVINGAPPS_TOKEN") or None,
            timeout=timeout_value,
            **apps,
        )


class LivingAppsService:
    """Read-only client for the five dashboard collections."""

    def __init__(self, config: Optional[LivingAppsConfig] = None, session: Optional[requests.Session] = None) -> None:
        self.config = config or LivingAppsConfig.from_env()
        self.session = session or requests.Session()
        if self.config.token:
            self.session.headers.update({"Authorization": f"Bearer {self.config.token}"})

    def _records_url(self, app_id: str) -> str:
        return f"{self.config.base_url}/apps/{app_id}/records"

    def _fetch(self, app_id: str) -> Any:
        if not app_id:
            raise ValueError("LivingApps app id is not configured")
        resp = self.session.get(self._records_url(app_id), timeout=self.config.timeout)
        resp.raise_for_status()
        return resp.json()

    def get_instructors(self) -> List[Instructor]:
        return parse_records(self._fetch(self.config.instructors_app), parse_instructor)

    def get_rooms(self) -> List[Room]:
        return parse_records(self._fetch(self.config.rooms_app), parse_room)

    def get_participants(self) -> List[Participant]:
        return parse_records(self._fetch(self.config.participants_app), parse_participant)

    def get_courses(self) -> List[Course]:
        return parse_records(self._fetch(self.config.courses_app), parse_course)

    def get_enrollments(self) -> List[Enrollment]:
        return parse_records(self._fetch(self.config.enrollments_app), parse_enrollment)

    def close(self) -> None:
        self.session.close()


def _fetchers(service: LivingAppsService) -> Dict[str, Callable[[], list]]:
    return {
        "instructors": service.get_instructors,
        "rooms": service.get_rooms,
        "participants": service.get_participants,
        "courses": service.get_courses,
        "enrollments": service.get_enrollments,
    }


def load_dashboard_data(service: Optional[LivingAppsService] = None) -> DashboardData:
    """Fetch all five collections concurrently.

    All-or-nothing: if any fetch raises, the failure is logged and empty
    collections are returned. No retry and no caching; every call is a fresh read.
    """
    owned = service is None
    service = service or LivingAppsService()
    fetchers = _fetchers(service)
    try:
        with ThreadPoolExecutor(max_workers=len(fetchers)) as pool:
            futures = {name: pool.submit(fn) for name, fn in fetchers.items()}
            results = {name: fut.result() for name, fut in futures.items()}
    except Exception:
        logger.exception("Failed to load data")
        return DashboardData(load_failed=True)
    finally:
        if owned:
            service.close()

    logger.info(
        "Loaded dashboard data: %s",
        ", ".join(f"{name}={len(rows)}" for name, rows in results.items()),
    )
    return DashboardData(**results)

"""
Tests for the LivingApps client and the all-or-nothing dashboard load.
"""

from __future__ import annotations

import logging

import pytest
import requests

from core.data import LivingAppsConfig, LivingAppsService, load_dashboard_data

APPS = dict(
    instructors_app="app-dozenten",
    rooms_app="app-raeume",
    participants_app="app-teilnehmer",
    courses_app="app-kurse",
    enrollments_app="app-anmeldungen",
)


@pytest.fixture
def config() -> LivingAppsConfig:
    return LivingAppsConfig(base_url="https://la.example/rest", token="secret", **APPS)


class TestConfig:
    def test_from_env(self) -> None:
        cfg = LivingAppsConfig.from_env(
            {
                "LIVINGAPPS_BASE_URL": "https://la.example/rest/",
                "LIVINGAPPS_TOKEN": "t0k",
                "LIVINGAPPS_APP_COURSES": "app-kurse",
                "LIVINGAPPS_TIMEOUT": "3",
            }
        )
        assert cfg.base_url == "https://la.example/rest"
        assert cfg.token == "t0k"
        assert cfg.courses_app == "app-kurse"
        assert cfg.rooms_app == ""
        assert cfg.timeout == 3.0

    def test_defaults(self) -> None:
        cfg = LivingAppsConfig.from_env({"LIVINGAPPS_TIMEOUT": "soon"})
        assert cfg.base_url == "https://my.living-apps.de/rest"
        assert cfg.token is None
        assert cfg.timeout == 15.0


class TestService:
    def test_fetches_and_parses(self, config, fake_session) -> None:
        service = LivingAppsService(config, session=fake_session)
        courses = service.get_courses()
        assert [c.title for c in courses] == ["Python Basics"]
        assert courses[0].price == 100.0
        assert "https://la.example/rest/apps/app-kurse/records" in fake_session.calls
        assert fake_session.headers["Authorization"] == "Bearer secret"

    def test_rooms_capacity_coerced(self, config, fake_session) -> None:
        rooms = LivingAppsService(config, session=fake_session).get_rooms()
        assert [r.capacity for r in rooms] == [25.0, 15.0]

    def test_http_error_raises(self, config, fake_session) -> None:
        del fake_session.payloads["app-raeume"]
        with pytest.raises(requests.HTTPError):
            LivingAppsService(config, session=fake_session).get_rooms()

    def test_unconfigured_app_raises(self, fake_session) -> None:
        service = LivingAppsService(LivingAppsConfig(), session=fake_session)
        with pytest.raises(ValueError):
            service.get_instructors()


class TestLoadDashboardData:
    def test_loads_all_collections(self, config, fake_session) -> None:
        data = load_dashboard_data(LivingAppsService(config, session=fake_session))
        assert not data.load_failed
        assert len(data.instructors) == 1
        assert len(data.rooms) == 2
        assert len(data.participants) == 1
        assert len(data.courses) == 1
        assert len(data.enrollments) == 2
        assert len(fake_session.calls) == 5

    def test_single_failure_empties_everything(self, config, fake_session, caplog) -> None:
        del fake_session.payloads["app-anmeldungen"]
        with caplog.at_level(logging.ERROR, logger="core.data"):
            data = load_dashboard_data(LivingAppsService(config, session=fake_session))
        assert data.load_failed
        assert data.instructors == []
        assert data.courses == []
        assert data.enrollments == []
        assert "Failed to load data" in caplog.text

    def test_owned_session_closed_after_load(self, config, fake_session, monkeypatch) -> None:
        monkeypatch.setattr("core.data.LivingAppsService", lambda: LivingAppsService(config, session=fake_session))
        data = load_dashboard_data()
        assert len(data.courses) == 1
        assert fake_session.closed

    def test_owned_session_closed_after_failure(self, config, fake_session, monkeypatch) -> None:
        del fake_session.payloads["app-kurse"]
        monkeypatch.setattr("core.data.LivingAppsService", lambda: LivingAppsService(config, session=fake_session))
        assert load_dashboard_data().load_failed
        assert fake_session.closed

    def test_injected_service_left_open(self, config, fake_session) -> None:
        load_dashboard_data(LivingAppsService(config, session=fake_session))
        assert not fake_session.closed

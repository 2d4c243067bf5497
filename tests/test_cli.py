"""Tests for the console entry point and URL-to-criteria wiring."""

import sys

import pytest

from estatedesk.__main__ import main
from estatedesk.domains import tasks
from estatedesk.runner import build_backend, build_orchestrator, criteria_from_url
from estatedesk.search.builder import FilterExpressionBuilder
from estatedesk.search.models import QueryResult
from estatedesk.settings import get_default_settings


class TestCriteriaFromUrl:
    """Page and modal surfaces merge into one criteria mapping."""

    def test_modal_wins_on_shared_keys(self) -> None:
        criteria = criteria_from_url(
            "agents",
            "?kam=Asha&appInstalled=yes&modalAppInstalled=no&modalVerified=true",
        )
        assert criteria["kam"] == ["Asha"]
        assert criteria["appInstalled"] == ["no"]
        assert criteria["verified"] is True

    def test_unset_modal_value_keeps_page_value(self) -> None:
        assert criteria_from_url("agents", "appInstalled=yes")["appInstalled"] == ["yes"]

    def test_numeric_calendar_bound_from_url(self) -> None:
        criteria = criteria_from_url("tasks", "dateRange=7d&addedRangeFrom=1709251200")
        assert criteria["addedRange"] == {"startDate": "1709251200"}
        assert FilterExpressionBuilder(tasks.SCHEMA).build(criteria) == "added >= 1709251200"

    def test_unknown_domain(self) -> None:
        with pytest.raises(ValueError):
            criteria_from_url("listings", "")


class NullBackend:
    async def search(self, index_name, request) -> QueryResult:
        return QueryResult()


class TestRunnerWiring:
    """Backend and orchestrator construction from settings."""

    def test_backend_requires_configuration(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("estatedesk.secrets.get_secret", lambda name: None)
        with pytest.raises(ValueError, match="ALGOLIA_API_KEY"):
            build_backend(get_default_settings())

    def test_backend_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("estatedesk.secrets.get_secret", lambda name: "key")
        settings = get_default_settings()
        settings["search"]["app_id"] = "appid"
        assert build_backend(settings) is not None

    def test_orchestrator_validates_sort_indices(self) -> None:
        settings = get_default_settings()
        settings["search"]["known_indices"] = ["agents"]
        with pytest.raises(ValueError, match="agents_name_asc"):
            build_orchestrator("agents", settings, NullBackend())

    def test_orchestrator_timing_from_settings(self) -> None:
        settings = get_default_settings()
        settings["search"]["debounce_sec"] = 0.05
        orchestrator = build_orchestrator("tasks", settings, NullBackend())
        assert orchestrator.debounce_sec == 0.05
        assert orchestrator.domain.index == "canvashomestasks"


class TestFilterCommand:
    """python -m estatedesk filter ..."""

    def test_prints_expression_and_summary(self, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.setattr(sys, "argv", ["estatedesk", "filter", "agents", "kam=Asha&modalVerified=true", "--describe"])
        assert main() == 0
        out = capsys.readouterr().out.splitlines()
        assert out == ['(kamName:"Asha") AND verified:true', "kam: Asha | verified: yes"]

    def test_empty_query(self, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.setattr(sys, "argv", ["estatedesk", "filter", "campaigns", "--describe"])
        assert main() == 0
        assert capsys.readouterr().out.splitlines() == ["", "(no filters)"]

    def test_unknown_domain_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "argv", ["estatedesk", "filter", "listings"])
        with pytest.raises(SystemExit):
            main()

    def test_search_page_validated(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "argv", ["estatedesk", "search", "tasks", "--page", "0"])
        with pytest.raises(SystemExit):
            main()

"""Tests for BudgetFirestoreClient with a mocked Firestore client."""

from datetime import date
from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import AlreadyExists

from src.core.models import PeriodStatus, PlannedTreatDay, WeeklyPeriod
from src.shell.config import FirestoreConfig, ServiceConfig
from src.shell.firestore_client import BudgetFirestoreClient


USER_ID = "user-1234567890"
MONDAY = date(2024, 12, 23)


def period_doc(week_start: str = "2024-12-23", week_end: str = "2024-12-29") -> MagicMock:
    doc = MagicMock()
    doc.exists = True
    doc.id = week_start
    doc.to_dict.return_value = {
        "week_start": week_start,
        "week_end": week_end,
        "weekly_budget": 10500,
        "baseline_average_daily": 1500,
        "cumulative_overage": 0,
        "status": "active",
        "created_at": "2024-12-23T08:00:00",
    }
    return doc


@pytest.fixture
def mock_client():
    return MagicMock()


@pytest.fixture
def client(mock_client):
    store = BudgetFirestoreClient(FirestoreConfig(project_id="test"))
    store._client = mock_client
    return store


@pytest.fixture
def user_collection(mock_client):
    """The subcollection mock reached by users/{id}/<name>."""
    return mock_client.collection.return_value.document.return_value.collection.return_value


class TestProfiles:
    """Tests for profile reads and writes."""

    def test_missing_profile(self, client, user_collection):
        user_collection.document.return_value.get.return_value.exists = False

        assert client.get_profile(USER_ID) is None

    def test_existing_profile(self, client, user_collection):
        doc = user_collection.document.return_value.get.return_value
        doc.exists = True
        doc.to_dict.return_value = {"bmr": 1600, "goal": "lose", "daily_target": 1500, "weekly_budget": 10500}

        profile = client.get_profile(USER_ID)

        assert profile.bmr == 1600
        assert profile.goal == "lose"
        user_collection.document.assert_called_with("current")

    def test_baseline_complete_users(self, client, mock_client):
        """User IDs come from the parent of each profile document."""
        doc = MagicMock()
        doc.reference.parent.parent.id = "user-a"
        query = mock_client.collection_group.return_value.where.return_value
        query.stream.return_value = [doc]

        assert client.list_baseline_complete_users() == ["user-a"]
        mock_client.collection_group.assert_called_with("profile")


class TestPeriods:
    """Tests for period persistence."""

    def test_create_period(self, client, user_collection):
        """A new period is written with create() under its Monday."""
        ref = user_collection.document.return_value
        period = WeeklyPeriod(
            week_start=MONDAY, week_end=date(2024, 12, 29), weekly_budget=10500, baseline_average_daily=1500
        )

        stored, created = client.create_period(USER_ID, period)

        assert created
        assert stored.id == "2024-12-23"
        user_collection.document.assert_called_with("2024-12-23")
        written = ref.create.call_args[0][0]
        assert "id" not in written
        assert written["week_start"] == "2024-12-23"
        assert written["status"] == "active"

    def test_create_period_conflict(self, client, user_collection):
        """Losing the create race returns the stored period."""
        ref = user_collection.document.return_value
        ref.create.side_effect = AlreadyExists("exists")
        ref.get.return_value = period_doc()
        period = WeeklyPeriod(
            week_start=MONDAY, week_end=date(2024, 12, 29), weekly_budget=9800, baseline_average_daily=1400
        )

        stored, created = client.create_period(USER_ID, period)

        assert not created
        assert stored.id == "2024-12-23"
        assert stored.weekly_budget == 10500

    def test_find_period_overlapping(self, client, user_collection):
        query = user_collection.where.return_value.order_by.return_value.limit.return_value
        query.stream.return_value = [period_doc()]

        found = client.find_period_overlapping(USER_ID, date(2024, 12, 25), date(2024, 12, 25))

        assert found.id == "2024-12-23"

    def test_find_period_ending_before_range(self, client, user_collection):
        """The latest earlier period does not count if it has ended."""
        query = user_collection.where.return_value.order_by.return_value.limit.return_value
        query.stream.return_value = [period_doc()]

        assert client.find_period_overlapping(USER_ID, date(2024, 12, 30), date(2025, 1, 5)) is None

    def test_set_status(self, client, user_collection):
        client.set_period_status(USER_ID, "2024-12-23", PeriodStatus.COMPLETED)

        user_collection.document.return_value.update.assert_called_once_with({"status": "completed"})


class TestTreatDays:
    """Tests for treat day persistence."""

    def test_create_conflict(self, client, user_collection):
        user_collection.document.return_value.create.side_effect = AlreadyExists("exists")

        created = client.create_treat_day(USER_ID, PlannedTreatDay(treat_date=MONDAY, planned_calories=2000))

        assert created is False

    def test_move_conflict(self, client, mock_client):
        """A taken target date leaves both dates unchanged."""
        mock_client.batch.return_value.commit.side_effect = AlreadyExists("exists")

        moved = client.move_treat_day(
            USER_ID, MONDAY, PlannedTreatDay(treat_date=date(2024, 12, 24), planned_calories=2000)
        )

        assert moved is False

    def test_move(self, client, mock_client):
        batch = mock_client.batch.return_value

        moved = client.move_treat_day(
            USER_ID, MONDAY, PlannedTreatDay(treat_date=date(2024, 12, 24), planned_calories=2000)
        )

        assert moved
        batch.create.assert_called_once()
        batch.delete.assert_called_once()
        batch.commit.assert_called_once()

    def test_delete_missing(self, client, user_collection):
        ref = user_collection.document.return_value
        ref.get.return_value.exists = False

        assert client.delete_treat_day(USER_ID, MONDAY) is False
        ref.delete.assert_not_called()


class TestConfig:
    """Tests for environment configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("SERVICE_TOKEN", "FALLBACK_DAILY_BUDGET", "FIRESTORE_DATABASE", "PORT"):
            monkeypatch.delenv(name, raising=False)

        config = ServiceConfig.from_env()

        assert config.service_token is None
        assert config.fallback_daily_budget == 1700
        assert config.port == 8080
        assert config.firestore.database == "budget-engine"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("SERVICE_TOKEN", "secret")
        monkeypatch.setenv("FALLBACK_DAILY_BUDGET", "1900")
        monkeypatch.setenv("PORT", "9000")

        config = ServiceConfig.from_env()

        assert config.service_token == "secret"
        assert config.fallback_daily_budget == 1900
        assert config.port == 9000

"""Shared test fixtures."""

from collections.abc import Generator

import pytest
from moto import mock_aws

from src.score_authority.database import LeaderboardDatabase
from src.score_authority.service import LeaderboardService

START_MS = 1_704_067_200_000  # 2024-01-01T00:00:00Z


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def aws_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test")  # noqa: S105
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def leaderboard_db(aws_env: None) -> Generator[LeaderboardDatabase, None, None]:
    """LeaderboardDatabase backed by moto tables."""
    with mock_aws():
        db = LeaderboardDatabase("test-runs", "test-scores")
        db.create_tables()
        yield db


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def leaderboard_service(
    leaderboard_db: LeaderboardDatabase, clock: FakeClock
) -> LeaderboardService:
    return LeaderboardService(database=leaderboard_db, clock=clock)

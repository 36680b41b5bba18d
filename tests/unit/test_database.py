"""Tests for leaderboard database operations."""

from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from src.score_authority.database import LeaderboardDatabase
from src.score_authority.exceptions import LeaderboardError
from src.score_authority.models import RunRecord

RUN_ID = "run-123e4567-e89b-12d3-a456-426614174000"


def make_record(run_id: str = RUN_ID, token_hash: str = "hash-a") -> RunRecord:
    return RunRecord(
        run_id=run_id, issued_at=1_000, expires_at=1_201_000, token_hash=token_hash
    )


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, operation)


class TestTableNames:
    """Tests for table name resolution."""

    def test_environment_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RUNS_TABLE", "env-runs")
        monkeypatch.setenv("SCORES_TABLE", "env-scores")

        db = LeaderboardDatabase()

        assert db.runs_table_name == "env-runs"
        assert db.scores_table_name == "env-scores"

    def test_explicit_names_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RUNS_TABLE", "env-runs")

        db = LeaderboardDatabase("runs", "scores")

        assert db.runs_table_name == "runs"
        assert db.scores_table_name == "scores"


class TestRunRecords:
    """Tests for run record persistence."""

    def test_insert_and_get_run(self, leaderboard_db: LeaderboardDatabase) -> None:
        assert leaderboard_db.insert_run(make_record()) is True

        record = leaderboard_db.get_run(RUN_ID)

        assert record == make_record()
        assert record is not None and record.consumed_at is None

    def test_insert_collision_keeps_original(
        self, leaderboard_db: LeaderboardDatabase
    ) -> None:
        leaderboard_db.insert_run(make_record(token_hash="hash-a"))

        assert leaderboard_db.insert_run(make_record(token_hash="hash-b")) is False
        record = leaderboard_db.get_run(RUN_ID)
        assert record is not None and record.token_hash == "hash-a"

    def test_get_unknown_run(self, leaderboard_db: LeaderboardDatabase) -> None:
        assert leaderboard_db.get_run("run-missing") is None

    def test_consume_run_only_once(self, leaderboard_db: LeaderboardDatabase) -> None:
        leaderboard_db.insert_run(make_record())

        assert leaderboard_db.consume_run(RUN_ID, 5_000) is True
        assert leaderboard_db.consume_run(RUN_ID, 6_000) is False

        record = leaderboard_db.get_run(RUN_ID)
        assert record is not None and record.consumed_at == 5_000

    def test_consume_unknown_run_does_not_create_it(
        self, leaderboard_db: LeaderboardDatabase
    ) -> None:
        assert leaderboard_db.consume_run("run-missing", 5_000) is False
        assert leaderboard_db.get_run("run-missing") is None

    def test_insert_run_unexpected_error(
        self, leaderboard_db: LeaderboardDatabase
    ) -> None:
        with patch.object(
            leaderboard_db.runs_table,
            "put_item",
            side_effect=client_error("ProvisionedThroughputExceededException", "PutItem"),
        ):
            with pytest.raises(LeaderboardError, match="Failed to insert run"):
                leaderboard_db.insert_run(make_record())


class TestScores:
    """Tests for max-upsert and ranking."""

    def test_first_write_inserts(self, leaderboard_db: LeaderboardDatabase) -> None:
        assert leaderboard_db.upsert_if_higher("Ann", 50, 1_000) is True

        entry = leaderboard_db.get_score("Ann")
        assert entry is not None
        assert entry.score == 50
        assert entry.updated_at == 1_000

    def test_higher_score_updates(self, leaderboard_db: LeaderboardDatabase) -> None:
        leaderboard_db.upsert_if_higher("Ann", 50, 1_000)

        assert leaderboard_db.upsert_if_higher("Ann", 70, 2_000) is True

        entry = leaderboard_db.get_score("Ann")
        assert entry is not None
        assert (entry.score, entry.updated_at) == (70, 2_000)

    @pytest.mark.parametrize("score", [50, 30, 0])
    def test_lower_or_equal_score_is_noop(
        self, leaderboard_db: LeaderboardDatabase, score: int
    ) -> None:
        leaderboard_db.upsert_if_higher("Ann", 50, 1_000)

        assert leaderboard_db.upsert_if_higher("Ann", score, 2_000) is False

        entry = leaderboard_db.get_score("Ann")
        assert entry is not None
        assert (entry.score, entry.updated_at) == (50, 1_000)

    def test_score_is_running_maximum(self, leaderboard_db: LeaderboardDatabase) -> None:
        for now, score in enumerate([10, 40, 25, 40, 90, 5, 60], start=1):
            leaderboard_db.upsert_if_higher("Ann", score, now)

        entry = leaderboard_db.get_score("Ann")
        assert entry is not None
        assert entry.score == 90

    def test_top_orders_by_score_then_earliest(
        self, leaderboard_db: LeaderboardDatabase
    ) -> None:
        leaderboard_db.upsert_if_higher("Late", 100, 3_000)
        leaderboard_db.upsert_if_higher("Low", 10, 1_000)
        leaderboard_db.upsert_if_higher("Early", 100, 2_000)
        leaderboard_db.upsert_if_higher("High", 500, 4_000)

        entries = leaderboard_db.top(10)

        assert [entry.player for entry in entries] == ["High", "Early", "Late", "Low"]

    def test_top_respects_limit(self, leaderboard_db: LeaderboardDatabase) -> None:
        for i in range(5):
            leaderboard_db.upsert_if_higher(f"P{i}", i * 10, i)

        entries = leaderboard_db.top(2)

        assert [entry.score for entry in entries] == [40, 30]

    def test_top_empty(self, leaderboard_db: LeaderboardDatabase) -> None:
        assert leaderboard_db.top(20) == []

    def test_upsert_unexpected_error(self, leaderboard_db: LeaderboardDatabase) -> None:
        with patch.object(
            leaderboard_db.scores_table,
            "update_item",
            side_effect=client_error("InternalServerError", "UpdateItem"),
        ):
            with pytest.raises(LeaderboardError, match="Failed to submit score"):
                leaderboard_db.upsert_if_higher("Ann", 10, 1)


class TestCreateTables:
    """Tests for table bootstrap."""

    def test_is_idempotent(self, leaderboard_db: LeaderboardDatabase) -> None:
        leaderboard_db.create_tables()

        tables = leaderboard_db.dynamodb.meta.client.list_tables()["TableNames"]
        assert {"test-runs", "test-scores"} <= set(tables)

"""DynamoDB operations for the score authority service."""

import os
from typing import Any

import boto3
from botocore.exceptions import ClientError

from .exceptions import LeaderboardError
from .models import RunRecord, ScoreEntry

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def _is_conditional_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED


class LeaderboardDatabase:
    """DynamoDB tables backing run tokens and best scores."""

    def __init__(
        self, runs_table_name: str | None = None, scores_table_name: str | None = None
    ) -> None:
        """Initialize database connection."""
        resolved_runs = runs_table_name or os.environ.get(
            "RUNS_TABLE", "leaderboard-runs"
        )
        resolved_scores = scores_table_name or os.environ.get(
            "SCORES_TABLE", "leaderboard-scores"
        )
        if not resolved_runs or not resolved_scores:
            raise ValueError("Table names must be provided")
        self.runs_table_name = resolved_runs
        self.scores_table_name = resolved_scores
        region = os.environ.get("AWS_DEFAULT_REGION", "us-east-1")
        self.dynamodb = boto3.resource("dynamodb", region_name=region)
        self.runs_table = self.dynamodb.Table(self.runs_table_name)
        self.scores_table = self.dynamodb.Table(self.scores_table_name)

    def create_tables(self) -> None:
        """Create both tables if they do not exist yet."""
        client = self.dynamodb.meta.client
        for table_name, key in (
            (self.runs_table_name, "run_id"),
            (self.scores_table_name, "player"),
        ):
            try:
                client.create_table(
                    TableName=table_name,
                    KeySchema=[{"AttributeName": key, "KeyType": "HASH"}],
                    AttributeDefinitions=[
                        {"AttributeName": key, "AttributeType": "S"}
                    ],
                    BillingMode="PAY_PER_REQUEST",
                )
            except client.exceptions.ResourceInUseException:
                continue
            except ClientError as e:
                raise LeaderboardError(f"Failed to create table {table_name}: {e}") from e
            client.get_waiter("table_exists").wait(TableName=table_name)

    def insert_run(self, record: RunRecord) -> bool:
        """Insert a new run record.

        Returns False when a record with the same run_id already exists.
        """
        item: dict[str, Any] = {
            "run_id": record.run_id,
            "issued_at": record.issued_at,
            "expires_at": record.expires_at,
            "token_hash": record.token_hash,
        }
        try:
            self.runs_table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(run_id)",
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                return False
            raise LeaderboardError(f"Failed to insert run: {e}") from e
        return True

    def get_run(self, run_id: str) -> RunRecord | None:
        try:
            response = self.runs_table.get_item(
                Key={"run_id": run_id}, ConsistentRead=True
            )
        except ClientError as e:
            raise LeaderboardError(f"Failed to read run: {e}") from e

        item = response.get("Item")
        if item is None:
            return None

        consumed_at = item.get("consumed_at")
        return RunRecord(
            run_id=str(item["run_id"]),
            issued_at=int(item["issued_at"]),
            expires_at=int(item["expires_at"]),
            token_hash=str(item["token_hash"]),
            consumed_at=int(consumed_at) if consumed_at is not None else None,
        )

    def consume_run(self, run_id: str, now: int) -> bool:
        """Mark a run as consumed if, and only if, it is still unconsumed.

        Returns False when another writer consumed it first.
        """
        try:
            self.runs_table.update_item(
                Key={"run_id": run_id},
                UpdateExpression="SET consumed_at = :now",
                ConditionExpression=(
                    "attribute_exists(run_id) AND attribute_not_exists(consumed_at)"
                ),
                ExpressionAttributeValues={":now": now},
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                return False
            raise LeaderboardError(f"Failed to consume run: {e}") from e
        return True

    def upsert_if_higher(self, player: str, score: int, now: int) -> bool:
        """Store a score only if it beats the player's current best.

        Insert and update-if-greater are a single conditional write.
        Returns True when the stored entry changed.
        """
        try:
            self.scores_table.update_item(
                Key={"player": player},
                UpdateExpression="SET score = :score, updated_at = :now",
                ConditionExpression="attribute_not_exists(player) OR score < :score",
                ExpressionAttributeValues={":score": score, ":now": now},
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                return False
            raise LeaderboardError(f"Failed to submit score: {e}") from e
        return True

    def get_score(self, player: str) -> ScoreEntry | None:
        try:
            response = self.scores_table.get_item(
                Key={"player": player}, ConsistentRead=True
            )
        except ClientError as e:
            raise LeaderboardError(f"Failed to read score: {e}") from e

        item = response.get("Item")
        if item is None:
            return None
        return self._to_entry(item)

    def top(self, limit: int) -> list[ScoreEntry]:
        """Return the best entries, highest score first.

        Ties go to the player who reached the score earliest. The whole
        table is scanned and sorted in memory, so cost grows with the number
        of players; a GSI keyed on score would be needed for a large board.
        """
        try:
            items: list[dict[str, Any]] = []
            scan_kwargs: dict[str, Any] = {"ConsistentRead": True}
            while True:
                response = self.scores_table.scan(**scan_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            raise LeaderboardError(f"Failed to get leaderboard: {e}") from e

        entries = [self._to_entry(item) for item in items]
        entries.sort(key=lambda entry: (-entry.score, entry.updated_at))
        return entries[:limit]

    @staticmethod
    def _to_entry(item: dict[str, Any]) -> ScoreEntry:
        # DynamoDB returns numbers as Decimal
        return ScoreEntry(
            player=str(item["player"]),
            score=int(item["score"]),
            updated_at=int(item["updated_at"]),
        )

"""Business logic for run tokens and score submission."""

import threading
import time
from collections.abc import Callable
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from .constants import DEFAULT_LIMIT, RUN_START_MAX_ATTEMPTS, RUN_TOKEN_TTL_MS
from .database import LeaderboardDatabase
from .exceptions import RunInitializationError
from .models import (
    RunRecord,
    RunStart,
    ScoreEntry,
    ScoreSubmission,
    SubmitError,
    SubmitErrorCode,
    SubmitResult,
)
from .tokens import generate_run_id, generate_token, hash_token, timing_safe_equal
from .validation import clamp_limit

logger = Logger(child=True)

INVALID_INPUT = SubmitError(
    code=SubmitErrorCode.INVALID_INPUT,
    message="Invalid player, score, or run token",
)
INVALID_RUN_TOKEN = SubmitError(
    code=SubmitErrorCode.INVALID_RUN_TOKEN, message="Invalid run token"
)
ALREADY_SUBMITTED = SubmitError(
    code=SubmitErrorCode.ALREADY_SUBMITTED,
    message="Score already submitted for this run",
)
RUN_TOKEN_EXPIRED = SubmitError(
    code=SubmitErrorCode.RUN_TOKEN_EXPIRED, message="Run token expired"
)


def current_time_ms() -> int:
    return int(time.time() * 1000)


class LeaderboardService:
    """Single-writer authority over run tokens and the score table.

    Mutating operations are serialized per instance, and every storage write
    is conditional so that concurrent instances sharing the tables stay safe.
    """

    def __init__(
        self,
        database: LeaderboardDatabase | None = None,
        clock: Callable[[], int] = current_time_ms,
    ) -> None:
        """Initialize service with database dependency."""
        self.db = database or LeaderboardDatabase()
        self.clock = clock
        self._lock = threading.Lock()

    def health_check(self) -> dict[str, str]:
        """Perform health check."""
        return {"status": "healthy", "service": "leaderboard"}

    def start_run(self, now: int | None = None) -> RunStart:
        """Issue a new run token.

        Raises:
            RunInitializationError: If every generated run_id collided
            LeaderboardError: If the database operation fails
        """
        with self._lock:
            for attempt in range(1, RUN_START_MAX_ATTEMPTS + 1):
                issued_at = self.clock() if now is None else now
                expires_at = issued_at + RUN_TOKEN_TTL_MS
                run_id = generate_run_id()
                token = generate_token(issued_at, expires_at)
                record = RunRecord(
                    run_id=run_id,
                    issued_at=issued_at,
                    expires_at=expires_at,
                    token_hash=hash_token(token),
                )
                if self.db.insert_run(record):
                    logger.info(
                        "Run started", extra={"run_id": run_id, "attempt": attempt}
                    )
                    return RunStart(
                        run_id=run_id,
                        token=token,
                        issued_at=issued_at,
                        expires_at=expires_at,
                    )
                logger.warning("Run ID collision", extra={"attempt": attempt})

        raise RunInitializationError(RUN_START_MAX_ATTEMPTS)

    def validate_and_consume(
        self, run_id: str, token: str, now: int
    ) -> SubmitError | None:
        """Check a presented token and spend it.

        Returns None on success, otherwise the first failing check in order:
        unknown run, already consumed, expired, hash mismatch.
        """
        record = self.db.get_run(run_id)
        if record is None:
            return INVALID_RUN_TOKEN

        if record.is_consumed:
            return ALREADY_SUBMITTED

        # Expired tokens are never consumed
        if record.is_expired(now):
            return RUN_TOKEN_EXPIRED

        if not timing_safe_equal(hash_token(token), record.token_hash):
            return INVALID_RUN_TOKEN

        if not self.db.consume_run(run_id, now):
            return ALREADY_SUBMITTED

        return None

    def upsert_if_higher(self, player: str, score: int, now: int) -> bool:
        return self.db.upsert_if_higher(player, score, now)

    def top(self, limit: Any = DEFAULT_LIMIT) -> list[ScoreEntry]:
        """Get the ranked leaderboard, clamping limit to [1, 100]."""
        return self.db.top(clamp_limit(limit))

    def submit(
        self,
        player: Any,
        claimed_score: Any,
        run_id: Any,
        token: Any,
        now: int | None = None,
    ) -> SubmitResult:
        """Submit a claimed score for a run.

        The run token is spent by a successful validation even when the
        score does not improve the player's best.

        Raises:
            LeaderboardError: If a database operation fails
        """
        try:
            submission = ScoreSubmission.model_validate(
                {
                    "player": player,
                    "claimedScore": claimed_score,
                    "runId": run_id,
                    "token": token,
                }
            )
        except ValidationError as e:
            logger.warning(
                "Invalid score submission",
                extra={"fields": [str(err["loc"][0]) for err in e.errors()]},
            )
            return SubmitResult.failure(INVALID_INPUT)

        with self._lock:
            timestamp = self.clock() if now is None else now
            error = self.validate_and_consume(
                submission.run_id, submission.token, timestamp
            )
            if error is not None:
                logger.warning(
                    "Submission rejected",
                    extra={"run_id": submission.run_id, "code": error.code.value},
                )
                return SubmitResult.failure(error)

            improved = self.upsert_if_higher(
                submission.player, submission.score, timestamp
            )
            logger.info(
                "Score accepted",
                extra={
                    "run_id": submission.run_id,
                    "player": submission.player,
                    "score": submission.score,
                    "improved": improved,
                },
            )
            entries = self.db.top(DEFAULT_LIMIT)

        return SubmitResult.success(entries)

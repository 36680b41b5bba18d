"""Data models for the score authority service."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .validation import (
    normalize_identifier,
    normalize_player,
    normalize_run_token,
    normalize_score,
)


class SubmitErrorCode(str, Enum):
    """Outcome codes for rejected submissions and run starts."""

    INVALID_INPUT = "INVALID_INPUT"
    INVALID_RUN_TOKEN = "INVALID_RUN_TOKEN"
    ALREADY_SUBMITTED = "ALREADY_SUBMITTED"
    RUN_TOKEN_EXPIRED = "RUN_TOKEN_EXPIRED"
    INTERNAL = "INTERNAL"


class WireModel(BaseModel):
    """Base for models exchanged with the game client in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class RunRecord(BaseModel):
    """Stored record for one issued run token."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    issued_at: int
    expires_at: int
    token_hash: str
    consumed_at: int | None = None

    @property
    def is_consumed(self) -> bool:
        return self.consumed_at is not None

    def is_expired(self, now: int) -> bool:
        return now > self.expires_at


class RunStart(WireModel):
    """Run metadata handed to the client; the only place the raw token exists."""

    run_id: str
    token: str
    issued_at: int
    expires_at: int


class ScoreEntry(WireModel):
    """Best known score for one player."""

    player: str
    score: int = Field(..., ge=0)
    updated_at: int


class LeaderboardResponse(WireModel):
    """Ranked leaderboard entries."""

    entries: list[ScoreEntry]


class ScoreSubmission(WireModel):
    """Normalized score submission.

    All fields arrive from an untrusted client. Validation only shapes the
    values; it says nothing about whether the claimed score is genuine.
    """

    player: str
    score: int = Field(..., alias="claimedScore")
    run_id: str
    token: str

    @field_validator("player", mode="before")
    @classmethod
    def validate_player(cls, v: Any) -> str:
        """Trim and collapse whitespace, capping the name length."""
        player = normalize_player(v)
        if player is None:
            raise ValueError("Player must be a non-empty string")
        return player

    @field_validator("score", mode="before")
    @classmethod
    def validate_score(cls, v: Any) -> int:
        """Floor and clamp the claimed score."""
        score = normalize_score(v)
        if score is None:
            raise ValueError("Score must be a finite number")
        return score

    @field_validator("run_id", mode="before")
    @classmethod
    def validate_run_id(cls, v: Any) -> str:
        run_id = normalize_identifier(v)
        if run_id is None:
            raise ValueError(
                "Run ID must contain only alphanumeric characters, hyphens, and underscores"
            )
        return run_id

    @field_validator("token", mode="before")
    @classmethod
    def validate_token(cls, v: Any) -> str:
        token = normalize_run_token(v)
        if token is None:
            raise ValueError("Run token is malformed")
        return token


class SubmitError(BaseModel):
    """Typed rejection of a submission."""

    model_config = ConfigDict(frozen=True)

    code: SubmitErrorCode
    message: str


class SubmitResult(BaseModel):
    """Outcome of a score submission."""

    ok: bool
    error: SubmitError | None = None
    entries: list[ScoreEntry] = Field(default_factory=list)

    @classmethod
    def success(cls, entries: list[ScoreEntry]) -> "SubmitResult":
        return cls(ok=True, entries=entries)

    @classmethod
    def failure(cls, error: SubmitError) -> "SubmitResult":
        return cls(ok=False, error=error)

    @property
    def code(self) -> SubmitErrorCode | None:
        return self.error.code if self.error else None

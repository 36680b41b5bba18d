"""Lambda handler for the score authority service."""

import json
from typing import Any

from aws_lambda_powertools import Logger
from aws_lambda_powertools.event_handler import (
    APIGatewayRestResolver,
    Response,
    content_types,
)
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from .constants import PAGE_LIMIT
from .exceptions import LeaderboardError, RunInitializationError
from .models import LeaderboardResponse, SubmitErrorCode
from .page import SECURITY_HEADERS, render_leaderboard_html
from .service import LeaderboardService
from .validation import normalize_identifier, normalize_run_token

logger = Logger()
app = APIGatewayRestResolver()
service = LeaderboardService()

ERROR_STATUS = {
    SubmitErrorCode.INVALID_INPUT: 400,
    SubmitErrorCode.INVALID_RUN_TOKEN: 400,
    SubmitErrorCode.ALREADY_SUBMITTED: 409,
    SubmitErrorCode.RUN_TOKEN_EXPIRED: 410,
    SubmitErrorCode.INTERNAL: 500,
}


def json_response(body: dict[str, Any], status_code: int = 200) -> Response:
    """Build an uncacheable JSON response."""
    return Response(
        status_code=status_code,
        content_type=content_types.APPLICATION_JSON,
        body=json.dumps(body),
        headers={"Cache-Control": "no-store"},
    )


def error_response(message: str, status_code: int) -> Response:
    return json_response({"error": message}, status_code)


def method_not_allowed(allow: str) -> Response:
    return Response(
        status_code=405,
        content_type="text/plain; charset=utf-8",
        body="Method Not Allowed",
        headers={"Allow": allow},
    )


@app.exception_handler(RunInitializationError)
def handle_run_initialization_error(e: RunInitializationError) -> Response:
    logger.error("Run initialization failed", extra={"attempts": e.attempts})
    return error_response(str(e), 500)


@app.exception_handler(LeaderboardError)
def handle_leaderboard_error(e: LeaderboardError) -> Response:
    logger.error("Database error", extra={"error": str(e)})
    return error_response("Internal server error", 500)


@app.get("/leaderboard/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return service.health_check()


@app.post("/run/start")
def start_run() -> Response:
    """Issue a single-use run token for a new play session."""
    run = service.start_run()
    return json_response(run.to_wire())


@app.post("/leaderboard")
def submit_score() -> Response:
    """Submit a score for a run."""
    try:
        payload = json.loads(app.current_event.decoded_body or "")
    except (ValueError, RecursionError):
        payload = None
    if not isinstance(payload, dict):
        logger.warning("Invalid JSON payload")
        return error_response("Invalid JSON payload", 400)

    run_id = normalize_identifier(payload.get("runId"))
    token = normalize_run_token(payload.get("token"))
    if run_id is None or token is None:
        logger.warning("Missing or malformed run token")
        return error_response("Missing run token. Refresh the app.", 428)

    claimed_score = payload.get("claimedScore")
    if claimed_score is None:
        claimed_score = payload.get("score")

    logger.info(
        "Score submission received",
        extra={"run_id": run_id, "player": payload.get("player")},
    )
    result = service.submit(payload.get("player"), claimed_score, run_id, token)

    if result.error is not None:
        return error_response(result.error.message, ERROR_STATUS[result.error.code])

    logger.info("Score submitted successfully", extra={"run_id": run_id})
    return json_response(LeaderboardResponse(entries=result.entries).to_wire())


@app.get("/leaderboard")
def get_leaderboard() -> Response:
    """Get the ranked leaderboard."""
    limit_param = app.current_event.get_query_string_value("limit", None)
    entries = service.top(limit_param)

    logger.info(
        "Leaderboard retrieved successfully",
        extra={"limit": limit_param, "entries_count": len(entries)},
    )
    return json_response(LeaderboardResponse(entries=entries).to_wire())


@app.route("/leaderboard/view", method=["GET", "HEAD"])
def leaderboard_page() -> Response:
    """Render the public leaderboard page."""
    entries = service.top(PAGE_LIMIT)
    return Response(
        status_code=200,
        content_type="text/html; charset=utf-8",
        body=render_leaderboard_html(entries),
        headers=dict(SECURITY_HEADERS),
    )


@app.route("/run/start", method=["GET", "PUT", "PATCH", "DELETE"])
def run_start_method_not_allowed() -> Response:
    return method_not_allowed("POST")


@app.route("/leaderboard", method=["PUT", "PATCH", "DELETE"])
def leaderboard_method_not_allowed() -> Response:
    return method_not_allowed("GET, POST")


@app.route("/leaderboard/view", method=["POST", "PUT", "PATCH", "DELETE"])
def leaderboard_page_method_not_allowed() -> Response:
    return method_not_allowed("GET, HEAD")


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
def lambda_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Lambda handler entry point."""
    return app.resolve(event, context)

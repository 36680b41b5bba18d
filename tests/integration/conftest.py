"""Integration test configuration and fixtures."""

import json
from collections.abc import Generator
from typing import Any
from unittest.mock import patch

import pytest

from src.score_authority.service import LeaderboardService


@pytest.fixture
def lambda_context():
    """Mock Lambda context for testing."""

    class MockLambdaContext:
        def __init__(self):
            self.function_name = "score-authority-test"
            self.function_version = "$LATEST"
            self.invoked_function_arn = (
                "arn:aws:lambda:us-east-1:123456789012:function:score-authority-test"
            )
            self.memory_limit_in_mb = 128
            self.remaining_time_in_millis = lambda: 30000
            self.log_group_name = "/aws/lambda/score-authority-test"
            self.log_stream_name = "2024/01/01/[$LATEST]test"
            self.aws_request_id = "test-request-id"

    return MockLambdaContext()


@pytest.fixture
def live_service(
    leaderboard_service: LeaderboardService,
) -> Generator[LeaderboardService, None, None]:
    """Route the Lambda handler to a service backed by moto tables."""
    with patch("src.score_authority.handler.service", leaderboard_service):
        yield leaderboard_service


def create_api_event(
    method: str,
    path: str,
    body: dict | None = None,
    query_params: dict | None = None,
) -> dict:
    """Helper function to create API Gateway events."""
    return {
        "resource": path,
        "path": path,
        "httpMethod": method,
        "headers": {"Content-Type": "application/json"},
        "queryStringParameters": query_params,
        "pathParameters": None,
        "body": json.dumps(body) if body is not None else None,
        "isBase64Encoded": False,
        "requestContext": {
            "httpMethod": method,
            "path": path,
            "stage": "test",
            "requestId": "test-request-id",
        },
    }


def invoke(
    handler: Any, context: Any, method: str, path: str, **kwargs: Any
) -> tuple[int, Any]:
    """Invoke the handler and decode its JSON body."""
    response = handler(create_api_event(method, path, **kwargs), context)
    return response["statusCode"], json.loads(response["body"])

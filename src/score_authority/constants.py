"""Protocol constants for the score authority service."""

import re

RUN_TOKEN_TTL_MS = 20 * 60 * 1000
RUN_START_MAX_ATTEMPTS = 3

PLAYER_MAX_LENGTH = 24
SCORE_MIN = 0
SCORE_MAX = 999_999

DEFAULT_LIMIT = 20
MIN_LIMIT = 1
MAX_LIMIT = 100
PAGE_LIMIT = 100

RUN_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,100}$")
RUN_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9._-]{20,220}$")
NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

#!/usr/bin/env python3
"""
Create the run-token and score tables for the score authority service.

Table names come from RUNS_TABLE / SCORES_TABLE and the endpoint from
AWS_ENDPOINT_URL, so the same script works against LocalStack and AWS.
"""

import os
import sys

from score_authority.database import LeaderboardDatabase
from score_authority.exceptions import LeaderboardError


def main():
    """Create both tables, skipping any that already exist."""
    print("🗄️  Score authority table bootstrap")
    print("=" * 50)

    db = LeaderboardDatabase()
    print(f"📍 Region: {os.environ.get('AWS_DEFAULT_REGION', 'us-east-1')}")
    print(f"🏃 Runs table: {db.runs_table_name}")
    print(f"🏆 Scores table: {db.scores_table_name}")

    try:
        db.create_tables()
    except LeaderboardError as e:
        print(f"❌ Bootstrap failed: {e}")
        sys.exit(1)

    print("✅ Tables ready")


if __name__ == "__main__":
    main()

"""Exceptions raised by the score authority service."""


class LeaderboardError(RuntimeError):
    """Storage or initialization failure; surfaced to clients as INTERNAL."""


class RunInitializationError(LeaderboardError):
    """No run could be created within the allowed number of attempts."""

    def __init__(self, attempts: int) -> None:
        super().__init__("Unable to initialize run")
        self.attempts = attempts

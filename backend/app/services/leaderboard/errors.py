class LeaderboardError(Exception):
    """Base class for leaderboard failures."""


class ValidationError(LeaderboardError):
    """A score submission is malformed. Nothing was written."""


class BackendUnavailable(LeaderboardError):
    """The ordered-set storage could not be reached."""

class EscalappError(Exception):
    """Base exception for the ladder engine."""

    pass


class GroupValidationError(EscalappError):
    """Raised when a group is not 4 players with matches among them."""

    pass


class ScoreValidationError(EscalappError):
    """Raised when a reported set score breaks the padel set rules."""

    pass


class ResultStateError(EscalappError):
    """Raised when a result report/confirmation is not allowed in its current state."""

    pass


class LadderError(EscalappError):
    """Raised for an impossible (position, level, total groups) combination."""

    pass


class RoundStateError(EscalappError):
    """Raised when a round cannot be closed."""

    pass


class RoundAlreadyClosedError(RoundStateError):
    pass


class MatchesIncompleteError(RoundStateError):
    pass

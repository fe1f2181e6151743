class SchedulingError(Exception):
    """Base class for schedule generation and result recording failures."""


class InsufficientPlayers(SchedulingError):
    def __init__(self, count, minimum=2):
        self.count = count
        self.minimum = minimum
        super().__init__(f"Need at least {minimum} players to generate matches, got {count}")


class BracketIntegrityError(SchedulingError):
    pass


class InvalidScoreUpdate(SchedulingError):
    pass


class DuplicatePlayer(SchedulingError, ValueError):
    pass

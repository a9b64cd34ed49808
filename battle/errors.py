"""Exceptions raised by the battle core."""
from typing import Optional


class BattleError(Exception):
    """Base class for every error raised by the battle package."""


class MapParseError(BattleError, ValueError):
    """The map text cannot be turned into a valid battle."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            where = f"line {line}" if column is None else f"line {line}, column {column}"
            message = f"{message} ({where})"
        super().__init__(message)


class InvariantViolation(BattleError):
    """Grid occupancy and the unit registry disagree. Never expected at runtime."""


class BattleStalled(BattleError):
    """The battle cannot progress any further, or exceeded its round limit."""

    def __init__(self, message: str, rounds: int):
        self.rounds = rounds
        super().__init__(message)

    def __reduce__(self):
        # Raised inside search worker processes, so it must survive pickling.
        return type(self), (self.args[0], self.rounds)


class NoQualifyingBoost(BattleError):
    """No boost up to the search limit kept every elf alive."""

    def __init__(self, max_boost: int):
        self.max_boost = max_boost
        super().__init__(f"no elf attack boost up to {max_boost} avoids elf casualties")


class RoundLimitExceeded(BattleStalled):
    """The battle was still going when it hit its configured round cap."""

"""In-memory value types returned by the engine."""

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from .constants import NOT_FOUND_ERROR, STATE_ERROR, VALIDATION_ERROR
from .schemas import KnockoutBracket, Match

T = TypeVar('T')


@dataclass
class EngineError:
    """An expected, user-facing failure: validation, state or not_found."""
    kind: str
    message: str

    def __str__(self) -> str:
        return f'{self.kind}: {self.message}'


@dataclass
class Result(Generic[T]):
    """Outcome of an engine operation: a value or an EngineError, never both."""
    value: Optional[T] = None
    error: Optional[EngineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: T = None) -> 'Result[T]':
        return cls(value=value)

    @classmethod
    def validation_error(cls, message: str) -> 'Result[T]':
        return cls(error=EngineError(VALIDATION_ERROR, message))

    @classmethod
    def state_error(cls, message: str) -> 'Result[T]':
        return cls(error=EngineError(STATE_ERROR, message))

    @classmethod
    def not_found(cls, message: str) -> 'Result[T]':
        return cls(error=EngineError(NOT_FOUND_ERROR, message))


@dataclass
class FixtureSet:
    """Matches produced for a competition, plus the bracket skeleton for knockouts."""
    matches: List[Match] = field(default_factory=list)
    bracket: Optional[KnockoutBracket] = None


@dataclass
class HeadToHead:
    """Completed meetings between two players."""
    player1_id: str
    player2_id: str
    player1_wins: int = 0
    player2_wins: int = 0
    draws: int = 0
    total_goals: int = 0
    matches: List[Match] = field(default_factory=list)


@dataclass
class StandingsRow:
    """One line of a league table."""
    player_id: str
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

"""Shared fixtures: deterministic ids and clock, players, an engine with one group."""

from datetime import datetime, timedelta, timezone

import pytest

from matchday.engine import CompetitionEngine
from matchday.schemas import Competition, EngineConfig, Match, Player
from matchday.store import GroupStore

START = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class CountingIds:
    """Id factory returning id-1, id-2, ..."""

    def __init__(self, prefix: str = 'id'):
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f'{self.prefix}-{self.count}'


class SteppingClock:
    """Clock that moves forward one minute every time it is read."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


@pytest.fixture
def ids():
    return CountingIds()


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def players():
    return [Player(id=f'p{i}', name=f'Player {i}', gamer_handle=f'gamer{i}') for i in range(1, 9)]


@pytest.fixture
def store():
    return GroupStore()


@pytest.fixture
def engine(store, config, ids, clock):
    return CompetitionEngine(
        store, config=config, id_factory=ids, clock=clock, invite_code_factory=lambda n: 'JOINME42'
    )


@pytest.fixture
def group(engine, players):
    """A group of eight players administered by p1."""
    result = engine.create_group('Sunday Club', players[0])
    for player in players[1:]:
        result = engine.join_group('JOINME42', player)
    return result.value


def make_match(match_id, home, away, home_score=None, away_score=None, minutes=0, **kwargs):
    """Build a match; completed when both scores are given."""
    completed = home_score is not None and away_score is not None
    when = START + timedelta(minutes=minutes)
    return Match(
        id=match_id,
        competition_id=kwargs.pop('competition_id', 'c1'),
        home_player_id=home,
        away_player_id=away,
        status='completed' if completed else kwargs.pop('status', 'scheduled'),
        home_score=home_score,
        away_score=away_score,
        scheduled_time=when,
        completed_at=when if completed else None,
        **kwargs,
    )


def make_competition(competition_type, participants, matches=(), **kwargs):
    """Build a competition with default options for its type."""
    options = kwargs.pop('options', None) or {'kind': competition_type}
    return Competition(
        id=kwargs.pop('id', 'c1'),
        group_id='g1',
        name=kwargs.pop('name', 'Test Cup'),
        type=competition_type,
        status=kwargs.pop('status', 'active'),
        start_date=START,
        participants=list(participants),
        matches=list(matches),
        options=options,
        **kwargs,
    )

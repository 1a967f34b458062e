"""Fixture generation for leagues, friendlies and knockout tournaments.

League (round robin):
- Every unordered pair plays once (single) or twice with sides swapped (double)
- n participants -> n(n-1)/2 matches (single) or n(n-1) matches (double)

Friendly:
- Exactly two participants, `friendly_target` matches scheduled up front
- `friendly_type` (best_of / first_to) does not change the fixture count

Knockout:
- Participant count is a power of two between 4 and 32
- Only round 0 is generated: participants[2i] vs participants[2i+1]
- Later rounds exist in the bracket skeleton but stay empty until the
  previous round is decided (see bracket.py)

Scheduled times are spaced one day apart (configurable) from the clock's
current time, giving a stable display order.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Optional

from .config import get_config
from .constants import (
    ACTIVE,
    DOUBLE,
    FRIENDLY,
    LEAGUE,
    ROUND_NAMES_FROM_FINAL,
    SCHEDULED,
    TOURNAMENT,
    UPCOMING,
)
from .models import FixtureSet
from .schemas import (
    Competition,
    EngineConfig,
    FriendlyOptions,
    KnockoutBracket,
    LeagueOptions,
    Match,
    TournamentRound,
)
from .utils import new_id, utc_now

logger = logging.getLogger('matchday.fixtures')

IdFactory = Callable[[], str]
Clock = Callable[[], datetime]


class FixtureError(RuntimeError):
    """Raised for competitions that should never have passed validation."""


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def round_name(round_index: int, total_rounds: int) -> str:
    """
    Display name for a bracket round.

    Examples:
        >>> round_name(2, 3)
        'Final'
        >>> round_name(1, 3)
        'Semi-Final'
        >>> round_name(0, 5)
        'Round 1'
    """
    from_final = total_rounds - 1 - round_index
    return ROUND_NAMES_FROM_FINAL.get(from_final, f'Round {round_index + 1}')


def build_match(
    competition_id: str,
    home_player_id: str,
    away_player_id: str,
    scheduled_time: datetime,
    id_factory: IdFactory = new_id,
    replay_of: Optional[str] = None,
) -> Match:
    """Create a scheduled match. Shared by fixture generation and bracket progression."""
    return Match(
        id=id_factory(),
        competition_id=competition_id,
        home_player_id=home_player_id,
        away_player_id=away_player_id,
        status=SCHEDULED,
        scheduled_time=scheduled_time,
        replay_of=replay_of,
    )


def _league_fixtures(
    competition: Competition, start: datetime, spacing: timedelta, id_factory: IdFactory
) -> list[Match]:
    options = competition.options
    double = isinstance(options, LeagueOptions) and options.league_format == DOUBLE
    participants = competition.participants
    matches: list[Match] = []

    for i in range(len(participants)):
        for j in range(i + 1, len(participants)):
            pairings = [(participants[i], participants[j])]
            if double:
                pairings.append((participants[j], participants[i]))
            for home, away in pairings:
                matches.append(
                    build_match(
                        competition.id, home, away, start + spacing * len(matches), id_factory
                    )
                )

    return matches


def _friendly_fixtures(
    competition: Competition,
    start: datetime,
    spacing: timedelta,
    id_factory: IdFactory,
    config: EngineConfig,
) -> list[Match]:
    if len(competition.participants) != 2:
        raise FixtureError(
            f'Friendly {competition.id} needs exactly 2 participants, '
            f'got {len(competition.participants)}'
        )
    options = competition.options
    target = (
        options.friendly_target
        if isinstance(options, FriendlyOptions)
        else config.friendly_default_target
    )
    home, away = competition.participants
    return [
        build_match(competition.id, home, away, start + spacing * i, id_factory)
        for i in range(target)
    ]


def _knockout_fixtures(
    competition: Competition,
    start: datetime,
    spacing: timedelta,
    id_factory: IdFactory,
    config: EngineConfig,
) -> FixtureSet:
    participants = competition.participants
    n = len(participants)
    if not is_power_of_two(n) or not (
        config.knockout_min_participants <= n <= config.knockout_max_participants
    ):
        raise FixtureError(f'Knockout {competition.id} cannot be drawn with {n} participants')

    matches = [
        build_match(
            competition.id, participants[i], participants[i + 1], start + spacing * (i // 2),
            id_factory,
        )
        for i in range(0, n, 2)
    ]

    total_rounds = math.ceil(math.log2(n))
    rounds = []
    for index in range(total_rounds):
        first = index == 0
        rounds.append(
            TournamentRound(
                id=id_factory(),
                name=round_name(index, total_rounds),
                round_number=index,
                matches=[m.id for m in matches] if first else [],
                status=ACTIVE if first else UPCOMING,
                is_generated=first,
            )
        )

    bracket = KnockoutBracket(
        id=id_factory(),
        competition_id=competition.id,
        total_rounds=total_rounds,
        current_round=0,
        rounds=rounds,
        participants=list(participants),
        winners={},
    )
    return FixtureSet(matches=matches, bracket=bracket)


def generate_fixtures(
    competition: Competition,
    id_factory: IdFactory = new_id,
    clock: Clock = utc_now,
    config: Optional[EngineConfig] = None,
) -> FixtureSet:
    """
    Produce the initial scheduled matches for a competition.

    Does not modify the competition; the caller attaches the result.

    Args:
        competition: Competition to generate fixtures for
        id_factory: Callable returning fresh ids for matches, rounds and bracket
        clock: Callable returning the current time, the first match's slot
        config: Engine config (defaults to get_config())

    Returns:
        FixtureSet with the matches and, for knockouts, the bracket skeleton

    Raises:
        FixtureError: If the competition is structurally unplayable
    """
    config = config or get_config()
    start = clock()
    spacing = timedelta(days=config.match_spacing_days)

    if competition.type == LEAGUE:
        fixture_set = FixtureSet(matches=_league_fixtures(competition, start, spacing, id_factory))
    elif competition.type == FRIENDLY:
        fixture_set = FixtureSet(
            matches=_friendly_fixtures(competition, start, spacing, id_factory, config)
        )
    elif competition.type == TOURNAMENT:
        fixture_set = _knockout_fixtures(competition, start, spacing, id_factory, config)
    else:
        raise FixtureError(f'Unknown competition type: {competition.type}')

    logger.debug(
        f'Generated {len(fixture_set.matches)} {competition.type} fixtures for {competition.id}'
    )
    return fixture_set

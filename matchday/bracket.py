"""Knockout bracket progression.

Slot positions are 0-indexed within each round and follow standard
single-elimination progression:

    Round r, slot i  ->  Round r+1, slot floor(i/2)  (home if i is even, else away)

A drawn slot match gets a replay with the same pairing, scheduled a day
after the draw. The replay points back at the drawn match through
`replay_of`, so a slot always resolves to the last match in its replay
chain. A round is decided once every slot resolves to a completed,
non-drawn match; only then is the next round generated.

Progression is safe to run any number of times for the same state: it
never schedules a second replay for the same draw and never regenerates a
round that already has matches.
"""

import logging
from datetime import timedelta
from typing import Optional

from .config import get_config
from .constants import ACTIVE, COMPLETED
from .fixtures import Clock, IdFactory, build_match
from .schemas import Competition, EngineConfig, KnockoutBracket, Match, TournamentRound
from .stats import match_winner
from .utils import new_id, utc_now

logger = logging.getLogger('matchday.bracket')


class BracketStateError(RuntimeError):
    """Raised when a bracket is in a state validation should have made impossible."""


def expected_slots(bracket: KnockoutBracket, round_index: int) -> int:
    """Number of matches (slots) in a round: 2^(total_rounds - round - 1)."""
    return 2 ** (bracket.total_rounds - round_index - 1)


def next_slot(slot: int) -> tuple[int, str]:
    """
    Slot a winner moves into in the next round, and the side they take.

    Examples:
        >>> next_slot(0)
        (0, 'home')
        >>> next_slot(3)
        (1, 'away')
    """
    return slot // 2, 'home' if slot % 2 == 0 else 'away'


def resolve_slot(competition: Competition, slot_match_id: str) -> Optional[Match]:
    """Match currently deciding a slot (the last replay, or the original match)."""
    return competition.resolve_slot(slot_match_id)


def slot_winner(competition: Competition, slot_match_id: str) -> Optional[str]:
    """Winner of a slot, or None while it is unplayed or drawn."""
    match = resolve_slot(competition, slot_match_id)
    return match_winner(match) if match is not None else None


def champion(competition: Competition) -> Optional[str]:
    """Tournament winner once the final round has been decided."""
    bracket = competition.bracket
    if bracket is None:
        return None
    final_round = bracket.rounds[-1]
    if final_round.status != COMPLETED:
        return None
    winners = bracket.winners.get(final_round.id, [])
    return winners[0] if len(winners) == 1 else None


def _check_round(competition: Competition, bracket: KnockoutBracket, index: int) -> TournamentRound:
    current = bracket.rounds[index]
    expected = expected_slots(bracket, index)
    if not current.is_generated or len(current.matches) != expected:
        raise BracketStateError(
            f'Round {current.name} of {competition.id} has {len(current.matches)} slots, '
            f'expected {expected}'
        )
    for slot_id in current.matches:
        if competition.find_match(slot_id) is None:
            raise BracketStateError(f'Slot match {slot_id} missing from {competition.id}')
    return current


def _schedule_replays(
    competition: Competition,
    current: TournamentRound,
    id_factory: IdFactory,
    clock: Clock,
    config: EngineConfig,
) -> list[Match]:
    replays = []
    for slot_id in current.matches:
        match = resolve_slot(competition, slot_id)
        if match is None or not match.is_draw:
            continue
        played_at = match.completed_at or clock()
        replay = build_match(
            competition.id,
            match.home_player_id,
            match.away_player_id,
            played_at + timedelta(days=config.replay_delay_days),
            id_factory,
            replay_of=match.id,
        )
        competition.matches.append(replay)
        replays.append(replay)
        logger.info(
            f'Draw in {current.name} ({match.home_player_id} v {match.away_player_id}), '
            f'replay {replay.id} scheduled'
        )
    return replays


def round_winners(competition: Competition, current: TournamentRound) -> Optional[list[str]]:
    """Winners in slot order, or None while any slot is undecided."""
    winners = []
    for slot_id in current.matches:
        winner = slot_winner(competition, slot_id)
        if winner is None:
            return None
        winners.append(winner)
    return winners


def on_match_completed(
    competition: Competition,
    id_factory: IdFactory = new_id,
    clock: Clock = utc_now,
    config: Optional[EngineConfig] = None,
) -> Competition:
    """
    Bring a knockout bracket up to date with the competition's results.

    Schedules replays for drawn slots, and once the current round is fully
    decided either generates the next round or records the champion.

    Args:
        competition: Knockout competition (anything else is returned unchanged)
        id_factory: Callable returning ids for new matches
        clock: Callable returning the current time
        config: Engine config (defaults to get_config())

    Returns:
        Updated copy of the competition (the input is not modified)

    Raises:
        BracketStateError: If the bracket's current round is malformed
    """
    if competition.bracket is None or not competition.is_knockout:
        return competition

    config = config or get_config()
    updated = competition.model_copy(deep=True)
    bracket = updated.bracket
    index = bracket.current_round
    current = _check_round(updated, bracket, index)

    if current.status == COMPLETED:
        return updated

    _schedule_replays(updated, current, id_factory, clock, config)

    winners = round_winners(updated, current)
    if winners is None:
        return updated

    if index == bracket.total_rounds - 1:
        current.status = COMPLETED
        bracket.winners[current.id] = winners
        logger.info(f'{updated.name}: {winners[0]} wins the {current.name}')
        return updated

    upcoming = bracket.rounds[index + 1]
    if upcoming.is_generated or upcoming.matches:
        return updated

    pairings = [{} for _ in range(expected_slots(bracket, index + 1))]
    for slot, winner in enumerate(winners):
        next_index, side = next_slot(slot)
        pairings[next_index][side] = winner

    start = clock()
    spacing = timedelta(days=config.match_spacing_days)
    new_matches = [
        build_match(
            updated.id, pair['home'], pair['away'], start + spacing * (k + 1), id_factory
        )
        for k, pair in enumerate(pairings)
    ]
    updated.matches.extend(new_matches)

    upcoming.matches = [m.id for m in new_matches]
    upcoming.status = ACTIVE
    upcoming.is_generated = True
    current.status = COMPLETED
    bracket.current_round = index + 1
    bracket.winners[current.id] = winners

    logger.info(
        f'{updated.name}: {current.name} complete, {len(new_matches)} {upcoming.name} '
        f'match(es) generated'
    )
    return updated

"""Validation functions for competitions, results and group membership.

Each validator returns a list of messages; an empty list means valid. The
engine turns a non-empty list into a Result error instead of raising.
"""

from typing import Any, Optional

from .constants import COMPLETED, FRIENDLY, LEAGUE, TOURNAMENT
from .fixtures import is_power_of_two
from .schemas import (
    CompetitionOptions,
    EngineConfig,
    FriendlyOptions,
    Group,
    Match,
)


def validate_participants(
    competition_type: str,
    participant_ids: list[str],
    group: Group,
    config: EngineConfig,
) -> list[str]:
    """
    Check participant rules for a new competition.

    Checks:
    - Known competition type
    - No duplicate participants
    - Every participant is a member of the group
    - Count rules: league >= 2, friendly == 2, knockout a power of two in [4, 32]

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if competition_type not in (LEAGUE, TOURNAMENT, FRIENDLY):
        return [f'Unknown competition type: {competition_type}']

    seen = set()
    duplicates = set()
    for player_id in participant_ids:
        if player_id in seen:
            duplicates.add(player_id)
        seen.add(player_id)
    if duplicates:
        errors.append(f'Duplicate participants: {", ".join(sorted(duplicates))}')

    members = set(group.member_ids)
    outsiders = [p for p in participant_ids if p not in members]
    if outsiders:
        errors.append(f'Not members of {group.name}: {", ".join(outsiders)}')

    count = len(participant_ids)
    if competition_type == LEAGUE and count < 2:
        errors.append(f'A league needs at least 2 participants, got {count}')
    elif competition_type == FRIENDLY and count != 2:
        errors.append(f'A friendly needs exactly 2 participants, got {count}')
    elif competition_type == TOURNAMENT:
        low, high = config.knockout_min_participants, config.knockout_max_participants
        if not is_power_of_two(count) or not low <= count <= high:
            errors.append(
                f'A knockout needs a power of two between {low} and {high} participants, '
                f'got {count}'
            )

    return errors


def validate_options(
    competition_type: str, options: Optional[CompetitionOptions], config: EngineConfig
) -> list[str]:
    """
    Check that the options variant belongs to the competition type.

    Returns:
        List of validation error messages (empty if valid)
    """
    if options is None:
        return []

    errors = []
    if options.kind != competition_type:
        errors.append(f'{options.kind} options given for a {competition_type} competition')
    if isinstance(options, FriendlyOptions) and options.friendly_target > config.friendly_max_target:
        errors.append(
            f'Friendly target {options.friendly_target} exceeds maximum '
            f'{config.friendly_max_target}'
        )
    return errors


def validate_score(home_score: Any, away_score: Any) -> list[str]:
    """
    Check a submitted result.

    Scores must be non-negative integers; booleans are rejected even though
    they are ints in Python.

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    for side, score in (('Home', home_score), ('Away', away_score)):
        if isinstance(score, bool) or not isinstance(score, int):
            errors.append(f'{side} score must be an integer, got {score!r}')
        elif score < 0:
            errors.append(f'{side} score must not be negative, got {score}')
    return errors


def validate_youtube_link(link: Any) -> list[str]:
    """A shared stream link must be a non-empty http(s) URL."""
    if not isinstance(link, str) or not link.strip():
        return ['YouTube link must not be empty']
    if not link.strip().startswith(('http://', 'https://')):
        return [f'YouTube link must be an http(s) URL, got {link!r}']
    return []


def validate_group(group: Group) -> list[str]:
    """
    Check a loaded group's structural invariants.

    Checks:
    - Admins are members
    - Competition participants are members
    - Match players are participants of their competition
    - Bracket slots reference existing matches

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    members = set(group.member_ids)

    for admin_id in group.admin_ids:
        if admin_id not in members:
            errors.append(f'{group.name}: admin {admin_id} is not a member')

    for competition in group.competitions:
        participants = set(competition.participants)
        outsiders = participants - members
        if outsiders:
            errors.append(
                f'{competition.name}: participants not in group: {", ".join(sorted(outsiders))}'
            )
        for match in competition.matches:
            if match.home_player_id not in participants or match.away_player_id not in participants:
                errors.append(f'{competition.name}: match {match.id} has a non-participant')
        if competition.bracket is not None:
            for tournament_round in competition.bracket.rounds:
                for slot_id in tournament_round.matches:
                    if competition.find_match(slot_id) is None:
                        errors.append(
                            f'{competition.name}: {tournament_round.name} slot {slot_id} '
                            f'has no match'
                        )

    return errors


def is_group_admin(group: Group, player_id: str) -> bool:
    """Whether a player administers the group (may correct scores)."""
    return player_id in group.admin_ids


def can_delete_match(group: Group, match: Match, player_id: str) -> bool:
    """Group admins and the two players may delete a match that has not been completed."""
    if match.status == COMPLETED:
        return False
    return is_group_admin(group, player_id) or player_id in (
        match.home_player_id,
        match.away_player_id,
    )

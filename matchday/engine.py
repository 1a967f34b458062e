"""Competition engine: the operations the UI and persistence layers call.

Every operation returns a Result holding either a value or an EngineError
(validation, state or not_found); expected failures are never raised. Work
happens on a deep copy of the owning group, which replaces the stored group
only once the whole operation has succeeded. Returned models are copies;
changing them does not touch the store.

After any change to a completed result the stats of every group member are
recomputed from scratch over all of the group's matches.
"""

import logging
from typing import Callable, Optional

from .bracket import champion, on_match_completed
from .config import get_config
from .constants import ACTIVE, COMPLETED, FRIENDLY, LEAGUE, LIVE, UPCOMING
from .fixtures import Clock, IdFactory, generate_fixtures
from .models import HeadToHead, Result, StandingsRow
from .schemas import (
    Competition,
    CompetitionOptions,
    EngineConfig,
    FriendlyOptions,
    Group,
    KnockoutOptions,
    LeagueOptions,
    Match,
    Player,
    PlayerStats,
)
from .stats import compute_stats, head_to_head, league_table
from .store import GroupStore
from .utils import new_id, new_invite_code, utc_now
from .validators import (
    validate_options,
    validate_participants,
    validate_score,
    validate_youtube_link,
)

logger = logging.getLogger('matchday.engine')


def _rejected(operation: str, result: Result) -> Result:
    logger.warning(f'{operation} rejected: {result.error}')
    return result


def chronological(matches: list[Match]) -> list[Match]:
    """Order matches oldest first by completion time, falling back to schedule time."""
    return sorted(matches, key=lambda m: m.completed_at or m.scheduled_time)


class CompetitionEngine:
    """
    Orchestrates fixture generation, result recording, bracket progression
    and stats recomputation over a GroupStore.

    Single writer: callers serialise operations; nothing here suspends or
    runs in the background.
    """

    def __init__(
        self,
        store: GroupStore,
        config: Optional[EngineConfig] = None,
        id_factory: IdFactory = new_id,
        clock: Clock = utc_now,
        invite_code_factory: Optional[Callable[[int], str]] = None,
    ):
        """
        Initialize engine.

        Args:
            store: Group repository the engine reads and writes
            config: Engine config (defaults to get_config())
            id_factory: Callable returning fresh ids
            clock: Callable returning the current time
            invite_code_factory: Callable taking a length and returning an invite code
        """
        self.store = store
        self.config = config or get_config()
        self.id_factory = id_factory
        self.clock = clock
        self.invite_code_factory = invite_code_factory or new_invite_code

    # Groups

    def create_group(
        self, name: str, admin: Player, description: str = '', is_public: bool = False
    ) -> Result[Group]:
        """Create a group with `admin` as its first member and administrator."""
        if not name or not name.strip():
            return _rejected('create_group', Result.validation_error('Group name must not be empty'))

        group = Group(
            id=self.id_factory(),
            name=name.strip(),
            description=description,
            admin_ids=[admin.id],
            members=[admin.model_copy(deep=True, update={'stats': PlayerStats()})],
            created_at=self.clock(),
            invite_code=self.invite_code_factory(self.config.invite_code_length),
            is_public=is_public,
        )
        self.store.save_group(group)
        logger.info(f'Group {group.name} ({group.id}) created by {admin.id}')
        return Result.success(group.model_copy(deep=True))

    def join_group(self, invite_code: str, player: Player) -> Result[Group]:
        """Add a player to the group with the given invite code."""
        group = self.store.find_group_by_invite(invite_code)
        if group is None:
            return _rejected('join_group', Result.not_found(f'No group with invite code {invite_code}'))
        if player.id in group.member_ids:
            return _rejected(
                'join_group', Result.state_error(f'{player.id} is already a member of {group.name}')
            )

        updated = group.model_copy(deep=True)
        member = player.model_copy(deep=True)
        member.stats = compute_stats(
            member.id, self._group_matches(updated), updated.competitions, self.config.form_length
        )
        updated.members.append(member)
        self.store.save_group(updated)
        logger.info(f'{player.id} joined {group.name}')
        return Result.success(updated.model_copy(deep=True))

    # Competitions

    def _default_options(self, competition_type: str) -> CompetitionOptions:
        if competition_type == LEAGUE:
            return LeagueOptions()
        if competition_type == FRIENDLY:
            return FriendlyOptions(friendly_target=self.config.friendly_default_target)
        return KnockoutOptions()

    def create_competition(
        self,
        group_id: str,
        name: str,
        competition_type: str,
        participant_ids: list[str],
        options: Optional[CompetitionOptions] = None,
    ) -> Result[Competition]:
        """
        Create a competition in a group without generating its fixtures.

        Args:
            group_id: Owning group
            name: Display name
            competition_type: 'league', 'tournament' or 'friendly'
            participant_ids: Ordered participant ids (knockout pairs follow this order)
            options: Options variant matching the type (defaults per type when omitted)

        Returns:
            Result with the new competition (status 'upcoming', no matches)
        """
        group = self.store.get_group(group_id)
        if group is None:
            return _rejected('create_competition', Result.not_found(f'Unknown group {group_id}'))

        errors = []
        if not name or not name.strip():
            errors.append('Competition name must not be empty')
        errors.extend(validate_participants(competition_type, participant_ids, group, self.config))
        errors.extend(validate_options(competition_type, options, self.config))
        if errors:
            return _rejected('create_competition', Result.validation_error('; '.join(errors)))

        competition = Competition(
            id=self.id_factory(),
            group_id=group.id,
            name=name.strip(),
            type=competition_type,
            status=UPCOMING,
            start_date=self.clock(),
            participants=list(participant_ids),
            matches=[],
            options=(options or self._default_options(competition_type)).model_copy(deep=True),
        )

        updated = group.model_copy(deep=True)
        updated.competitions.append(competition)
        self.store.save_group(updated)
        logger.info(
            f'{competition_type.capitalize()} {competition.name} ({competition.id}) created '
            f'with {len(participant_ids)} participants'
        )
        return Result.success(competition.model_copy(deep=True))

    def generate_matches(self, competition_id: str) -> Result[Competition]:
        """Generate fixtures (and the bracket for knockouts) and mark the competition active."""
        found = self.store.find_competition(competition_id)
        if found is None:
            return _rejected(
                'generate_matches', Result.not_found(f'Unknown competition {competition_id}')
            )
        group, competition = found
        if competition.status != UPCOMING or competition.matches or competition.bracket:
            return _rejected(
                'generate_matches',
                Result.state_error(f'Fixtures already generated for {competition.name}'),
            )

        # Participant counts are not enforced by the schema, so stored competitions are rechecked
        errors = validate_participants(
            competition.type, competition.participants, group, self.config
        )
        errors.extend(validate_options(competition.type, competition.options, self.config))
        if errors:
            return _rejected('generate_matches', Result.validation_error('; '.join(errors)))

        fixture_set = generate_fixtures(competition, self.id_factory, self.clock, self.config)

        updated = group.model_copy(deep=True)
        target = self._competition_in(updated, competition_id)
        target.matches = fixture_set.matches
        target.bracket = fixture_set.bracket
        target.status = ACTIVE
        self.store.save_group(updated)
        logger.info(f'Generated {len(fixture_set.matches)} matches for {competition.name}')
        return Result.success(target.model_copy(deep=True))

    # Matches

    def record_result(self, match_id: str, home_score: int, away_score: int) -> Result[Match]:
        """
        Record the result of a scheduled or live match.

        Knockout draws get a replay and completed rounds advance the bracket;
        then every member's stats are recomputed.
        """
        errors = validate_score(home_score, away_score)
        if errors:
            return _rejected('record_result', Result.validation_error('; '.join(errors)))

        found = self.store.find_match(match_id)
        if found is None:
            return _rejected('record_result', Result.not_found(f'Unknown match {match_id}'))
        group, competition, match = found
        if match.status == COMPLETED:
            return _rejected(
                'record_result', Result.state_error(f'Match {match_id} is already completed')
            )

        updated = group.model_copy(deep=True)
        target = self._competition_in(updated, competition.id)
        played = target.find_match(match_id)
        played.home_score = home_score
        played.away_score = away_score
        played.status = COMPLETED
        played.completed_at = self.clock()
        logger.info(
            f'{target.name}: {played.home_player_id} {home_score}-{away_score} '
            f'{played.away_player_id}'
        )

        if target.is_knockout:
            target = on_match_completed(target, self.id_factory, self.clock, self.config)
            self._replace_competition(updated, target)

        self._update_completion(target)
        self._recompute_stats(updated)
        self.store.save_group(updated)
        return Result.success(target.find_match(match_id).model_copy(deep=True))

    def correct_score(self, match_id: str, home_score: int, away_score: int) -> Result[Match]:
        """
        Rewrite the score of a completed match.

        Privileged: the caller decides whether the actor may do this (see
        validators.is_group_admin). Status, timestamps and the bracket are
        left untouched; only stats are recomputed.
        """
        errors = validate_score(home_score, away_score)
        if errors:
            return _rejected('correct_score', Result.validation_error('; '.join(errors)))

        found = self.store.find_match(match_id)
        if found is None:
            return _rejected('correct_score', Result.not_found(f'Unknown match {match_id}'))
        group, competition, match = found
        if match.status != COMPLETED:
            return _rejected(
                'correct_score',
                Result.state_error(f'Match {match_id} is {match.status}, only completed matches can be corrected'),
            )

        updated = group.model_copy(deep=True)
        target = self._competition_in(updated, competition.id).find_match(match_id)
        previous = (target.home_score, target.away_score)
        target.home_score = home_score
        target.away_score = away_score
        self._recompute_stats(updated)
        self.store.save_group(updated)
        logger.info(
            f'Match {match_id} corrected from {previous[0]}-{previous[1]} '
            f'to {home_score}-{away_score}'
        )
        return Result.success(target.model_copy(deep=True))

    def delete_match(self, match_id: str) -> Result[Match]:
        """
        Remove a match that has not been completed.

        Knockout matches that hold a bracket slot cannot be removed. A
        scheduled replay holds no slot and may be deleted; the next
        progression of its round schedules a fresh one.
        """
        found = self.store.find_match(match_id)
        if found is None:
            return _rejected('delete_match', Result.not_found(f'Unknown match {match_id}'))
        group, competition, match = found
        if match.status == COMPLETED:
            return _rejected(
                'delete_match', Result.state_error(f'Match {match_id} is completed and cannot be deleted')
            )
        if competition.bracket is not None and any(
            match_id in r.matches for r in competition.bracket.rounds
        ):
            return _rejected(
                'delete_match',
                Result.state_error(f'Match {match_id} belongs to the {competition.name} bracket'),
            )

        updated = group.model_copy(deep=True)
        target = self._competition_in(updated, competition.id)
        target.matches = [m for m in target.matches if m.id != match_id]
        if self._update_completion(target):
            self._recompute_stats(updated)
        self.store.save_group(updated)
        logger.info(f'Match {match_id} deleted from {competition.name}')
        return Result.success(match.model_copy(deep=True))

    def share_youtube_link(self, match_id: str, youtube_link: str) -> Result[Match]:
        """Attach a stream link to a match and mark it live."""
        errors = validate_youtube_link(youtube_link)
        if errors:
            return _rejected('share_youtube_link', Result.validation_error('; '.join(errors)))

        found = self.store.find_match(match_id)
        if found is None:
            return _rejected('share_youtube_link', Result.not_found(f'Unknown match {match_id}'))
        group, competition, match = found
        if match.status == COMPLETED:
            return _rejected(
                'share_youtube_link', Result.state_error(f'Match {match_id} is already completed')
            )

        updated = group.model_copy(deep=True)
        target = self._competition_in(updated, competition.id).find_match(match_id)
        target.youtube_link = youtube_link.strip()
        target.status = LIVE
        self.store.save_group(updated)
        logger.info(f'Match {match_id} is live')
        return Result.success(target.model_copy(deep=True))

    # Queries

    def player_stats(self, group_id: str, player_id: str) -> Result[PlayerStats]:
        """Fresh stats for a player over all of a group's matches."""
        group = self.store.get_group(group_id)
        if group is None:
            return Result.not_found(f'Unknown group {group_id}')
        if player_id not in group.member_ids:
            return Result.not_found(f'{player_id} is not a member of {group.name}')
        return Result.success(
            compute_stats(
                player_id, self._group_matches(group), group.competitions, self.config.form_length
            )
        )

    def head_to_head(self, group_id: str, player1_id: str, player2_id: str) -> Result[HeadToHead]:
        group = self.store.get_group(group_id)
        if group is None:
            return Result.not_found(f'Unknown group {group_id}')
        return Result.success(head_to_head(player1_id, player2_id, self._group_matches(group)))

    def standings(self, competition_id: str) -> Result[list[StandingsRow]]:
        found = self.store.find_competition(competition_id)
        if found is None:
            return Result.not_found(f'Unknown competition {competition_id}')
        return Result.success(league_table(found[1]))

    # Internals

    @staticmethod
    def _competition_in(group: Group, competition_id: str) -> Competition:
        return next(c for c in group.competitions if c.id == competition_id)

    @staticmethod
    def _replace_competition(group: Group, competition: Competition) -> None:
        group.competitions = [
            competition if c.id == competition.id else c for c in group.competitions
        ]

    @staticmethod
    def _group_matches(group: Group) -> list[Match]:
        return chronological([m for c in group.competitions for m in c.matches])

    def _update_completion(self, competition: Competition) -> bool:
        """Mark a finished competition completed; returns True if its status changed."""
        if competition.status != ACTIVE:
            return False
        if competition.is_knockout:
            finished = champion(competition) is not None
        else:
            finished = bool(competition.matches) and all(
                m.status == COMPLETED for m in competition.matches
            )
        if not finished:
            return False
        competition.status = COMPLETED
        competition.end_date = self.clock()
        logger.info(f'{competition.name} completed')
        return True

    def _recompute_stats(self, group: Group) -> None:
        matches = self._group_matches(group)
        for member in group.members:
            member.stats = compute_stats(
                member.id, matches, group.competitions, self.config.form_length
            )
        logger.debug(f'Recomputed stats for {len(group.members)} members of {group.name}')

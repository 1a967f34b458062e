"""Pydantic schemas for the group / competition / match object graph.

Everything the engine persists is defined here so that a saved store reads
back unchanged.
"""

from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator


class PlayerStats(BaseModel):
    """Aggregate record of a player, derived from completed matches."""

    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    clean_sheets: int = 0
    points: int = 0
    win_rate: float = 0.0
    form: list[Literal['W', 'D', 'L']] = Field(default_factory=list)
    leagues_won: int = 0
    knockouts_won: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    class Config:
        extra = 'forbid'


class Player(BaseModel):
    """A registered player."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    gamer_handle: str = ''
    email: str | None = None
    joined_at: datetime | None = None
    role: str = Field(default='player', pattern=r'^(player|admin|super_admin)$')
    status: str = Field(default='active', pattern=r'^(active|suspended|banned)$')
    stats: PlayerStats = Field(default_factory=PlayerStats)

    class Config:
        extra = 'forbid'


class Match(BaseModel):
    """A single fixture between two players."""

    id: str = Field(..., min_length=1)
    competition_id: str
    home_player_id: str
    away_player_id: str
    status: str = Field(default='scheduled', pattern=r'^(scheduled|live|completed)$')
    home_score: int | None = Field(None, ge=0)
    away_score: int | None = Field(None, ge=0)
    scheduled_time: datetime
    youtube_link: str | None = None
    completed_at: datetime | None = None
    replay_of: str | None = None

    @model_validator(mode='after')
    def check_scores_match_status(self):
        """Scores are present if and only if the match is completed."""
        if self.home_player_id == self.away_player_id:
            raise ValueError(f'Match {self.id} has the same player on both sides')
        has_scores = self.home_score is not None and self.away_score is not None
        if self.status == 'completed' and not has_scores:
            raise ValueError(f'Completed match {self.id} is missing scores')
        if self.status != 'completed' and (
            self.home_score is not None or self.away_score is not None
        ):
            raise ValueError(f'Match {self.id} has scores but is {self.status}')
        return self

    @property
    def is_draw(self) -> bool:
        return self.status == 'completed' and self.home_score == self.away_score

    class Config:
        extra = 'forbid'


class TournamentRound(BaseModel):
    """One round of a knockout bracket; `matches` holds one match id per slot."""

    id: str
    name: str
    round_number: int = Field(..., ge=0)
    matches: list[str] = Field(default_factory=list)
    status: str = Field(default='upcoming', pattern=r'^(upcoming|active|completed)$')
    is_generated: bool = False

    class Config:
        extra = 'forbid'


class KnockoutBracket(BaseModel):
    """Round structure of a knockout tournament."""

    id: str
    competition_id: str
    total_rounds: int = Field(..., ge=1)
    current_round: int = Field(0, ge=0)
    rounds: list[TournamentRound]
    participants: list[str]
    winners: dict[str, list[str]] = Field(default_factory=dict)

    @model_validator(mode='after')
    def check_round_count(self):
        """Ensure there is exactly one round entry per bracket round."""
        if len(self.rounds) != self.total_rounds:
            raise ValueError(
                f'Bracket {self.id} has {len(self.rounds)} rounds, expected {self.total_rounds}'
            )
        if self.current_round >= self.total_rounds:
            raise ValueError(f'Bracket {self.id} current round {self.current_round} out of range')
        return self

    class Config:
        extra = 'forbid'


class LeagueOptions(BaseModel):
    """League format: single (one match per pair) or double (home and away)."""

    kind: Literal['league'] = 'league'
    league_format: Literal['single', 'double'] = 'single'

    class Config:
        extra = 'forbid'


class FriendlyOptions(BaseModel):
    """Friendly series between two players."""

    kind: Literal['friendly'] = 'friendly'
    friendly_type: Literal['best_of', 'first_to'] = 'best_of'
    friendly_target: int = Field(3, ge=1)

    class Config:
        extra = 'forbid'


class KnockoutOptions(BaseModel):
    """Single-elimination tournament."""

    kind: Literal['tournament'] = 'tournament'
    tournament_type: Literal['knockout'] = 'knockout'

    class Config:
        extra = 'forbid'


CompetitionOptions = Union[LeagueOptions, FriendlyOptions, KnockoutOptions]


class Competition(BaseModel):
    """A league, knockout tournament or friendly series inside a group."""

    id: str
    group_id: str
    name: str = Field(..., min_length=1)
    type: Literal['league', 'tournament', 'friendly']
    status: str = Field(default='upcoming', pattern=r'^(upcoming|active|completed)$')
    start_date: datetime
    end_date: datetime | None = None
    participants: list[str]
    matches: list[Match] = Field(default_factory=list)
    options: CompetitionOptions = Field(..., discriminator='kind')
    bracket: KnockoutBracket | None = None

    @field_validator('participants')
    @classmethod
    def validate_unique_participants(cls, v):
        """Ensure no participant is listed twice."""
        if len(set(v)) != len(v):
            raise ValueError('Participants must be unique')
        return v

    @model_validator(mode='after')
    def check_options_kind(self):
        """Ensure the options variant belongs to the competition type."""
        if self.options.kind != self.type:
            raise ValueError(f'{self.options.kind} options given for a {self.type} competition')
        return self

    @property
    def is_knockout(self) -> bool:
        return self.type == 'tournament' and isinstance(self.options, KnockoutOptions)

    def find_match(self, match_id: str) -> Match | None:
        for match in self.matches:
            if match.id == match_id:
                return match
        return None

    def resolve_slot(self, slot_match_id: str) -> Match | None:
        """
        Follow a bracket slot's replay chain to the match that decides it.

        A slot holds the id of its original match; each replay points back
        at the drawn match it replaces via `replay_of`.
        """
        match = self.find_match(slot_match_id)
        while match is not None:
            replay = next((m for m in self.matches if m.replay_of == match.id), None)
            if replay is None:
                return match
            match = replay
        return None

    class Config:
        extra = 'forbid'


class Group(BaseModel):
    """A named set of players and the competitions they play."""

    id: str
    name: str = Field(..., min_length=1)
    description: str = ''
    admin_ids: list[str] = Field(..., min_length=1)
    members: list[Player] = Field(default_factory=list)
    created_at: datetime
    invite_code: str
    is_public: bool = False
    competitions: list[Competition] = Field(default_factory=list)

    @field_validator('members')
    @classmethod
    def validate_unique_members(cls, v):
        """Ensure a player is only a member once."""
        seen = set()
        for member in v:
            if member.id in seen:
                raise ValueError(f'Duplicate member: {member.id}')
            seen.add(member.id)
        return v

    @property
    def member_ids(self) -> list[str]:
        return [m.id for m in self.members]

    class Config:
        extra = 'forbid'


class StoreFile(BaseModel):
    """Complete store JSON file structure."""

    groups: list[Group] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class EngineConfig(BaseModel):
    """Engine configuration settings."""

    friendly_default_target: int = Field(3, ge=1)
    friendly_max_target: int = Field(25, ge=1)
    match_spacing_days: int = Field(1, ge=1)
    replay_delay_days: int = Field(1, ge=0)
    form_length: int = Field(5, ge=1)
    knockout_min_participants: int = Field(4, ge=2)
    knockout_max_participants: int = Field(32, ge=2)
    invite_code_length: int = Field(8, ge=4, le=32)

    @model_validator(mode='after')
    def check_knockout_bounds(self):
        """Ensure the knockout bounds are ordered powers of two."""
        for bound in (self.knockout_min_participants, self.knockout_max_participants):
            if bound & (bound - 1):
                raise ValueError(f'Knockout bound {bound} is not a power of two')
        if self.knockout_min_participants > self.knockout_max_participants:
            raise ValueError('knockout_min_participants exceeds knockout_max_participants')
        if self.friendly_default_target > self.friendly_max_target:
            raise ValueError('friendly_default_target exceeds friendly_max_target')
        return self

    class Config:
        extra = 'forbid'

from .schemas import (
    Player,
    PlayerStats,
    Group,
    Competition,
    Match,
    TournamentRound,
    KnockoutBracket,
    LeagueOptions,
    FriendlyOptions,
    KnockoutOptions,
    EngineConfig,
    StoreFile,
)
from .models import EngineError, Result, FixtureSet, HeadToHead, StandingsRow
from .stats import compute_stats, head_to_head, league_table, league_points
from .fixtures import generate_fixtures, build_match, round_name, FixtureError
from .bracket import on_match_completed, champion, resolve_slot, BracketStateError
from .engine import CompetitionEngine
from .store import GroupStore
from .config import get_config, clear_config_cache

__all__ = [
    # Schemas
    'Player',
    'PlayerStats',
    'Group',
    'Competition',
    'Match',
    'TournamentRound',
    'KnockoutBracket',
    'LeagueOptions',
    'FriendlyOptions',
    'KnockoutOptions',
    'EngineConfig',
    'StoreFile',
    # Results
    'EngineError',
    'Result',
    'FixtureSet',
    'HeadToHead',
    'StandingsRow',
    # Stats
    'compute_stats',
    'head_to_head',
    'league_table',
    'league_points',
    # Fixtures
    'generate_fixtures',
    'build_match',
    'round_name',
    'FixtureError',
    # Bracket
    'on_match_completed',
    'champion',
    'resolve_slot',
    'BracketStateError',
    # Engine
    'CompetitionEngine',
    'GroupStore',
    # Config
    'get_config',
    'clear_config_cache',
]

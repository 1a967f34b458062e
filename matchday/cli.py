"""
Matchday command line interface.

Reads (and for result commands, rewrites) a store JSON file written by
GroupStore.save.

Usage:
    matchday data/store.json stats --group <group_id>
    matchday data/store.json standings --competition <competition_id>
    matchday data/store.json bracket --competition <competition_id>
    matchday data/store.json h2h --group <group_id> <player1_id> <player2_id>
    matchday data/store.json generate --competition <competition_id>
    matchday data/store.json record <match_id> 2 1
    matchday data/store.json validate
"""

import argparse
import logging
import sys
from pathlib import Path

from .bracket import champion, slot_winner
from .engine import CompetitionEngine
from .logging_config import setup_logging
from .schemas import StoreFile
from .store import GroupStore
from .utils import validate_json_file
from .validators import validate_group


def _member_names(store: GroupStore) -> dict[str, str]:
    return {m.id: m.name for group in store for m in group.members}


def cmd_stats(store: GroupStore, args: argparse.Namespace) -> int:
    group = store.get_group(args.group)
    if group is None:
        print(f'Unknown group: {args.group}')
        return 1

    print(f'{group.name}')
    print('=' * 60)
    members = sorted(group.members, key=lambda m: (m.stats.points, m.stats.goal_difference), reverse=True)
    for rank, member in enumerate(members, 1):
        s = member.stats
        print(
            f'  {rank}. {member.name}: P{s.played} W{s.wins} D{s.draws} L{s.losses} '
            f'GD{s.goal_difference:+d} {s.points} pts  form {"".join(s.form) or "-"}  '
            f'leagues {s.leagues_won} cups {s.knockouts_won}'
        )
    return 0


def cmd_standings(engine: CompetitionEngine, args: argparse.Namespace) -> int:
    result = engine.standings(args.competition)
    if not result.ok:
        print(result.error.message)
        return 1

    names = _member_names(engine.store)
    for rank, row in enumerate(result.value, 1):
        print(
            f'  {rank}. {names.get(row.player_id, row.player_id)}: '
            f'P{row.played} W{row.wins} D{row.draws} L{row.losses} '
            f'{row.goals_for}:{row.goals_against} {row.points} pts'
        )
    return 0


def cmd_bracket(store: GroupStore, args: argparse.Namespace) -> int:
    found = store.find_competition(args.competition)
    if found is None:
        print(f'Unknown competition: {args.competition}')
        return 1
    _, competition = found
    if competition.bracket is None:
        print(f'{competition.name} has no bracket')
        return 1

    names = _member_names(store)
    for tournament_round in competition.bracket.rounds:
        print(f'{tournament_round.name} [{tournament_round.status}]')
        for slot_id in tournament_round.matches:
            match = competition.find_match(slot_id)
            winner = slot_winner(competition, slot_id)
            home = names.get(match.home_player_id, match.home_player_id)
            away = names.get(match.away_player_id, match.away_player_id)
            suffix = f' -> {names.get(winner, winner)}' if winner else ''
            print(f'  {home} v {away}{suffix}')

    winner = champion(competition)
    if winner:
        print(f'Champion: {names.get(winner, winner)}')
    return 0


def cmd_h2h(engine: CompetitionEngine, args: argparse.Namespace) -> int:
    result = engine.head_to_head(args.group, args.player1, args.player2)
    if not result.ok:
        print(result.error.message)
        return 1
    h2h = result.value
    print(
        f'{args.player1} {h2h.player1_wins} - {h2h.draws} - {h2h.player2_wins} {args.player2} '
        f'({len(h2h.matches)} matches, {h2h.total_goals} goals)'
    )
    return 0


def cmd_generate(engine: CompetitionEngine, args: argparse.Namespace) -> int:
    result = engine.generate_matches(args.competition)
    if not result.ok:
        print(f'❌ {result.error.message}')
        return 1
    engine.store.save(args.store)
    print(f'Generated {len(result.value.matches)} matches for {result.value.name}')
    return 0


def cmd_record(engine: CompetitionEngine, args: argparse.Namespace) -> int:
    result = engine.record_result(args.match, args.home_score, args.away_score)
    if not result.ok:
        print(f'❌ {result.error.message}')
        return 1
    engine.store.save(args.store)
    print(f'Recorded {args.home_score}-{args.away_score} for match {args.match}')
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    is_valid, error = validate_json_file(args.store, StoreFile)
    if not is_valid:
        print(f'❌ {error}')
        return 1

    store = GroupStore.load(args.store)
    errors = []
    for group in store:
        errors.extend(validate_group(group))
    for error in errors:
        print(f'  - {error}')
    if errors:
        print(f'❌ {len(errors)} problem(s) found')
        return 1
    print(f'✓ {len(store)} group(s) valid')
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Matchday competition tracker')
    parser.add_argument('store', type=Path, help='Path to the store JSON file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    sub = parser.add_subparsers(dest='command', required=True)

    stats = sub.add_parser('stats', help='Member stats for a group')
    stats.add_argument('--group', '-g', required=True)

    standings = sub.add_parser('standings', help='League table for a competition')
    standings.add_argument('--competition', '-c', required=True)

    bracket = sub.add_parser('bracket', help='Knockout bracket for a competition')
    bracket.add_argument('--competition', '-c', required=True)

    h2h = sub.add_parser('h2h', help='Head-to-head record of two players')
    h2h.add_argument('--group', '-g', required=True)
    h2h.add_argument('player1')
    h2h.add_argument('player2')

    generate = sub.add_parser('generate', help='Generate fixtures for a competition')
    generate.add_argument('--competition', '-c', required=True)

    record = sub.add_parser('record', help='Record a match result')
    record.add_argument('match')
    record.add_argument('home_score', type=int)
    record.add_argument('away_score', type=int)

    sub.add_parser('validate', help='Check the store for broken invariants')

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.command == 'validate':
        return cmd_validate(args)

    try:
        store = GroupStore.load(args.store)
    except (FileNotFoundError, ValueError) as e:
        print(f'❌ {e}')
        return 1

    engine = CompetitionEngine(store)
    handlers = {
        'stats': lambda: cmd_stats(store, args),
        'standings': lambda: cmd_standings(engine, args),
        'bracket': lambda: cmd_bracket(store, args),
        'h2h': lambda: cmd_h2h(engine, args),
        'generate': lambda: cmd_generate(engine, args),
        'record': lambda: cmd_record(engine, args),
    }
    return handlers[args.command]()


if __name__ == '__main__':
    sys.exit(main())

"""Unit tests for fixture generation."""

from collections import Counter
from datetime import timedelta

import pytest

from conftest import START, make_competition
from matchday.fixtures import FixtureError, generate_fixtures, is_power_of_two, round_name


def _players(n):
    return [f'p{i}' for i in range(1, n + 1)]


class TestLeagueFixtures:
    """Tests for round-robin league fixtures."""

    @pytest.mark.parametrize('n', [2, 3, 4, 7, 10])
    def test_single_round_robin(self, n, ids, clock, config):
        """Test every unordered pair meets exactly once."""
        league = make_competition('league', _players(n), status='upcoming')
        matches = generate_fixtures(league, ids, clock, config).matches

        assert len(matches) == n * (n - 1) // 2
        pairs = Counter(frozenset((m.home_player_id, m.away_player_id)) for m in matches)
        assert all(count == 1 for count in pairs.values())
        assert len(pairs) == n * (n - 1) // 2

    @pytest.mark.parametrize('n', [2, 3, 5, 8])
    def test_double_round_robin(self, n, ids, clock, config):
        """Test every ordered pair meets exactly once in double format."""
        league = make_competition(
            'league', _players(n), status='upcoming',
            options={'kind': 'league', 'league_format': 'double'},
        )
        matches = generate_fixtures(league, ids, clock, config).matches

        assert len(matches) == n * (n - 1)
        ordered = Counter((m.home_player_id, m.away_player_id) for m in matches)
        assert all(count == 1 for count in ordered.values())

    def test_three_player_order(self, ids, clock, config):
        """Test pairs are generated in participant order."""
        league = make_competition('league', ['p1', 'p2', 'p3'], status='upcoming')
        matches = generate_fixtures(league, ids, clock, config).matches
        assert [(m.home_player_id, m.away_player_id) for m in matches] == [
            ('p1', 'p2'), ('p1', 'p3'), ('p2', 'p3'),
        ]

    def test_scheduled_times_strictly_increase(self, ids, clock, config):
        """Test fixtures are spaced one day apart from the clock's time."""
        league = make_competition('league', _players(4), status='upcoming')
        matches = generate_fixtures(league, ids, clock, config).matches

        assert matches[0].scheduled_time == START
        for earlier, later in zip(matches, matches[1:]):
            assert later.scheduled_time - earlier.scheduled_time == timedelta(days=1)

    def test_all_scheduled_with_unique_ids(self, ids, clock, config):
        """Test generated matches are scheduled and uniquely identified."""
        league = make_competition('league', _players(5), status='upcoming')
        matches = generate_fixtures(league, ids, clock, config).matches
        assert all(m.status == 'scheduled' and m.home_score is None for m in matches)
        assert len({m.id for m in matches}) == len(matches)
        assert all(m.competition_id == league.id for m in matches)

    def test_input_not_modified(self, ids, clock, config):
        """Test generation leaves the competition untouched."""
        league = make_competition('league', _players(4), status='upcoming')
        before = league.model_dump()
        fixture_set = generate_fixtures(league, ids, clock, config)
        assert league.model_dump() == before
        assert fixture_set.bracket is None


class TestFriendlyFixtures:
    """Tests for friendly series fixtures."""

    def test_default_target(self, ids, clock, config):
        """Test a friendly schedules three matches by default."""
        friendly = make_competition('friendly', ['p1', 'p2'], status='upcoming')
        matches = generate_fixtures(friendly, ids, clock, config).matches
        assert len(matches) == 3
        assert all((m.home_player_id, m.away_player_id) == ('p1', 'p2') for m in matches)

    def test_first_to_schedules_target(self, ids, clock, config):
        """Test first_to still schedules exactly friendly_target matches."""
        friendly = make_competition(
            'friendly', ['p1', 'p2'], status='upcoming',
            options={'kind': 'friendly', 'friendly_type': 'first_to', 'friendly_target': 5},
        )
        assert len(generate_fixtures(friendly, ids, clock, config).matches) == 5

    def test_wrong_participant_count(self, ids, clock, config):
        """Test a friendly that slipped past validation is a programmer error."""
        friendly = make_competition('friendly', ['p1', 'p2', 'p3'], status='upcoming')
        with pytest.raises(FixtureError):
            generate_fixtures(friendly, ids, clock, config)


class TestKnockoutFixtures:
    """Tests for knockout round 0 and bracket skeleton."""

    @pytest.mark.parametrize('n,rounds', [(4, 2), (8, 3), (16, 4), (32, 5)])
    def test_slot_integrity(self, n, rounds, ids, clock, config):
        """Test round 0 has n/2 matches and later rounds start empty."""
        cup = make_competition('tournament', _players(n), status='upcoming')
        fixture_set = generate_fixtures(cup, ids, clock, config)
        bracket = fixture_set.bracket

        assert len(fixture_set.matches) == n // 2
        assert bracket.total_rounds == rounds
        assert bracket.current_round == 0
        assert bracket.rounds[0].matches == [m.id for m in fixture_set.matches]
        assert bracket.rounds[0].status == 'active'
        assert bracket.rounds[0].is_generated
        for later in bracket.rounds[1:]:
            assert later.matches == []
            assert later.status == 'upcoming'
            assert not later.is_generated
        assert bracket.winners == {}

    def test_first_round_pairs_adjacent_participants(self, ids, clock, config):
        """Test participant 2i plays participant 2i+1."""
        cup = make_competition('tournament', ['a', 'b', 'c', 'd', 'e', 'f', 'g', 'h'], status='upcoming')
        matches = generate_fixtures(cup, ids, clock, config).matches
        assert [(m.home_player_id, m.away_player_id) for m in matches] == [
            ('a', 'b'), ('c', 'd'), ('e', 'f'), ('g', 'h'),
        ]

    def test_round_names(self, ids, clock, config):
        """Test rounds are named back from the final."""
        cup = make_competition('tournament', _players(16), status='upcoming')
        bracket = generate_fixtures(cup, ids, clock, config).bracket
        assert [r.name for r in bracket.rounds] == [
            'Round 1', 'Quarter-Final', 'Semi-Final', 'Final',
        ]

    @pytest.mark.parametrize('n', [2, 6, 12, 64])
    def test_invalid_sizes(self, n, ids, clock, config):
        """Test unplayable knockout sizes raise."""
        cup = make_competition('tournament', _players(n), status='upcoming')
        with pytest.raises(FixtureError):
            generate_fixtures(cup, ids, clock, config)


def test_round_name():
    """Test round names for short and long brackets."""
    assert round_name(0, 2) == 'Semi-Final'
    assert round_name(1, 2) == 'Final'
    assert round_name(1, 5) == 'Round 2'
    assert round_name(2, 5) == 'Quarter-Final'


def test_is_power_of_two():
    assert [n for n in range(0, 40) if is_power_of_two(n)] == [1, 2, 4, 8, 16, 32]

"""Player statistics derived from match history.

Everything here is a pure function of the matches passed in: stats are
recomputed in full after every result change instead of being updated
incrementally, so recomputing from the same history always gives the same
answer.

Rules:
- Only completed matches count (scheduled and live matches are ignored)
- Win = 3 points, draw = 1, loss = 0
- Form lists the most recent results first, capped at 5 by default
- League titles go to every participant tied on the highest points total
  (no goal-difference tiebreak), provided that total is above zero
- Knockout titles go to the winner of the final once the final round is done
"""

from typing import Iterable, Optional, Sequence

from .constants import COMPLETED, DRAW, LEAGUE, LOSS, POINTS_FOR_DRAW, POINTS_FOR_WIN, WIN
from .models import HeadToHead, StandingsRow
from .schemas import Competition, Match, PlayerStats


def _is_scored(match: Match) -> bool:
    return (
        match.status == COMPLETED
        and match.home_score is not None
        and match.away_score is not None
    )


def _scores_for(match: Match, player_id: str) -> tuple[int, int]:
    """Return (player_score, opponent_score) from the player's side of the match."""
    if match.home_player_id == player_id:
        return match.home_score, match.away_score
    return match.away_score, match.home_score


def _involves(match: Match, player_id: str) -> bool:
    return player_id in (match.home_player_id, match.away_player_id)


def match_winner(match: Match) -> Optional[str]:
    """Player id of the winning side, or None for draws and unplayed matches."""
    if not _is_scored(match):
        return None
    if match.home_score > match.away_score:
        return match.home_player_id
    if match.away_score > match.home_score:
        return match.away_player_id
    return None


def league_points(competition: Competition) -> dict[str, int]:
    """Points (3 per win, 1 per draw) for every participant within one competition."""
    points = {player_id: 0 for player_id in competition.participants}
    for match in competition.matches:
        if not _is_scored(match):
            continue
        winner = match_winner(match)
        if winner is None:
            for player_id in (match.home_player_id, match.away_player_id):
                if player_id in points:
                    points[player_id] += POINTS_FOR_DRAW
        elif winner in points:
            points[winner] += POINTS_FOR_WIN
    return points


def league_winners(competition: Competition) -> list[str]:
    """All participants tied on the top points total, empty if nobody has scored a point."""
    points = league_points(competition)
    if not points:
        return []
    best = max(points.values())
    if best <= 0:
        return []
    return [player_id for player_id, pts in points.items() if pts == best]


def knockout_winner(competition: Competition) -> Optional[str]:
    """Winner of the final, once the bracket's final round is completed."""
    bracket = competition.bracket
    if bracket is None or not bracket.rounds:
        return None
    final_round = bracket.rounds[-1]
    if final_round.status != COMPLETED or len(final_round.matches) != 1:
        return None
    final_match = competition.resolve_slot(final_round.matches[0])
    if final_match is None:
        return None
    return match_winner(final_match)


def compute_stats(
    player_id: str,
    matches: Iterable[Match],
    competitions: Sequence[Competition] = (),
    form_length: int = 5,
) -> PlayerStats:
    """
    Compute a player's aggregate record from match history.

    Args:
        player_id: Player to compute stats for
        matches: Matches in chronological order (oldest first)
        competitions: Optional competitions used to credit league/knockout titles
        form_length: Number of recent results to keep in the form list

    Returns:
        PlayerStats; all zeros when the player has no completed matches
    """
    wins = draws = losses = 0
    goals_for = goals_against = clean_sheets = 0
    form: list[str] = []

    for match in matches:
        if not _is_scored(match) or not _involves(match, player_id):
            continue

        player_score, opponent_score = _scores_for(match, player_id)
        goals_for += player_score
        goals_against += opponent_score

        if opponent_score == 0:
            clean_sheets += 1

        if player_score > opponent_score:
            wins += 1
            form.insert(0, WIN)
        elif player_score == opponent_score:
            draws += 1
            form.insert(0, DRAW)
        else:
            losses += 1
            form.insert(0, LOSS)

    leagues_won = 0
    knockouts_won = 0
    for competition in competitions:
        if competition.status != COMPLETED or player_id not in competition.participants:
            continue
        if competition.type == LEAGUE:
            if player_id in league_winners(competition):
                leagues_won += 1
        elif competition.is_knockout:
            if knockout_winner(competition) == player_id:
                knockouts_won += 1

    played = wins + draws + losses
    return PlayerStats(
        played=played,
        wins=wins,
        draws=draws,
        losses=losses,
        goals_for=goals_for,
        goals_against=goals_against,
        clean_sheets=clean_sheets,
        points=wins * POINTS_FOR_WIN + draws * POINTS_FOR_DRAW,
        win_rate=(wins / played) * 100 if played > 0 else 0.0,
        form=form[:form_length],
        leagues_won=leagues_won,
        knockouts_won=knockouts_won,
    )


def head_to_head(player1_id: str, player2_id: str, matches: Iterable[Match]) -> HeadToHead:
    """Summarise every completed meeting between two players."""
    record = HeadToHead(player1_id=player1_id, player2_id=player2_id)

    for match in matches:
        if not _is_scored(match):
            continue
        if {match.home_player_id, match.away_player_id} != {player1_id, player2_id}:
            continue

        p1_score, p2_score = _scores_for(match, player1_id)
        record.total_goals += p1_score + p2_score
        if p1_score > p2_score:
            record.player1_wins += 1
        elif p2_score > p1_score:
            record.player2_wins += 1
        else:
            record.draws += 1
        record.matches.append(match)

    return record


def league_table(competition: Competition) -> list[StandingsRow]:
    """
    Standings for one competition.

    Sorted by points, then goal difference, then goals scored; remaining ties
    keep participant order. Display ordering only; title credit ignores it.
    """
    rows = {player_id: StandingsRow(player_id=player_id) for player_id in competition.participants}

    for match in competition.matches:
        if not _is_scored(match):
            continue
        for player_id in (match.home_player_id, match.away_player_id):
            row = rows.get(player_id)
            if row is None:
                continue
            player_score, opponent_score = _scores_for(match, player_id)
            row.played += 1
            row.goals_for += player_score
            row.goals_against += opponent_score
            if player_score > opponent_score:
                row.wins += 1
                row.points += POINTS_FOR_WIN
            elif player_score == opponent_score:
                row.draws += 1
                row.points += POINTS_FOR_DRAW
            else:
                row.losses += 1

    order = {player_id: i for i, player_id in enumerate(competition.participants)}
    return sorted(
        rows.values(),
        key=lambda r: (-r.points, -r.goal_difference, -r.goals_for, order[r.player_id]),
    )

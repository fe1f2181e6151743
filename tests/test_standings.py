"""
Unit tests for round-robin standings.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from conftest import make_players
from scheduler.results import record_result
from scheduler.schedule import generate_schedule, ROUND_ROBIN
from scheduler.standings import compute_standings, standings_to_dicts


def _play(matches, player_a, player_b, sets_a, sets_b):
    """Record a result between two players regardless of slot order."""
    for match in matches:
        ids = [p.id for p in match.players]
        if ids == [player_a, player_b]:
            return record_result(matches, match.match_number, sets_a, sets_b)
        if ids == [player_b, player_a]:
            return record_result(matches, match.match_number, sets_b, sets_a)
    raise AssertionError(f"No match between {player_a} and {player_b}")


@pytest.fixture
def three_player_league(by_rating):
    players = make_players(3)
    return players, generate_schedule(players, ROUND_ROBIN, by_rating)


class TestStandings:
    """Tests for the league table."""

    def test_no_results(self, three_player_league):
        players, matches = three_player_league
        standings = compute_standings(players, matches)
        assert [row['player_id'] for row in standings] == ['p1', 'p2', 'p3']
        assert all(row['points'] == 0 and row['set_ratio'] == 0 for row in standings)
        assert [row['rank'] for row in standings] == [1, 2, 3]

    def test_ranked_by_points(self, three_player_league):
        players, matches = three_player_league
        _play(matches, 'p3', 'p2', 2, 0)
        _play(matches, 'p2', 'p1', 2, 0)
        _play(matches, 'p3', 'p1', 2, 0)

        standings = compute_standings(players, matches)
        assert [row['player_id'] for row in standings] == ['p3', 'p2', 'p1']
        assert [row['points'] for row in standings] == [4, 2, 0]
        assert standings[0]['wins'] == 2 and standings[0]['losses'] == 0
        assert standings[2]['matches'] == 2

    def test_points_tie_broken_by_set_ratio(self, three_player_league):
        players, matches = three_player_league
        _play(matches, 'p1', 'p2', 2, 1)
        _play(matches, 'p2', 'p3', 2, 0)
        _play(matches, 'p3', 'p1', 2, 0)

        standings = compute_standings(players, matches)
        assert [row['points'] for row in standings] == [2, 2, 2]
        # p2: 3 of 5 sets, p3: 2 of 4, p1: 2 of 5
        assert [row['player_id'] for row in standings] == ['p2', 'p3', 'p1']
        assert standings[0]['set_ratio'] == pytest.approx(0.6)

    def test_ratio_tie_broken_by_sets_won(self, by_rating):
        players = make_players(4)
        matches = generate_schedule(players, ROUND_ROBIN, by_rating)
        _play(matches, 'p1', 'p3', 2, 0)
        _play(matches, 'p2', 'p4', 3, 0)

        standings = compute_standings(players, matches)
        assert [row['player_id'] for row in standings] == ['p2', 'p1', 'p3', 'p4']

    def test_only_completed_matches_count(self, three_player_league):
        players, matches = three_player_league
        _play(matches, 'p2', 'p1', 2, 1)
        unscored = _play(matches, 'p3', 'p1', 2, 0)
        unscored.winner = None

        standings = compute_standings(players, matches)
        assert sum(row['matches'] for row in standings) == 2
        assert standings[0]['player_id'] == 'p2'

    def test_idempotent(self, three_player_league):
        players, matches = three_player_league
        _play(matches, 'p1', 'p2', 2, 1)
        assert compute_standings(players, matches) == compute_standings(players, matches)

    def test_players_outside_roster_ignored(self, three_player_league):
        players, matches = three_player_league
        _play(matches, 'p1', 'p2', 2, 0)
        standings = compute_standings(players[1:], matches)
        assert [row['player_id'] for row in standings] == ['p2', 'p3']
        assert all(row['matches'] == 0 for row in standings)

    def test_standings_to_dicts(self, three_player_league):
        players, matches = three_player_league
        rows = standings_to_dicts(compute_standings(players, matches))
        assert rows[0]['player']['id'] == 'p1'
        assert rows[0]['rank'] == 1

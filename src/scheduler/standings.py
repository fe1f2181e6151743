"""
Round-robin league table.
"""
from typing import Dict, List

from .models import STATUS_COMPLETED

POINTS_FOR_WIN = 2
POINTS_FOR_LOSS = 0


def _set_ratio(stats: Dict) -> float:
    total_sets = stats['sets_won'] + stats['sets_lost']
    if stats['matches'] == 0 or total_sets == 0:
        return 0.0
    return stats['sets_won'] / total_sets


def compute_standings(players: List, matches: List) -> List[Dict]:
    """
    Calculate the league table from completed matches.

    Returns: [{'player': Player, 'player_id': id, 'name': str, 'matches': n,
               'wins': n, 'losses': n, 'sets_won': n, 'sets_lost': n,
               'points': n, 'set_ratio': float, 'rank': n}, ...]

    Ranking: points -> set ratio -> sets won -> roster order.
    Matches without a recorded winner are ignored, so a partly played
    tournament gives the table as it stands.
    """
    player_stats = {}
    for index, player in enumerate(players):
        player_stats[player.id] = {
            'player': player,
            'player_id': player.id,
            'name': player.full_name,
            'matches': 0,
            'wins': 0,
            'losses': 0,
            'sets_won': 0,
            'sets_lost': 0,
            'points': 0,
            '_order': index,
        }

    for match in matches:
        if match.status != STATUS_COMPLETED or not match.winner:
            continue
        match_players = match.players
        if len(match_players) != 2:
            continue
        player1, player2 = match_players
        if player1.id not in player_stats or player2.id not in player_stats:
            continue

        stats1 = player_stats[player1.id]
        stats2 = player_stats[player2.id]
        sets1 = match.player1_sets_won or 0
        sets2 = match.player2_sets_won or 0

        stats1['matches'] += 1
        stats2['matches'] += 1
        stats1['sets_won'] += sets1
        stats1['sets_lost'] += sets2
        stats2['sets_won'] += sets2
        stats2['sets_lost'] += sets1

        if match.winner == player1.id:
            winner, loser = stats1, stats2
        elif match.winner == player2.id:
            winner, loser = stats2, stats1
        else:
            continue
        winner['wins'] += 1
        winner['points'] += POINTS_FOR_WIN
        loser['losses'] += 1
        loser['points'] += POINTS_FOR_LOSS

    for stats in player_stats.values():
        stats['set_ratio'] = _set_ratio(stats)

    sorted_stats = sorted(
        player_stats.values(),
        key=lambda x: (-x['points'], -x['set_ratio'], -x['sets_won'], x['_order'])
    )

    standings = []
    for rank, stats in enumerate(sorted_stats, start=1):
        row = {k: v for k, v in stats.items() if k != '_order'}
        row['rank'] = rank
        standings.append(row)
    return standings


def standings_to_dicts(standings: List[Dict]) -> List[Dict]:
    """Make a standings table JSON/YAML friendly."""
    return [
        {**{k: v for k, v in row.items() if k != 'player'}, 'player': row['player'].to_dict()}
        for row in standings
    ]

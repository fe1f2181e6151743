"""
Schedule generation entry point and match list (de)serialization.
"""
from typing import Dict, List

from .elimination import generate_elimination_bracket
from .errors import InsufficientPlayers
from .models import Match
from .round_robin import generate_round_robin_matches
from .seeding import seed_players

ELIMINATION = 'elimination'
ROUND_ROBIN = 'round-robin'
TOURNAMENT_FORMATS = (ELIMINATION, ROUND_ROBIN)


def generate_schedule(players: List, tournament_format: str, strategy=None) -> List[Match]:
    """
    Generate every match for a tournament.

    Elimination returns the whole bracket, round 1 to the Final, with byes
    already advanced. Round-robin returns one match per pair of players.
    Regenerating replaces a previous schedule; nothing is kept between calls.
    """
    if tournament_format not in TOURNAMENT_FORMATS:
        raise ValueError(f"Unknown tournament format: {tournament_format}")
    if len(players) < 2:
        raise InsufficientPlayers(len(players))

    if tournament_format == ELIMINATION:
        return generate_elimination_bracket(players, strategy)['matches']
    return generate_round_robin_matches(seed_players(players, strategy))


def matches_to_dicts(matches: List[Match]) -> List[Dict]:
    return [match.to_dict() for match in matches]


def matches_from_dicts(data: List[Dict]) -> List[Match]:
    return [Match.from_dict(item) for item in data or []]

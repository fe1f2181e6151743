"""
Round-robin match generation: every player meets every other player once.
"""
import logging
from itertools import combinations
from typing import List

from .errors import InsufficientPlayers
from .models import Match, PlayerSlot, STATUS_READY

logger = logging.getLogger(__name__)


def generate_round_robin_matches(seeded_players: List) -> List[Match]:
    """
    Pair every two players once, in seed order.

    All matches are round 1 and ready to play; for N players there are
    N * (N - 1) / 2 of them.
    """
    if len(seeded_players) < 2:
        raise InsufficientPlayers(len(seeded_players))

    matches = []
    for match_number, (player1, player2) in enumerate(combinations(seeded_players, 2), start=1):
        matches.append(Match(
            round=1,
            match_number=match_number,
            bracket=f"RR{match_number}",
            round_name=f"Round Robin Match {match_number}",
            player1=PlayerSlot(player1),
            player2=PlayerSlot(player2),
            status=STATUS_READY,
            seed_info=f"({player1.seed}) vs ({player2.seed})",
        ))

    logger.info("Round robin: %d players, %d matches", len(seeded_players), len(matches))
    return matches

"""
Recording match results and advancing winners through the bracket.

Every elimination match knows which later match consumes its winner
(``next_match``) and in which slot (``next_slot``), so advancing a winner is
a lookup. Matches against a bye resolve on their own as soon as the other
side is a concrete player.
"""
import logging
from typing import Dict, List

from .errors import InvalidScoreUpdate
from .models import PlayerSlot, STATUS_COMPLETED, STATUS_READY, STATUS_WAITING

logger = logging.getLogger(__name__)


def index_matches(matches: List) -> Dict:
    """Map match number -> match."""
    return {match.match_number: match for match in matches}


def _winner_player(match):
    for player in match.players:
        if player.id == match.winner:
            return player
    return None


def refresh_status(match, matches_by_number: Dict):
    """Recompute a match's status after one of its slots changed."""
    if match.is_resolved and match.has_bye:
        walkover = match.players[0]
        match.winner = walkover.id
        match.status = STATUS_COMPLETED
        logger.debug("%s: %s advances on a bye", match.bracket, walkover.full_name)
        advance_winner(match, matches_by_number)
    elif match.status != STATUS_COMPLETED:
        match.status = STATUS_READY if match.is_resolved else STATUS_WAITING


def advance_winner(match, matches_by_number: Dict):
    """Write the winner of ``match`` into its slot of the next match."""
    if match.next_match is None or match.winner is None:
        return
    next_match = matches_by_number.get(match.next_match)
    if next_match is None:
        return
    winner = _winner_player(match)
    next_match.set_slot(match.next_slot, PlayerSlot(winner))
    logger.debug("%s winner %s -> %s slot %d",
                 match.bracket, winner.full_name, next_match.bracket, match.next_slot + 1)
    refresh_status(next_match, matches_by_number)


def _check_winner_change(match, matches_by_number: Dict):
    """Refuse to rewrite a winner that a later, played match already used."""
    current = match
    while current.next_match is not None:
        following = matches_by_number.get(current.next_match)
        if following is None or following.status != STATUS_COMPLETED:
            return
        if not following.has_bye:
            raise InvalidScoreUpdate(
                f"Cannot change the winner of {match.bracket}: {following.bracket} is already completed"
            )
        current = following


def record_result(matches: List, match_number: int, player1_sets_won: int, player2_sets_won: int,
                  detailed_score: str = ''):
    """
    Record the score of a match and advance its winner.

    The winner is the side with more sets. Re-recording a completed match
    replaces its score (last write wins) as long as a changed winner has not
    already played its next match.

    Raises InvalidScoreUpdate without touching any match when the update is
    rejected.
    """
    matches_by_number = index_matches(matches)
    match = matches_by_number.get(match_number)
    if match is None:
        raise InvalidScoreUpdate(f"Match {match_number} does not exist")
    if not match.is_resolved:
        raise InvalidScoreUpdate(f"{match.bracket} is still waiting for its players")
    if match.has_bye:
        raise InvalidScoreUpdate(f"{match.bracket} is a bye and advances automatically")

    for value in (player1_sets_won, player2_sets_won):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidScoreUpdate(f"Set counts must be non-negative integers, got {value!r}")
    if player1_sets_won == player2_sets_won:
        raise InvalidScoreUpdate(f"{match.bracket} cannot end level at {player1_sets_won}-{player2_sets_won}")

    player1, player2 = match.players
    winner = player1 if player1_sets_won > player2_sets_won else player2

    if match.status == STATUS_COMPLETED and match.winner != winner.id:
        _check_winner_change(match, matches_by_number)

    match.player1_sets_won = player1_sets_won
    match.player2_sets_won = player2_sets_won
    match.detailed_score = detailed_score or ''
    match.winner = winner.id
    match.status = STATUS_COMPLETED
    logger.info("%s completed %d-%d, winner %s",
                match.bracket, player1_sets_won, player2_sets_won, winner.full_name)

    advance_winner(match, matches_by_number)
    return match


def get_champion(matches: List):
    """Return the player who won the final, or None while it is undecided."""
    if not matches:
        return None
    last_round = max(m.round for m in matches)
    finals = [m for m in matches if m.round == last_round and m.next_match is None]
    if len(finals) != 1 or finals[0].status != STATUS_COMPLETED:
        return None
    return _winner_player(finals[0])

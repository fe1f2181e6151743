"""
Single elimination bracket generation.

Steps:
- size the bracket (fewest byes over the candidate capacities)
- place seeded players in protected positions, then byes, then the rest
- pair slots into round-1 matches and build placeholder matches up to the
  Final, each wired to the match that consumes its winner
"""
import logging
import math
from typing import List, Dict

from .errors import BracketIntegrityError
from .models import (
    Match,
    PlayerSlot,
    ByeSlot,
    PlaceholderSlot,
    STATUS_READY,
    STATUS_WAITING,
)
from .results import index_matches, refresh_status, get_champion
from .seeding import seed_players

logger = logging.getLogger(__name__)

SMALL_FIELD_LIMIT = 8
SMALL_FIELD_CAPACITIES = [4, 6, 8, 12, 16]


def get_round_name(round_number: int, total_rounds: int) -> str:
    """Get the name of a round counted back from the Final."""
    if round_number == total_rounds:
        return "Final"
    elif round_number == total_rounds - 1:
        return "Semi-Final"
    elif round_number == total_rounds - 2:
        return "Quarter-Final"
    else:
        return f"Round {round_number}"


def _next_power_of_two(n: int) -> int:
    return 2 ** math.ceil(math.log2(n))


def calculate_bracket_size(num_players: int) -> int:
    """
    Calculate the bracket capacity.

    Next power of 2 by default. Fields of up to 8 players also consider the
    small capacities (4, 6, 8, 12, 16) and take the first one with strictly
    fewer byes, so 5 or 6 players get a 6-slot bracket.
    """
    if num_players <= 0:
        return 0
    best_size = _next_power_of_two(num_players)
    if num_players <= SMALL_FIELD_LIMIT:
        min_byes = best_size - num_players
        for size in SMALL_FIELD_CAPACITIES:
            if size >= num_players and size - num_players < min_byes:
                min_byes = size - num_players
                best_size = size
    return best_size


def calculate_byes(num_players: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(num_players) - num_players


def calculate_round_sizes(bracket_size: int) -> List[int]:
    """
    Match counts per round, halving (rounding up) until the Final.

    Works for capacities that are not powers of 2: a 6-slot bracket plays
    3, 2 and 1 matches.
    """
    if bracket_size < 2 or bracket_size % 2:
        raise BracketIntegrityError(f"Bracket size must be an even number of at least 2, got {bracket_size}")
    sizes = [bracket_size // 2]
    while sizes[-1] > 1:
        sizes.append(math.ceil(sizes[-1] / 2))
    return sizes


def generate_seed_positions(bracket_size: int) -> List[int]:
    """
    Positions for seeds 1-8, one per quarter section in turn.

    Entries 4-7 (seeds 5-8) sit an eighth of the bracket into each quarter.
    """
    sections = [0, bracket_size / 4, bracket_size / 2, 3 * bracket_size / 4]
    positions = []
    for i in range(8):
        offset = (i // 4) * (bracket_size // 8)
        positions.append(math.floor(sections[i % 4] + offset))
    return positions


def get_bye_positions(slots: List, num_byes: int) -> List[int]:
    """
    Choose the slots that receive byes.

    Candidates run from the bottom of the bracket upwards on every other slot
    (C-1, C-3, ...). Occupied slots are skipped, as are slots whose opponent
    is already a bye. Anything still missing falls back to the lowest free
    slot that keeps byes in separate matches.
    """
    bracket_size = len(slots)
    chosen = []

    def _available(pos):
        return slots[pos] is None and pos not in chosen and (pos ^ 1) not in chosen

    for i in range(bracket_size):
        if len(chosen) == num_byes:
            break
        pos = max(0, bracket_size - 1 - 2 * i)
        if _available(pos):
            chosen.append(pos)

    for pos in range(bracket_size - 1, -1, -1):
        if len(chosen) == num_byes:
            break
        if _available(pos):
            chosen.append(pos)

    if len(chosen) < num_byes:
        raise BracketIntegrityError(
            f"Only {len(chosen)} of {num_byes} byes fit a {bracket_size}-slot bracket without a bye-vs-bye match"
        )
    return chosen


def place_players(seeded_players: List, bracket_size: int, num_byes: int) -> List:
    """
    Fill every bracket slot with a PlayerSlot or a ByeSlot.

    Seed 1 takes the top slot and seed 2 the bottom one, seeds 3 and 4 the
    quarter marks and seeds 5-8 one position per section. A seed 5-8
    position that would leave fewer open matches than byes is skipped and
    that player joins the unseeded fill. Byes are placed next, and the
    remaining players fill the free slots in seed order.
    """
    if len(seeded_players) + num_byes != bracket_size:
        raise BracketIntegrityError(
            f"{len(seeded_players)} players and {num_byes} byes cannot fill {bracket_size} slots"
        )

    slots = [None] * bracket_size
    placed = set()

    def _place(pos, player):
        if 0 <= pos < bracket_size and slots[pos] is None and player.id not in placed:
            slots[pos] = PlayerSlot(player)
            placed.add(player.id)

    # Seeds 1 and 2 at opposite ends
    if len(seeded_players) >= 1:
        _place(0, seeded_players[0])
    if len(seeded_players) >= 2:
        _place(bracket_size - 1, seeded_players[1])

    # Seeds 3 and 4 at the quarter marks
    quarter = bracket_size // 4
    if len(seeded_players) >= 3:
        _place(quarter, seeded_players[2])
    if len(seeded_players) >= 4:
        _place(bracket_size - 1 - quarter, seeded_players[3])

    # Seeds 5-8 spread over the four sections
    seed_positions = generate_seed_positions(bracket_size)
    for i in range(4, min(len(seeded_players), 8)):
        pos = seed_positions[i]
        if slots[pos ^ 1] is not None and _open_matches(slots) - 1 < num_byes:
            continue
        _place(pos, seeded_players[i])

    for pos in get_bye_positions(slots, num_byes):
        slots[pos] = ByeSlot()

    remaining = (p for p in seeded_players if p.id not in placed)
    for pos in range(bracket_size):
        if slots[pos] is None:
            player = next(remaining, None)
            if player is None:
                break
            _place(pos, player)

    _check_placement(slots, seeded_players, num_byes)
    logger.debug("Bracket slots: %s", slots)
    return slots


def _open_matches(slots: List) -> int:
    """Round-1 matches that still have a free slot for a bye."""
    return sum(1 for i in range(0, len(slots), 2) if slots[i] is None or slots[i + 1] is None)


def _check_placement(slots: List, seeded_players: List, num_byes: int):
    empty = [pos for pos, slot in enumerate(slots) if slot is None]
    if empty:
        raise BracketIntegrityError(f"Bracket slots left empty: {empty}")

    ids = [slot.player.id for slot in slots if isinstance(slot, PlayerSlot)]
    if len(ids) != len(set(ids)):
        raise BracketIntegrityError("A player was placed in more than one slot")
    if set(ids) != {p.id for p in seeded_players}:
        raise BracketIntegrityError("Not every player was placed in the bracket")

    byes = sum(1 for slot in slots if isinstance(slot, ByeSlot))
    if byes != num_byes:
        raise BracketIntegrityError(f"Expected {num_byes} byes, placed {byes}")


def _seed_label(slot) -> str:
    if isinstance(slot, ByeSlot):
        return 'BYE'
    return str(slot.player.seed or '?')


def build_match_tree(slots: List) -> List[Match]:
    """
    Convert filled bracket slots into the full list of matches.

    Round 1 pairs slots (0, 1), (2, 3), ... Every later round has half as
    many matches (rounding up) and takes the winners of two earlier matches;
    an odd match out is paired with a bye. Match numbers run across the
    whole bracket in (round, position) order.
    """
    round_sizes = calculate_round_sizes(len(slots))
    total_rounds = len(round_sizes)

    rounds = []
    match_number = 1

    first_round = []
    for i in range(0, len(slots), 2):
        slot1, slot2 = slots[i], slots[i + 1]
        if isinstance(slot1, ByeSlot) and isinstance(slot2, ByeSlot):
            raise BracketIntegrityError(f"Round 1 match {i // 2 + 1} has a bye on both sides")
        first_round.append(Match(
            round=1,
            match_number=match_number,
            bracket=f"R1M{i // 2 + 1}",
            round_name=get_round_name(1, total_rounds),
            player1=slot1,
            player2=slot2,
            status=STATUS_READY,
            seed_info=f"{_seed_label(slot1)} vs {_seed_label(slot2)}",
        ))
        match_number += 1
    rounds.append(first_round)

    for round_number in range(2, total_rounds + 1):
        previous = rounds[-1]
        current = []
        for i in range(round_sizes[round_number - 1]):
            feeders = previous[i * 2:i * 2 + 2]
            slot1 = PlaceholderSlot(feeders[0].match_number, 0)
            slot2 = PlaceholderSlot(feeders[1].match_number, 1) if len(feeders) > 1 else ByeSlot()
            match = Match(
                round=round_number,
                match_number=match_number,
                bracket=f"R{round_number}M{i + 1}",
                round_name=get_round_name(round_number, total_rounds),
                player1=slot1,
                player2=slot2,
                status=STATUS_WAITING,
                seed_info='TBD vs TBD',
            )
            for side, feeder in enumerate(feeders):
                feeder.next_match = match.match_number
                feeder.next_slot = side
            current.append(match)
            match_number += 1
        rounds.append(current)

    for round_number, (round_matches, expected) in enumerate(zip(rounds, round_sizes), start=1):
        if len(round_matches) != expected:
            raise BracketIntegrityError(
                f"Round {round_number} has {len(round_matches)} matches, expected {expected}"
            )
    if len(rounds[-1]) != 1:
        raise BracketIntegrityError("Bracket does not end in a single final")

    matches = [match for round_matches in rounds for match in round_matches]

    # Byes in round 1 advance immediately
    matches_by_number = index_matches(matches)
    for match in first_round:
        if match.has_bye:
            refresh_status(match, matches_by_number)

    return matches


def generate_elimination_bracket(players: List, strategy=None) -> Dict:
    """
    Generate a complete single elimination bracket.

    Returns dict with:
    - 'seeded_players': players in seed order
    - 'bracket_size': number of slots
    - 'byes': number of byes
    - 'total_rounds': number of rounds
    - 'slots': the filled round-1 slots
    - 'matches': every match, round 1 to the Final
    """
    seeded = seed_players(players, strategy)
    bracket_size = calculate_bracket_size(len(seeded))
    num_byes = bracket_size - len(seeded)

    slots = place_players(seeded, bracket_size, num_byes)
    matches = build_match_tree(slots)
    total_rounds = max(match.round for match in matches)

    logger.info("Elimination bracket: %d players, %d slots, %d byes, %d matches over %d rounds",
                len(seeded), bracket_size, num_byes, len(matches), total_rounds)
    return {
        'seeded_players': seeded,
        'bracket_size': bracket_size,
        'byes': num_byes,
        'total_rounds': total_rounds,
        'slots': slots,
        'matches': matches,
    }


def group_matches_by_round(matches: List) -> Dict[int, List]:
    """Group matches into {round: [matches in match-number order]}."""
    rounds = {}
    for match in sorted(matches, key=lambda m: m.match_number):
        rounds.setdefault(match.round, []).append(match)
    return rounds


def get_elimination_bracket_display(matches: List) -> Dict:
    """
    Get bracket data formatted for display.
    """
    rounds = group_matches_by_round(matches)
    first_round = rounds.get(1, [])
    champion = get_champion(matches)

    matches_per_round = {}
    for round_number, round_matches in rounds.items():
        matches_per_round[round_number] = len([m for m in round_matches if not m.has_bye])

    return {
        'rounds': [
            {
                'round': round_number,
                'round_name': round_matches[0].round_name,
                'matches': [m.to_dict() for m in round_matches],
            }
            for round_number, round_matches in rounds.items()
        ],
        'bracket_size': len(first_round) * 2,
        'total_rounds': len(rounds),
        'byes': sum(1 for m in first_round if m.has_bye),
        'matches_per_round': matches_per_round,
        'champion': champion.to_dict() if champion else None,
    }

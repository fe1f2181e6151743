"""
Player seeding.

Seeds are assigned by a ranking strategy. The default strategy derives a
synthetic rating from registration order, the player's name and their email
provider. It is a placeholder policy for fields without rating data, not a
measure of playing strength.
"""
import logging
import math
from typing import List, Optional

from .errors import InsufficientPlayers, DuplicatePlayer

logger = logging.getLogger(__name__)

MAX_SEEDED_PLAYERS = 8
BASE_RATING = 1000
COMMON_EMAIL_PROVIDERS = ('gmail', 'hotmail')
COMMON_EMAIL_BONUS = 50


def name_hash(text: str) -> int:
    """32-bit wrapping string hash (h = h * 31 + code), returned signed."""
    h = 0
    for char in text:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def calculate_seeded_count(num_players: int) -> int:
    """Number of players eligible for protected bracket positions."""
    return min(MAX_SEEDED_PLAYERS, math.ceil(num_players / 4))


class SeedingStrategy:
    """Orders a roster from strongest to weakest."""

    def rank(self, players):
        raise NotImplementedError


class RegistrationRatingStrategy(SeedingStrategy):
    """Ranks players by a synthetic rating.

    rating = 1000
           + (100 - 10 * registration index)   earlier registrants first
           + |name_hash(first + last)| % 200   stable per-name spread
           + 50 for a common email provider
    """

    def rating(self, player, registration_index: int) -> int:
        rating = BASE_RATING
        rating += 100 - registration_index * 10
        rating += abs(name_hash(player.first_name + player.last_name)) % 200
        email = (player.email or '').lower()
        if any(provider in email for provider in COMMON_EMAIL_PROVIDERS):
            rating += COMMON_EMAIL_BONUS
        return rating

    def rank(self, players):
        rated = [(self.rating(player, index), index, player) for index, player in enumerate(players)]
        rated.sort(key=lambda r: (-r[0], r[1]))
        for rating, index, player in rated:
            logger.debug("Rating %s for %s (registered #%d)", rating, player.full_name, index + 1)
        return [player for _, _, player in rated]


class ExplicitRatingStrategy(SeedingStrategy):
    """Ranks players by their own rating; unrated players go last."""

    def rank(self, players):
        indexed = list(enumerate(players))
        indexed.sort(key=lambda item: (
            item[1].rating is None,
            -(item[1].rating or 0),
            item[0],
        ))
        return [player for _, player in indexed]


SEEDING_STRATEGIES = {
    'registration': RegistrationRatingStrategy,
    'rating': ExplicitRatingStrategy,
}


def get_seeding_strategy(name: str) -> SeedingStrategy:
    """Look up a seeding strategy by its configuration name."""
    try:
        return SEEDING_STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"Unknown seeding strategy: {name}")


def seed_players(players: List, strategy: Optional[SeedingStrategy] = None) -> List:
    """
    Assign seeds 1..N to a roster.

    Returns new Player objects in seed order. The top min(8, ceil(N/4))
    are flagged as seeded.
    """
    if len(players) < 2:
        raise InsufficientPlayers(len(players))

    seen = set()
    for player in players:
        if player.id in seen:
            raise DuplicatePlayer(f"Player {player.id} is registered more than once")
        seen.add(player.id)

    strategy = strategy or RegistrationRatingStrategy()
    ranked = strategy.rank(list(players))
    if len(ranked) != len(players) or {p.id for p in ranked} != seen:
        raise ValueError(f"{type(strategy).__name__} did not return the full roster")

    seeded_count = calculate_seeded_count(len(ranked))
    seeded = [player.with_seed(index + 1, index < seeded_count) for index, player in enumerate(ranked)]

    logger.info("Seeded %d players (%d protected)", len(seeded), seeded_count)
    return seeded

"""
Unit tests for player seeding.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from conftest import make_players
from scheduler.errors import InsufficientPlayers, DuplicatePlayer
from scheduler.models import Player
from scheduler.seeding import (
    name_hash,
    calculate_seeded_count,
    seed_players,
    get_seeding_strategy,
    RegistrationRatingStrategy,
    ExplicitRatingStrategy,
    SeedingStrategy,
)


class TestNameHash:
    """Tests for the 32-bit name hash."""

    def test_empty(self):
        assert name_hash("") == 0

    def test_short_strings(self):
        """Test h = h * 31 + code."""
        assert name_hash("a") == 97
        assert name_hash("ab") == 97 * 31 + 98

    def test_known_value(self):
        assert name_hash("hello") == 99162322

    def test_wraps_to_signed_32_bit(self):
        """Test overflow wraps into the signed 32-bit range."""
        assert name_hash("polygenelubricants") == -2 ** 31
        for text in ("Roger Federer", "Serena Williams", "x" * 100):
            assert -2 ** 31 <= name_hash(text) < 2 ** 31


class TestSeededCount:
    """Tests for the number of protected seeds."""

    @pytest.mark.parametrize("num_players,expected", [
        (2, 1), (4, 1), (5, 2), (8, 2), (9, 3), (16, 4), (17, 5), (32, 8), (64, 8),
    ])
    def test_seeded_count(self, num_players, expected):
        assert calculate_seeded_count(num_players) == expected


class TestRegistrationRatingStrategy:
    """Tests for the synthetic rating."""

    def test_earlier_registration_rates_higher(self):
        """Test each registration slot is worth 10 points."""
        strategy = RegistrationRatingStrategy()
        player = Player(id="p1", first_name="Ana", last_name="Lee", email="ana@example.com")
        assert strategy.rating(player, 0) - strategy.rating(player, 3) == 30

    def test_common_email_bonus(self):
        """Test gmail and hotmail addresses get 50 extra points."""
        strategy = RegistrationRatingStrategy()
        club = Player(id="p1", first_name="Ana", last_name="Lee", email="ana@club.org")
        gmail = Player(id="p2", first_name="Ana", last_name="Lee", email="ana@gmail.com")
        hotmail = Player(id="p3", first_name="Ana", last_name="Lee", email="ANA@Hotmail.com")
        assert strategy.rating(gmail, 0) - strategy.rating(club, 0) == 50
        assert strategy.rating(hotmail, 0) - strategy.rating(club, 0) == 50

    def test_rating_range(self):
        """Test the rating stays within its components' bounds."""
        strategy = RegistrationRatingStrategy()
        player = Player(id="p1", first_name="Ana", last_name="Lee", email="ana@club.org")
        assert 1100 <= strategy.rating(player, 0) < 1300

    def test_rank_is_deterministic(self):
        """Test the same roster always ranks the same way."""
        players = make_players(10, rated=False)
        first = [p.id for p in RegistrationRatingStrategy().rank(players)]
        second = [p.id for p in RegistrationRatingStrategy().rank(players)]
        assert first == second
        assert sorted(first) == sorted(p.id for p in players)


class TestExplicitRatingStrategy:
    """Tests for rating-based ranking."""

    def test_ranks_by_rating(self):
        players = [
            Player(id="a", first_name="A", rating=1200),
            Player(id="b", first_name="B", rating=1800),
            Player(id="c", first_name="C", rating=1500),
        ]
        assert [p.id for p in ExplicitRatingStrategy().rank(players)] == ["b", "c", "a"]

    def test_unrated_players_last_in_registration_order(self):
        players = [
            Player(id="a", first_name="A"),
            Player(id="b", first_name="B", rating=900),
            Player(id="c", first_name="C"),
        ]
        assert [p.id for p in ExplicitRatingStrategy().rank(players)] == ["b", "a", "c"]


class TestSeedPlayers:
    """Tests for seed assignment."""

    def test_seeds_are_one_to_n(self, by_rating):
        seeded = seed_players(make_players(6), by_rating)
        assert [p.seed for p in seeded] == [1, 2, 3, 4, 5, 6]
        assert [p.id for p in seeded] == ["p1", "p2", "p3", "p4", "p5", "p6"]

    def test_top_quarter_flagged_seeded(self, by_rating):
        seeded = seed_players(make_players(12), by_rating)
        assert [p.is_seeded for p in seeded] == [True] * 3 + [False] * 9

    def test_seeded_flag_capped_at_eight(self, by_rating):
        seeded = seed_players(make_players(40), by_rating)
        assert sum(p.is_seeded for p in seeded) == 8

    def test_input_not_mutated(self, by_rating):
        players = make_players(4)
        seed_players(players, by_rating)
        assert all(p.seed is None for p in players)

    def test_default_strategy(self):
        seeded = seed_players(make_players(5, rated=False))
        assert sorted(p.seed for p in seeded) == [1, 2, 3, 4, 5]

    @pytest.mark.parametrize("count", [0, 1])
    def test_insufficient_players(self, count):
        with pytest.raises(InsufficientPlayers):
            seed_players(make_players(count))

    def test_duplicate_player_ids(self):
        players = make_players(3) + [Player(id="p1", first_name="Again")]
        with pytest.raises(DuplicatePlayer):
            seed_players(players)

    def test_strategy_must_return_whole_roster(self):
        class DropsPlayers(SeedingStrategy):
            def rank(self, players):
                return players[:-1]

        with pytest.raises(ValueError):
            seed_players(make_players(4), DropsPlayers())


class TestGetSeedingStrategy:
    def test_lookup(self):
        assert isinstance(get_seeding_strategy('registration'), RegistrationRatingStrategy)
        assert isinstance(get_seeding_strategy('rating'), ExplicitRatingStrategy)

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_seeding_strategy('coin-toss')

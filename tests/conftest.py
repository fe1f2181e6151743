"""
Shared pytest fixtures for tournament scheduler tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - skip the exhaustive bracket sweeps
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from scheduler.models import Player
from scheduler.seeding import ExplicitRatingStrategy


def make_players(count, rated=True):
    """Players p1..pN; with rated=True p1 is the strongest."""
    return [
        Player(
            id=f"p{i}",
            first_name=f"Player{i}",
            last_name="Test",
            email=f"player{i}@example.com",
            rating=(1000 - i) if rated else None,
        )
        for i in range(1, count + 1)
    ]


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: exhaustive sweeps over many field sizes")


@pytest.fixture
def by_rating():
    """Seeding that follows each player's rating, so seed N == player pN."""
    return ExplicitRatingStrategy()


@pytest.fixture
def four_players():
    return make_players(4)


@pytest.fixture
def five_players():
    return make_players(5)


@pytest.fixture
def sixteen_players():
    return make_players(16)


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Test client writing into a temporary data directory."""
    import app as app_module

    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        yield client

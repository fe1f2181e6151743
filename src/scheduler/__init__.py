"""
Tournament schedule generation: seeding, elimination brackets, round-robin
matches, result recording and standings.
"""
from .errors import SchedulingError, InsufficientPlayers, BracketIntegrityError, InvalidScoreUpdate
from .models import Player, Match, PlayerSlot, ByeSlot, PlaceholderSlot
from .results import record_result
from .schedule import generate_schedule, ELIMINATION, ROUND_ROBIN
from .standings import compute_standings

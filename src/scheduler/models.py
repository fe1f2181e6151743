"""
Data models for players, bracket slots and matches.
"""
from typing import Dict, Optional


STATUS_WAITING = 'waiting'
STATUS_READY = 'ready'
STATUS_COMPLETED = 'completed'


class Player:
    def __init__(self, id, first_name, last_name='', email='', rating=None, seed=None, is_seeded=False):
        self.id = id
        self.first_name = first_name
        self.last_name = last_name
        self.email = email
        self.rating = rating
        self.seed = seed
        self.is_seeded = is_seeded

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def with_seed(self, seed, is_seeded):
        """Return a copy of this player carrying the given seed."""
        return Player(self.id, self.first_name, self.last_name, self.email,
                      rating=self.rating, seed=seed, is_seeded=is_seeded)

    def to_dict(self) -> Dict:
        data = {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'email': self.email,
        }
        if self.rating is not None:
            data['rating'] = self.rating
        if self.seed is not None:
            data['seed'] = self.seed
            data['isSeeded'] = self.is_seeded
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'Player':
        return cls(
            id=data['id'],
            first_name=data.get('firstName', ''),
            last_name=data.get('lastName', ''),
            email=data.get('email', ''),
            rating=data.get('rating'),
            seed=data.get('seed'),
            is_seeded=data.get('isSeeded', False),
        )

    def __eq__(self, other):
        return isinstance(other, Player) and self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"Player(id={self.id}, name={self.full_name}, seed={self.seed})"


class PlayerSlot:
    """A match side held by a concrete player."""

    def __init__(self, player):
        self.player = player

    def to_dict(self) -> Dict:
        return self.player.to_dict()

    def __eq__(self, other):
        return isinstance(other, PlayerSlot) and self.player == other.player

    def __repr__(self):
        return f"PlayerSlot({self.player.full_name})"


class ByeSlot:
    """An artificial opponent; the other side advances without playing."""

    def to_dict(self) -> Dict:
        return {'id': 'bye', 'firstName': 'BYE', 'lastName': '', 'isBye': True}

    def __eq__(self, other):
        return isinstance(other, ByeSlot)

    def __repr__(self):
        return "ByeSlot()"


class PlaceholderSlot:
    """A match side awaiting the winner of an earlier match."""

    def __init__(self, source_match, side):
        self.source_match = source_match
        self.side = side

    def to_dict(self) -> Dict:
        return {
            'id': f'winner_{self.source_match}',
            'firstName': 'TBD',
            'lastName': '',
            'isPlaceholder': True,
            'sourceMatch': self.source_match,
            'side': self.side,
        }

    def __eq__(self, other):
        return (isinstance(other, PlaceholderSlot)
                and self.source_match == other.source_match
                and self.side == other.side)

    def __repr__(self):
        return f"PlaceholderSlot(winner of M{self.source_match})"


def slot_from_dict(data: Dict):
    """Rebuild a slot variant from its serialized player dict."""
    if data.get('isBye'):
        return ByeSlot()
    if data.get('isPlaceholder'):
        return PlaceholderSlot(data['sourceMatch'], data.get('side', 0))
    return PlayerSlot(Player.from_dict(data))


class Match:
    def __init__(self, round, match_number, bracket, round_name, player1, player2,
                 status=STATUS_WAITING, winner=None, next_match=None, next_slot=None,
                 seed_info=''):
        self.round = round
        self.match_number = match_number
        self.bracket = bracket
        self.round_name = round_name
        self.player1 = player1
        self.player2 = player2
        self.status = status
        self.winner = winner
        self.next_match = next_match
        self.next_slot = next_slot
        self.seed_info = seed_info
        self.player1_sets_won = None
        self.player2_sets_won = None
        self.detailed_score = ''

    @property
    def slots(self):
        return [self.player1, self.player2]

    def set_slot(self, index, slot):
        if index == 0:
            self.player1 = slot
        else:
            self.player2 = slot

    @property
    def has_bye(self) -> bool:
        return isinstance(self.player1, ByeSlot) or isinstance(self.player2, ByeSlot)

    @property
    def is_resolved(self) -> bool:
        """True when no side is still waiting on an earlier match."""
        return not any(isinstance(slot, PlaceholderSlot) for slot in self.slots)

    @property
    def players(self):
        return [slot.player for slot in self.slots if isinstance(slot, PlayerSlot)]

    @property
    def score(self) -> Optional[str]:
        if self.player1_sets_won is None or self.player2_sets_won is None:
            return None
        return f"{self.player1_sets_won}-{self.player2_sets_won}"

    def to_dict(self) -> Dict:
        return {
            'round': self.round,
            'matchNumber': self.match_number,
            'bracket': self.bracket,
            'roundName': self.round_name,
            'player1': self.player1.to_dict(),
            'player2': self.player2.to_dict(),
            'status': self.status,
            'winner': self.winner,
            'player1SetsWon': self.player1_sets_won,
            'player2SetsWon': self.player2_sets_won,
            'detailedScore': self.detailed_score,
            'score': self.score,
            'hasBye': self.has_bye,
            'seedInfo': self.seed_info,
            'nextMatch': self.next_match,
            'nextSlot': self.next_slot,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        match = cls(
            round=data['round'],
            match_number=data['matchNumber'],
            bracket=data.get('bracket', ''),
            round_name=data.get('roundName', ''),
            player1=slot_from_dict(data['player1']),
            player2=slot_from_dict(data['player2']),
            status=data.get('status', STATUS_WAITING),
            winner=data.get('winner'),
            next_match=data.get('nextMatch'),
            next_slot=data.get('nextSlot'),
            seed_info=data.get('seedInfo', ''),
        )
        match.player1_sets_won = data.get('player1SetsWon')
        match.player2_sets_won = data.get('player2SetsWon')
        match.detailed_score = data.get('detailedScore') or ''
        return match

    def __repr__(self):
        return (f"Match({self.bracket}, round={self.round}, number={self.match_number}, "
                f"{self.player1!r} vs {self.player2!r}, status={self.status})")

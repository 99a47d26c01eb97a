PENDING = 'pending'
READY = 'ready'
BYE = 'bye'
COMPLETED = 'completed'

WINNERS = 'winners'
LOSERS = 'losers'
FINALS = 'finals'

TEAM1 = 'team1'
TEAM2 = 'team2'
SLOTS = (TEAM1, TEAM2)


class SlotSource:
    """Where a game slot gets its team: a seed, or the winner/loser of another game."""

    SEED = 'seed'
    WINNER = 'winner'
    LOSER = 'loser'
    KINDS = (SEED, WINNER, LOSER)

    __slots__ = ('_kind', '_value')

    def __init__(self, kind, value):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown slot source kind: {kind}")
        self._kind = kind
        self._value = int(value)

    @classmethod
    def seed(cls, position):
        return cls(cls.SEED, position)

    @classmethod
    def winner_of(cls, game_number):
        return cls(cls.WINNER, game_number)

    @classmethod
    def loser_of(cls, game_number):
        return cls(cls.LOSER, game_number)

    @classmethod
    def parse(cls, text):
        """Parse 'seed:1', 'winner:5' or 'loser:3'."""
        if text is None:
            return None
        kind, _, value = str(text).partition(':')
        if not value:
            raise ValueError(f"Malformed slot source: {text!r}")
        return cls(kind, value)

    @property
    def kind(self):
        return self._kind

    @property
    def value(self):
        return self._value

    @property
    def is_seed(self):
        return self._kind == self.SEED

    @property
    def game_number(self):
        """Referenced game number, or None for seed sources."""
        return None if self.is_seed else self._value

    def __eq__(self, other):
        if not isinstance(other, SlotSource):
            return NotImplemented
        return self._kind == other._kind and self._value == other._value

    def __hash__(self):
        return hash((self._kind, self._value))

    def __str__(self):
        return f"{self._kind}:{self._value}"

    def __repr__(self):
        return f"SlotSource({self._kind}:{self._value})"


class GameTemplate:
    def __init__(self, bracket_size, game_number, round_name, round_number, side,
                 team1_source, team2_source, side_round=None,
                 winner_advances_to=None, winner_slot=None,
                 loser_advances_to=None, loser_slot=None,
                 is_grand_final=False, is_reset_game=False):
        self.bracket_size = bracket_size
        self.game_number = game_number
        self.round_name = round_name
        self.round_number = round_number  # dependency depth across the whole bracket
        self.side = side
        self.side_round = side_round  # round index within its own side
        self.team1_source = team1_source
        self.team2_source = team2_source
        self.winner_advances_to = winner_advances_to
        self.winner_slot = winner_slot
        self.loser_advances_to = loser_advances_to
        self.loser_slot = loser_slot
        self.is_grand_final = is_grand_final
        self.is_reset_game = is_reset_game

    def sources(self):
        return (self.team1_source, self.team2_source)

    def to_dict(self):
        return {
            'bracket_size': self.bracket_size,
            'game_number': self.game_number,
            'round_name': self.round_name,
            'round_number': self.round_number,
            'side': self.side,
            'side_round': self.side_round,
            'team1_source': str(self.team1_source),
            'team2_source': str(self.team2_source),
            'winner_advances_to': self.winner_advances_to,
            'winner_slot': self.winner_slot,
            'loser_advances_to': self.loser_advances_to,
            'loser_slot': self.loser_slot,
            'is_grand_final': self.is_grand_final,
            'is_reset_game': self.is_reset_game,
        }

    def __repr__(self):
        return (f"GameTemplate(game_number={self.game_number}, round_name={self.round_name}, "
                f"team1_source={self.team1_source}, team2_source={self.team2_source})")


class Entry:
    def __init__(self, seed_position, team_id=None, is_bye=None):
        self.seed_position = seed_position
        self.team_id = team_id
        # A missing team means a bye unless stated otherwise
        self.is_bye = (team_id is None) if is_bye is None else bool(is_bye)

    def to_dict(self):
        return {'seed_position': self.seed_position, 'team_id': self.team_id, 'is_bye': self.is_bye}

    @classmethod
    def from_dict(cls, data):
        return cls(data['seed_position'], data.get('team_id'), data.get('is_bye'))

    def __eq__(self, other):
        if not isinstance(other, Entry):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        if self.is_bye:
            return f"Entry(seed_position={self.seed_position}, BYE)"
        return f"Entry(seed_position={self.seed_position}, team_id={self.team_id})"


class Game:
    FIELDS = (
        'game_number', 'round_name', 'round_number', 'side', 'side_round',
        'team1_source', 'team2_source', 'team1_id', 'team2_id', 'status',
        'winner_id', 'loser_id', 'team1_score', 'team2_score',
        'winner_advances_to', 'winner_slot', 'loser_advances_to', 'loser_slot',
        'is_grand_final', 'is_reset_game',
    )

    def __init__(self, game_number, team1_source=None, team2_source=None,
                 round_name=None, round_number=None, side=None, side_round=None,
                 team1_id=None, team2_id=None, status=PENDING,
                 winner_id=None, loser_id=None, team1_score=None, team2_score=None,
                 winner_advances_to=None, winner_slot=None,
                 loser_advances_to=None, loser_slot=None,
                 is_grand_final=False, is_reset_game=False):
        self.game_number = game_number
        self.round_name = round_name
        self.round_number = round_number
        self.side = side
        self.side_round = side_round
        self.team1_source = team1_source
        self.team2_source = team2_source
        self.team1_id = team1_id
        self.team2_id = team2_id
        self.status = status
        self.winner_id = winner_id
        self.loser_id = loser_id
        self.team1_score = team1_score
        self.team2_score = team2_score
        self.winner_advances_to = winner_advances_to
        self.winner_slot = winner_slot
        self.loser_advances_to = loser_advances_to
        self.loser_slot = loser_slot
        self.is_grand_final = is_grand_final
        self.is_reset_game = is_reset_game

    @classmethod
    def from_template(cls, template):
        return cls(
            game_number=template.game_number,
            team1_source=template.team1_source,
            team2_source=template.team2_source,
            round_name=template.round_name,
            round_number=template.round_number,
            side=template.side,
            side_round=template.side_round,
            winner_advances_to=template.winner_advances_to,
            winner_slot=template.winner_slot,
            loser_advances_to=template.loser_advances_to,
            loser_slot=template.loser_slot,
            is_grand_final=template.is_grand_final,
            is_reset_game=template.is_reset_game,
        )

    def team_in(self, slot):
        return self.team1_id if slot == TEAM1 else self.team2_id

    def set_team(self, slot, team_id):
        if slot == TEAM1:
            self.team1_id = team_id
        elif slot == TEAM2:
            self.team2_id = team_id
        else:
            raise ValueError(f"Unknown slot: {slot}")

    def source_of(self, slot):
        return self.team1_source if slot == TEAM1 else self.team2_source

    @property
    def teams(self):
        return (self.team1_id, self.team2_id)

    @property
    def has_both_teams(self):
        return self.team1_id is not None and self.team2_id is not None

    @property
    def is_decided(self):
        return self.status in (COMPLETED, BYE)

    def copy(self):
        return Game(**{name: getattr(self, name) for name in self.FIELDS})

    def to_dict(self):
        data = {name: getattr(self, name) for name in self.FIELDS}
        data['team1_source'] = str(self.team1_source) if self.team1_source else None
        data['team2_source'] = str(self.team2_source) if self.team2_source else None
        return data

    @classmethod
    def from_dict(cls, data):
        values = {name: data.get(name) for name in cls.FIELDS if name in data}
        values['team1_source'] = SlotSource.parse(data.get('team1_source'))
        values['team2_source'] = SlotSource.parse(data.get('team2_source'))
        values['status'] = data.get('status') or PENDING
        values['is_grand_final'] = bool(data.get('is_grand_final'))
        values['is_reset_game'] = bool(data.get('is_reset_game'))
        return cls(**values)

    def __eq__(self, other):
        if not isinstance(other, Game):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Game(game_number={self.game_number}, status={self.status}, "
                f"teams=({self.team1_id}, {self.team2_id}), winner={self.winner_id})")


class SeedingRanking:
    def __init__(self, team_id, seed_average=None, seed_rank=None, tiebreaker_value=None, raw_seed_score=None):
        self.team_id = team_id
        self.seed_average = seed_average
        self.seed_rank = seed_rank
        self.tiebreaker_value = tiebreaker_value
        self.raw_seed_score = raw_seed_score

    @property
    def is_ranked(self):
        return self.seed_rank is not None

    def to_dict(self):
        return {
            'team_id': self.team_id,
            'seed_average': self.seed_average,
            'seed_rank': self.seed_rank,
            'tiebreaker_value': self.tiebreaker_value,
            'raw_seed_score': self.raw_seed_score,
        }

    def __repr__(self):
        return (f"SeedingRanking(team_id={self.team_id}, seed_rank={self.seed_rank}, "
                f"seed_average={self.seed_average}, tiebreaker_value={self.tiebreaker_value})")

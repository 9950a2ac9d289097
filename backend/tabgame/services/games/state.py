"""In-memory shape of a Tâb game and its JSON record form."""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple, Union

BLUE = 'Blue'
RED = 'Red'


class Status(str, Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'
    FINISHED = 'finished'


class Step(str, Enum):
    FROM = 'from'
    TO = 'to'
    TAKE = 'take'


@dataclass
class Piece:
    color: str
    owner: str
    in_motion: bool = False
    reached_last_row: bool = False

    def to_dict(self):
        return {
            'color': self.color,
            'owner': self.owner,
            'inMotion': self.in_motion,
            'reachedLastRow': self.reached_last_row,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            color=data['color'],
            owner=data['owner'],
            in_motion=bool(data.get('inMotion')),
            reached_last_row=bool(data.get('reachedLastRow')),
        )


@dataclass(frozen=True)
class Move:
    origin: int
    target: int
    captures: Tuple[int, ...] = ()

    def to_dict(self):
        return {'from': self.origin, 'to': self.target, 'captures': list(self.captures)}

    @classmethod
    def from_dict(cls, data):
        return cls(origin=data['from'], target=data['to'], captures=tuple(data.get('captures') or ()))


@dataclass(frozen=True)
class Dice:
    stick_values: Tuple[bool, ...]
    value: int
    keep_playing: bool

    def to_dict(self):
        return {
            'stickValues': list(self.stick_values),
            'value': self.value,
            'keepPlaying': self.keep_playing,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            stick_values=tuple(data['stickValues']),
            value=data['value'],
            keep_playing=data['keepPlaying'],
        )


# Sub-steps of a single move. Each variant carries only the data valid in it.

@dataclass(frozen=True)
class SelectPiece:
    step: ClassVar[Step] = Step.FROM

    @property
    def selected(self) -> List[int]:
        return []


@dataclass(frozen=True)
class SelectTarget:
    origin: int
    step: ClassVar[Step] = Step.TO

    @property
    def selected(self) -> List[int]:
        return [self.origin]


@dataclass(frozen=True)
class ChooseCapture:
    move: Move
    step: ClassVar[Step] = Step.TAKE

    @property
    def selected(self) -> List[int]:
        return [self.move.origin]


Phase = Union[SelectPiece, SelectTarget, ChooseCapture]


@dataclass
class Game:
    id: str
    group: int
    size: int
    players: Dict[str, Optional[str]] = field(default_factory=dict)
    status: Status = Status.WAITING
    pieces: List[Optional[Piece]] = field(default_factory=list)
    turn: Optional[str] = None
    initial: Optional[str] = None
    phase: Phase = field(default_factory=SelectPiece)
    dice: Optional[Dice] = None
    must_pass: Optional[str] = None
    winner: Optional[str] = None
    moves: List[dict] = field(default_factory=list)
    created_at: float = field(default_factory=time.time)

    @property
    def cells(self) -> int:
        return 4 * self.size

    @property
    def step(self) -> Step:
        return self.phase.step

    @property
    def selected(self) -> List[int]:
        return self.phase.selected

    @property
    def pending_move(self) -> Optional[Move]:
        return self.phase.move if isinstance(self.phase, ChooseCapture) else None

    def color_of(self, nick: str) -> Optional[str]:
        return self.players.get(nick)

    def opponent_of(self, nick: str) -> Optional[str]:
        for other in self.players:
            if other != nick:
                return other
        return None

    def to_dict(self):
        pending = self.pending_move
        return {
            'id': self.id,
            'group': self.group,
            'size': self.size,
            'players': dict(self.players),
            'status': self.status.value,
            'pieces': [p.to_dict() if p else None for p in self.pieces],
            'turn': self.turn,
            'initial': self.initial,
            'step': self.step.value,
            'selected': self.selected,
            'pendingMove': pending.to_dict() if pending else None,
            'dice': self.dice.to_dict() if self.dice else None,
            'mustPass': self.must_pass,
            'winner': self.winner,
            'moves': list(self.moves),
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, data):
        step = Step(data.get('step') or Step.FROM.value)
        selected = data.get('selected') or []
        if step == Step.TAKE and data.get('pendingMove'):
            phase = ChooseCapture(Move.from_dict(data['pendingMove']))
        elif step == Step.TO and selected:
            phase = SelectTarget(selected[0])
        else:
            phase = SelectPiece()
        return cls(
            id=data['id'],
            group=data['group'],
            size=data['size'],
            players=dict(data.get('players') or {}),
            status=Status(data['status']),
            pieces=[Piece.from_dict(p) if p else None for p in data.get('pieces') or []],
            turn=data.get('turn'),
            initial=data.get('initial'),
            phase=phase,
            dice=Dice.from_dict(data['dice']) if data.get('dice') else None,
            must_pass=data.get('mustPass'),
            winner=data.get('winner'),
            moves=list(data.get('moves') or []),
            created_at=data.get('createdAt') or time.time(),
        )


def update_payload(game: Game) -> dict:
    """State pushed to clients after every change; empty fields are left out."""
    payload = {'status': game.status.value}
    if game.pieces:
        payload['pieces'] = [p.to_dict() if p else None for p in game.pieces]
    if game.initial:
        payload['initial'] = game.initial
    if game.status == Status.PLAYING:
        payload['step'] = game.step.value
    if game.turn:
        payload['turn'] = game.turn
    if game.players:
        payload['players'] = dict(game.players)
    if game.dice:
        payload['dice'] = game.dice.to_dict()
    if game.selected:
        payload['selected'] = game.selected
    if game.winner is not None:
        payload['winner'] = game.winner
    if game.must_pass is not None:
        payload['mustPass'] = game.must_pass
    return payload

"""Tâb session state machine.

A game goes waiting -> playing -> finished. Every public operation checks the
caller's credentials, loads the game record, validates the request against
the move engine, saves the record and re-arms the game's timers. Handlers and
timer callbacks run one at a time under the timeout manager's lock.
"""
import logging
import random
import time
from typing import Callable, List, Optional

from tabgame.auth import generate_game_id
from tabgame.errors import (
    AlreadyRolled,
    CannotPass,
    GameNotFound,
    GameNotInProgress,
    InvalidCell,
    InvalidCredentials,
    InvalidSize,
    MustRollFirst,
    NotInGame,
    NotYourTurn,
    RepeatRollPending,
)

from . import board, dice, ranking
from .state import BLUE, RED, Game, SelectPiece, Status, update_payload

# Stands in for the password when a timer forces a player out
FORCED = object()


def is_valid_size(size) -> bool:
    return isinstance(size, int) and not isinstance(size, bool) and size >= 3 and size % 2 == 1


class TabEngine:
    def __init__(
        self,
        store,
        credentials,
        timers,
        waiting_timeout: float = 300,
        turn_timeout: float = 120,
        ranking_limit: int = 10,
        two_click: bool = False,
        rng=None,
        logger=None,
    ):
        self.store = store
        self.credentials = credentials
        self.timers = timers
        self.waiting_timeout = waiting_timeout
        self.turn_timeout = turn_timeout
        self.ranking_limit = ranking_limit
        self.two_click = two_click
        self.logger = logger or logging.getLogger(__name__)
        self.rng = rng or random
        self._lock = timers.lock
        self._listeners: List[Callable[[str, Optional[dict]], None]] = []

    def add_listener(self, listener: Callable[[str, Optional[dict]], None]) -> None:
        """Call ``listener(game_id, payload)`` after every change; payload is None when the game is gone."""
        self._listeners.append(listener)

    # ---- lifecycle

    def resume_timers(self) -> None:
        """Re-arm timers for games loaded from the store."""
        with self._lock:
            for game_id, record in self.store.all('games').items():
                if record['status'] == Status.WAITING.value:
                    self.timers.arm_waiting(game_id, self.waiting_timeout, self._waiting_expired)
                elif record['status'] == Status.PLAYING.value:
                    self.timers.arm_turn(game_id, self.turn_timeout, self._turn_expired)

    def reset(self) -> None:
        with self._lock:
            self.timers.cancel_all()
            self.store.reset()

    def close(self) -> None:
        with self._lock:
            self.timers.cancel_all()
            self.store.close()

    # ---- accounts

    def register(self, nick: str, password: str) -> dict:
        """Create the account, or log in when the nick exists with the same password."""
        with self._lock:
            now = time.time()
            user = self.store.get('users', nick)
            if user is None:
                user = {
                    'nick': nick,
                    'passwordHash': self.credentials.hash_password(password),
                    'createdAt': now,
                    'lastLogin': now,
                    'gamesPlayed': 0,
                    'victories': 0,
                }
                self.logger.info(f"[register] nick={nick}")
            elif not self.credentials.verify_password(password, user.get('passwordHash')):
                raise InvalidCredentials()
            else:
                user['lastLogin'] = now
            self.store.set('users', nick, user)
            return {}

    # ---- matchmaking

    def join(self, nick: str, password, size: int, group: int) -> dict:
        with self._lock:
            self._authenticate(nick, password)
            if not is_valid_size(size):
                raise InvalidSize(f"Invalid size '{size}' - must be an odd number of at least 3")

            own_game = None
            waiting = None
            for game_id, record in self.store.all('games').items():
                if record['status'] != Status.WAITING.value:
                    continue
                if record['group'] != group or record['size'] != size:
                    continue
                if nick in record['players']:
                    own_game = game_id
                elif waiting is None and len(record['players']) == 1:
                    waiting = record
            if own_game:
                return {'game': own_game}

            if waiting is not None:
                game = Game.from_dict(waiting)
                opponent = next(iter(game.players))
                game.players = {opponent: BLUE, nick: RED}
                board.init_board(game)
                game.status = Status.PLAYING
                game.turn = game.initial = opponent
                game.phase = SelectPiece()
                game.dice = None
                game.must_pass = None
                self._save(game)
                self.timers.disarm_waiting(game.id)
                self._arm_turn(game)
                self.logger.info(f"[pair] game={game.id} blue={opponent} red={nick} size={size} group={group}")
                return {'game': game.id}

            game_id = generate_game_id({'nick': nick, 'size': size, 'group': group})
            while self.store.get('games', game_id) is not None:
                game_id = generate_game_id({'nick': nick, 'size': size, 'group': group})
            game = Game(id=game_id, group=group, size=size, players={nick: None})
            self._save(game)
            self.timers.arm_waiting(game.id, self.waiting_timeout, self._waiting_expired)
            self.logger.info(f"[join] game={game.id} nick={nick} waiting size={size} group={group}")
            return {'game': game.id}

    def leave(self, nick: str, password, game_id: str) -> dict:
        with self._lock:
            self._authenticate(nick, password)
            game = self._load(game_id)
            if nick not in game.players:
                raise NotInGame()

            if game.status == Status.WAITING:
                del game.players[nick]
                if game.players:
                    self._save(game)
                else:
                    self.store.delete('games', game_id)
                    self.timers.disarm_all(game_id)
                    self._publish(game_id, None)
                self.logger.info(f"[leave] game={game_id} nick={nick} status=waiting")
            elif game.status == Status.PLAYING:
                self.logger.info(f"[leave] game={game_id} nick={nick} status=playing forfeit")
                self._finish(game, game.opponent_of(nick), nick)
            return {}

    # ---- turn cycle

    def roll(self, nick: str, password, game_id: str) -> dict:
        with self._lock:
            game = self._active_game(nick, password, game_id)
            if game.dice is not None:
                if game.dice.keep_playing:
                    raise RepeatRollPending()
                raise AlreadyRolled()

            result = dice.roll(self.rng)
            game.dice = result
            game.phase = SelectPiece()
            game.must_pass = None
            if not board.possible_moves(game, nick, result.value):
                if result.keep_playing:
                    game.must_pass = nick
                else:
                    board.next_turn(game)
            self.logger.info(
                f"[roll] game={game_id} nick={nick} value={result.value} "
                f"keep_playing={result.keep_playing} turn={game.turn}"
            )
            self._save(game)
            self._arm_turn(game)
            return {'dice': result.to_dict(), 'turn': game.turn, 'mustPass': game.must_pass}

    def pass_turn(self, nick: str, password, game_id: str) -> dict:
        with self._lock:
            game = self._active_game(nick, password, game_id)
            if game.dice is None:
                raise MustRollFirst()
            if game.must_pass != nick and board.possible_moves(game, nick, game.dice.value):
                raise CannotPass()
            board.next_turn(game)
            self.logger.info(f"[pass] game={game_id} nick={nick} turn={game.turn}")
            self._save(game)
            self._arm_turn(game)
            return {'turn': game.turn}

    def notify(self, nick: str, password, game_id: str, cell) -> dict:
        with self._lock:
            game = self._active_game(nick, password, game_id)
            if isinstance(cell, bool) or not isinstance(cell, int):
                raise InvalidCell('cell is not an integer')
            if cell < 0:
                raise InvalidCell('cell is negative')
            if cell >= game.cells:
                raise InvalidCell(f"cell {cell} is out of the board")
            if game.dice is None:
                raise MustRollFirst()

            move = board.select_cell(game, nick, cell, two_click=self.two_click)
            if move is None:
                self.logger.info(f"[select] game={game_id} nick={nick} cell={cell} step={game.step.value}")
            else:
                self.logger.info(f"[move] game={game_id} nick={nick} from={move.origin} to={move.target}")
                opponent = game.opponent_of(nick)
                if board.has_player_won(game, nick) or not board.owned_cells(game, opponent):
                    self._finish(game, nick, opponent)
                    return update_payload(game)
                board.complete_move(game)
            self._save(game)
            self._arm_turn(game)
            return update_payload(game)

    # ---- queries

    def get_game(self, game_id: str) -> Optional[dict]:
        return self.store.get('games', game_id)

    def get_ranking(self, group: int, size: int) -> List[dict]:
        if not is_valid_size(size):
            raise InvalidSize(f"Invalid size '{size}' - must be an odd number of at least 3")
        return ranking.top_ranking(self.store, group, size, self.ranking_limit)

    # ---- internals

    def _authenticate(self, nick: str, password) -> None:
        user = self.store.get('users', nick)
        if user is None:
            raise InvalidCredentials(f"Unknown user '{nick}'")
        if password is FORCED:
            return
        if not self.credentials.verify_password(password, user.get('passwordHash')):
            raise InvalidCredentials()

    def _load(self, game_id: str) -> Game:
        record = self.store.get('games', game_id) if game_id else None
        if record is None:
            raise GameNotFound()
        return Game.from_dict(record)

    def _active_game(self, nick: str, password, game_id: str) -> Game:
        self._authenticate(nick, password)
        game = self._load(game_id)
        if nick not in game.players:
            raise NotInGame()
        if game.status != Status.PLAYING:
            raise GameNotInProgress()
        if game.turn != nick:
            raise NotYourTurn()
        return game

    def _finish(self, game: Game, winner: str, loser: Optional[str]) -> None:
        """Commit the finished game record, then count the result."""
        game.status = Status.FINISHED
        game.winner = winner
        game.dice = None
        game.phase = SelectPiece()
        game.must_pass = None
        self.store.set('games', game.id, game.to_dict())
        self.timers.disarm_all(game.id)
        ranking.record_result(self.store, game, winner, loser)
        self._publish(game.id, update_payload(game))
        self.logger.info(f"[finish] game={game.id} winner={winner} loser={loser}")

    def _save(self, game: Game) -> None:
        self.store.set('games', game.id, game.to_dict())
        self._publish(game.id, update_payload(game))

    def _publish(self, game_id: str, payload: Optional[dict]) -> None:
        for listener in self._listeners:
            try:
                listener(game_id, payload)
            except Exception:
                self.logger.exception(f"[publish-error] game={game_id}")

    def _arm_turn(self, game: Game) -> None:
        self.timers.arm_turn(game.id, self.turn_timeout, self._turn_expired)

    def _waiting_expired(self, game_id: str) -> None:
        with self._lock:
            record = self.store.get('games', game_id)
            if record is None or record['status'] != Status.WAITING.value:
                self.logger.info(f"[timer-abort] game={game_id} no longer waiting")
                return
            self.store.delete('games', game_id)
            self._publish(game_id, None)
            self.logger.info(f"[expire] game={game_id} no opponent found")

    def _turn_expired(self, game_id: str) -> None:
        with self._lock:
            record = self.store.get('games', game_id)
            if record is None or record['status'] != Status.PLAYING.value:
                self.logger.info(f"[timer-abort] game={game_id} no longer playing")
                return
            nick = record['turn']
            self.logger.info(f"[timeout] game={game_id} nick={nick} forfeits")
            try:
                self.leave(nick, FORCED, game_id)
            except InvalidCredentials:
                self.logger.warning(f"[timeout] game={game_id} nick={nick} has no account, leave skipped")
            except Exception:
                self.logger.exception(f"[timeout-error] game={game_id} nick={nick}")
                raise

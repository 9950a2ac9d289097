"""Move engine for the Tâb board.

The board is a closed loop of ``4 * size`` cells made of four rows. Blue
starts on the first row and moves forward around the loop, Red starts on the
last row and moves backward. A piece's final band is the row its opponent
starts on.
"""
import time
from typing import List, Optional

from tabgame.errors import IllegalMove, InvalidCaptureChoice, NoPieceAtPosition

from .state import BLUE, RED, ChooseCapture, Game, Move, Piece, SelectPiece, SelectTarget

DIRECTIONS = {BLUE: 1, RED: -1}


def init_board(game: Game) -> None:
    """Place ``size`` Blue pieces on row 0 and ``size`` Red pieces on the last row."""
    size = game.size
    blue = next(nick for nick, color in game.players.items() if color == BLUE)
    red = next(nick for nick, color in game.players.items() if color == RED)
    pieces: List[Optional[Piece]] = [None] * game.cells
    for i in range(size):
        pieces[i] = Piece(color=BLUE, owner=blue)
        pieces[game.cells - size + i] = Piece(color=RED, owner=red)
    game.pieces = pieces


def final_band(color: str, size: int) -> range:
    if color == BLUE:
        return range(3 * size, 4 * size)
    return range(0, size)


def target_of(game: Game, origin: int, value: int, color: str) -> int:
    return (origin + DIRECTIONS[color] * value) % game.cells


def owned_cells(game: Game, player: str) -> List[int]:
    return [i for i, piece in enumerate(game.pieces) if piece and piece.owner == player]


def captures_on_path(game: Game, origin: int, target: int, player: str) -> List[int]:
    """Opponent pieces passed over or landed on, walking from ``origin`` (exclusive)
    to ``target`` (inclusive) in the player's direction."""
    color = game.color_of(player)
    step = DIRECTIONS[color]
    captures = []
    visited = set()
    cell = origin
    while cell != target:
        cell = (cell + step) % game.cells
        if cell in visited:
            break
        visited.add(cell)
        piece = game.pieces[cell]
        if piece and piece.owner != player:
            captures.append(cell)
    return captures


def validate_move(game: Game, origin: int, target: int, player: str) -> Move:
    piece = game.pieces[origin]
    if piece is None or piece.owner != player:
        raise NoPieceAtPosition()
    occupant = game.pieces[target]
    if occupant and occupant.owner == player:
        raise IllegalMove('Cannot land on your own piece')
    return Move(origin, target, tuple(captures_on_path(game, origin, target, player)))


def possible_moves(game: Game, player: str, value: int) -> List[Move]:
    color = game.color_of(player)
    moves = []
    for origin in owned_cells(game, player):
        target = target_of(game, origin, value, color)
        occupant = game.pieces[target]
        if occupant and occupant.owner == player:
            continue
        moves.append(validate_move(game, origin, target, player))
    return moves


def execute_move(game: Game, move: Move, player: str, capture: Optional[int] = None) -> List[int]:
    """Move the piece, removing the chosen capture and whatever sat on the landing cell.

    Appends the move to the game log and returns the cells whose pieces were removed.
    """
    piece = game.pieces[move.origin]
    removed = []
    if capture is not None and game.pieces[capture]:
        game.pieces[capture] = None
        removed.append(capture)
    occupant = game.pieces[move.target]
    if occupant and occupant.owner != player:
        removed.append(move.target)
    game.pieces[move.origin] = None
    piece.in_motion = True
    if move.target in final_band(piece.color, game.size):
        piece.reached_last_row = True
    game.pieces[move.target] = piece
    game.moves.append({
        'player': player,
        'from': move.origin,
        'to': move.target,
        'captured': removed,
        'dice': game.dice.value if game.dice else None,
        'timestamp': time.time(),
    })
    return removed


def has_player_won(game: Game, player: str) -> bool:
    cells = owned_cells(game, player)
    if not cells:
        return False
    for cell in cells:
        piece = game.pieces[cell]
        if cell not in final_band(piece.color, game.size) or not piece.reached_last_row:
            return False
    return True


def next_turn(game: Game) -> None:
    game.turn = game.opponent_of(game.turn)
    game.dice = None
    game.phase = SelectPiece()
    game.must_pass = None


def complete_move(game: Game) -> None:
    """Spend the dice: a repeat roll keeps the turn, anything else passes it."""
    if game.dice and game.dice.keep_playing:
        game.dice = None
        game.phase = SelectPiece()
        game.must_pass = None
    else:
        next_turn(game)


def select_cell(game: Game, player: str, cell: int, two_click: bool = False) -> Optional[Move]:
    """Apply one click of the current player.

    Returns the executed move, or None when the click only advanced the
    selection (destination or capture still to be chosen).
    """
    phase = game.phase
    value = game.dice.value

    if isinstance(phase, ChooseCapture):
        move = phase.move
        if cell not in move.captures:
            raise InvalidCaptureChoice()
        execute_move(game, move, player, capture=cell)
        game.phase = SelectPiece()
        return move

    if isinstance(phase, SelectTarget):
        if cell == phase.origin:
            game.phase = SelectPiece()
            return None
        occupant = game.pieces[cell]
        if occupant and occupant.owner == player:
            raise IllegalMove('Cannot land on your own piece')
        move = next(
            (m for m in possible_moves(game, player, value) if m.origin == phase.origin and m.target == cell),
            None,
        )
        if move is None:
            raise IllegalMove()
        return _resolve(game, move, player)

    move = validate_move(game, cell, target_of(game, cell, value, game.color_of(player)), player)
    if two_click:
        game.phase = SelectTarget(cell)
        return None
    return _resolve(game, move, player)


def _resolve(game: Game, move: Move, player: str) -> Optional[Move]:
    if move.captures:
        game.phase = ChooseCapture(move)
        return None
    execute_move(game, move, player)
    game.phase = SelectPiece()
    return move

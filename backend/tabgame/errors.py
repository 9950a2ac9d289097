"""Typed errors raised by the game core.

Every error carries the message returned to the client and the HTTP status
the transport layer should use for it.
"""


class GameError(Exception):
    status_code = 400
    message = 'Invalid request'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {'error': self.message}


class InvalidRequest(GameError):
    message = 'Invalid request'


class InvalidCredentials(GameError):
    status_code = 401
    message = 'User registered with a different password'


class GameNotFound(GameError):
    status_code = 404
    message = 'Invalid game reference'


class NotInGame(GameError):
    message = 'Player is not part of this game'


class GameNotInProgress(GameError):
    message = 'Game not in progress'


class NotYourTurn(GameError):
    message = 'Not your turn to play'


class InvalidSize(GameError):
    message = 'Invalid size - must be an odd number of at least 3'


class InvalidCell(GameError):
    message = 'Invalid cell'


class MustRollFirst(GameError):
    message = 'You must roll the dice first'


class AlreadyRolled(GameError):
    message = 'You already rolled the dice'


class RepeatRollPending(GameError):
    message = 'Repeat roll pending - move or pass before rolling again'


class NoPieceAtPosition(GameError):
    message = 'No piece of yours at that position'


class IllegalMove(GameError):
    message = 'Invalid move'


class InvalidCaptureChoice(GameError):
    message = 'Choose one of the pieces that can be captured'


class CannotPass(GameError):
    message = 'You have valid moves, cannot pass'

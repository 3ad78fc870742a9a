"""Request-level errors raised by the match registry.

Each error carries a stable ``code`` for clients and a human readable
``message``. The socket gateway reports them to the requesting connection
only; they never affect other matches.
"""


class MatchError(Exception):
    code = 'match_error'
    default_message = 'Request could not be processed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'code': self.code, 'message': self.message}


class NotFound(MatchError):
    code = 'not_found'
    default_message = 'Match not found'


class AlreadyFull(MatchError):
    code = 'already_full'
    default_message = 'Match is full'


class AlreadyJoined(MatchError):
    code = 'already_joined'
    default_message = 'You are already in this match'


class NotAParticipant(MatchError):
    code = 'not_a_participant'
    default_message = 'You are not a participant in this match'


class OutOfTurn(MatchError):
    code = 'out_of_turn'
    default_message = 'It is not your turn'


class CellOccupied(MatchError):
    code = 'cell_occupied'
    default_message = 'That cell is already taken'


class InvalidCell(MatchError):
    code = 'invalid_cell'
    default_message = 'Cell index must be between 0 and 8'


class NotPlayable(MatchError):
    code = 'not_playable'
    default_message = 'Match has not started or is already finished'


class CapacityOrNamingError(MatchError):
    code = 'capacity_or_naming'
    default_message = 'Could not allocate a match identifier'

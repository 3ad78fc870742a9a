import threading
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

MARK_X = 'X'
MARK_O = 'O'
DRAW = 'draw'

STATUS_WAITING = 'waiting'
STATUS_PLAYING = 'playing'
STATUS_FINISHED = 'finished'

BOARD_SIZE = 9


def other_mark(mark: str) -> str:
    return MARK_O if mark == MARK_X else MARK_X


def empty_board() -> List[Optional[str]]:
    return [None] * BOARD_SIZE


@dataclass
class Match:
    id: str
    board: List[Optional[str]] = field(default_factory=empty_board)
    participants: Dict[str, str] = field(default_factory=dict)  # connection id -> mark
    current_mark: str = MARK_X
    status: str = STATUS_WAITING  # waiting, playing, finished
    winner: Optional[str] = None  # None, a mark, or 'draw'
    # Only live records in the registry carry a lock; snapshots have none
    lock: Optional[threading.Lock] = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def room(self) -> str:
        return f"match:{self.id}"

    @property
    def is_joinable(self) -> bool:
        return self.status == STATUS_WAITING and len(self.participants) < 2

    def snapshot(self) -> 'Match':
        """Copy of the match that is safe to read after the lock is released."""
        return replace(
            self,
            board=list(self.board),
            participants=dict(self.participants),
            lock=None,
        )

    def to_dict(self, display_names: Optional[Dict[str, str]] = None):
        names = display_names or {}
        return {
            'match_id': self.id,
            'board': list(self.board),
            'current_mark': self.current_mark,
            'status': self.status,
            'winner': self.winner,
            'participants': {cid: names.get(cid, cid) for cid in self.participants},
            'marks': dict(self.participants),
        }


@dataclass
class Participant:
    connection_id: str
    display_name: str
    active_match_id: Optional[str] = None
    mark: Optional[str] = None

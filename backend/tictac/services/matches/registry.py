import logging
import random
import string
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from tictac.models import (
    DRAW,
    MARK_O,
    MARK_X,
    STATUS_FINISHED,
    STATUS_PLAYING,
    STATUS_WAITING,
    BOARD_SIZE,
    Match,
    other_mark,
)
from .errors import (
    AlreadyFull,
    AlreadyJoined,
    CapacityOrNamingError,
    CellOccupied,
    InvalidCell,
    NotAParticipant,
    NotFound,
    NotPlayable,
    OutOfTurn,
)
from .evaluator import evaluate, is_full

logger = logging.getLogger(__name__)

MATCH_ID_ALPHABET = string.ascii_uppercase + string.digits


class MatchRegistry:
    """In-memory table of matches and their state machine.

    The table is guarded by one lock and every match carries its own lock, so
    moves on one match never wait on another match. Lock order is always
    match lock first, table lock second.

    Every public method returns a snapshot of the match, never the live record.
    """

    def __init__(self, id_length: int = 6, max_attempts: int = 20, rng: Optional[random.Random] = None):
        self._id_length = id_length
        self._max_attempts = max_attempts
        self._rng = rng or random.Random()
        self._matches: Dict[str, Match] = {}
        self._lock = threading.Lock()

    def _generate_id(self) -> str:
        return ''.join(self._rng.choices(MATCH_ID_ALPHABET, k=self._id_length))

    @contextmanager
    def _locked(self, match_id: str) -> Iterator[Optional[Match]]:
        with self._lock:
            match = self._matches.get(match_id)
        if match is None:
            yield None
            return
        with match.lock:
            # The match may have been destroyed while we waited for its lock
            with self._lock:
                alive = self._matches.get(match_id) is match
            yield match if alive else None

    def create_match(self, creator_id: str) -> Match:
        with self._lock:
            for _ in range(self._max_attempts):
                candidate = self._generate_id()
                if candidate not in self._matches:
                    break
            else:
                logger.warning(f"[create] no free match id after {self._max_attempts} attempts")
                raise CapacityOrNamingError()
            match = Match(id=candidate, participants={creator_id: MARK_X})
            self._matches[candidate] = match
            logger.info(f"[create] match={candidate} creator={creator_id}")
            return match.snapshot()

    def join_match(self, match_id: str, joiner_id: str) -> Match:
        with self._locked(match_id) as match:
            if match is None:
                raise NotFound()
            if len(match.participants) >= 2:
                raise AlreadyFull()
            if joiner_id in match.participants:
                raise AlreadyJoined()
            if match.status != STATUS_WAITING:
                raise NotPlayable('Match is no longer accepting participants')
            match.participants[joiner_id] = MARK_O
            match.status = STATUS_PLAYING
            logger.info(f"[join] match={match_id} joiner={joiner_id}")
            return match.snapshot()

    def apply_move(self, match_id: str, acting_id: str, cell_index) -> Match:
        with self._locked(match_id) as match:
            if match is None or match.status != STATUS_PLAYING:
                raise NotPlayable()
            mark = match.participants.get(acting_id)
            if mark is None:
                raise NotAParticipant()
            if mark != match.current_mark:
                raise OutOfTurn()
            if isinstance(cell_index, bool) or not isinstance(cell_index, int) or not 0 <= cell_index < BOARD_SIZE:
                raise InvalidCell()
            if match.board[cell_index] is not None:
                raise CellOccupied()

            match.board[cell_index] = mark
            winner = evaluate(match.board)
            if winner:
                match.winner = winner
                match.status = STATUS_FINISHED
            elif is_full(match.board):
                match.winner = DRAW
                match.status = STATUS_FINISHED
            else:
                match.current_mark = other_mark(match.current_mark)

            logger.info(f"[move] match={match_id} mark={mark} cell={cell_index}")
            if match.status == STATUS_FINISHED:
                logger.info(f"[finish] match={match_id} winner={match.winner}")
            return match.snapshot()

    def leave_match(self, match_id: str, leaving_id: str) -> Optional[Match]:
        """Remove a participant; returns None when there was nothing to do.

        The returned snapshot lists the participants that remain. A match left
        with nobody in it is destroyed.
        """
        with self._locked(match_id) as match:
            if match is None or leaving_id not in match.participants:
                return None
            match.status = STATUS_FINISHED
            del match.participants[leaving_id]
            if not match.participants:
                with self._lock:
                    self._matches.pop(match_id, None)
                logger.info(f"[leave] match={match_id} destroyed")
            else:
                logger.info(f"[leave] match={match_id} participant={leaving_id}")
            return match.snapshot()

    def list_joinable(self) -> List[str]:
        with self._lock:
            return [match_id for match_id, match in self._matches.items() if match.is_joinable]

    def get(self, match_id: str) -> Optional[Match]:
        with self._locked(match_id) as match:
            return match.snapshot() if match is not None else None

    def count(self) -> int:
        with self._lock:
            return len(self._matches)

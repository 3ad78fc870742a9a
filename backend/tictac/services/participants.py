import threading
from dataclasses import replace
from typing import Dict, Iterable, Optional

from tictac.models import Participant


def default_name(connection_id: str) -> str:
    return f"Player_{connection_id[:4]}"


class ParticipantDirectory:
    """Live connections keyed by connection id, with their name and match seat.

    Records are only changed under the directory lock; callers get copies.
    """

    def __init__(self, name_max_length: int = 32):
        self._name_max_length = name_max_length
        self._participants: Dict[str, Participant] = {}
        self._lock = threading.Lock()

    def _clean_name(self, connection_id: str, name) -> str:
        name = name.strip() if isinstance(name, str) else ''
        if not name:
            return default_name(connection_id)
        return name[:self._name_max_length]

    def identify(self, connection_id: str, name) -> Participant:
        """Create or rename a participant, keeping any match association."""
        display_name = self._clean_name(connection_id, name)
        with self._lock:
            participant = self._participants.get(connection_id)
            if participant is None:
                participant = Participant(connection_id=connection_id, display_name=display_name)
                self._participants[connection_id] = participant
            else:
                participant.display_name = display_name
            return replace(participant)

    def ensure(self, connection_id: str) -> Participant:
        with self._lock:
            participant = self._participants.get(connection_id)
            if participant is None:
                participant = Participant(connection_id=connection_id, display_name=default_name(connection_id))
                self._participants[connection_id] = participant
            return replace(participant)

    def assign(self, connection_id: str, match_id: str, mark: str) -> None:
        with self._lock:
            participant = self._participants.get(connection_id)
            if participant is not None:
                participant.active_match_id = match_id
                participant.mark = mark

    def release(self, connection_id: str, match_id: Optional[str] = None) -> None:
        """Clear the match seat, only if it is still match_id when one is given."""
        with self._lock:
            participant = self._participants.get(connection_id)
            if participant is not None and match_id in (None, participant.active_match_id):
                participant.active_match_id = None
                participant.mark = None

    def forget(self, connection_id: str) -> Optional[Participant]:
        with self._lock:
            return self._participants.pop(connection_id, None)

    def lookup(self, connection_id: str) -> Optional[Participant]:
        with self._lock:
            participant = self._participants.get(connection_id)
            return replace(participant) if participant is not None else None

    def name_of(self, connection_id: str) -> str:
        participant = self.lookup(connection_id)
        return participant.display_name if participant else default_name(connection_id)

    def names_for(self, connection_ids: Iterable[str]) -> Dict[str, str]:
        return {cid: self.name_of(cid) for cid in connection_ids}

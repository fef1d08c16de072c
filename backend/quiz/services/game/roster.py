from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Set


@dataclass
class Participant:
    identity: str
    sid: Optional[str]
    score: float = 0.0
    answer: Optional[str] = None
    answer_time: Optional[float] = None
    is_connected: bool = True

    def clear_answer(self) -> None:
        self.answer = None
        self.answer_time = None

    def to_dict(self):
        return {
            'name': self.identity,
            'score': self.score,
            'answer': self.answer,
            'answerTime': self.answer_time,
            'isConnected': self.is_connected,
        }


class Roster:
    """Who is in the room and which connection currently reaches them.

    Players are keyed by identity so a reconnect lands on the same entry;
    a second map from connection id to identity makes disconnect handling
    a lookup instead of a scan. Unknown identities and connections are
    ignored everywhere.
    """

    def __init__(self):
        self._players: Dict[str, Participant] = {}
        self._sid_to_identity: Dict[str, str] = {}
        self._admin_sids: Set[str] = set()
        self._player_sids: Set[str] = set()

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[Participant]:
        return iter(list(self._players.values()))

    def get(self, identity: Optional[str]) -> Optional[Participant]:
        if identity is None:
            return None
        return self._players.get(identity)

    def identity_for(self, sid: str) -> Optional[str]:
        return self._sid_to_identity.get(sid)

    def is_admin(self, sid: str) -> bool:
        return sid in self._admin_sids

    def is_player_connection(self, sid: str) -> bool:
        return sid in self._player_sids

    def join_as_admin(self, sid: str) -> None:
        self._admin_sids.add(sid)

    def join_as_player(self, identity: str, sid: str) -> Participant:
        player = self._players.get(identity)
        if player is None:
            player = Participant(identity=identity, sid=sid)
            self._players[identity] = player
        else:
            # Reconnect: score and current answer survive, only the route changes
            if player.sid and self._sid_to_identity.get(player.sid) == identity:
                self._sid_to_identity.pop(player.sid, None)
                self._player_sids.discard(player.sid)
            player.sid = sid
            player.is_connected = True
        self._sid_to_identity[sid] = identity
        self._player_sids.add(sid)
        return player

    def rejoin_waiting(self, sid: str) -> None:
        self._player_sids.add(sid)

    def record_answer(self, identity: str, answer: str, at: float, started_at: float) -> bool:
        """Store the first answer of this question; later ones are dropped."""
        player = self._players.get(identity)
        if player is None or player.answer is not None:
            return False
        player.answer = answer
        player.answer_time = round(at - started_at, 2)
        return True

    def mark_disconnected(self, sid: str) -> Optional[Participant]:
        self._admin_sids.discard(sid)
        self._player_sids.discard(sid)
        identity = self._sid_to_identity.pop(sid, None)
        if identity is None:
            return None
        player = self._players.get(identity)
        if player is None or player.sid != sid:
            return None
        player.is_connected = False
        return player

    def all_answered(self) -> bool:
        if not self._players:
            return False
        return all(p.answer is not None for p in self._players.values())

    def clear_answers(self) -> None:
        for player in self._players.values():
            player.clear_answer()

    def names(self, connected_only: bool = False) -> List[str]:
        return [
            p.identity for p in self._players.values()
            if p.is_connected or not connected_only
        ]

    def reset_all(self) -> None:
        self._players.clear()
        self._sid_to_identity.clear()
        self._admin_sids.clear()
        self._player_sids.clear()

"""Socket.IO events, grouped by who may receive them.

Each event class belongs to exactly one audience family and the router only
accepts the matching family on each channel, so an admin-only payload
cannot go out on the player channel by mistake.
"""
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, List


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


@dataclass
class Event:
    name: ClassVar[str] = ''

    @property
    def event_name(self) -> str:
        return self.name

    def payload(self) -> Dict[str, Any]:
        return {_camel(f.name): getattr(self, f.name) for f in fields(self)}


class RoomEvent(Event):
    """Sent identically to the admin and waiting audiences."""


class BroadcastEvent(Event):
    """Sent to every connection in the room."""


class AdminEvent(Event):
    """Admin audience only."""


class PlayerEvent(Event):
    """One player, resolved by identity at send time."""


class ReplyEvent(Event):
    """Answer to the connection that made the request."""


# -- room --------------------------------------------------------------------

@dataclass
class PlayerJoined(RoomEvent):
    name: ClassVar[str] = 'player-joined'
    player_count: int
    players: List[str]


@dataclass
class PlayerLeft(RoomEvent):
    name: ClassVar[str] = 'player-left'
    player_count: int
    players: List[str]


@dataclass
class GameStarted(RoomEvent):
    name: ClassVar[str] = 'game-started'
    phase: str
    question: int


@dataclass
class TimerUpdate(RoomEvent):
    name: ClassVar[str] = 'timer-update'
    phase: str
    time_left: int


@dataclass
class PhaseChanged(RoomEvent):
    name: ClassVar[str] = 'phase-changed'
    phase: str
    question: int


# -- everyone ----------------------------------------------------------------

@dataclass
class AnswerSubmitted(BroadcastEvent):
    name: ClassVar[str] = 'answer-submitted'
    player_id: str
    player_name: str


@dataclass
class GameReset(BroadcastEvent):
    name: ClassVar[str] = 'game-reset'


@dataclass
class AdminGameEndedFallback(BroadcastEvent):
    name: ClassVar[str] = 'admin-game-ended-fallback'
    leaderboard: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class PlayerGameEndedFallback(BroadcastEvent):
    name: ClassVar[str] = 'player-game-ended-fallback'
    leaderboard: List[Dict[str, Any]] = field(default_factory=list)


# -- admin -------------------------------------------------------------------

@dataclass
class AdminGameEnded(AdminEvent):
    name: ClassVar[str] = 'admin-game-ended'
    leaderboard: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class ChatbotStarted(AdminEvent):
    name: ClassVar[str] = 'chatbot-started'
    question: str


@dataclass
class ChatbotResponse(AdminEvent):
    name: ClassVar[str] = 'chatbot-response'
    question: str
    response: str


@dataclass
class ChatbotError(AdminEvent):
    name: ClassVar[str] = 'chatbot-error'
    message: str


# -- single player -----------------------------------------------------------

@dataclass
class PlayerGameEnded(PlayerEvent):
    name: ClassVar[str] = 'player-game-ended'
    rank: int
    score: float
    total_players: int


# -- replies -----------------------------------------------------------------

@dataclass
class AdminJoined(ReplyEvent):
    name: ClassVar[str] = 'admin-joined'
    message: str = 'Admin connected'


@dataclass
class LeaderboardUpdate(ReplyEvent):
    name: ClassVar[str] = 'leaderboard-update'
    leaderboard: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class PlayerCountUpdate(ReplyEvent):
    name: ClassVar[str] = 'player-count-update'
    player_count: int
    players: List[str]


@dataclass
class ErrorReply(ReplyEvent):
    """Authorization failure, named after the request that caused it."""
    message: str
    event: str = 'error'

    @property
    def event_name(self) -> str:
        return self.event

    def payload(self) -> Dict[str, Any]:
        return {'message': self.message}


def join_error(message='Invalid or expired token'):
    return ErrorReply(message, 'join-error')


def start_game_error(message='Only admin can start the game'):
    return ErrorReply(message, 'start-game-error')


def reset_game_error(message='Only admin can reset the game'):
    return ErrorReply(message, 'reset-game-error')


def new_game_error(message='Only admin can start a new game'):
    return ErrorReply(message, 'new-game-error')

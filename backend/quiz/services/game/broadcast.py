import logging

from .events import AdminEvent, BroadcastEvent, Event, PlayerEvent, ReplyEvent, RoomEvent
from .roster import Roster

logger = logging.getLogger(__name__)


def _expect(event: Event, kind: type) -> None:
    if not isinstance(event, kind):
        raise TypeError(f"{type(event).__name__} cannot be sent as {kind.__name__}")


class BroadcastRouter:
    """Decides which connections receive which event.

    The room has two standing Socket.IO rooms, admin and waiting, plus an
    "all" room every connection enters on connect. Player unicasts resolve
    identity to the current connection through the roster at send time.
    """

    def __init__(self, socketio, roster: Roster, room_id: str, namespace: str = '/'):
        self.socketio = socketio
        self.roster = roster
        self.namespace = namespace
        self.admin_room = f"{room_id}:admin"
        self.waiting_room = f"{room_id}:waiting-room"
        self.all_room = f"{room_id}:all"

    # -- membership ------------------------------------------------------

    def enter_room(self, sid: str) -> None:
        self.socketio.server.enter_room(sid, self.all_room, namespace=self.namespace)

    def enter_admin(self, sid: str) -> None:
        self.socketio.server.enter_room(sid, self.admin_room, namespace=self.namespace)

    def enter_waiting(self, sid: str) -> None:
        self.socketio.server.enter_room(sid, self.waiting_room, namespace=self.namespace)

    def close_groups(self) -> None:
        self.socketio.close_room(self.admin_room, namespace=self.namespace)
        self.socketio.close_room(self.waiting_room, namespace=self.namespace)

    # -- sends -----------------------------------------------------------

    def _emit(self, event: Event, to: str) -> None:
        self.socketio.emit(event.event_name, event.payload(), to=to, namespace=self.namespace)

    def to_groups(self, event: RoomEvent) -> None:
        _expect(event, RoomEvent)
        self._emit(event, self.admin_room)
        self._emit(event, self.waiting_room)

    def to_admin(self, event: AdminEvent) -> None:
        _expect(event, AdminEvent)
        self._emit(event, self.admin_room)

    def to_admin_connection(self, sid: str, event: AdminEvent) -> bool:
        """Send to one admin connection, checking membership now."""
        _expect(event, AdminEvent)
        if not self.roster.is_admin(sid):
            logger.info(f"[route-skip] {event.event_name} to non-admin sid={sid}")
            return False
        self._emit(event, sid)
        return True

    def to_player(self, identity: str, event: PlayerEvent) -> bool:
        _expect(event, PlayerEvent)
        player = self.roster.get(identity)
        if player is None or not player.is_connected or not player.sid:
            logger.info(f"[route-skip] {event.event_name} to {identity}: no live connection")
            return False
        self._emit(event, player.sid)
        return True

    def to_everyone(self, event: BroadcastEvent) -> None:
        _expect(event, BroadcastEvent)
        self._emit(event, self.all_room)

    def reply(self, sid: str, event: ReplyEvent) -> None:
        _expect(event, ReplyEvent)
        self._emit(event, sid)

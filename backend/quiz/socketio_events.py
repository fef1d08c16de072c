from flask import request

from quiz import socketio
from quiz.services import get_services
from quiz.services.chat import relay_question
from quiz.services.game.events import ErrorReply


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _controller():
    return get_services().controller


def handle_connect(auth=None):
    _controller().connect(_get_sid())


def handle_disconnect(reason=None):
    _controller().leave(_get_sid())


def handle_join_waiting(data):
    data = data or {}
    _controller().join(_get_sid(), data.get('token'), data.get('playerName'))


def handle_rejoin_admin_room(data):
    data = data or {}
    _controller().rejoin_admin(_get_sid(), data.get('token'), data.get('playerName'))


def handle_rejoin_waiting_room(data):
    data = data or {}
    _controller().rejoin_waiting(_get_sid(), data.get('token'), data.get('playerName'))


def handle_start_game(data):
    data = data or {}
    _controller().start_game(_get_sid(), data.get('token'), data.get('playerEmail'))


def handle_submit_answer(data):
    data = data or {}
    _controller().submit_answer(_get_sid(), data.get('playerEmail'), data.get('answer'))


def handle_reset_game(data=None):
    data = data or {}
    _controller().reset_game(_get_sid(), data.get('token'), data.get('playerEmail'))


def handle_new_game(data=None):
    data = data or {}
    _controller().new_game(_get_sid(), data.get('token'), data.get('playerEmail'))


def handle_request_leaderboard(data=None):
    _controller().leaderboard_for(_get_sid())


def handle_request_player_count(data=None):
    _controller().player_count_for(_get_sid())


def handle_chatbot_question(data):
    """Admin-only data chat. Polling runs as a background task, off the game lock."""
    data = data or {}
    sid = _get_sid()
    services = get_services()
    router = services.controller.router
    question = (data.get('question') or '').strip()
    if not services.tokens.is_valid(data.get('token')) or not router.roster.is_admin(sid):
        router.reply(sid, ErrorReply('Only admin can use the data chat', 'chatbot-error'))
        return
    if not question:
        router.reply(sid, ErrorReply('A question is required', 'chatbot-error'))
        return
    services.spawn(relay_question, router, services.chat, sid, question)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the default namespace."""
    socketio.on_event('connect', handle_connect)
    socketio.on_event('disconnect', handle_disconnect)
    socketio.on_event('join-waiting', handle_join_waiting)
    socketio.on_event('rejoin-admin-room', handle_rejoin_admin_room)
    socketio.on_event('rejoin-waiting-room', handle_rejoin_waiting_room)
    socketio.on_event('start-game', handle_start_game)
    socketio.on_event('submit-answer', handle_submit_answer)
    socketio.on_event('reset-game', handle_reset_game)
    socketio.on_event('new-game', handle_new_game)
    socketio.on_event('request-leaderboard', handle_request_leaderboard)
    socketio.on_event('request-player-count', handle_request_player_count)
    socketio.on_event('chatbot-question', handle_chatbot_question)

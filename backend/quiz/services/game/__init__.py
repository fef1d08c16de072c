"""Game session core: tokens, roster, phases, scoring and fan-out.

Nothing in here imports Flask; the app factory wires a ``GameController``
to the Socket.IO server and the adapters in ``quiz.services``.
"""
from .broadcast import BroadcastRouter
from .controller import GameController, GameSession, Phase
from .roster import Participant, Roster
from .tokens import TokenRegistry

__all__ = [
    'BroadcastRouter',
    'GameController',
    'GameSession',
    'Participant',
    'Phase',
    'Roster',
    'TokenRegistry',
]

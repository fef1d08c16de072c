"""Services behind the HTTP and Socket.IO handlers.

``game`` holds the real-time session core; the sibling modules adapt the
external collaborators (employee directory, results table, data chat).
"""
from dataclasses import dataclass
from typing import Callable, Optional

from flask import current_app


@dataclass
class QuizServices:
    tokens: object
    oracle: object
    controller: object
    chat: object
    spawn: Callable


def get_services(app: Optional[object] = None) -> QuizServices:
    return (app or current_app).extensions['quiz']

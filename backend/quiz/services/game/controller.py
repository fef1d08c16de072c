import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from . import events
from .broadcast import BroadcastRouter
from .roster import Roster
from .scoring import LeaderboardEntry, player_standing, score_question
from .timers import Countdown
from .tokens import TokenRegistry

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    WAITING = 'waiting'
    PHOTOS = 'photos'
    QUESTION = 'question'
    LEADERBOARD = 'leaderboard'


@dataclass
class GameSettings:
    admin_identity: str
    game_id: str = 'espresso'
    correct_answer: str = 'echantons'
    photo_seconds: int = 10
    question_seconds: int = 10
    max_score: float = 10.0
    total_questions: int = 1
    run_countdowns: bool = True

    @classmethod
    def from_config(cls, config) -> 'GameSettings':
        return cls(
            admin_identity=config['ADMIN_IDENTITY'],
            game_id=config.get('GAME_ID', 'espresso'),
            correct_answer=config.get('CORRECT_ANSWER', 'echantons'),
            photo_seconds=int(config.get('PHOTO_DURATION_SEC', 10)),
            question_seconds=int(config.get('QUESTION_DURATION_SEC', 10)),
            max_score=float(config.get('MAX_QUESTION_SCORE', 10)),
            total_questions=int(config.get('TOTAL_QUESTIONS', 1)),
            run_countdowns=bool(config.get('RUN_COUNTDOWNS', True)),
        )


@dataclass
class GameSession:
    """State of one room. Only the controller mutates it, under its lock."""
    room_id: str
    photo_seconds: int = 10
    question_seconds: int = 10
    total_questions: int = 1
    roster: Roster = field(default_factory=Roster)
    is_started: bool = False
    phase: Phase = Phase.WAITING
    current_question: int = 0
    photo_time_left: int = 0
    question_time_left: int = 0
    leaderboard: List[LeaderboardEntry] = field(default_factory=list)
    question_started_at: Optional[float] = None
    question_ended_at: Optional[float] = None
    scored_question: Optional[int] = None
    # Bumped on every reset; background work from an older epoch is dropped
    epoch: int = 0

    def __post_init__(self):
        self.photo_time_left = self.photo_seconds
        self.question_time_left = self.question_seconds

    def reset(self) -> None:
        self.is_started = False
        self.phase = Phase.WAITING
        self.current_question = 0
        self.photo_time_left = self.photo_seconds
        self.question_time_left = self.question_seconds
        self.leaderboard = []
        self.question_started_at = None
        self.question_ended_at = None
        self.scored_question = None
        self.roster.reset_all()
        self.epoch += 1

    def to_dict(self):
        return {
            'room': self.room_id,
            'isStarted': self.is_started,
            'phase': self.phase.value,
            'currentQuestion': self.current_question,
            'totalQuestions': self.total_questions,
            'photoTimeLeft': self.photo_time_left,
            'questionTimeLeft': self.question_time_left,
            'playerCount': len(self.roster),
            'players': [p.to_dict() for p in self.roster],
            'leaderboard': [e.to_dict() for e in self.leaderboard],
        }


def run_inline(fn, *args, **kwargs):
    fn(*args, **kwargs)


class GameController:
    """Phase machine for one room: waiting -> photos -> question -> leaderboard.

    Every entry point takes ``self._lock`` so a transition, the broadcasts
    that announce it and an answer landing at the same moment cannot
    interleave. Countdown ticks take the same lock and are dropped when the
    countdown is no longer the current one.
    """

    def __init__(self, session: GameSession, tokens: TokenRegistry, router: BroadcastRouter,
                 settings: GameSettings, results_sink=None,
                 clock: Callable[[], float] = time.time,
                 spawn: Callable = run_inline,
                 sleep: Callable[[float], None] = time.sleep):
        self.session = session
        self.roster = session.roster
        self.tokens = tokens
        self.router = router
        self.settings = settings
        self.results_sink = results_sink
        self.clock = clock
        self.spawn = spawn
        self.sleep = sleep
        self._lock = threading.RLock()
        self._countdown: Optional[Countdown] = None

    # -- helpers ---------------------------------------------------------

    def is_admin(self, token: Optional[str], identity: Optional[str]) -> bool:
        return self.tokens.is_valid(token) and identity == self.settings.admin_identity

    def active_timers(self) -> int:
        return 1 if self._countdown is not None and self._countdown.active else 0

    def snapshot(self):
        with self._lock:
            return self.session.to_dict()

    def _players_payload(self, connected_only=False):
        return len(self.roster), self.roster.names(connected_only=connected_only)

    # -- membership ------------------------------------------------------

    def connect(self, sid: str) -> None:
        self.router.enter_room(sid)

    def join(self, sid: str, token: Optional[str], identity: Optional[str]) -> None:
        with self._lock:
            if not self.tokens.is_valid(token):
                self.router.reply(sid, events.join_error())
                return
            if identity == self.settings.admin_identity:
                self.roster.join_as_admin(sid)
                self.router.enter_admin(sid)
                self.router.reply(sid, events.AdminJoined())
                logger.info(f"[join] admin {identity} sid={sid}")
                return
            name = identity or 'Anonymous'
            self.roster.join_as_player(name, sid)
            self.router.enter_waiting(sid)
            count, names = self._players_payload()
            self.router.to_groups(events.PlayerJoined(count, names))
            logger.info(f"[join] player {name} sid={sid} players={count}")

    def rejoin_admin(self, sid: str, token: Optional[str], identity: Optional[str]) -> None:
        with self._lock:
            if not self.is_admin(token, identity):
                self.router.reply(sid, events.join_error('Only admin can join the admin room'))
                return
            self.roster.join_as_admin(sid)
            self.router.enter_admin(sid)
            logger.info(f"[rejoin] admin {identity} sid={sid}")

    def rejoin_waiting(self, sid: str, token: Optional[str], identity: Optional[str]) -> None:
        with self._lock:
            if not self.tokens.is_valid(token):
                self.router.reply(sid, events.join_error())
                return
            if self.roster.get(identity) is not None:
                self.roster.join_as_player(identity, sid)
                count, names = self._players_payload()
                self.router.to_groups(events.PlayerJoined(count, names))
            else:
                self.roster.rejoin_waiting(sid)
            self.router.enter_waiting(sid)
            logger.info(f"[rejoin] waiting {identity} sid={sid}")

    def leave(self, sid: str) -> None:
        with self._lock:
            player = self.roster.mark_disconnected(sid)
            if player is None:
                return
            count, names = self._players_payload(connected_only=True)
            self.router.to_groups(events.PlayerLeft(count, names))
            logger.info(f"[leave] player {player.identity} sid={sid}")

    def leaderboard_for(self, sid: str) -> None:
        with self._lock:
            board = [e.to_dict() for e in self.session.leaderboard]
        self.router.reply(sid, events.LeaderboardUpdate(board))

    def player_count_for(self, sid: str) -> None:
        with self._lock:
            count, names = self._players_payload()
        self.router.reply(sid, events.PlayerCountUpdate(count, names))

    # -- countdowns ------------------------------------------------------

    def _cancel_countdown(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            logger.info(f"[timer-cancel] {self._countdown!r}")
            self._countdown = None

    def _start_countdown(self, phase: Phase, seconds: int) -> None:
        self._cancel_countdown()
        spawn = self.spawn if self.settings.run_countdowns else None
        self._countdown = Countdown(phase.value, seconds, self._on_tick, spawn=spawn, sleep=self.sleep)
        logger.info(f"[timer-set] room={self.session.room_id} phase={phase.value} duration={seconds}s")
        self._countdown.start()

    def tick(self) -> None:
        """Advance the current countdown by one second."""
        with self._lock:
            if self._countdown is not None:
                self._on_tick(self._countdown)

    def _on_tick(self, countdown: Countdown) -> None:
        with self._lock:
            if countdown is not self._countdown or not countdown.active:
                logger.info(f"[timer-abort] stale {countdown!r}")
                return
            remaining = countdown.step()
            phase = Phase(countdown.phase)
            if phase is Phase.PHOTOS:
                self.session.photo_time_left = remaining
            else:
                self.session.question_time_left = remaining
            self.router.to_groups(events.TimerUpdate(phase.value, remaining))
            if remaining > 0:
                return
            logger.info(f"[timer-fire] room={self.session.room_id} phase={phase.value}")
            if phase is Phase.PHOTOS:
                self._cancel_countdown()
                self._begin_question()
            else:
                self._end_question(self.clock())

    # -- transitions -----------------------------------------------------

    def start_game(self, sid: str, token: Optional[str], identity: Optional[str]) -> bool:
        with self._lock:
            if not self.is_admin(token, identity):
                self.router.reply(sid, events.start_game_error())
                return False
            if self.session.phase is not Phase.WAITING:
                self.router.reply(sid, events.start_game_error('Game already in progress'))
                return False
            s = self.session
            s.is_started = True
            s.phase = Phase.PHOTOS
            s.current_question = 0
            s.photo_time_left = self.settings.photo_seconds
            logger.info(f"[phase] room={s.room_id} waiting -> photos players={len(self.roster)}")
            self.router.to_groups(events.GameStarted(s.phase.value, s.current_question))
            self._start_countdown(Phase.PHOTOS, self.settings.photo_seconds)
            return True

    def _begin_question(self) -> None:
        s = self.session
        s.phase = Phase.QUESTION
        s.question_time_left = self.settings.question_seconds
        s.question_started_at = self.clock()
        s.question_ended_at = None
        self.roster.clear_answers()
        logger.info(f"[phase] room={s.room_id} photos -> question started_at={s.question_started_at}")
        self.router.to_groups(events.PhaseChanged(s.phase.value, s.current_question))
        self._start_countdown(Phase.QUESTION, self.settings.question_seconds)

    def submit_answer(self, sid: str, identity: Optional[str], answer) -> bool:
        with self._lock:
            if self.session.phase is not Phase.QUESTION:
                logger.info(f"[answer-reject] {identity} outside question phase")
                return False
            identity = identity or self.roster.identity_for(sid)
            now = self.clock()
            if answer is None or not self.roster.record_answer(identity, answer, now,
                                                               self.session.question_started_at):
                logger.info(f"[answer-reject] {identity} unknown or already answered")
                return False
            player = self.roster.get(identity)
            logger.info(f"[answer] {identity} answer={answer!r} time={player.answer_time}s")
            self.router.to_everyone(events.AnswerSubmitted(sid, identity))
            if self.roster.all_answered():
                logger.info("[answer] all players answered, ending question early")
                self._end_question(now)
            return True

    def _end_question(self, ended_at: float) -> None:
        s = self.session
        if s.scored_question == s.current_question:
            logger.info(f"[score-skip] question={s.current_question} already scored")
            return
        s.scored_question = s.current_question
        self._cancel_countdown()
        s.question_ended_at = ended_at
        s.phase = Phase.LEADERBOARD

        outcome = score_question(self.roster, self.settings.correct_answer, self.settings.max_score,
                                 s.question_started_at, s.question_ended_at)
        s.leaderboard = outcome.leaderboard
        board = [e.to_dict() for e in outcome.leaderboard]
        logger.info(f"[score] room={s.room_id} question={s.current_question} leaderboard={board}")

        self.router.to_admin(events.AdminGameEnded(board))
        self.router.to_everyone(events.AdminGameEndedFallback(board))
        for player in self.roster:
            if not player.is_connected:
                continue
            standing = player_standing(outcome.leaderboard, player.identity)
            self.router.to_player(player.identity, events.PlayerGameEnded(
                standing['rank'], standing['score'], standing['totalPlayers']))
        self.router.to_everyone(events.PlayerGameEndedFallback(board))

        if self.results_sink is not None:
            self.spawn(self._store_results, s.epoch, outcome.records)

    def _store_results(self, epoch: int, records) -> bool:
        # Holding the lock orders the write against new_game's clear and reset
        with self._lock:
            if epoch != self.session.epoch:
                logger.info(f"[sink-skip] dropping {len(records)} results from epoch {epoch}, "
                            f"room reset since (now {self.session.epoch})")
                return False
            return self.results_sink.append(self.settings.game_id, records)

    def reset_game(self, sid: str, token: Optional[str], identity: Optional[str]) -> bool:
        if not self.is_admin(token, identity):
            self.router.reply(sid, events.reset_game_error())
            return False
        self._reset()
        return True

    def new_game(self, sid: str, token: Optional[str], identity: Optional[str]) -> bool:
        if not self.is_admin(token, identity):
            self.router.reply(sid, events.new_game_error())
            return False
        with self._lock:
            logger.info(f"[new-game] clearing stored results for {self.settings.game_id}")
            if self.results_sink is not None:
                self.results_sink.clear(self.settings.game_id)
            self._reset()
        return True

    def _reset(self) -> None:
        with self._lock:
            self._cancel_countdown()
            self.session.reset()
            self.tokens.revoke_all()
            self.router.to_everyone(events.GameReset())
            self.router.close_groups()
            logger.info(f"[reset] room={self.session.room_id} back to waiting")

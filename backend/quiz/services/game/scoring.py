from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .roster import Participant

TIMEOUT_ANSWER = 'timeout'


@dataclass
class LeaderboardEntry:
    identity: str
    score: float
    answer_time: Optional[float]

    def to_dict(self):
        return {'name': self.identity, 'score': self.score, 'answerTime': self.answer_time}


@dataclass
class ResultRecord:
    identity: str
    answer: str
    answer_time: float
    score: float
    rank: int
    is_correct: bool
    occurred_at: datetime


@dataclass
class QuestionOutcome:
    leaderboard: List[LeaderboardEntry]
    records: List[ResultRecord]


def question_points(answer: Optional[str], latency: Optional[float], correct_answer: str,
                    max_points: float) -> float:
    """Points for one answer: the faster a correct answer, the more it earns."""
    if answer is None or answer != correct_answer or latency is None:
        return 0.0
    return max(0.0, max_points - latency)


def rank_entries(entries: Iterable[LeaderboardEntry]) -> List[LeaderboardEntry]:
    """Order by score, then by answer time where both times are known.

    Entries whose time is missing keep their insertion order among equal
    scores, so the sort is done in two stable passes: time inside each score
    band, restricted to the timed entries of that band.
    """
    ordered = sorted(entries, key=lambda e: -e.score)
    result: List[LeaderboardEntry] = []
    i = 0
    while i < len(ordered):
        j = i
        while j < len(ordered) and ordered[j].score == ordered[i].score:
            j += 1
        band = ordered[i:j]
        timed = sorted((e for e in band if e.answer_time is not None), key=lambda e: e.answer_time)
        slots = iter(timed)
        for entry in band:
            result.append(next(slots) if entry.answer_time is not None else entry)
        i = j
    return result


def score_question(participants: Iterable[Participant], correct_answer: str, max_points: float,
                   started_at: Optional[float], ended_at: Optional[float]) -> QuestionOutcome:
    """Apply one question's points and build the board and the result rows.

    Connected participants are listed even with no points; one who never
    answered is shown with the whole question duration as their time.
    Disconnected participants keep their points but are left off the board.
    """
    players = list(participants)
    full_time = None
    if started_at is not None and ended_at is not None:
        full_time = round(ended_at - started_at, 2)

    correct = {}
    for p in players:
        is_correct = p.answer is not None and p.answer == correct_answer
        correct[p.identity] = is_correct
        if is_correct:
            p.score += question_points(p.answer, p.answer_time, correct_answer, max_points)

    entries = []
    for p in players:
        if not p.is_connected:
            continue
        shown_time = p.answer_time if p.answer_time is not None else full_time
        entries.append(LeaderboardEntry(p.identity, p.score if correct[p.identity] else 0.0, shown_time))
    leaderboard = rank_entries(entries)

    positions = {e.identity: i + 1 for i, e in enumerate(leaderboard)}
    scores = {e.identity: e.score for e in leaderboard}
    now = datetime.now(timezone.utc)
    records = [
        ResultRecord(
            identity=p.identity,
            answer=p.answer if p.answer is not None else TIMEOUT_ANSWER,
            answer_time=p.answer_time if p.answer_time is not None else (full_time or 0.0),
            score=scores.get(p.identity, 0.0),
            rank=positions.get(p.identity, 0),
            is_correct=correct[p.identity],
            occurred_at=now,
        )
        for p in players
    ]
    return QuestionOutcome(leaderboard, records)


def player_standing(leaderboard: List[LeaderboardEntry], identity: str):
    for position, entry in enumerate(leaderboard, start=1):
        if entry.identity == identity:
            return {'rank': position, 'score': entry.score, 'totalPlayers': len(leaderboard)}
    return {'rank': 0, 'score': 0.0, 'totalPlayers': len(leaderboard)}

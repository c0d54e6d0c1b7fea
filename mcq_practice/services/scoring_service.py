# mcq_practice/services/scoring_service.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence


class ScoringError(Exception):
    pass


class Scorable(Protocol):
    correct_option: str


@dataclass(frozen=True)
class ScoreResult:
    total_questions: int
    correct_answers: int
    score: float  # percentage, not rounded
    time_spent: int  # seconds, sum of per-question timers
    is_correct: list[bool] = field(default_factory=list)


def score_session(
    questions: Sequence[Scorable],
    selected: Sequence[str | None],
    times: Sequence[int] | None = None,
) -> ScoreResult:
    """
    Score one attempt.

    ``selected`` and ``times`` run parallel to ``questions``. An unanswered
    question (None) is never correct. An empty attempt scores 0 rather than
    dividing by zero; callers are expected to reject empty attempts earlier.
    """
    if times is None:
        times = [0] * len(questions)

    if len(selected) != len(questions) or len(times) != len(questions):
        raise ScoringError(
            f"expected {len(questions)} answers and timings, "
            f"got {len(selected)} answers and {len(times)} timings"
        )

    is_correct = [
        answer is not None and answer == q.correct_option
        for q, answer in zip(questions, selected)
    ]
    total = len(questions)
    correct = sum(is_correct)
    score = correct / total * 100 if total else 0.0

    return ScoreResult(
        total_questions=total,
        correct_answers=correct,
        score=score,
        time_spent=sum(times),
        is_correct=is_correct,
    )

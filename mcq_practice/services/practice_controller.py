"""
Practice session controller.

Drives one quiz attempt on the student's side:

    CONFIGURING -> LOADING -> ANSWERING -> SUBMITTING -> COMPLETE
                                  |             ^
                                  +-> EXPIRED --+   (timed quizzes only)

The controller talks to the question bank through a ``QuestionBank``
object (``mcq_practice.client.ApiClient`` in practice), which carries the
authenticated user. Time is fed in from outside through ``tick()``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from mcq_practice.core.exceptions import (
    FetchError,
    NoQuestionsError,
    ValidationError,
)
from mcq_practice.services.countdown import Countdown
from mcq_practice.services.scoring_service import ScoreResult, score_session

logger = logging.getLogger(__name__)

# Sent to the API as-is; the server caps it at what the topic holds
QUESTION_COUNT_ALL = 9999
QUESTION_COUNT_CHOICES = (5, 10, 15, 20, 25, 30, 40, 50, 100, QUESTION_COUNT_ALL)

SECONDS_PER_QUESTION_MIN = 15
SECONDS_PER_QUESTION_MAX = 180
SECONDS_PER_QUESTION_STEP = 15

OPTIONS = ("A", "B", "C", "D")


@dataclass(frozen=True)
class PracticeQuestion:
    id: int
    text: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_option: str
    topic_id: int | None = None
    subtopic: str | None = None
    difficulty: str = "medium"
    image_path: str | None = None
    explanation: str | None = None


class QuestionBank(Protocol):
    def random_questions(
        self, count: int, topic_id: int | None = None
    ) -> list[PracticeQuestion]: ...

    def submit_session(self, payload: dict) -> int: ...


@dataclass(frozen=True)
class QuizConfig:
    question_count: int = 10
    topic_id: int | None = None
    timed: bool = False
    seconds_per_question: int = 60

    def validate(self) -> None:
        if self.question_count not in QUESTION_COUNT_CHOICES:
            raise ValidationError(
                f"Question count must be one of {', '.join(map(str, QUESTION_COUNT_CHOICES[:-1]))} or all"
            )
        if self.timed:
            s = self.seconds_per_question
            if (
                s < SECONDS_PER_QUESTION_MIN
                or s > SECONDS_PER_QUESTION_MAX
                or s % SECONDS_PER_QUESTION_STEP
            ):
                raise ValidationError(
                    "Time per question must be between 15 and 180 seconds, in steps of 15"
                )

    @property
    def total_time_seconds(self) -> int | None:
        if not self.timed:
            return None
        return self.seconds_per_question * self.question_count


class SessionState(str, Enum):
    CONFIGURING = "configuring"
    LOADING = "loading"
    ANSWERING = "answering"
    EXPIRED = "expired"
    SUBMITTING = "submitting"
    COMPLETE = "complete"


@dataclass(frozen=True)
class SubmittedSession:
    session_id: int
    result: ScoreResult

    @property
    def results_path(self) -> str:
        return f"/results/{self.session_id}"


class PracticeSessionController:
    def __init__(self, bank: QuestionBank, config: QuizConfig | None = None):
        self.bank = bank
        self.state = SessionState.CONFIGURING
        self.config: QuizConfig | None = None
        self.questions: list[PracticeQuestion] = []
        self.answers: list[str | None] = []
        self.question_times: list[int] = []
        self.current_index = 0
        self.countdown: Countdown | None = None
        self.submitted: SubmittedSession | None = None
        if config is not None:
            self.configure(config)

    # -- configuration / loading -------------------------------------------

    def configure(self, config: QuizConfig) -> None:
        self._require(SessionState.CONFIGURING)
        config.validate()
        self.config = config

    def load(self) -> list[PracticeQuestion]:
        self._require(SessionState.CONFIGURING)
        if self.config is None:
            raise ValidationError("Quiz is not configured")

        wanted = self.config.question_count
        self.state = SessionState.LOADING
        try:
            questions = self.bank.random_questions(wanted, self.config.topic_id)
        except Exception:
            self.state = SessionState.CONFIGURING
            raise

        if not questions:
            self.state = SessionState.CONFIGURING
            raise NoQuestionsError()
        if wanted != QUESTION_COUNT_ALL and len(questions) < wanted:
            self.state = SessionState.CONFIGURING
            raise FetchError(
                f"Requested {wanted} questions but only {len(questions)} are available"
            )
        if wanted != QUESTION_COUNT_ALL:
            questions = questions[:wanted]

        self.questions = list(questions)
        self.answers = [None] * len(self.questions)
        self.question_times = [0] * len(self.questions)
        self.current_index = 0

        if self.config.timed:
            # "all" is only known once loaded, so size the timer on what came back
            self.countdown = Countdown(
                self.config.seconds_per_question * len(self.questions),
                self._on_time_up,
            )
            self.countdown.start()

        self.state = SessionState.ANSWERING
        logger.info(
            f"Loaded {len(self.questions)} questions "
            f"(topic={self.config.topic_id}, timed={self.config.timed})"
        )
        return self.questions

    # -- answering ---------------------------------------------------------

    @property
    def current_question(self) -> PracticeQuestion | None:
        if not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a is not None)

    def select_answer(self, option: str, index: int | None = None) -> None:
        self._require(SessionState.ANSWERING)
        if option not in OPTIONS:
            raise ValidationError(f"Unknown option {option!r}")
        idx = self.current_index if index is None else self._check_index(index)
        self.answers[idx] = option

    def go_to(self, index: int) -> None:
        self._require(SessionState.ANSWERING)
        self.current_index = self._check_index(index)

    def next(self) -> None:
        if self.current_index < len(self.questions) - 1:
            self.go_to(self.current_index + 1)

    def previous(self) -> None:
        if self.current_index > 0:
            self.go_to(self.current_index - 1)

    def tick(self, seconds: int = 1) -> None:
        """Account ``seconds`` of wall-clock time to the question on screen."""
        if self.state != SessionState.ANSWERING:
            return
        self.question_times[self.current_index] += seconds
        if self.countdown is not None:
            self.countdown.tick(seconds)

    # -- submission --------------------------------------------------------

    def submit(self) -> SubmittedSession:
        """
        Score the attempt and persist it in a single request.

        Safe to call more than once: manual submit and timer expiry can
        race, and only the first call writes anything.
        """
        if self.submitted is not None:
            return self.submitted
        if self.state not in (SessionState.ANSWERING, SessionState.EXPIRED):
            raise ValidationError(f"Cannot submit while {self.state.value}")

        previous = self.state
        self.state = SessionState.SUBMITTING
        if self.countdown is not None:
            self.countdown.pause()

        result = score_session(self.questions, self.answers, self.question_times)
        payload = {
            "topic_id": self.config.topic_id,
            "answers": [
                {
                    "question_id": q.id,
                    "selected_option": answer,
                    "time_spent": spent,
                }
                for q, answer, spent in zip(
                    self.questions, self.answers, self.question_times
                )
            ],
        }

        try:
            session_id = self.bank.submit_session(payload)
        except Exception as e:
            logger.warning(f"Submitting practice session failed: {e!r}")
            self.state = previous
            if previous == SessionState.ANSWERING and self.countdown is not None:
                self.countdown.resume()
            raise

        if self.countdown is not None:
            self.countdown.cancel()
        self.submitted = SubmittedSession(session_id=session_id, result=result)
        self.state = SessionState.COMPLETE
        logger.info(
            f"Session {session_id} submitted: "
            f"{result.correct_answers}/{result.total_questions} correct"
        )
        return self.submitted

    def _on_time_up(self) -> None:
        if self.state != SessionState.ANSWERING:
            return
        logger.info(
            f"Time is up with {self.answered_count}/{len(self.questions)} answered"
        )
        self.state = SessionState.EXPIRED
        self.submit()

    # -- helpers -----------------------------------------------------------

    def _require(self, state: SessionState) -> None:
        if self.state != state:
            raise ValidationError(
                f"Expected state {state.value}, currently {self.state.value}"
            )

    def _check_index(self, index: int) -> int:
        if not 0 <= index < len(self.questions):
            raise ValidationError(f"Question index {index} out of range")
        return index

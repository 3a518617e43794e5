"""Game progression shared between the presentation layer and the API."""

from __future__ import annotations

from collections.abc import Callable
import logging
from threading import Lock
import time
from typing import Any

from creature_quiz.core.models import (
    Achievement,
    BodyPartStyle,
    BodyPartType,
    GamePhase,
    GameState,
    GameStatistics,
    Question,
    QuestionCategory,
    QuestionDifficulty,
    QuizResult,
)
from creature_quiz.core.question_generator import QuestionGenerator
from creature_quiz.core.services.achievement_tracker import AchievementTracker
from creature_quiz.core.services.game_session import GameSession
from creature_quiz.core.services.statistics_tracker import StatisticsTracker
from creature_quiz.core.settings import GameSettings

logger = logging.getLogger(__name__)


def build_fallback_question() -> Question:
    """The single question used when generation fails or yields nothing."""
    options = ("7", "8", "9")
    return Question(
        id="fallback_1",
        question_text="What is 5 + 3?",
        correct_answer="8",
        body_part=BodyPartType.EYES,
        options=options,
        answer_to_style={
            "7": BodyPartStyle.SQUARE,
            "8": BodyPartStyle.ROUND,
            "9": BodyPartStyle.TRIANGLE,
        },
        difficulty=QuestionDifficulty.EASY,
        category=QuestionCategory.ADDITION,
    )


class GameEngine:
    """Facade over the round session, statistics and achievements.

    Every public method holds the engine lock for its whole duration, so
    callers on different threads see one mutation at a time.
    """

    def __init__(
        self,
        generator: QuestionGenerator | None = None,
        settings: GameSettings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._lock = Lock()
        self._clock = clock

        # Services
        self._generator = generator if generator is not None else QuestionGenerator()
        self._session = GameSession()
        self._statistics = StatisticsTracker()
        self._achievements = AchievementTracker()

        self._settings = settings if settings is not None else GameSettings()

    # --- Round lifecycle ---

    def start_new_game(self) -> None:
        with self._lock:
            questions = self._generate_questions()
            self._session.start_round(questions, started_at=self._clock())
            self._statistics.record_game_started()
            logger.info("Started game with %d question(s)", len(questions))

    def reset_game(self) -> None:
        self.start_new_game()

    def answer_question(self, answer: str) -> QuizResult | None:
        """Grade an answer for the current question; None when nothing is asked."""
        with self._lock:
            result = self._session.record_answer(answer, answered_at=self._clock())
            if result is None:
                logger.debug("Ignored answer %r: no current question", answer)
                return None
            self._statistics.record_answer(result.question_id, result.is_correct)
            return result

    def select_variation(self, body_part: BodyPartType, variation: str) -> None:
        with self._lock:
            style = self._session.select_variation(BodyPartType(body_part), variation)
            if style is not None:
                self._statistics.record_favorite_style(BodyPartType(body_part), style)

    def next_question(self) -> None:
        with self._lock:
            if self._session.advance():
                self._session.set_phase(GamePhase.QUIZ)
            elif self._session.is_retry_mode():
                self._finish_retry()
            else:
                self._session.set_phase(GamePhase.RESULTS)

    def start_retry_mode(self) -> bool:
        """Replay the missed questions. Returns False when there is nothing to retry."""
        with self._lock:
            if not self._settings.allow_retry:
                logger.info("Retry refused: retries are disabled")
                return False
            if not self._session.has_mistakes():
                logger.info("Retry refused: no incorrect questions")
                return False
            count = self._session.start_retry(started_at=self._clock())
            logger.info("Started retry round with %d question(s)", count)
            return True

    def finish_retry_mode(self) -> None:
        with self._lock:
            self._finish_retry()

    def start_customization(self) -> bool:
        with self._lock:
            if not self._can_customize():
                logger.info("Customization refused: round was not perfect or is disabled")
                return False
            self._session.set_phase(GamePhase.CUSTOMIZATION)
            return True

    def set_phase(self, phase: GamePhase) -> None:
        with self._lock:
            self._session.set_phase(GamePhase(phase))

    def update_game_settings(self, **changes: Any) -> GameSettings:
        """Apply a partial settings update; raises InvalidSettingsError on bad input."""
        with self._lock:
            self._settings = self._settings.merged(**changes)
            return self._settings

    def update_statistics(self) -> None:
        """Fold the current round into the statistics and check achievements."""
        with self._lock:
            self._update_statistics()

    # --- Projections ---

    @property
    def progress(self) -> float:
        with self._lock:
            total = self._session.get_total_questions()
            if total == 0:
                return 0.0
            return min(self._session.get_index() + 1, total) / total * 100

    @property
    def is_perfect_score(self) -> bool:
        with self._lock:
            return self._is_perfect_score()

    @property
    def can_customize(self) -> bool:
        with self._lock:
            return self._can_customize()

    @property
    def current_question(self) -> Question | None:
        with self._lock:
            return self._session.get_current_question()

    @property
    def questions(self) -> list[Question]:
        with self._lock:
            return self._session.get_questions()

    @property
    def settings(self) -> GameSettings:
        with self._lock:
            return self._settings

    @property
    def statistics(self) -> GameStatistics:
        with self._lock:
            return self._statistics.snapshot()

    @property
    def achievements(self) -> list[Achievement]:
        with self._lock:
            return self._achievements.get_achievements()

    def snapshot(self) -> GameState:
        with self._lock:
            return self._session.snapshot()

    def get_part_style_mapping(self) -> dict[BodyPartType, BodyPartStyle]:
        return self._generator.get_part_style_mapping()

    def get_style_variations(self, style: BodyPartStyle) -> list[str]:
        return self._generator.get_style_variations(style)

    # --- Internals (caller holds the lock) ---

    def _generate_questions(self) -> list[Question]:
        settings = self._settings
        try:
            questions = self._generator.generate(
                settings.questions_per_quiz,
                settings.difficulty,
                list(settings.categories),
            )
        except Exception:
            logger.exception("Question generation failed; using fallback question")
            return [build_fallback_question()]
        if not questions:
            logger.warning("No questions generated; using fallback question")
            return [build_fallback_question()]
        return questions

    def _finish_retry(self) -> None:
        self._session.end_retry()
        self._session.set_phase(GamePhase.RESULTS)
        self._update_statistics()

    def _update_statistics(self) -> None:
        elapsed_ms = self._session.elapsed_ms(self._clock())
        self._session.add_time_spent(elapsed_ms)
        self._statistics.record_round(self._session.get_score(), elapsed_ms)
        self._achievements.evaluate(self._statistics.snapshot())

    def _is_perfect_score(self) -> bool:
        total = self._session.get_total_questions()
        return total > 0 and self._session.get_score() == total

    def _can_customize(self) -> bool:
        return self._is_perfect_score() and self._settings.enable_customization

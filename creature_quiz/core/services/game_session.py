"""Service for managing the active round and its question state."""

from __future__ import annotations

from creature_quiz.core.models import (
    BodyPartStyle,
    BodyPartType,
    GamePhase,
    GameState,
    Question,
    QuizResult,
)


class GameSession:
    """Holds the mutable state of one round (first pass or retry)."""

    def __init__(self) -> None:
        self._questions: list[Question] = []
        self._phase: GamePhase = GamePhase.QUIZ
        self._index: int = 0
        self._score: int = 0
        self._unlocked_styles: dict[BodyPartType, BodyPartStyle] = {}
        self._selected_variations: dict[BodyPartType, str] = {}
        self._incorrect_questions: list[Question] = []
        self._results: list[QuizResult] = []
        self._retry_mode: bool = False
        self._started_at: float = 0.0
        self._total_time_spent_ms: float = 0.0

    def start_round(self, questions: list[Question], started_at: float) -> None:
        """Begin a fresh game, clearing everything unlocked in the previous one."""
        self._questions = list(questions)
        self._index = 0
        self._score = 0
        self._unlocked_styles = {}
        self._selected_variations = {}
        self._incorrect_questions = []
        self._results = []
        self._retry_mode = False
        self._started_at = started_at
        self._total_time_spent_ms = 0.0
        self._phase = GamePhase.QUIZ

    def start_retry(self, started_at: float) -> int:
        """Replay the missed questions. Returns the size of the retry round."""
        self._questions = list(self._incorrect_questions)
        self._incorrect_questions = []
        self._index = 0
        self._score = 0
        self._results = []
        self._retry_mode = True
        self._started_at = started_at
        self._phase = GamePhase.QUIZ
        return len(self._questions)

    def end_retry(self) -> None:
        self._retry_mode = False

    def get_current_question(self) -> Question | None:
        if 0 <= self._index < len(self._questions):
            return self._questions[self._index]
        return None

    def record_answer(self, selected_answer: str, answered_at: float) -> QuizResult | None:
        """Grade ``selected_answer`` against the current question."""
        question = self.get_current_question()
        if question is None:
            return None

        is_correct = selected_answer == question.correct_answer
        style = question.style_for(selected_answer)
        if style is not None:
            self._unlocked_styles[question.body_part] = style

        if is_correct:
            self._score += 1
        else:
            self._incorrect_questions.append(question)

        result = QuizResult(
            question_id=question.id,
            selected_answer=selected_answer,
            is_correct=is_correct,
            time_spent_ms=max(0.0, (answered_at - self._started_at) * 1000),
            body_part=question.body_part,
            unlocked_style=style,
        )
        self._results.append(result)
        return result

    def advance(self) -> bool:
        """Move to the next question. Returns False once the round is exhausted."""
        self._index += 1
        return self._index < len(self._questions)

    def select_variation(self, body_part: BodyPartType, variation: str) -> BodyPartStyle | None:
        """Store the variation and return the part's unlocked style, if any."""
        self._selected_variations[body_part] = variation
        return self._unlocked_styles.get(body_part)

    def add_time_spent(self, elapsed_ms: float) -> None:
        self._total_time_spent_ms += elapsed_ms

    def elapsed_ms(self, now: float) -> float:
        return max(0.0, (now - self._started_at) * 1000)

    def set_phase(self, phase: GamePhase) -> None:
        self._phase = phase

    def get_questions(self) -> list[Question]:
        return list(self._questions)

    def get_index(self) -> int:
        return self._index

    def get_score(self) -> int:
        return self._score

    def get_total_questions(self) -> int:
        return len(self._questions)

    def has_mistakes(self) -> bool:
        return bool(self._incorrect_questions)

    def is_retry_mode(self) -> bool:
        return self._retry_mode

    def snapshot(self) -> GameState:
        return GameState(
            current_phase=self._phase,
            current_question_index=self._index,
            score=self._score,
            total_questions=len(self._questions),
            unlocked_styles=dict(self._unlocked_styles),
            selected_variations=dict(self._selected_variations),
            incorrect_questions=list(self._incorrect_questions),
            quiz_results=list(self._results),
            is_retry_mode=self._retry_mode,
            game_start_time=self._started_at,
            total_time_spent_ms=self._total_time_spent_ms,
        )

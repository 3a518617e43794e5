"""Procedural generation of arithmetic and word-problem questions.

Every question is tied to one creature body part. Body parts are assigned
round-robin from ``PART_STYLE_TABLE`` and categories round-robin from the
requested list, so a long enough quiz covers every combination evenly.

Each of the three offered answers maps to a cosmetic style by its position in
the shuffled option list, independent of whether the answer is correct. The
player therefore unlocks a style with every answer, not only correct ones.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
import random
from uuid import uuid4

from creature_quiz.constants.game_constants import (
    ADD_SUB_RANGES,
    DISTRACTOR_ATTEMPTS_PER_RANGE,
    DISTRACTOR_RANGES,
    MUL_DIV_RANGES,
    OPTIONS_PER_QUESTION,
)
from creature_quiz.core.models import (
    BodyPartStyle,
    BodyPartType,
    Question,
    QuestionCategory,
    QuestionDifficulty,
)
from creature_quiz.core.word_problems import word_problems_for

logger = logging.getLogger(__name__)

PART_STYLE_TABLE: tuple[tuple[BodyPartType, BodyPartStyle], ...] = (
    (BodyPartType.EYES, BodyPartStyle.ROUND),
    (BodyPartType.EARS, BodyPartStyle.SQUARE),
    (BodyPartType.NOSE, BodyPartStyle.TRIANGLE),
    (BodyPartType.MOUTH, BodyPartStyle.ROUND),
    (BodyPartType.ARMS, BodyPartStyle.SQUARE),
    (BodyPartType.LEGS, BodyPartStyle.TRIANGLE),
    (BodyPartType.TAIL, BodyPartStyle.ROUND),
    (BodyPartType.WINGS, BodyPartStyle.SQUARE),
)

OPTION_STYLE_ORDER: tuple[BodyPartStyle, ...] = (
    BodyPartStyle.ROUND,
    BodyPartStyle.SQUARE,
    BodyPartStyle.TRIANGLE,
)

VARIATIONS_PER_STYLE: int = 3

_ID_PREFIXES: dict[QuestionCategory, str] = {
    QuestionCategory.ADDITION: "add",
    QuestionCategory.SUBTRACTION: "sub",
    QuestionCategory.MULTIPLICATION: "mul",
    QuestionCategory.DIVISION: "div",
    QuestionCategory.WORD_PROBLEMS: "word",
}


class QuestionGenerator:
    """Creates shuffled question lists for a difficulty and set of categories."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._builders: dict[
            QuestionCategory, Callable[[QuestionDifficulty, BodyPartType], Question]
        ] = {
            QuestionCategory.ADDITION: self._addition_question,
            QuestionCategory.SUBTRACTION: self._subtraction_question,
            QuestionCategory.MULTIPLICATION: self._multiplication_question,
            QuestionCategory.DIVISION: self._division_question,
            QuestionCategory.WORD_PROBLEMS: self._word_problem,
        }

    def set_seed(self, seed: int | None) -> None:
        self._rng.seed(seed)

    def generate(
        self,
        count: int,
        difficulty: QuestionDifficulty | str,
        categories: Sequence[QuestionCategory | str],
    ) -> list[Question]:
        """Return ``count`` questions in random order."""
        if count < 0:
            raise ValueError("Question count cannot be negative.")
        if not categories:
            raise ValueError("At least one question category is required.")

        tier = QuestionDifficulty(difficulty)
        resolved = [QuestionCategory(category) for category in categories]

        questions: list[Question] = []
        for index in range(count):
            category = resolved[index % len(resolved)]
            body_part, _ = PART_STYLE_TABLE[index % len(PART_STYLE_TABLE)]
            questions.append(self._builders[category](tier, body_part))

        logger.debug("Generated %d %s question(s) for %s", count, tier.value, resolved)
        return self._shuffled(questions)

    @staticmethod
    def get_part_style_mapping() -> dict[BodyPartType, BodyPartStyle]:
        """Return the fixed body part -> style family table."""
        return dict(PART_STYLE_TABLE)

    @staticmethod
    def get_style_variations(style: BodyPartStyle | str) -> list[str]:
        family = BodyPartStyle(style).value
        return [f"{family}-{number}" for number in range(1, VARIATIONS_PER_STYLE + 1)]

    def get_part_variations(
        self, body_part: BodyPartType | str, style: BodyPartStyle | str
    ) -> list[str]:
        """Variations for a part; every part shares the same slots within a style."""
        BodyPartType(body_part)  # unknown parts raise ValueError
        return self.get_style_variations(style)

    # --- Category builders ---

    def _addition_question(self, difficulty: QuestionDifficulty, body_part: BodyPartType) -> Question:
        a, b = self._operands(ADD_SUB_RANGES, difficulty)
        return self._build(
            QuestionCategory.ADDITION, difficulty, body_part, f"What is {a} + {b}?", a + b
        )

    def _subtraction_question(self, difficulty: QuestionDifficulty, body_part: BodyPartType) -> Question:
        a, b = self._operands(ADD_SUB_RANGES, difficulty)
        while a == b:
            b = self._operands(ADD_SUB_RANGES, difficulty)[1]
        larger, smaller = max(a, b), min(a, b)
        return self._build(
            QuestionCategory.SUBTRACTION,
            difficulty,
            body_part,
            f"What is {larger} - {smaller}?",
            larger - smaller,
        )

    def _multiplication_question(
        self, difficulty: QuestionDifficulty, body_part: BodyPartType
    ) -> Question:
        a, b = self._operands(MUL_DIV_RANGES, difficulty)
        return self._build(
            QuestionCategory.MULTIPLICATION, difficulty, body_part, f"What is {a} × {b}?", a * b
        )

    def _division_question(self, difficulty: QuestionDifficulty, body_part: BodyPartType) -> Question:
        divisor, quotient = self._operands(MUL_DIV_RANGES, difficulty)
        dividend = divisor * quotient
        return self._build(
            QuestionCategory.DIVISION,
            difficulty,
            body_part,
            f"What is {dividend} ÷ {divisor}?",
            quotient,
        )

    def _word_problem(self, difficulty: QuestionDifficulty, body_part: BodyPartType) -> Question:
        problem = self._rng.choice(word_problems_for(difficulty))
        return self._build(
            QuestionCategory.WORD_PROBLEMS,
            difficulty,
            body_part,
            problem.question_text,
            problem.answer,
            hint=problem.hint,
        )

    # --- Helpers ---

    def _build(
        self,
        category: QuestionCategory,
        difficulty: QuestionDifficulty,
        body_part: BodyPartType,
        question_text: str,
        answer: int,
        hint: str | None = None,
    ) -> Question:
        options = self._three_options(answer, difficulty)
        return Question(
            id=f"{_ID_PREFIXES[category]}_{uuid4().hex}",
            question_text=question_text,
            correct_answer=str(answer),
            body_part=body_part,
            options=tuple(options),
            answer_to_style=map_options_to_styles(options),
            difficulty=difficulty,
            category=category,
            hint=hint,
        )

    def _operands(
        self, ranges: dict[str, tuple[int, int]], difficulty: QuestionDifficulty
    ) -> tuple[int, int]:
        low, high = ranges[difficulty.value]
        return self._rng.randint(low, high), self._rng.randint(low, high)

    def _three_options(self, correct_answer: int, difficulty: QuestionDifficulty) -> list[str]:
        options = [str(correct_answer)]
        spread = DISTRACTOR_RANGES[difficulty.value]
        rejected = 0
        while len(options) < OPTIONS_PER_QUESTION:
            sign = 1 if self._rng.random() > 0.5 else -1
            candidate = correct_answer + sign * self._rng.randrange(spread) + 1
            if candidate > 0 and str(candidate) not in options:
                options.append(str(candidate))
                continue
            rejected += 1
            if rejected >= DISTRACTOR_ATTEMPTS_PER_RANGE:
                spread *= 2
                rejected = 0
                logger.debug("Widened distractor range to %d for answer %d", spread, correct_answer)
        return self._shuffled(options)

    def _shuffled(self, items: list) -> list:
        shuffled = list(items)
        self._rng.shuffle(shuffled)
        return shuffled


def map_options_to_styles(options: Sequence[str]) -> dict[str, BodyPartStyle]:
    """Assign round/square/triangle to the options in their displayed order."""
    return {
        option: OPTION_STYLE_ORDER[index % len(OPTION_STYLE_ORDER)]
        for index, option in enumerate(options)
    }

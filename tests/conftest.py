import random

import pytest

from creature_quiz.core.game_engine import GameEngine
from creature_quiz.core.models import (
    BodyPartType,
    Question,
    QuestionCategory,
    QuestionDifficulty,
)
from creature_quiz.core.question_generator import QuestionGenerator, map_options_to_styles
from creature_quiz.core.settings import GameSettings


def make_question(
    qid: str,
    answer: int,
    body_part: BodyPartType = BodyPartType.EYES,
) -> Question:
    """Create a fixed addition question with options answer-1, answer, answer+1."""
    options = (str(answer - 1), str(answer), str(answer + 1))
    return Question(
        id=qid,
        question_text=f"What is {answer - 1} + 1?",
        correct_answer=str(answer),
        body_part=body_part,
        options=options,
        answer_to_style=map_options_to_styles(options),
        difficulty=QuestionDifficulty.EASY,
        category=QuestionCategory.ADDITION,
    )


class StubGenerator(QuestionGenerator):
    """Generator returning scripted question lists, one per call."""

    def __init__(self, *batches: list[Question]) -> None:
        super().__init__(random.Random(0))
        self._batches = list(batches)
        self.calls: list[tuple[int, QuestionDifficulty, list[QuestionCategory]]] = []

    def generate(self, count, difficulty, categories):
        self.calls.append((count, difficulty, list(categories)))
        if len(self._batches) > 1:
            return self._batches.pop(0)
        return list(self._batches[0]) if self._batches else []


class FailingGenerator(QuestionGenerator):
    def generate(self, count, difficulty, categories):
        raise RuntimeError("generator exploded")


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def seeded_generator() -> QuestionGenerator:
    return QuestionGenerator(random.Random(1234))


@pytest.fixture
def three_questions() -> list[Question]:
    return [
        make_question("q1", 5, BodyPartType.EYES),
        make_question("q2", 7, BodyPartType.EARS),
        make_question("q3", 9, BodyPartType.NOSE),
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(three_questions, clock) -> GameEngine:
    """Engine playing the three fixed questions in order."""
    return GameEngine(
        generator=StubGenerator(three_questions),
        settings=GameSettings(questions_per_quiz=3),
        clock=clock,
    )


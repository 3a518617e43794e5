"""Domain models for the creature quiz."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType


class BodyPartType(str, Enum):
    """Creature anatomy slots that can receive a cosmetic style."""

    EYES = "eyes"
    EARS = "ears"
    NOSE = "nose"
    MOUTH = "mouth"
    ARMS = "arms"
    LEGS = "legs"
    TAIL = "tail"
    WINGS = "wings"


class BodyPartStyle(str, Enum):
    """Visual families a body part can be drawn in."""

    ROUND = "round"
    SQUARE = "square"
    TRIANGLE = "triangle"


class GamePhase(str, Enum):
    QUIZ = "quiz"
    SELECTION = "selection"
    RESULTS = "results"
    CUSTOMIZATION = "customization"


class QuestionDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionCategory(str, Enum):
    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MULTIPLICATION = "multiplication"
    DIVISION = "division"
    WORD_PROBLEMS = "word-problems"


class AchievementCriteriaType(str, Enum):
    SCORE = "score"
    TIME = "time"
    QUESTIONS = "questions"
    CUSTOMIZATION = "customization"
    STREAK = "streak"


class AchievementCondition(str, Enum):
    EQUALS = "equals"
    GREATER_THAN = "greater-than"
    LESS_THAN = "less-than"
    CONTAINS = "contains"


@dataclass(slots=True, frozen=True)
class Question:
    """Three-option quiz question bound to one creature body part."""

    id: str
    question_text: str
    correct_answer: str
    body_part: BodyPartType
    options: tuple[str, ...]
    answer_to_style: Mapping[str, BodyPartStyle] = field(hash=False)
    difficulty: QuestionDifficulty
    category: QuestionCategory
    hint: str | None = None

    def __post_init__(self) -> None:
        # The option -> style mapping is read-only once the question exists.
        object.__setattr__(self, "answer_to_style", MappingProxyType(dict(self.answer_to_style)))

    def style_for(self, answer: str) -> BodyPartStyle | None:
        """Return the style unlocked by ``answer``, or None for unknown answers."""
        return self.answer_to_style.get(answer)


@dataclass(slots=True, frozen=True)
class QuizResult:
    """Outcome of a single answered question."""

    question_id: str
    selected_answer: str
    is_correct: bool
    time_spent_ms: float
    body_part: BodyPartType | None = None
    unlocked_style: BodyPartStyle | None = None


@dataclass(slots=True)
class GameState:
    """Snapshot of the round handed to the presentation layer."""

    current_phase: GamePhase = GamePhase.QUIZ
    current_question_index: int = 0
    score: int = 0
    total_questions: int = 0
    unlocked_styles: dict[BodyPartType, BodyPartStyle] = field(default_factory=dict)
    selected_variations: dict[BodyPartType, str] = field(default_factory=dict)
    incorrect_questions: list[Question] = field(default_factory=list)
    quiz_results: list[QuizResult] = field(default_factory=list)
    is_retry_mode: bool = False
    game_start_time: float = 0.0
    total_time_spent_ms: float = 0.0


@dataclass(slots=True)
class QuestionPerformance:
    correct: int = 0
    total: int = 0


@dataclass(slots=True)
class GameStatistics:
    """Aggregates kept for the lifetime of the engine."""

    total_games_played: int = 0
    average_score: float = 0.0
    best_score: int = 0
    total_time_played_ms: float = 0.0
    favorite_styles: dict[BodyPartType, BodyPartStyle] = field(default_factory=dict)
    question_performance: dict[str, QuestionPerformance] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class AchievementCriteria:
    type: AchievementCriteriaType
    value: int
    condition: AchievementCondition


@dataclass(slots=True)
class Achievement:
    """Badge unlocked once the statistics cross its threshold."""

    id: str
    name: str
    description: str
    icon: str
    criteria: AchievementCriteria
    unlocked: bool = False
    unlock_date: datetime | None = None

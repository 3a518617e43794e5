"""Validated game settings."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from creature_quiz.constants.game_constants import DEFAULT_QUESTIONS_PER_QUIZ
from creature_quiz.core.models import QuestionCategory, QuestionDifficulty


class InvalidSettingsError(ValueError):
    """Raised when a settings update does not validate."""


class GameSettings(BaseModel):
    """Round configuration. ``time_limit_seconds`` is informational only."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    questions_per_quiz: int = Field(default=DEFAULT_QUESTIONS_PER_QUIZ, gt=0)
    time_limit_seconds: int | None = Field(default=None, gt=0)
    difficulty: QuestionDifficulty = QuestionDifficulty.EASY
    categories: tuple[QuestionCategory, ...] = (QuestionCategory.ADDITION,)
    allow_hints: bool = True
    allow_retry: bool = True
    enable_customization: bool = True

    @field_validator("categories")
    @classmethod
    def _validate_categories(
        cls, categories: tuple[QuestionCategory, ...]
    ) -> tuple[QuestionCategory, ...]:
        if not categories:
            raise ValueError("At least one question category is required.")
        # Drop duplicates but keep the round-robin order.
        return tuple(dict.fromkeys(categories))

    def merged(self, **changes: Any) -> GameSettings:
        """Return a validated copy with ``changes`` applied."""
        data = self.model_dump()
        data.update(changes)
        try:
            return GameSettings.model_validate(data)
        except ValidationError as exc:
            raise InvalidSettingsError(str(exc)) from exc

"""Service for unlocking achievements from cumulative statistics."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
import logging

from creature_quiz.constants.game_constants import (
    BEST_SCORE_ACHIEVEMENT_THRESHOLD,
    GAMES_PLAYED_ACHIEVEMENT_THRESHOLD,
)
from creature_quiz.core.models import (
    Achievement,
    AchievementCondition,
    AchievementCriteria,
    AchievementCriteriaType,
    GameStatistics,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class AchievementRule:
    """Template for an achievement plus the check that unlocks it."""

    id: str
    name: str
    description: str
    icon: str
    criteria: AchievementCriteria
    is_met: Callable[[GameStatistics], bool]


ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule(
        id="first_5_games",
        name="Getting Started",
        description="Played 5 games",
        icon="🎮",
        criteria=AchievementCriteria(
            type=AchievementCriteriaType.QUESTIONS,
            value=GAMES_PLAYED_ACHIEVEMENT_THRESHOLD,
            condition=AchievementCondition.GREATER_THAN,
        ),
        is_met=lambda stats: stats.total_games_played >= GAMES_PLAYED_ACHIEVEMENT_THRESHOLD,
    ),
    AchievementRule(
        id="perfect_score",
        name="Perfect Score",
        description="Got a perfect score",
        icon="🏆",
        criteria=AchievementCriteria(
            type=AchievementCriteriaType.SCORE,
            value=BEST_SCORE_ACHIEVEMENT_THRESHOLD,
            condition=AchievementCondition.GREATER_THAN,
        ),
        is_met=lambda stats: stats.best_score >= BEST_SCORE_ACHIEVEMENT_THRESHOLD,
    ),
)


class AchievementTracker:
    """Keeps unlocked achievements keyed by id; unlocking twice is a no-op."""

    def __init__(
        self,
        rules: tuple[AchievementRule, ...] = ACHIEVEMENT_RULES,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._rules = rules
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._unlocked: dict[str, Achievement] = {}

    def evaluate(self, stats: GameStatistics) -> list[Achievement]:
        """Unlock every rule ``stats`` satisfies. Returns only the new unlocks."""
        newly_unlocked: list[Achievement] = []
        for rule in self._rules:
            if rule.id in self._unlocked or not rule.is_met(stats):
                continue
            achievement = Achievement(
                id=rule.id,
                name=rule.name,
                description=rule.description,
                icon=rule.icon,
                criteria=rule.criteria,
                unlocked=True,
                unlock_date=self._now(),
            )
            self._unlocked[rule.id] = achievement
            newly_unlocked.append(achievement)
            logger.info("Achievement unlocked: %s", rule.name)
        return newly_unlocked

    def is_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self._unlocked

    def get_achievements(self) -> list[Achievement]:
        """Unlocked achievements in unlock order."""
        return [replace(achievement) for achievement in self._unlocked.values()]

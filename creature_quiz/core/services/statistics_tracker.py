"""Service for aggregating play statistics across games."""

from __future__ import annotations

from copy import deepcopy

from creature_quiz.core.models import (
    BodyPartStyle,
    BodyPartType,
    GameStatistics,
    QuestionPerformance,
)


class StatisticsTracker:
    """Tracks games played, scores, play time and per-question performance."""

    def __init__(self) -> None:
        self._stats = GameStatistics()

    def record_game_started(self) -> None:
        self._stats.total_games_played += 1

    def record_answer(self, question_id: str, is_correct: bool) -> None:
        """Update the attempt counters for a question."""
        entry = self._stats.question_performance.get(question_id)
        if entry is None:
            entry = QuestionPerformance()
            self._stats.question_performance[question_id] = entry

        entry.total += 1
        if is_correct:
            entry.correct += 1

    def record_round(self, score: int, elapsed_ms: float) -> None:
        """Fold a finished round into the best score, running mean and play time."""
        stats = self._stats
        stats.best_score = max(stats.best_score, score)

        games = stats.total_games_played
        if games > 0:
            stats.average_score = ((stats.average_score * (games - 1)) + score) / games
        else:
            stats.average_score = float(score)

        stats.total_time_played_ms += elapsed_ms

    def record_favorite_style(self, body_part: BodyPartType, style: BodyPartStyle) -> None:
        self._stats.favorite_styles[body_part] = style

    def get_best_score(self) -> int:
        return self._stats.best_score

    def snapshot(self) -> GameStatistics:
        """Return a detached copy for consumers."""
        return deepcopy(self._stats)

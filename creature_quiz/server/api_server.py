"""FastAPI server that lets a presentation layer drive the game engine."""

from __future__ import annotations

from threading import Thread

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel
import uvicorn

from creature_quiz.constants.about import APP_NAME, APP_VERSION
from creature_quiz.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from creature_quiz.core.game_engine import GameEngine
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
from creature_quiz.core.settings import GameSettings, InvalidSettingsError


class AnswerPayload(BaseModel):
    """Payload schema for submitted answers."""

    answer: str


class VariationPayload(BaseModel):
    body_part: BodyPartType
    variation: str


class PhasePayload(BaseModel):
    phase: GamePhase


class SettingsPayload(BaseModel):
    """Partial settings update; only the fields sent are applied."""

    questions_per_quiz: int | None = None
    time_limit_seconds: int | None = None
    difficulty: QuestionDifficulty | None = None
    categories: list[QuestionCategory] | None = None
    allow_hints: bool | None = None
    allow_retry: bool | None = None
    enable_customization: bool | None = None


def _question_payload(question: Question, include_hint: bool) -> dict[str, object]:
    return {
        "question_id": question.id,
        "question_text": question.question_text,
        "body_part": question.body_part.value,
        "options": list(question.options),
        "option_styles": {option: style.value for option, style in question.answer_to_style.items()},
        "difficulty": question.difficulty.value,
        "category": question.category.value,
        "hint": question.hint if include_hint else None,
    }


def _result_payload(result: QuizResult) -> dict[str, object]:
    return {
        "question_id": result.question_id,
        "selected_answer": result.selected_answer,
        "is_correct": result.is_correct,
        "time_spent_ms": result.time_spent_ms,
        "body_part": result.body_part.value if result.body_part else None,
        "unlocked_style": result.unlocked_style.value if result.unlocked_style else None,
    }


def _state_payload(state: GameState, engine: GameEngine) -> dict[str, object]:
    return {
        "current_phase": state.current_phase.value,
        "current_question_index": state.current_question_index,
        "score": state.score,
        "total_questions": state.total_questions,
        "unlocked_styles": {part.value: style.value for part, style in state.unlocked_styles.items()},
        "selected_variations": {part.value: variation for part, variation in state.selected_variations.items()},
        "incorrect_question_ids": [question.id for question in state.incorrect_questions],
        "quiz_results": [_result_payload(result) for result in state.quiz_results],
        "is_retry_mode": state.is_retry_mode,
        "game_start_time": state.game_start_time,
        "total_time_spent_ms": state.total_time_spent_ms,
        "progress": engine.progress,
        "is_perfect_score": engine.is_perfect_score,
        "can_customize": engine.can_customize,
    }


def _settings_payload(settings: GameSettings) -> dict[str, object]:
    return settings.model_dump(mode="json")


def _statistics_payload(stats: GameStatistics) -> dict[str, object]:
    return {
        "total_games_played": stats.total_games_played,
        "average_score": stats.average_score,
        "best_score": stats.best_score,
        "total_time_played_ms": stats.total_time_played_ms,
        "favorite_styles": {part.value: style.value for part, style in stats.favorite_styles.items()},
        "question_performance": {
            question_id: {"correct": entry.correct, "total": entry.total}
            for question_id, entry in stats.question_performance.items()
        },
    }


def _achievement_payload(achievement: Achievement) -> dict[str, object]:
    return {
        "id": achievement.id,
        "name": achievement.name,
        "description": achievement.description,
        "icon": achievement.icon,
        "unlocked": achievement.unlocked,
        "unlock_date": achievement.unlock_date.isoformat() if achievement.unlock_date else None,
        "criteria": {
            "type": achievement.criteria.type.value,
            "value": achievement.criteria.value,
            "condition": achievement.criteria.condition.value,
        },
    }


def _get_engine_dependency(engine: GameEngine):
    def dependency() -> GameEngine:
        return engine

    return dependency


def create_api_app(engine: GameEngine) -> FastAPI:
    """Create a FastAPI application wired to the provided game engine."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    engine_dep = _get_engine_dependency(engine)

    @app.get("/state")
    def get_state(game: GameEngine = Depends(engine_dep)) -> dict[str, object]:
        return _state_payload(game.snapshot(), game)

    @app.get("/question")
    def get_question(game: GameEngine = Depends(engine_dep)) -> dict[str, object]:
        question = game.current_question
        if question is None:
            return {"active": False, "question": None}
        return {
            "active": True,
            "question": _question_payload(question, include_hint=game.settings.allow_hints),
        }

    @app.post("/game", status_code=201)
    def start_game(game: GameEngine = Depends(engine_dep)) -> dict[str, object]:
        game.start_new_game()
        return _state_payload(game.snapshot(), game)

    @app.post("/answer")
    def submit_answer(
        payload: AnswerPayload,
        game: GameEngine = Depends(engine_dep),
    ) -> dict[str, object]:
        result = game.answer_question(payload.answer)
        if result is None:
            raise HTTPException(status_code=409, detail="There is no question to answer.")
        return _result_payload(result)

    @app.post("/next")
    def next_question(game: GameEngine = Depends(engine_dep)) -> dict[str, object]:
        game.next_question()
        return _state_payload(game.snapshot(), game)

    @app.post("/retry")
    def start_retry(game: GameEngine = Depends(engine_dep)) -> dict[str, object]:
        if not game.start_retry_mode():
            raise HTTPException(status_code=409, detail="There are no questions to retry.")
        return _state_payload(game.snapshot(), game)

    @app.post("/customization")
    def start_customization(game: GameEngine = Depends(engine_dep)) -> dict[str, object]:
        if not game.start_customization():
            raise HTTPException(status_code=409, detail="Customization needs a perfect round.")
        return _state_payload(game.snapshot(), game)

    @app.post("/variation")
    def select_variation(
        payload: VariationPayload,
        game: GameEngine = Depends(engine_dep),
    ) -> dict[str, object]:
        game.select_variation(payload.body_part, payload.variation)
        return _state_payload(game.snapshot(), game)

    @app.post("/phase")
    def set_phase(
        payload: PhasePayload,
        game: GameEngine = Depends(engine_dep),
    ) -> dict[str, object]:
        game.set_phase(payload.phase)
        return _state_payload(game.snapshot(), game)

    @app.get("/settings")
    def get_settings(game: GameEngine = Depends(engine_dep)) -> dict[str, object]:
        return _settings_payload(game.settings)

    @app.patch("/settings")
    def update_settings(
        payload: SettingsPayload,
        game: GameEngine = Depends(engine_dep),
    ) -> dict[str, object]:
        try:
            settings = game.update_game_settings(**payload.model_dump(exclude_unset=True))
        except InvalidSettingsError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return _settings_payload(settings)

    @app.get("/statistics")
    def get_statistics(game: GameEngine = Depends(engine_dep)) -> dict[str, object]:
        return _statistics_payload(game.statistics)

    @app.get("/achievements")
    def get_achievements(game: GameEngine = Depends(engine_dep)) -> list[dict[str, object]]:
        return [_achievement_payload(achievement) for achievement in game.achievements]

    @app.get("/styles")
    def get_styles(game: GameEngine = Depends(engine_dep)) -> dict[str, str]:
        return {part.value: style.value for part, style in game.get_part_style_mapping().items()}

    @app.get("/styles/{style}/variations")
    def get_variations(
        style: BodyPartStyle,
        game: GameEngine = Depends(engine_dep),
    ) -> list[str]:
        return game.get_style_variations(style)

    return app


def run_api_server(
    engine: GameEngine,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API in the foreground until interrupted."""
    uvicorn.run(create_api_app(engine), host=host, port=port, log_level="info")


def start_api_server(
    engine: GameEngine,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(engine)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    thread = Thread(target=server.run, name="CreatureQuizApiServer", daemon=True)
    thread.start()
    return thread

"""Application entry point for the Creature Quiz game API."""

from __future__ import annotations

from creature_quiz.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from creature_quiz.core.game_engine import GameEngine
from creature_quiz.core.question_generator import QuestionGenerator
from creature_quiz.server.api_server import run_api_server
from creature_quiz.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging, build the engine and serve the game API."""
    logger = configure_logging()
    logger.info("Starting Creature Quiz…")

    engine = GameEngine(generator=QuestionGenerator())
    logger.info("Game API available at http://%s:%d/", DEFAULT_HOST, DEFAULT_PORT)
    run_api_server(engine, host=DEFAULT_HOST, port=DEFAULT_PORT)


if __name__ == "__main__":
    main()

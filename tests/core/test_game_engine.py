"""
Tests for the GameEngine state machine, statistics and fallbacks.
"""

from dataclasses import FrozenInstanceError
import threading

import pytest

from conftest import FailingGenerator, StubGenerator, make_question
from creature_quiz.core.game_engine import GameEngine, build_fallback_question
from creature_quiz.core.models import (
    BodyPartStyle,
    BodyPartType,
    GamePhase,
    QuestionCategory,
    QuestionDifficulty,
)
from creature_quiz.core.question_generator import QuestionGenerator
from creature_quiz.core.settings import GameSettings, InvalidSettingsError


def _play_round(engine: GameEngine, wrong_ids: frozenset[str] = frozenset()) -> list[GamePhase]:
    """Answer every question in order, returning the phase after each advance."""
    phases = []
    while (question := engine.current_question) is not None:
        answer = "0" if question.id in wrong_ids else question.correct_answer
        engine.answer_question(answer)
        engine.next_question()
        phases.append(engine.snapshot().current_phase)
    return phases


class TestStartNewGame:
    def test_start_new_game_when_called_then_round_is_fresh(self, engine, three_questions, clock):
        # Act
        engine.start_new_game()

        # Assert
        state = engine.snapshot()
        assert state.current_phase is GamePhase.QUIZ
        assert state.current_question_index == 0
        assert state.score == 0
        assert state.total_questions == 3
        assert state.game_start_time == clock.now
        assert engine.current_question == three_questions[0]
        assert engine.statistics.total_games_played == 1

    def test_start_new_game_when_called_then_requests_settings_values(self, clock):
        # Arrange
        generator = StubGenerator([make_question("q1", 4)])
        settings = GameSettings(
            questions_per_quiz=7,
            difficulty="medium",
            categories=["division", "word-problems"],
        )
        engine = GameEngine(generator=generator, settings=settings, clock=clock)

        # Act
        engine.start_new_game()

        # Assert
        assert generator.calls == [
            (
                7,
                QuestionDifficulty.MEDIUM,
                [QuestionCategory.DIVISION, QuestionCategory.WORD_PROBLEMS],
            )
        ]

    def test_start_new_game_when_previous_round_played_then_state_reset(self, engine):
        # Arrange
        engine.start_new_game()
        engine.answer_question("0")
        engine.select_variation(BodyPartType.EYES, "round-2")
        engine.next_question()

        # Act
        engine.reset_game()

        # Assert
        state = engine.snapshot()
        assert state.unlocked_styles == {}
        assert state.selected_variations == {}
        assert state.incorrect_questions == []
        assert state.quiz_results == []
        assert state.current_question_index == 0
        assert engine.statistics.total_games_played == 2

    def test_start_new_game_when_generator_raises_then_uses_fallback(self, clock, caplog):
        # Arrange
        engine = GameEngine(generator=FailingGenerator(), clock=clock)

        # Act
        engine.start_new_game()

        # Assert
        assert engine.questions == [build_fallback_question()]
        question = engine.current_question
        assert question.id == "fallback_1"
        assert question.question_text == "What is 5 + 3?"
        assert question.correct_answer == "8"
        assert question.options == ("7", "8", "9")
        assert question.answer_to_style == {
            "7": BodyPartStyle.SQUARE,
            "8": BodyPartStyle.ROUND,
            "9": BodyPartStyle.TRIANGLE,
        }
        assert "Question generation failed" in caplog.text

    def test_start_new_game_when_generator_returns_nothing_then_uses_fallback(self, clock):
        engine = GameEngine(generator=StubGenerator([]), clock=clock)

        engine.start_new_game()

        assert [q.id for q in engine.questions] == ["fallback_1"]
        assert engine.snapshot().total_questions == 1

    def test_fallback_round_when_answered_correctly_then_playable(self, clock):
        # Arrange
        engine = GameEngine(generator=FailingGenerator(), clock=clock)
        engine.start_new_game()

        # Act
        result = engine.answer_question("8")
        engine.next_question()

        # Assert
        assert result.is_correct is True
        assert engine.snapshot().unlocked_styles == {BodyPartType.EYES: BodyPartStyle.ROUND}
        assert engine.snapshot().current_phase is GamePhase.RESULTS
        assert engine.is_perfect_score is True

    def test_start_new_game_when_real_generator_then_count_matches_settings(self):
        engine = GameEngine(
            generator=QuestionGenerator(),
            settings=GameSettings(questions_per_quiz=5, categories=list(QuestionCategory)),
        )

        engine.start_new_game()

        assert len(engine.questions) == 5


class TestAnswerQuestion:
    def test_answer_question_when_no_game_then_noop(self, engine):
        # Act
        result = engine.answer_question("5")

        # Assert
        assert result is None
        assert engine.snapshot().quiz_results == []
        assert engine.statistics.question_performance == {}

    def test_answer_question_when_correct_then_score_and_performance_updated(
        self, engine, three_questions, clock
    ):
        # Arrange
        engine.start_new_game()
        clock.advance(4)

        # Act
        result = engine.answer_question(three_questions[0].correct_answer)

        # Assert
        assert result.is_correct is True
        assert result.time_spent_ms == 4000.0
        assert engine.snapshot().score == 1
        performance = engine.statistics.question_performance["q1"]
        assert (performance.correct, performance.total) == (1, 1)

    def test_answer_question_when_wrong_then_style_unlocked_anyway(self, engine, three_questions):
        # Arrange
        engine.start_new_game()
        question = three_questions[0]
        wrong = question.options[0]

        # Act
        result = engine.answer_question(wrong)

        # Assert
        assert result.is_correct is False
        assert engine.snapshot().unlocked_styles == {
            question.body_part: question.answer_to_style[wrong]
        }
        assert engine.snapshot().incorrect_questions == [question]
        performance = engine.statistics.question_performance["q1"]
        assert (performance.correct, performance.total) == (0, 1)

    def test_answer_question_when_round_finished_then_noop(self, engine):
        engine.start_new_game()
        _play_round(engine)

        assert engine.answer_question("5") is None
        assert len(engine.snapshot().quiz_results) == 3


class TestProgression:
    def test_next_question_when_three_answered_then_quiz_quiz_results(self, engine):
        # Arrange
        engine.start_new_game()

        # Act
        phases = _play_round(engine)

        # Assert
        assert phases == [GamePhase.QUIZ, GamePhase.QUIZ, GamePhase.RESULTS]
        assert engine.snapshot().current_question_index == 3
        assert engine.progress == pytest.approx(100.0)

    def test_next_question_when_first_pass_ends_then_statistics_untouched(self, engine):
        engine.start_new_game()
        _play_round(engine)

        stats = engine.statistics
        assert stats.best_score == 0
        assert stats.average_score == 0.0
        assert engine.achievements == []

    def test_progress_when_no_game_then_zero(self, engine):
        assert engine.progress == 0.0

    def test_progress_when_first_question_then_one_third(self, engine):
        engine.start_new_game()

        assert engine.progress == pytest.approx(100 / 3)

    def test_set_phase_when_called_then_phase_changes(self, engine):
        engine.start_new_game()

        engine.set_phase(GamePhase.SELECTION)

        assert engine.snapshot().current_phase is GamePhase.SELECTION


class TestCustomization:
    def test_can_customize_when_perfect_round_then_true(self, engine):
        # Arrange
        engine.start_new_game()
        _play_round(engine)

        # Act
        changed = engine.start_customization()

        # Assert
        assert engine.is_perfect_score is True
        assert engine.can_customize is True
        assert changed is True
        assert engine.snapshot().current_phase is GamePhase.CUSTOMIZATION

    def test_can_customize_when_two_of_three_then_false(self, engine):
        # Arrange
        engine.start_new_game()
        _play_round(engine, wrong_ids=frozenset({"q2"}))

        # Act
        changed = engine.start_customization()

        # Assert
        assert engine.snapshot().score == 2
        assert engine.can_customize is False
        assert changed is False
        assert engine.snapshot().current_phase is GamePhase.RESULTS

    def test_can_customize_when_feature_disabled_then_false(self, engine):
        engine.update_game_settings(enable_customization=False)
        engine.start_new_game()
        _play_round(engine)

        assert engine.is_perfect_score is True
        assert engine.can_customize is False
        assert engine.start_customization() is False

    def test_can_customize_when_no_questions_then_false(self, engine):
        assert engine.is_perfect_score is False
        assert engine.can_customize is False

    def test_select_variation_when_part_unlocked_then_favorite_recorded(self, engine, three_questions):
        # Arrange
        engine.start_new_game()
        question = three_questions[0]
        engine.answer_question(question.correct_answer)
        style = question.answer_to_style[question.correct_answer]

        # Act
        engine.select_variation(BodyPartType.EYES, f"{style.value}-3")

        # Assert
        assert engine.snapshot().selected_variations == {BodyPartType.EYES: f"{style.value}-3"}
        assert engine.statistics.favorite_styles == {BodyPartType.EYES: style}

    def test_select_variation_when_part_locked_then_no_favorite(self, engine):
        engine.start_new_game()

        engine.select_variation(BodyPartType.WINGS, "square-1")

        assert engine.snapshot().selected_variations == {BodyPartType.WINGS: "square-1"}
        assert engine.statistics.favorite_styles == {}


class TestRetryMode:
    def test_start_retry_mode_when_one_wrong_then_single_question_round(
        self, engine, three_questions
    ):
        # Arrange
        engine.start_new_game()
        _play_round(engine, wrong_ids=frozenset({"q2"}))

        # Act
        started = engine.start_retry_mode()

        # Assert
        assert started is True
        assert engine.questions == [three_questions[1]]
        state = engine.snapshot()
        assert state.is_retry_mode is True
        assert state.total_questions == 1
        assert state.current_phase is GamePhase.QUIZ
        assert state.incorrect_questions == []

    def test_retry_round_when_completed_then_results_and_statistics(self, engine, clock):
        # Arrange
        engine.start_new_game()
        _play_round(engine, wrong_ids=frozenset({"q2"}))
        engine.start_retry_mode()
        clock.advance(2)

        # Act
        phases = _play_round(engine)

        # Assert
        assert phases == [GamePhase.RESULTS]
        state = engine.snapshot()
        assert state.is_retry_mode is False
        assert state.total_time_spent_ms == 2000.0
        stats = engine.statistics
        assert stats.best_score == 1
        assert stats.average_score == pytest.approx(1.0)
        assert stats.total_time_played_ms == 2000.0
        assert engine.can_customize is True

    def test_retry_round_when_wrong_again_then_fresh_mistake_list(self, engine, three_questions):
        engine.start_new_game()
        _play_round(engine, wrong_ids=frozenset({"q1", "q3"}))
        engine.start_retry_mode()

        _play_round(engine, wrong_ids=frozenset({"q3"}))

        assert engine.snapshot().incorrect_questions == [three_questions[2]]
        assert engine.start_retry_mode() is True
        assert engine.questions == [three_questions[2]]

    def test_start_retry_mode_when_no_mistakes_then_refused(self, engine, three_questions):
        # Arrange
        engine.start_new_game()
        _play_round(engine)

        # Act
        started = engine.start_retry_mode()

        # Assert
        assert started is False
        assert engine.snapshot().is_retry_mode is False
        assert engine.snapshot().current_phase is GamePhase.RESULTS
        assert engine.questions == three_questions

    def test_start_retry_mode_when_retries_disabled_then_refused(self, engine):
        engine.update_game_settings(allow_retry=False)
        engine.start_new_game()
        _play_round(engine, wrong_ids=frozenset({"q1"}))

        assert engine.start_retry_mode() is False
        assert engine.snapshot().is_retry_mode is False

    def test_finish_retry_mode_when_called_directly_then_results(self, engine):
        engine.start_new_game()
        _play_round(engine, wrong_ids=frozenset({"q1"}))
        engine.start_retry_mode()

        engine.finish_retry_mode()

        assert engine.snapshot().current_phase is GamePhase.RESULTS
        assert engine.snapshot().is_retry_mode is False


class TestStatistics:
    def test_update_statistics_when_two_games_then_mean_and_best(self, clock):
        # Arrange
        first = [make_question(f"a{i}", 5) for i in range(3)]
        second = [make_question(f"b{i}", 6) for i in range(5)]
        engine = GameEngine(generator=StubGenerator(first, second), clock=clock)

        # Act
        engine.start_new_game()
        _play_round(engine)
        engine.update_statistics()
        engine.start_new_game()
        _play_round(engine)
        engine.update_statistics()

        # Assert
        stats = engine.statistics
        assert stats.total_games_played == 2
        assert stats.best_score == 5
        assert stats.average_score == pytest.approx(4.0)

    def test_update_statistics_when_five_games_then_achievement_once(self, engine):
        # Arrange
        for _ in range(5):
            engine.start_new_game()
            _play_round(engine)
            engine.update_statistics()

        # Act
        engine.update_statistics()

        # Assert
        assert [a.id for a in engine.achievements] == ["first_5_games"]

    def test_update_statistics_when_best_score_ten_then_perfect_score_achievement(self, clock):
        questions = [make_question(f"q{i}", 3) for i in range(10)]
        engine = GameEngine(generator=StubGenerator(questions), clock=clock)

        engine.start_new_game()
        _play_round(engine)
        engine.update_statistics()

        assert [a.id for a in engine.achievements] == ["perfect_score"]

    def test_update_statistics_when_time_passes_then_play_time_accumulates(self, engine, clock):
        engine.start_new_game()
        clock.advance(3)
        engine.update_statistics()

        assert engine.statistics.total_time_played_ms == 3000.0


class TestSettingsAndTables:
    def test_update_game_settings_when_partial_then_applies(self, engine):
        # Act
        settings = engine.update_game_settings(difficulty="hard", allow_hints=False)

        # Assert
        assert settings.difficulty is QuestionDifficulty.HARD
        assert engine.settings.allow_hints is False
        assert engine.settings.questions_per_quiz == 3

    def test_update_game_settings_when_invalid_then_previous_kept(self, engine):
        with pytest.raises(InvalidSettingsError):
            engine.update_game_settings(categories=[])

        assert engine.settings.categories == (QuestionCategory.ADDITION,)

    def test_get_style_tables_when_called_then_delegates_to_generator(self, engine):
        assert engine.get_part_style_mapping()[BodyPartType.LEGS] is BodyPartStyle.TRIANGLE
        assert engine.get_style_variations(BodyPartStyle.ROUND) == ["round-1", "round-2", "round-3"]


class TestQuestionImmutability:
    def test_current_question_when_style_mapping_mutated_then_raises_and_unlock_unchanged(
        self, engine
    ):
        # Arrange
        engine.start_new_game()
        question = engine.current_question

        # Act
        with pytest.raises(TypeError):
            question.answer_to_style["5"] = BodyPartStyle.TRIANGLE
        result = engine.answer_question("5")

        # Assert
        assert result.unlocked_style is BodyPartStyle.SQUARE

    def test_question_when_field_assigned_then_frozen(self):
        question = make_question("q1", 5)

        with pytest.raises(FrozenInstanceError):
            question.correct_answer = "6"

    def test_question_when_hashed_then_usable_in_sets(self, three_questions):
        assert len({*three_questions, make_question("q1", 5)}) == 3


class TestLocking:
    def test_answer_question_when_called_from_threads_then_every_answer_counted(self, clock):
        # Arrange
        question = make_question("only", 5)
        engine = GameEngine(generator=StubGenerator([question]), clock=clock)
        engine.start_new_game()

        # Act
        threads = [
            threading.Thread(target=engine.answer_question, args=("5",)) for _ in range(20)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # Assert
        assert len(engine.snapshot().quiz_results) == 20
        assert engine.statistics.question_performance["only"].total == 20

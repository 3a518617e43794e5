"""Canned word problems grouped by difficulty."""

from __future__ import annotations

from dataclasses import dataclass

from creature_quiz.core.models import QuestionDifficulty


@dataclass(slots=True, frozen=True)
class WordProblem:
    question_text: str
    answer: int
    hint: str


WORD_PROBLEMS: dict[QuestionDifficulty, tuple[WordProblem, ...]] = {
    QuestionDifficulty.EASY: (
        WordProblem(
            "If you have 3 apples and get 2 more, how many do you have?",
            5,
            "Count the apples you start with, then add the new ones!",
        ),
        WordProblem(
            "There are 4 birds on a tree and 3 more fly in. How many birds are there now?",
            7,
            "Add the birds that were there to the ones that flew in!",
        ),
    ),
    QuestionDifficulty.MEDIUM: (
        WordProblem(
            "A store has 25 books and sells 8. How many books are left?",
            17,
            "Start with the total books and subtract the ones sold!",
        ),
        WordProblem(
            "If each box has 6 toys and you have 4 boxes, how many toys do you have?",
            24,
            "Multiply the number of toys per box by the number of boxes!",
        ),
    ),
    QuestionDifficulty.HARD: (
        WordProblem(
            "A train travels 120 miles in 3 hours. How many miles does it travel per hour?",
            40,
            "Divide the total distance by the time taken!",
        ),
        WordProblem(
            "If you save $15 each week for 8 weeks, how much money will you have?",
            120,
            "Multiply the amount saved per week by the number of weeks!",
        ),
    ),
}


def word_problems_for(difficulty: QuestionDifficulty) -> tuple[WordProblem, ...]:
    return WORD_PROBLEMS[difficulty]

"""Game-related constants shared across the generator and the engine."""

DEFAULT_QUESTIONS_PER_QUIZ: int = 3

# Inclusive operand ranges per difficulty tier.
ADD_SUB_RANGES: dict[str, tuple[int, int]] = {
    "easy": (1, 10),
    "medium": (10, 59),
    "hard": (50, 149),
}
MUL_DIV_RANGES: dict[str, tuple[int, int]] = {
    "easy": (1, 5),
    "medium": (1, 10),
    "hard": (5, 19),
}

# Spread of wrong answers around the correct one.
DISTRACTOR_RANGES: dict[str, int] = {
    "easy": 3,
    "medium": 5,
    "hard": 10,
}
OPTIONS_PER_QUESTION: int = 3
# Rejected candidates tolerated before the distractor range doubles.
DISTRACTOR_ATTEMPTS_PER_RANGE: int = 20

GAMES_PLAYED_ACHIEVEMENT_THRESHOLD: int = 5
BEST_SCORE_ACHIEVEMENT_THRESHOLD: int = 10

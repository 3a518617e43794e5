"""Static metadata describing Creature Quiz."""

APP_NAME = "Creature Quiz"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "Creature Quiz is a maths quiz for children. Every answer unlocks a new look "
    "for one of your creature's body parts, and a perfect round lets you customize it."
)

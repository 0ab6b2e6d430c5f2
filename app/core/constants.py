"""Application constants."""

# Plan editor offers 1..12 sets per exercise
MAX_TARGET_SETS = 12

# Placeholder exercise name when a seeded entry has neither a name nor a plan counterpart
DEFAULT_EXERCISE_NAME = "Exercise"

"""
Shared constants.

This module has no dependencies on models or services to avoid circular imports.
"""

# XP granted when a user's stats are first created
STARTING_XP = 100

# Workout XP is floor(completion_percentage * WORKOUT_XP_RATE), max 50
WORKOUT_XP_RATE = 0.5

# Rough calorie estimate per minute of active workout time
CALORIES_PER_MINUTE = 5

DAYS_PER_WEEK = 7

# Step goal days tracked per week
DEFAULT_STEP_GOAL_DAYS = 7

# Used for week 1 when the plan schedule has no workout days to count
DEFAULT_WORKOUTS_PLANNED = 4

# Badge awarded on first initialization
STARTER_BADGE_KEY = "journey_begins"

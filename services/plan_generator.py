"""
LLM-backed plan generation.

Builds a plan request from the onboarding profile, calls the Anthropic
Messages API and validates the JSON document it returns. Only the parts
the progression engine depends on (milestones and the weekly schedule)
are checked; the rest of the document is stored as-is.
"""

import json
import logging
import random
import time
from dataclasses import dataclass
from math import floor
from typing import Any, Dict, Optional

from anthropic import (
    Anthropic,
    APIConnectionError,
    APIError,
    APIStatusError,
    RateLimitError,
)
from pydantic import ValidationError

from application.exceptions import PlanGenerationError
from models.generation import UserProfile
from models.progression import PlanDocument

logger = logging.getLogger(__name__)

LBS_TO_KG = 0.453592
DEFAULT_HEIGHT_CM = 178

# Moderate activity (3-5 workouts/week)
ACTIVITY_MULTIPLIER = 1.55

WORKOUT_FREQUENCY_DAYS = {
    "1-2 days per week": 2,
    "3-4 days per week": 4,
    "5-6 days per week": 5,
    "Every day": 6,
}
DEFAULT_DAYS_PER_WEEK = 4

PLAN_SYSTEM_PROMPT = (
    "You are an expert fitness coach. Output STRICT JSON ONLY, no markdown "
    "and no commentary. No medical advice."
)


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def calculate_bmr(profile: UserProfile) -> int:
    """Basal metabolic rate via Mifflin-St Jeor."""
    height_cm = profile.height_cm or DEFAULT_HEIGHT_CM
    weight_kg = (
        profile.current_weight
        if profile.weight_unit == "kg"
        else profile.current_weight * LBS_TO_KG
    )
    base = 10 * weight_kg + 6.25 * height_cm - 5 * profile.age
    return _round_half_up(base + 5 if profile.gender == "Male" else base - 161)


def calculate_tdee(bmr: int) -> int:
    return _round_half_up(bmr * ACTIVITY_MULTIPLIER)


def days_per_week(workout_frequency: str) -> int:
    return WORKOUT_FREQUENCY_DAYS.get(workout_frequency, DEFAULT_DAYS_PER_WEEK)


def build_plan_prompt(profile: UserProfile, bmr: int, tdee: int, days: int) -> str:
    """
    Build the user message for plan generation.

    Args:
        profile: Onboarding profile
        bmr: Basal metabolic rate
        tdee: Total daily energy expenditure
        days: Training days per week

    Returns:
        Prompt text
    """
    equipment = ", ".join(profile.available_equipment) or "bodyweight only"
    if profile.training_location == "commercial":
        equipment = "standard commercial gym equipment"

    return "\n".join([
        "Create a personalized training and nutrition plan.",
        "",
        f"Age: {profile.age}",
        f"Gender: {profile.gender}",
        f"Weight: {profile.current_weight} {profile.weight_unit}",
        f"Goal: {profile.fitness_goal}",
        f"Experience: {profile.experience_level}",
        f"Training location: {profile.training_location}",
        f"Equipment: {equipment}",
        f"BMR: ~{bmr} kcal/day, TDEE: ~{tdee} kcal/day",
        f"Days per week: {days}",
        "",
        "Return a JSON object with at least:",
        '- "milestones": [{"week_range": {"start": int, "end": int}, '
        '"title": str, "focus": [str]}] covering consecutive weeks from week 1',
        '- "weekly_plan": {"program_length_weeks": int, "days_per_week": int, '
        '"schedule": [{"day_label": str, "workout": [{"exercise": str, '
        '"sets": int, "reps": str, "rest_seconds": int}]}]} with 7 entries; '
        "rest days have an empty workout list",
        '- "nutrition": {"calorie_target_range": {"min": int, "max": int}, '
        '"macros_grams": {"protein": int, "carbs": int, "fat": int}}',
        f"Schedule EXACTLY {days} workout days.",
    ])


def extract_json(text: str) -> Dict[str, Any]:
    """
    Parse the first JSON object in an LLM response.

    Strips markdown code fences and any text around the object.

    Raises:
        json.JSONDecodeError: If no valid JSON object is present
    """
    content = text.strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else ""
    if content.endswith("```"):
        content = content.rsplit("```", 1)[0]

    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end == -1:
        raise json.JSONDecodeError("No JSON object found in response", content, 0)
    return json.loads(content[start:end + 1])


def _is_transient(error: APIError) -> bool:
    """Connection failures, timeouts and 5xx responses are worth retrying."""
    if isinstance(error, APIConnectionError):
        return True
    return isinstance(error, APIStatusError) and error.status_code >= 500


@dataclass
class GeneratedPlan:
    """A validated plan document plus the derived inputs used to build it."""

    document: PlanDocument
    bmr: int
    tdee: int
    days_per_week: int


class PlanGenerator:
    """
    Anthropic-powered plan generator.

    The client is injectable so tests can pass a mock.
    """

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_RETRIES = 1

    # Backoff configuration
    BASE_BACKOFF_SECONDS = 1.0
    RATE_LIMIT_BACKOFF_SECONDS = 5.0
    MAX_BACKOFF_SECONDS = 30.0

    def __init__(
        self,
        client: Optional[Anthropic] = None,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 16000,
        temperature: float = 0.7,
    ):
        """
        Initialize the generator.

        Args:
            client: Pre-built Anthropic client (takes precedence over api_key)
            api_key: Anthropic API key
            model: Model to use
            max_tokens: Output token limit
            temperature: Sampling temperature
        """
        if client is None and api_key is None:
            raise PlanGenerationError("Plan generation is not configured")
        self._client = client or Anthropic(api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    def generate(self, profile: UserProfile) -> GeneratedPlan:
        """
        Generate and validate a plan document.

        Args:
            profile: Onboarding profile

        Returns:
            GeneratedPlan

        Raises:
            PlanGenerationError: If no valid plan is produced after retries
        """
        bmr = calculate_bmr(profile)
        tdee = calculate_tdee(bmr)
        days = days_per_week(profile.workout_frequency)
        prompt = build_plan_prompt(profile, bmr, tdee, days)

        last_error: Optional[Exception] = None
        for attempt in range(self.MAX_RETRIES + 1):
            try:
                document = self._validate(extract_json(self._call_llm(prompt)))
                logger.info(
                    f"Generated plan with {len(document.milestones)} milestones and "
                    f"{len(document.workout_day_labels)} workout days"
                )
                return GeneratedPlan(document=document, bmr=bmr, tdee=tdee, days_per_week=days)
            except json.JSONDecodeError as e:
                last_error = e
                logger.warning(f"Failed to parse plan JSON on attempt {attempt + 1}: {e}")
            except (ValidationError, PlanGenerationError) as e:
                last_error = e
                logger.warning(f"Invalid plan document on attempt {attempt + 1}: {e}")
            except RateLimitError as e:
                last_error = e
                logger.warning(f"Rate limit error on attempt {attempt + 1}: {e}")
                self._backoff(attempt, self.RATE_LIMIT_BACKOFF_SECONDS)
            except (APIConnectionError, APIStatusError) as e:
                if not _is_transient(e):
                    logger.error(f"Anthropic API error during plan generation: {e}")
                    raise PlanGenerationError(f"Plan generation failed: {e}") from e
                last_error = e
                logger.warning(f"Transient Anthropic error on attempt {attempt + 1}: {e}")
                self._backoff(attempt, self.BASE_BACKOFF_SECONDS)
            except APIError as e:
                logger.error(f"Anthropic API error during plan generation: {e}")
                raise PlanGenerationError(f"Plan generation failed: {e}") from e

        raise PlanGenerationError(f"Plan generation failed: {last_error}") from last_error

    def _backoff(self, attempt: int, base_delay: float) -> None:
        """Sleep before the next attempt; no sleep after the last one."""
        if attempt >= self.MAX_RETRIES:
            return
        delay = min((2**attempt) * base_delay + random.uniform(0, 1), self.MAX_BACKOFF_SECONDS)
        logger.info(f"Backoff: sleeping {delay:.2f}s before retry")
        time.sleep(delay)

    def _call_llm(self, prompt: str) -> str:
        """Call the Anthropic Messages API and return the text content."""
        response = self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            system=PLAN_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
        if not response.content:
            raise PlanGenerationError("Model returned empty response")
        text = getattr(response.content[0], "text", "")
        if not text:
            raise PlanGenerationError("Model returned empty response")
        return text

    @staticmethod
    def _validate(data: Dict[str, Any]) -> PlanDocument:
        document = PlanDocument.model_validate(data)
        if not document.milestones:
            raise PlanGenerationError("Plan has no milestones")
        if not document.schedule:
            raise PlanGenerationError("Plan has no weekly schedule")
        return document

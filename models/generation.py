"""
Request and response models for plan generation.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from models.progression import Plan


class UserProfile(BaseModel):
    """Onboarding profile used to build the plan request."""

    full_name: Optional[str] = Field(None, max_length=200)
    age: int = Field(ge=13, le=100)
    gender: str = Field(description="'Male', 'Female' or other")
    height_cm: Optional[float] = Field(None, gt=0, le=272)
    current_weight: float = Field(gt=0)
    weight_unit: str = Field(default="lbs", pattern="^(lbs|kg)$")
    goal_weight: Optional[float] = Field(None, gt=0)
    fitness_goal: str = Field(min_length=1, max_length=200)
    experience_level: str = Field(default="beginner", max_length=50)
    workout_frequency: str = Field(default="3-4 days per week", max_length=50)
    training_location: str = Field(default="commercial", max_length=100)
    gym_name: Optional[str] = Field(None, max_length=200)
    available_equipment: List[str] = []


class GeneratePlanRequest(BaseModel):
    """Request model for plan generation."""

    profile: UserProfile


class GeneratePlanResponse(BaseModel):
    """Response model for plan generation."""

    plan: Plan
    bmr: int
    tdee: int
    days_per_week: int

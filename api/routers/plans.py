"""
Plans router.

This router provides:
- The user's active plan
- Plan generation from an onboarding profile; the generated plan becomes
  the active plan and any previous plan is archived
"""

import logging

from fastapi import APIRouter, Depends

from api.deps import get_current_user, get_plan_generator, get_progression_service
from models.generation import GeneratePlanRequest, GeneratePlanResponse
from models.progression import Plan
from services.plan_generator import PlanGenerator
from services.progression_service import ProgressionService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/plans",
    tags=["Plans"],
)


@router.get("/active", response_model=Plan)
def get_active_plan(
    user_id: str = Depends(get_current_user),
    service: ProgressionService = Depends(get_progression_service),
) -> Plan:
    return service.get_active_plan(user_id)


@router.post("/generate", response_model=GeneratePlanResponse)
def generate_plan(
    request: GeneratePlanRequest,
    user_id: str = Depends(get_current_user),
    service: ProgressionService = Depends(get_progression_service),
    generator: PlanGenerator = Depends(get_plan_generator),
) -> GeneratePlanResponse:
    """
    Generate a personalized plan and make it the active plan.

    Returns:
        GeneratePlanResponse with the stored plan and the BMR/TDEE/day
        count used to build the request

    Raises:
        PlanGenerationError (502) if the model does not return a valid plan
    """
    generated = generator.generate(request.profile)
    plan = service.activate_plan(user_id, generated.document)
    logger.info(f"Generated plan {plan.id} (v{plan.version}) for {user_id}")
    return GeneratePlanResponse(
        plan=plan,
        bmr=generated.bmr,
        tdee=generated.tdee,
        days_per_week=generated.days_per_week,
    )

from fastapi import APIRouter, Depends

from codescore.api.dependencies import get_profile_service
from codescore.models.profile import AggregationReport
from codescore.services.profile_service import ProfileService

router = APIRouter(prefix="/scores", tags=["scores"])


@router.post("/recompute", response_model=AggregationReport)
async def recompute_scores(service: ProfileService = Depends(get_profile_service)) -> AggregationReport:
    """Rebuild every known user's total score from their stored profiles."""
    return await service.recompute_all_user_scores()

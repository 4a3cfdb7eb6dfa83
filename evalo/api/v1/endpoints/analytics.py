from fastapi import APIRouter, Depends

from evalo.api.deps import get_analytics_service, get_current_dean
from evalo.models.profile import Profile
from evalo.schemas.analytics import GlobalAnalytics
from evalo.services.analytics import AnalyticsService

router = APIRouter()


@router.get("/", response_model=GlobalAnalytics)
async def get_global_analytics(
    analytics_service: AnalyticsService = Depends(get_analytics_service),
    current_dean: Profile = Depends(get_current_dean),
):
    """
    Organisation-wide feedback figures (deans only)
    """
    return await analytics_service.global_analytics(current_dean.organization_id)

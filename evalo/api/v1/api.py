from fastapi import APIRouter

from evalo.api.v1.endpoints import submissions, sentiment
from evalo.api.v1.endpoints import courses, events, feedback, analytics

api_router = APIRouter()

# Student-facing, no authentication
api_router.include_router(submissions.router, prefix="/submissions", tags=["submissions"])
api_router.include_router(sentiment.router, prefix="/sentiment", tags=["sentiment"])

# Teacher and dean dashboard
api_router.include_router(courses.router, prefix="/courses", tags=["courses"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(feedback.router, prefix="/feedback", tags=["feedback"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])


@api_router.get("/health")
async def health_check() -> dict:
    """
    Health check endpoint
    """
    return {"status": "healthy"}

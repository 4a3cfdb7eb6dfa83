from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from evalo.core.exceptions import AuthenticationError, AuthorizationError
from evalo.core.logging import get_logger
from evalo.core.security import decode_access_token
from evalo.db.session import get_db
from evalo.models.profile import Profile
from evalo.services.analytics import AnalyticsService
from evalo.services.course import CourseService
from evalo.services.event import EventService
from evalo.services.event_counter import EventCounterStore
from evalo.services.feedback import FeedbackSubmissionService
from evalo.services.sentiment import HttpSentimentClassifier, SentimentClassifier

logger = get_logger(__name__)

# Tokens are issued by the external auth provider; we only verify them
bearer_scheme = HTTPBearer(auto_error=False)

_sentiment_classifier: Optional[SentimentClassifier] = None


async def get_current_profile(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Profile:
    """
    Dependency to validate the bearer token and load the caller's profile

    Raises:
        AuthenticationError: no token, invalid token, or no profile for its subject
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated", "MISSING_TOKEN")

    token_data = decode_access_token(credentials.credentials)
    try:
        profile_id = UUID(token_data.sub)
    except ValueError:
        raise AuthenticationError("Token subject is not a profile ID", "INVALID_TOKEN")

    profile = await db.get(Profile, profile_id)
    if profile is None:
        logger.warning(f"No profile for token subject {profile_id}")
        raise AuthenticationError("Could not validate credentials", "PROFILE_NOT_FOUND")
    return profile


async def get_current_dean(
    current_profile: Annotated[Profile, Depends(get_current_profile)],
) -> Profile:
    if not current_profile.is_dean:
        raise AuthorizationError("Only deans can access this resource", "DEAN_REQUIRED")
    return current_profile


def get_sentiment_classifier() -> SentimentClassifier:
    """Process-wide classifier client"""
    global _sentiment_classifier
    if _sentiment_classifier is None:
        _sentiment_classifier = HttpSentimentClassifier()
    return _sentiment_classifier


def get_course_service(db: Annotated[AsyncSession, Depends(get_db)]) -> CourseService:
    return CourseService(db)


def get_event_service(db: Annotated[AsyncSession, Depends(get_db)]) -> EventService:
    return EventService(db)


def get_counter_store(db: Annotated[AsyncSession, Depends(get_db)]) -> EventCounterStore:
    return EventCounterStore(db)


def get_feedback_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    classifier: Annotated[SentimentClassifier, Depends(get_sentiment_classifier)],
) -> FeedbackSubmissionService:
    return FeedbackSubmissionService(db, classifier)


def get_analytics_service(db: Annotated[AsyncSession, Depends(get_db)]) -> AnalyticsService:
    return AnalyticsService(db)

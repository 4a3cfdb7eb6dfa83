from evalo.schemas.token import TokenPayload
from evalo.schemas.course import Course, CourseCreate, CourseUpdate
from evalo.schemas.event import (
    Event, EventCreate, EventUpdate, EventStatusUpdate, EventCounters,
    EventLookup, CounterReconciliation
)
from evalo.schemas.feedback import Feedback, FeedbackSubmit, FeedbackReviewUpdate, SubmissionReceipt
from evalo.schemas.sentiment import SentimentRequest, SentimentResponse, Classification
from evalo.schemas.analytics import (
    ToneBreakdown, WordCount, EventAnalytics, TrendPoint, CourseSummary,
    MonthlyTrendPoint, GlobalAnalytics
)

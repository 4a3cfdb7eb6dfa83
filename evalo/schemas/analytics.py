from typing import List

from pydantic import BaseModel


class ToneBreakdown(BaseModel):
    """Counts and shares per tone; percentages are 0 when total is 0"""
    total_feedback: int = 0
    positive_feedback: int = 0
    negative_feedback: int = 0
    neutral_feedback: int = 0
    positive_percentage: float = 0.0
    negative_percentage: float = 0.0
    neutral_percentage: float = 0.0


class WordCount(BaseModel):
    text: str
    value: int


class EventAnalytics(ToneBreakdown):
    common_words: List[WordCount] = []


class TrendPoint(BaseModel):
    date: str
    positive: int
    negative: int
    neutral: int
    total: int


class CourseSummary(ToneBreakdown):
    trend_data: List[TrendPoint] = []


class MonthlyTrendPoint(BaseModel):
    month: str
    positive: int = 0
    negative: int = 0
    neutral: int = 0
    total: int = 0


class GlobalAnalytics(ToneBreakdown):
    courses_count: int = 0
    events_count: int = 0
    monthly_trend_data: List[MonthlyTrendPoint] = []

import re
from collections import Counter, OrderedDict
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from evalo.models.course import Course
from evalo.models.event import Event
from evalo.models.feedback import Feedback, Tone
from evalo.schemas.analytics import (
    CourseSummary, EventAnalytics, GlobalAnalytics, MonthlyTrendPoint,
    ToneBreakdown, TrendPoint, WordCount
)

STOP_WORDS = frozenset("""
    i me my myself we our ours ourselves you your yours yourself yourselves
    he him his himself she her hers herself it its itself they them their
    theirs themselves what which who whom this that these those am is are
    was were be been being have has had having do does did doing a an the
    and but if or because as until while of at by for with about against
    between into through during before after above below to from up down
    in out on off over under again further then once here there when where
    why how all any both each few more most other some such no nor not only
    own same so than too very s t can will just don should now
""".split())

WORD_SPLIT = re.compile(r"\W+")
MIN_WORD_LENGTH = 3
COMMON_WORDS_LIMIT = 10


def percentage(part: int, total: int) -> float:
    return (part / total) * 100 if total > 0 else 0.0


def tone_breakdown(positive: int, negative: int, neutral: int, total: Optional[int] = None) -> dict:
    """Counts plus percentage shares; ``total`` defaults to the sum of the three"""
    total = positive + negative + neutral if total is None else total
    return dict(
        total_feedback=total,
        positive_feedback=positive,
        negative_feedback=negative,
        neutral_feedback=neutral,
        positive_percentage=percentage(positive, total),
        negative_percentage=percentage(negative, total),
        neutral_percentage=percentage(neutral, total),
    )


def common_words(contents: Iterable[str], limit: int = COMMON_WORDS_LIMIT) -> List[WordCount]:
    """
    Most frequent words across feedback texts

    Words are lower-cased and split on non-word characters; stop words and
    words shorter than three letters are ignored. Ties keep first-seen order.
    """
    counts: Counter = Counter()
    for content in contents:
        for word in WORD_SPLIT.split(content.lower()):
            if len(word) >= MIN_WORD_LENGTH and word not in STOP_WORDS:
                counts[word] += 1
    return [WordCount(text=word, value=value) for word, value in counts.most_common(limit)]


def count_tones(tones: Iterable[str]) -> Counter:
    counts = Counter(tones)
    return Counter({tone.value: counts.get(tone.value, 0) for tone in Tone})


class AnalyticsService:
    """Aggregations behind the dashboard charts"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def event_analytics(self, event_id: UUID) -> EventAnalytics:
        """Per-tone shares and common words, computed from the feedback rows"""
        stmt = select(Feedback.tone, Feedback.content).where(Feedback.event_id == event_id)
        rows = (await self.db.execute(stmt)).all()

        tones = count_tones(row.tone for row in rows)
        return EventAnalytics(
            **tone_breakdown(
                tones[Tone.POSITIVE.value],
                tones[Tone.NEGATIVE.value],
                tones[Tone.NEUTRAL.value],
                total=len(rows),
            ),
            common_words=common_words(row.content for row in rows),
        )

    async def course_summary(self, course_id: UUID) -> CourseSummary:
        """Totals and an oldest-first trend, read from the event counters"""
        stmt = (
            select(
                Event.event_date,
                Event.positive_feedback_count,
                Event.negative_feedback_count,
                Event.neutral_feedback_count,
                Event.total_feedback_count,
            )
            .where(Event.course_id == course_id)
            .order_by(Event.event_date.asc())
        )
        rows = (await self.db.execute(stmt)).all()
        if not rows:
            return CourseSummary()

        trend = [
            TrendPoint(
                date=row.event_date.date().isoformat(),
                positive=row.positive_feedback_count or 0,
                negative=row.negative_feedback_count or 0,
                neutral=row.neutral_feedback_count or 0,
                total=row.total_feedback_count or 0,
            )
            for row in rows
        ]
        return CourseSummary(
            **tone_breakdown(
                sum(p.positive for p in trend),
                sum(p.negative for p in trend),
                sum(p.neutral for p in trend),
                total=sum(p.total for p in trend),
            ),
            trend_data=trend,
        )

    async def global_analytics(self, organization_id: Optional[UUID]) -> GlobalAnalytics:
        """
        Organisation-wide figures computed from the feedback table rather than
        the event counters, with a monthly trend keyed ``YYYY-MM``
        """
        courses_count = await self.db.scalar(
            select(func.count(Course.id)).where(Course.organization_id == organization_id)
        )
        events_count = await self.db.scalar(
            select(func.count(Event.id)).where(Event.organization_id == organization_id)
        )
        stmt = (
            select(Feedback.tone, Feedback.created_at)
            .where(Feedback.organization_id == organization_id)
            .order_by(Feedback.created_at.asc())
        )
        rows = (await self.db.execute(stmt)).all()

        monthly: "OrderedDict[str, MonthlyTrendPoint]" = OrderedDict()
        for row in rows:
            if row.created_at is None:
                continue
            month = row.created_at.strftime("%Y-%m")
            point = monthly.setdefault(month, MonthlyTrendPoint(month=month))
            point.total += 1
            if row.tone in (Tone.POSITIVE.value, Tone.NEGATIVE.value, Tone.NEUTRAL.value):
                setattr(point, row.tone, getattr(point, row.tone) + 1)

        tones = count_tones(row.tone for row in rows)
        return GlobalAnalytics(
            **tone_breakdown(
                tones[Tone.POSITIVE.value],
                tones[Tone.NEGATIVE.value],
                tones[Tone.NEUTRAL.value],
                total=len(rows),
            ),
            courses_count=courses_count or 0,
            events_count=events_count or 0,
            monthly_trend_data=list(monthly.values()),
        )

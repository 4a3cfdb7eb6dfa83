"""
HTTP layer tests: routing, authentication and error mapping
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from evalo.api.deps import (
    get_current_profile, get_feedback_service, get_sentiment_classifier
)
from evalo.core.config import get_settings
from evalo.core.exceptions import ClassificationUnavailableError, InvalidCodeError
from evalo.core.security import create_access_token
from evalo.db.session import get_db
from evalo.main import app
from evalo.models.feedback import Tone
from evalo.models.profile import Profile, ProfileRole

settings = get_settings()
API = settings.API_V1_STR


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def use_database(session_factory):
    """Route the app's sessions to the per-test SQLite database"""
    async def _get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db


def _auth(profile) -> dict:
    return {"Authorization": f"Bearer {create_access_token(profile.id)}"}


class TestPublicEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get(f"{API}/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "online"


class TestSubmissionEndpoints:

    @pytest.mark.asyncio
    async def test_invalid_code_is_400(self, client):
        service = MagicMock()
        service.submit = AsyncMock(side_effect=InvalidCodeError())
        app.dependency_overrides[get_feedback_service] = lambda: service

        response = await client.post(f"{API}/submissions/", json={"access_code": "ZZ99", "content": "Hi"})

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid or expired access code", "error_code": "INVALID_CODE"}

    @pytest.mark.asyncio
    async def test_classifier_outage_is_503(self, client):
        service = MagicMock()
        service.submit = AsyncMock(side_effect=ClassificationUnavailableError("Sentiment service unreachable"))
        app.dependency_overrides[get_feedback_service] = lambda: service

        response = await client.post(f"{API}/submissions/", json={"access_code": "AB12", "content": "Hi"})

        assert response.status_code == 503
        assert response.json()["error_code"] == "CLASSIFICATION_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_database_error_is_generic_500(self, client):
        service = MagicMock()
        service.submit = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk full")))
        app.dependency_overrides[get_feedback_service] = lambda: service

        response = await client.post(f"{API}/submissions/", json={"access_code": "AB12", "content": "Hi"})

        assert response.status_code == 500
        assert response.json() == {"detail": "A database error occurred"}

    @pytest.mark.asyncio
    async def test_missing_fields_are_422(self, client):
        response = await client.post(f"{API}/submissions/", json={"access_code": "AB12"})

        assert response.status_code == 422


class TestSentimentEndpoint:

    @pytest.mark.asyncio
    async def test_proxy_returns_camel_case_scores(self, client, stub_classifier_cls):
        classifier = stub_classifier_cls(tone=Tone.NEUTRAL)
        app.dependency_overrides[get_sentiment_classifier] = lambda: classifier

        response = await client.post(f"{API}/sentiment/", json={"text": "It was fine", "show_details": True})

        assert response.status_code == 200
        body = response.json()
        assert body["sentiment"] == "neutral"
        assert "detailedScores" in body

    @pytest.mark.asyncio
    async def test_empty_text_is_400(self, client, classifier):
        app.dependency_overrides[get_sentiment_classifier] = lambda: classifier

        response = await client.post(f"{API}/sentiment/", json={"text": "   "})

        assert response.status_code == 400
        assert classifier.calls == []

    @pytest.mark.asyncio
    async def test_upstream_failure_is_503(self, client, unavailable_classifier):
        app.dependency_overrides[get_sentiment_classifier] = lambda: unavailable_classifier

        response = await client.post(f"{API}/sentiment/", json={"text": "Hello"})

        assert response.status_code == 503
        assert response.json()["detail"] == "Sentiment service unreachable"


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, client, use_database):
        response = await client.get(f"{API}/courses/")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_garbage_token_is_401(self, client, use_database):
        response = await client.get(f"{API}/courses/", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_token_for_unknown_profile_is_401(self, client, use_database):
        response = await client.get(f"{API}/courses/", headers=_auth(MagicMock(id=uuid.uuid4())))

        assert response.status_code == 401
        assert response.json()["error_code"] == "PROFILE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_global_analytics_requires_dean(self, client, use_database):
        teacher = Profile(id=uuid.uuid4(), email="t@school.example", role=ProfileRole.TEACHER.value)
        app.dependency_overrides[get_current_profile] = lambda: teacher

        response = await client.get(f"{API}/analytics/")

        assert response.status_code == 403
        assert response.json()["error_code"] == "DEAN_REQUIRED"


class TestDashboardFlow:
    """A teacher runs a session end to end against a real database"""

    @pytest.mark.asyncio
    async def test_course_event_submission_lifecycle(
        self, client, use_database, stub_classifier_cls, make_profile
    ):
        teacher = await make_profile()
        headers = _auth(teacher)
        classifier = stub_classifier_cls(tones=[Tone.POSITIVE, Tone.NEGATIVE])
        app.dependency_overrides[get_sentiment_classifier] = lambda: classifier

        response = await client.post(f"{API}/courses/", json={"name": "Algorithms", "code": "CS201"}, headers=headers)
        assert response.status_code == 201
        course_id = response.json()["id"]

        response = await client.post(
            f"{API}/courses/{course_id}/events", json={"event_date": "2026-03-02T10:00:00Z"}, headers=headers
        )
        assert response.status_code == 201
        event = response.json()
        code = event["entry_code"]
        assert event["status"] == "open"
        assert event["total_feedback_count"] == 0

        response = await client.get(f"{API}/submissions/{code.lower()}")
        assert response.status_code == 200
        assert response.json()["course_code"] == "CS201"

        for content in ("Great lecture!", "Confusing assignment"):
            response = await client.post(f"{API}/submissions/", json={"access_code": code, "content": content})
            assert response.status_code == 201
            assert response.json() == {"status": "received"}

        response = await client.get(f"{API}/events/{event['id']}/feedback", headers=headers)
        assert response.status_code == 200
        feedback = {item["tone"]: item["id"] for item in response.json()}
        assert set(feedback) == {"positive", "negative"}

        response = await client.delete(f"{API}/feedback/{feedback['positive']}", headers=headers)
        assert response.status_code == 204

        response = await client.get(f"{API}/events/{event['id']}", headers=headers)
        counters = response.json()
        assert (
            counters["positive_feedback_count"],
            counters["negative_feedback_count"],
            counters["neutral_feedback_count"],
            counters["total_feedback_count"],
        ) == (0, 1, 0, 1)

        response = await client.get(f"{API}/events/{event['id']}/analytics", headers=headers)
        assert response.json()["negative_percentage"] == 100.0

        response = await client.post(f"{API}/events/{event['id']}/status", json={"status": "closed"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["status"] == "closed"

        response = await client.get(f"{API}/submissions/{code}")
        assert response.status_code == 400

        response = await client.post(f"{API}/events/{event['id']}/status", json={"status": "open"}, headers=headers)
        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_EVENT_STATE"

        response = await client.post(f"{API}/events/{event['id']}/reconcile", headers=headers)
        assert response.status_code == 200
        assert response.json()["actual"] == {"positive": 0, "negative": 1, "neutral": 0, "total": 1}

    @pytest.mark.asyncio
    async def test_teacher_cannot_touch_another_teachers_course(
        self, client, use_database, make_profile, make_course
    ):
        owner = await make_profile()
        intruder = await make_profile()
        course = await make_course(owner)

        response = await client.get(f"{API}/courses/{course.id}", headers=_auth(intruder))

        assert response.status_code == 403
        assert response.json()["error_code"] == "COURSE_FORBIDDEN"

    @pytest.mark.asyncio
    async def test_dean_sees_organization_courses(
        self, client, use_database, make_profile, make_course
    ):
        dean = await make_profile(role=ProfileRole.DEAN)
        await make_course(await make_profile(), code="CS201")
        await make_course(await make_profile(organization=uuid.uuid4()), code="EXT1")

        response = await client.get(f"{API}/courses/", headers=_auth(dean))

        assert response.status_code == 200
        assert [c["code"] for c in response.json()] == ["CS201"]

        response = await client.get(f"{API}/analytics/", headers=_auth(dean))
        assert response.status_code == 200
        assert response.json()["courses_count"] == 1


class TestCourseEndpoints:
    """Course edits and removal over HTTP"""

    @pytest.mark.asyncio
    async def test_patch_updates_sent_fields_and_ignores_nulls(
        self, client, use_database, make_profile, make_course
    ):
        """A null name is a no-op instead of a database error"""
        teacher = await make_profile()
        course = await make_course(teacher, name="Algorithms", code="CS201")

        response = await client.patch(
            f"{API}/courses/{course.id}", json={"name": None, "cycle": "2026-1"}, headers=_auth(teacher)
        )

        assert response.status_code == 200
        body = response.json()
        assert (body["name"], body["code"], body["cycle"]) == ("Algorithms", "CS201", "2026-1")

    @pytest.mark.asyncio
    async def test_patch_by_another_teacher_is_403(self, client, use_database, make_profile, make_course):
        """Only the owner or a dean may edit a course"""
        course = await make_course(await make_profile())

        response = await client.patch(
            f"{API}/courses/{course.id}", json={"name": "Hijacked"}, headers=_auth(await make_profile())
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_removes_course_and_its_events(
        self, client, use_database, classifier, make_profile, make_course, make_event
    ):
        """After deletion the course, its events and their codes are gone"""
        teacher = await make_profile()
        headers = _auth(teacher)
        course = await make_course(teacher)
        event = await make_event(course, entry_code="AB12")
        app.dependency_overrides[get_sentiment_classifier] = lambda: classifier

        response = await client.post(f"{API}/submissions/", json={"access_code": "AB12", "content": "Great lecture!"})
        assert response.status_code == 201

        response = await client.delete(f"{API}/courses/{course.id}", headers=headers)
        assert response.status_code == 204

        response = await client.get(f"{API}/courses/{course.id}", headers=headers)
        assert response.status_code == 404

        response = await client.get(f"{API}/events/{event.id}", headers=headers)
        assert response.status_code == 404

        response = await client.get(f"{API}/submissions/AB12")
        assert response.status_code == 400

"""
Tests for the HTTP sentiment classifier client
"""

import json

import httpx
import pytest

from evalo.core.exceptions import ClassificationUnavailableError
from evalo.models.feedback import Tone
from evalo.services.sentiment import HttpSentimentClassifier

API_URL = "http://sentiment.test/analyze"


def _classifier(handler, show_details=False):
    return HttpSentimentClassifier(
        api_url=API_URL,
        timeout=2.0,
        show_details=show_details,
        transport=httpx.MockTransport(handler),
    )


class TestHttpSentimentClassifier:

    @pytest.mark.asyncio
    async def test_successful_classification(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={
                "sentiment": "Negative",
                "confidence": 0.87,
                "detailed_scores": {"negative": 0.87, "neutral": 0.1, "positive": 0.03},
            })

        result = await _classifier(handler, show_details=True).classify("Confusing assignment")

        assert result.tone == Tone.NEGATIVE
        assert result.confidence == pytest.approx(0.87)
        assert result.detailed_scores["negative"] == pytest.approx(0.87)
        assert str(requests[0].url) == API_URL
        assert json.loads(requests[0].content) == {"text": "Confusing assignment", "show_details": True}

    @pytest.mark.asyncio
    async def test_show_details_can_be_overridden_per_call(self):
        payloads = []

        def handler(request: httpx.Request) -> httpx.Response:
            payloads.append(json.loads(request.content))
            return httpx.Response(200, json={"sentiment": "neutral", "confidence": 0.5})

        result = await _classifier(handler, show_details=False).classify("ok", show_details=True)

        assert result.tone == Tone.NEUTRAL
        assert result.detailed_scores is None
        assert payloads == [{"text": "ok", "show_details": True}]

    @pytest.mark.asyncio
    async def test_upstream_error_carries_detail_and_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"detail": "model not loaded"})

        with pytest.raises(ClassificationUnavailableError) as exc_info:
            await _classifier(handler).classify("text")

        assert exc_info.value.message == "model not loaded"
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ClassificationUnavailableError):
            await _classifier(handler).classify("text")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["positive"]),
        httpx.Response(200, json={"sentiment": "ecstatic", "confidence": 0.9}),
        httpx.Response(200, json={"confidence": 0.9}),
        httpx.Response(200, json={"sentiment": "positive", "confidence": "very"}),
    ])
    async def test_unusable_answers(self, response):
        with pytest.raises(ClassificationUnavailableError):
            await _classifier(lambda request: response).classify("text")

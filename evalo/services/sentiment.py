from abc import ABC, abstractmethod
from typing import Optional

import httpx
from pydantic import ValidationError as SchemaValidationError

from evalo.core.config import get_settings
from evalo.core.exceptions import ClassificationUnavailableError
from evalo.core.logging import get_logger
from evalo.models.feedback import Tone
from evalo.schemas.sentiment import Classification

settings = get_settings()
logger = get_logger(__name__)


class SentimentClassifier(ABC):
    """Capability interface: text in, tone out, or an explicit failure"""

    @abstractmethod
    async def classify(self, text: str, show_details: Optional[bool] = None) -> Classification:
        """
        Classify ``text`` into a tone

        Raises:
            ClassificationUnavailableError: the classifier could not answer
        """
        pass


class HttpSentimentClassifier(SentimentClassifier):
    """
    Client of the external sentiment-analysis model API

    The API accepts ``{"text": ..., "show_details": ...}`` and answers with
    ``{"sentiment": ..., "confidence": ..., "detailed_scores": {...}}``.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        show_details: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or settings.SENTIMENT_API_URL
        self.timeout = timeout or settings.SENTIMENT_TIMEOUT
        self.show_details = settings.SENTIMENT_SHOW_DETAILS if show_details is None else show_details
        self._transport = transport

    async def classify(self, text: str, show_details: Optional[bool] = None) -> Classification:
        payload = {
            "text": text,
            "show_details": self.show_details if show_details is None else show_details,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Sentiment service unreachable at {self.api_url}: {e}")
            raise ClassificationUnavailableError(f"Sentiment service unreachable: {e}")

        if response.is_error:
            detail = self._error_detail(response)
            logger.error(f"Sentiment service returned {response.status_code}: {detail}")
            raise ClassificationUnavailableError(detail, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise ClassificationUnavailableError("Sentiment service returned a non-JSON body")

        if not isinstance(data, dict):
            raise ClassificationUnavailableError("Sentiment service returned an unexpected body")

        label = str(data.get("sentiment") or "").strip().lower()
        try:
            tone = Tone(label)
        except ValueError:
            raise ClassificationUnavailableError(f"Unknown sentiment label: {data.get('sentiment')!r}")

        try:
            return Classification(
                tone=tone,
                confidence=data.get("confidence"),
                detailed_scores=data.get("detailed_scores"),
            )
        except SchemaValidationError as e:
            raise ClassificationUnavailableError(f"Malformed sentiment response: {e.error_count()} error(s)")

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or "Error analyzing sentiment"
        if isinstance(body, dict) and body.get("detail"):
            return str(body["detail"])
        return "Error analyzing sentiment"

from fastapi import APIRouter, Depends, HTTPException, status

from evalo.api.deps import get_sentiment_classifier
from evalo.schemas.sentiment import SentimentRequest, SentimentResponse
from evalo.services.sentiment import SentimentClassifier

router = APIRouter()


@router.post("/", response_model=SentimentResponse)
async def analyze_sentiment(
    request: SentimentRequest,
    classifier: SentimentClassifier = Depends(get_sentiment_classifier),
):
    """
    Forward text to the sentiment model and return its classification
    """
    text = request.text.strip()
    if not text:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No text provided"
        )

    result = await classifier.classify(text, show_details=request.show_details)
    return SentimentResponse(
        sentiment=result.tone,
        confidence=result.confidence,
        detailed_scores=result.detailed_scores,
    )

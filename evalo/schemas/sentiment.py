from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from evalo.models.feedback import Tone


class SentimentRequest(BaseModel):
    text: str = Field("", description="Text to classify")
    show_details: bool = Field(False, description="Ask the model for per-label scores")


class Classification(BaseModel):
    """Classifier answer; tone is authoritative for the submission"""
    tone: Tone
    confidence: Optional[float] = None
    detailed_scores: Optional[Dict[str, float]] = None


class SentimentResponse(BaseModel):
    sentiment: Tone
    confidence: Optional[float] = None
    detailed_scores: Optional[Dict[str, float]] = Field(None, alias="detailedScores")

    model_config = ConfigDict(populate_by_name=True)

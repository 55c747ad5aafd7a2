"""
Analysis and image-generation schemas.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AnalysisOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    dream_id: int
    symbolism: Optional[str] = None
    emotional_analysis: Optional[str] = None
    psychological_insight: Optional[str] = None
    created_at: str


class AnalysisResponse(BaseModel):
    analysis: Optional[AnalysisOut] = None


class ImageRequest(BaseModel):
    title: str = Field(description="Dream title used in the prompt.")
    content: str = Field(description="Dream text; only the first 200 characters are used.")


class ImageResponse(BaseModel):
    url: str

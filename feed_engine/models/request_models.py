# Pydantic models for incoming API requests
from pydantic import BaseModel, Field


class ProgressRequest(BaseModel):
    video_id: str
    progress: float = Field(..., description="Fraction watched, 0.0 - 1.0")


class SearchRequest(BaseModel):
    query: str = ""


class RefreshRequest(BaseModel):
    hard: bool = False

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class LearningLevel(str, Enum):
    beginner = "Beginner"
    intermediate = "Intermediate"
    advanced = "Advanced"


# ── Request ──────────────────────────────────────────────────────────────────

class LearningPathRequest(BaseModel):
    """Request body for learning path generation."""
    topic: str = Field(..., min_length=1, description="Subject to plan a journey for")
    level: LearningLevel = Field(default=LearningLevel.beginner)


# ── Response ─────────────────────────────────────────────────────────────────

class LearningStep(BaseModel):
    """One "game level" of the journey."""
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    estimated_time: str = Field(..., alias="estimatedTime")
    key_concepts: List[str] = Field(default_factory=list, alias="keyConcepts")


class LearningPath(BaseModel):
    topic: str
    steps: List[LearningStep] = Field(..., min_length=1)

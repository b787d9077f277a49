"""
StudyBuddy — Shared Response Envelopes
=======================================
Every error from this API is wrapped in ErrorResponse.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class RenderVariant(str, Enum):
    standard = "standard"
    handwritten = "handwritten"


class NotesResponse(BaseModel):
    """Generated notes as raw markdown plus the rendered HTML."""
    markdown: str
    html: str
    variant: RenderVariant


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    model: str
    api_key_configured: bool
    warnings: List[str] = []


class ErrorResponse(BaseModel):
    """Standard error envelope."""
    status: str = "error"
    message: str
    detail: Optional[str] = None

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


GRADE_OPTIONS = ["Class 8", "Class 9", "Class 10", "Class 11", "Class 12", "College"]
EXAM_OPTIONS = ["School Exams", "JEE Mains/Adv", "NEET", "UPSC", "SAT", "Learning for Fun"]


class Theme(str, Enum):
    light = "light"
    dark = "dark"


# ── Stored Entity ────────────────────────────────────────────────────────────

class UserProfile(BaseModel):
    """Student profile. Stored camelCase under the `studyBuddyProfile` key."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    grade: str = ""
    target_exam: str = Field(default="", alias="targetExam")
    is_onboarded: bool = Field(default=False, alias="isOnboarded")


# ── Requests ─────────────────────────────────────────────────────────────────

class OnboardingRequest(BaseModel):
    """All three fields are required to finish onboarding."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    grade: str = Field(..., min_length=1)
    target_exam: str = Field(..., min_length=1, alias="targetExam")


class ProfileUpdate(BaseModel):
    """Settings edit: only the provided fields change."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1)
    grade: Optional[str] = Field(default=None, min_length=1)
    target_exam: Optional[str] = Field(default=None, min_length=1, alias="targetExam")


class ThemeUpdate(BaseModel):
    theme: Theme


# ── Responses ────────────────────────────────────────────────────────────────

class ProfileOptions(BaseModel):
    grades: List[str] = GRADE_OPTIONS
    exams: List[str] = EXAM_OPTIONS
    levels: List[str]

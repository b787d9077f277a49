from studybuddy.schemas.chat import ChatHistory, ChatMessage, ChatTurnResponse
from studybuddy.schemas.common import ErrorResponse, HealthResponse, NotesResponse, RenderVariant
from studybuddy.schemas.learning_path import (
    LearningLevel,
    LearningPath,
    LearningPathRequest,
    LearningStep,
)
from studybuddy.schemas.mindmap import MindMapNode, MindMapRequest
from studybuddy.schemas.profile import (
    EXAM_OPTIONS,
    GRADE_OPTIONS,
    OnboardingRequest,
    ProfileOptions,
    ProfileUpdate,
    Theme,
    ThemeUpdate,
    UserProfile,
)

__all__ = [
    "ChatHistory",
    "ChatMessage",
    "ChatTurnResponse",
    "ErrorResponse",
    "HealthResponse",
    "NotesResponse",
    "RenderVariant",
    "LearningLevel",
    "LearningPath",
    "LearningPathRequest",
    "LearningStep",
    "MindMapNode",
    "MindMapRequest",
    "EXAM_OPTIONS",
    "GRADE_OPTIONS",
    "OnboardingRequest",
    "ProfileOptions",
    "ProfileUpdate",
    "Theme",
    "ThemeUpdate",
    "UserProfile",
]

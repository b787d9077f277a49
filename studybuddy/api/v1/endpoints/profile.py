import logging

from fastapi import APIRouter, Depends

from studybuddy.api.deps import get_state
from studybuddy.schemas.learning_path import LearningLevel
from studybuddy.schemas.profile import (
    OnboardingRequest,
    ProfileOptions,
    ProfileUpdate,
    ThemeUpdate,
    UserProfile,
)
from studybuddy.services.state_store import StudyState

logger = logging.getLogger(__name__)

router = APIRouter()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 1. PROFILE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.get("/profile", response_model=UserProfile)
async def read_profile(state: StudyState = Depends(get_state)):
    return state.profile


@router.get("/profile/options", response_model=ProfileOptions)
async def profile_options():
    """Choices offered by the onboarding form."""
    return ProfileOptions(levels=[level.value for level in LearningLevel])


@router.post("/profile/onboard", response_model=UserProfile)
async def onboard(request: OnboardingRequest, state: StudyState = Depends(get_state)):
    """One-time profile collection. Also seeds the tutor's welcome message."""
    return state.complete_onboarding(request)


@router.put("/profile", response_model=UserProfile)
async def edit_profile(update: ProfileUpdate, state: StudyState = Depends(get_state)):
    return state.update_profile(update)


@router.post("/profile/reset", response_model=UserProfile)
async def reset_profile(state: StudyState = Depends(get_state)):
    logger.info("[STATE] Profile reset to un-onboarded")
    return state.reset_profile()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 2. THEME
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.get("/theme", response_model=ThemeUpdate)
async def read_theme(state: StudyState = Depends(get_state)):
    return ThemeUpdate(theme=state.theme)


@router.put("/theme", response_model=ThemeUpdate)
async def set_theme(update: ThemeUpdate, state: StudyState = Depends(get_state)):
    return ThemeUpdate(theme=state.set_theme(update.theme))

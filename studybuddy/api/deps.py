from fastapi import Depends, HTTPException, Request

from studybuddy.services.state_store import StudyState


def get_state(request: Request) -> StudyState:
    return request.app.state.study


def require_onboarded(state: StudyState = Depends(get_state)) -> StudyState:
    """Generative routes are gated behind onboarding."""
    if not state.profile.is_onboarded:
        raise HTTPException(status_code=403, detail="Complete onboarding first.")
    return state

"""
StudyBuddy — Application State
===============================
One explicit state object owned by the app. Profile and theme are mirrored
to a small JSON "local storage" file on every change; chat history and the
latest generated artifacts live for the session only.
"""

import json
import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from studybuddy.core.errors import ActionInProgressError
from studybuddy.schemas.chat import ChatMessage
from studybuddy.schemas.learning_path import LearningPath
from studybuddy.schemas.mindmap import MindMapNode
from studybuddy.schemas.profile import OnboardingRequest, ProfileUpdate, Theme, UserProfile

logger = logging.getLogger(__name__)

PROFILE_KEY = "studyBuddyProfile"
THEME_KEY = "theme"

ACTIONS = ("notes", "mindmap", "learning_path", "chat")

WELCOME_MESSAGE_ID = "init"
IMAGE_PLACEHOLDER = "(sent an image)"


def welcome_text(profile: UserProfile) -> str:
    return (
        f"Hi {profile.name}! I'm Professor Nova 👩‍🏫. \n\n"
        f"I see you're in **{profile.grade}** preparing for **{profile.target_exam}**. \n\n"
        "I'm here to help you ace it! Ask me anything, generate notes, or upload a problem."
    )


class StudyState:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.profile = UserProfile()
        self.theme = Theme.light
        self.chat_history: List[ChatMessage] = []
        self.latest_notes: Optional[str] = None
        self.latest_mind_map: Optional[MindMapNode] = None
        self.latest_learning_path: Optional[LearningPath] = None
        self._locks: Dict[str, asyncio.Lock] = {action: asyncio.Lock() for action in ACTIONS}

    # ── Persistence ──────────────────────────────────────────────────────────

    @classmethod
    def load(cls, path: Union[str, Path]) -> "StudyState":
        """Read the storage file; a missing or unreadable file means defaults."""
        state = cls(path)
        if not state.path.exists():
            logger.info(f"[STATE] No storage at {state.path}, starting fresh")
            return state

        try:
            raw = json.loads(state.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"[STATE] Could not read {state.path}: {e}. Using defaults.")
            return state

        if not isinstance(raw, dict):
            logger.warning(f"[STATE] {state.path} is not a JSON object. Using defaults.")
            return state

        if raw.get(PROFILE_KEY) is not None:
            try:
                state.profile = UserProfile.model_validate(raw[PROFILE_KEY])
            except ValidationError as e:
                logger.warning(f"[STATE] Stored profile invalid ({e.error_count()} errors), ignoring")

        try:
            state.theme = Theme(raw.get(THEME_KEY, Theme.light.value))
        except ValueError:
            logger.warning(f"[STATE] Unknown stored theme {raw.get(THEME_KEY)!r}, using light")

        logger.info(f"[STATE] ✓ Loaded profile (onboarded={state.profile.is_onboarded}), theme={state.theme.value}")
        return state

    def save(self, profile: Optional[UserProfile] = None, theme: Optional[Theme] = None) -> None:
        """Write profile and theme; callers pass new values and assign only after this succeeds."""
        payload = {
            PROFILE_KEY: (self.profile if profile is None else profile).model_dump(by_alias=True),
            THEME_KEY: (self.theme if theme is None else theme).value,
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)

    # ── Profile ──────────────────────────────────────────────────────────────

    def complete_onboarding(self, request: OnboardingRequest) -> UserProfile:
        profile = UserProfile(
            name=request.name,
            grade=request.grade,
            target_exam=request.target_exam,
            is_onboarded=True,
        )
        self.save(profile=profile)
        self.profile = profile
        if not self.chat_history:
            self.chat_history.append(
                ChatMessage(id=WELCOME_MESSAGE_ID, role="model", text=welcome_text(self.profile))
            )
        logger.info(f"[STATE] ✓ Onboarded {self.profile.name} ({self.profile.grade}, {self.profile.target_exam})")
        return self.profile

    def update_profile(self, update: ProfileUpdate) -> UserProfile:
        changes = update.model_dump(exclude_none=True)
        profile = self.profile.model_copy(update=changes)
        self.save(profile=profile)
        self.profile = profile
        return self.profile

    def reset_profile(self) -> UserProfile:
        """Back to un-onboarded; the profile itself is never deleted."""
        profile = self.profile.model_copy(update={"is_onboarded": False})
        self.save(profile=profile)
        self.profile = profile
        return self.profile

    def set_theme(self, theme: Theme) -> Theme:
        theme = Theme(theme)
        self.save(theme=theme)
        self.theme = theme
        return self.theme

    # ── Chat ─────────────────────────────────────────────────────────────────

    def append_message(self, message: ChatMessage) -> ChatMessage:
        self.chat_history.append(message)
        return message

    def clear_chat(self) -> None:
        self.chat_history = []

    def model_history(self) -> List[dict]:
        """
        Prior turns in the shape the chat API expects.

        Error turns are skipped. Image bytes are not replayed, so an
        image-only user turn is sent as a short placeholder. Consecutive
        turns from the same role (left behind by a skipped error turn) are
        merged into one turn so roles keep alternating.
        """
        history: List[dict] = []
        for message in self.chat_history:
            if message.is_error:
                continue
            text = message.text
            if not text:
                if message.role != "user" or not message.image:
                    continue
                text = IMAGE_PLACEHOLDER
            if history and history[-1]["role"] == message.role:
                history[-1]["parts"].append(text)
            else:
                history.append({"role": message.role, "parts": [text]})
        return history

    # ── Generated artifacts ──────────────────────────────────────────────────

    def set_notes(self, markdown: str) -> None:
        self.latest_notes = markdown

    def set_mind_map(self, mind_map: MindMapNode) -> None:
        self.latest_mind_map = mind_map

    def set_learning_path(self, path: LearningPath) -> None:
        self.latest_learning_path = path

    # ── One request per action ───────────────────────────────────────────────

    @asynccontextmanager
    async def busy(self, action: str):
        lock = self._locks[action]
        if lock.locked():
            raise ActionInProgressError(f"A {action.replace('_', ' ')} request is already in progress.")
        async with lock:
            yield

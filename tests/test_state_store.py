import asyncio
import json

import pytest

from studybuddy.core.errors import ActionInProgressError
from studybuddy.schemas.chat import ChatMessage
from studybuddy.schemas.profile import OnboardingRequest, ProfileUpdate, Theme
from studybuddy.services.state_store import PROFILE_KEY, THEME_KEY, StudyState


@pytest.fixture
def onboarding():
    return OnboardingRequest(name="Ravi", grade="Class 12", targetExam="JEE Mains/Adv")


def test_fresh_start_defaults(tmp_path):
    state = StudyState.load(tmp_path / "missing.json")

    assert state.profile.is_onboarded is False
    assert state.profile.name == ""
    assert state.theme == Theme.light
    assert state.chat_history == []


def test_onboarding_persists_two_keys(tmp_path, onboarding):
    path = tmp_path / "nested" / "state.json"
    state = StudyState.load(path)
    state.complete_onboarding(onboarding)

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert set(stored) == {PROFILE_KEY, THEME_KEY}
    assert stored[PROFILE_KEY] == {
        "name": "Ravi",
        "grade": "Class 12",
        "targetExam": "JEE Mains/Adv",
        "isOnboarded": True,
    }
    assert stored[THEME_KEY] == "light"


def test_onboarding_seeds_welcome_once(tmp_path, onboarding):
    state = StudyState.load(tmp_path / "state.json")
    state.complete_onboarding(onboarding)
    state.complete_onboarding(onboarding)

    assert len(state.chat_history) == 1
    welcome = state.chat_history[0]
    assert welcome.id == "init"
    assert welcome.role == "model"
    assert "Hi Ravi!" in welcome.text
    assert "**Class 12**" in welcome.text


def test_reload_round_trip(tmp_path, onboarding):
    path = tmp_path / "state.json"
    state = StudyState.load(path)
    state.complete_onboarding(onboarding)
    state.set_theme(Theme.dark)

    reloaded = StudyState.load(path)
    assert reloaded.profile == state.profile
    assert reloaded.theme == Theme.dark
    # chat is session-only
    assert reloaded.chat_history == []


def test_edit_and_reset_keep_profile(tmp_path, onboarding):
    state = StudyState.load(tmp_path / "state.json")
    state.complete_onboarding(onboarding)

    state.update_profile(ProfileUpdate(grade="College"))
    assert state.profile.grade == "College"
    assert state.profile.name == "Ravi"
    assert state.profile.is_onboarded is True

    state.reset_profile()
    assert state.profile.is_onboarded is False
    assert state.profile.name == "Ravi"
    assert StudyState.load(state.path).profile.is_onboarded is False


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", '{"studyBuddyProfile": {"name": 5}, "theme": "neon"}'])
def test_corrupt_storage_falls_back_to_defaults(tmp_path, content):
    path = tmp_path / "state.json"
    path.write_text(content, encoding="utf-8")

    state = StudyState.load(path)
    assert state.profile.is_onboarded is False
    assert state.theme == Theme.light


def test_model_history_skips_error_turns(tmp_path):
    state = StudyState(tmp_path / "state.json")
    state.append_message(ChatMessage(role="user", text="What is osmosis?"))
    state.append_message(ChatMessage(role="model", text="Error: boom", is_error=True))
    state.append_message(ChatMessage(role="model", text="Water moving across a membrane."))

    assert state.model_history() == [
        {"role": "user", "parts": ["What is osmosis?"]},
        {"role": "model", "parts": ["Water moving across a membrane."]},
    ]

    state.clear_chat()
    assert state.chat_history == []


def test_model_history_merges_and_keeps_image_turns(tmp_path):
    state = StudyState(tmp_path / "state.json")
    state.append_message(ChatMessage(role="user", text="Hello?"))
    state.append_message(ChatMessage(role="model", text="Error: boom", is_error=True))
    state.append_message(ChatMessage(role="user", text="", image="aGVsbG8="))
    state.append_message(ChatMessage(role="user", text="What is this?"))
    state.append_message(ChatMessage(role="model", text="A leaf."))
    state.append_message(ChatMessage(role="model", text=""))

    assert state.model_history() == [
        {"role": "user", "parts": ["Hello?", "(sent an image)", "What is this?"]},
        {"role": "model", "parts": ["A leaf."]},
    ]


def test_failed_save_leaves_state_unchanged(tmp_path, onboarding, monkeypatch):
    state = StudyState.load(tmp_path / "state.json")

    def disk_full(*args, **kwargs):
        raise OSError("No space left on device")

    monkeypatch.setattr(state, "save", disk_full)

    with pytest.raises(OSError):
        state.complete_onboarding(onboarding)
    with pytest.raises(OSError):
        state.set_theme(Theme.dark)

    assert state.profile.is_onboarded is False
    assert state.profile.name == ""
    assert state.theme == Theme.light
    assert state.chat_history == []


def test_one_request_per_action(tmp_path):
    state = StudyState(tmp_path / "state.json")

    async def scenario():
        async with state.busy("mindmap"):
            with pytest.raises(ActionInProgressError):
                async with state.busy("mindmap"):
                    pass
            # other actions are independent
            async with state.busy("notes"):
                pass
        async with state.busy("mindmap"):
            pass

    asyncio.run(scenario())

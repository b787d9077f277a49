"""
StudyBuddy — Gemini Service
============================
Handles every interaction with the hosted model:
  1. Study notes (free text, optional PDF/image attachment)
  2. Mind map (JSON tree)
  3. Tutor chat turn (history + optional image)
  4. Learning path (JSON steps)

Each operation builds one prompt, makes one call, and decodes the reply.
JSON replies always pass through tolerant extraction and schema validation.
"""

import asyncio
import logging
from typing import Any, List, Optional

import google.generativeai as genai

from studybuddy.core.config import settings
from studybuddy.core.errors import (
    MissingCredentialError,
    ModelServiceError,
    StudyBuddyError,
)
from studybuddy.schemas.learning_path import LearningLevel, LearningPath
from studybuddy.schemas.mindmap import MindMapNode
from studybuddy.schemas.profile import UserProfile
from studybuddy.services.file_service import InlineFile
from studybuddy.services.json_recovery import decode_model

logger = logging.getLogger(__name__)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CLIENT INITIALIZATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_configured_key: Optional[str] = None


def _configure() -> None:
    """(Re)configure the SDK when the key in settings differs from the active one."""
    global _configured_key
    if settings.GOOGLE_API_KEY != _configured_key:
        genai.configure(api_key=settings.GOOGLE_API_KEY, transport="rest")
        _configured_key = settings.GOOGLE_API_KEY


if settings.has_api_key:
    _configure()
    logger.info(f"[INIT] ✓ Gemini client ready ({settings.GEMINI_MODEL})")
else:
    logger.warning("[INIT] ✗ Google API key missing, generative features disabled")

NO_NOTES_FALLBACK = "No notes generated."
NO_REPLY_FALLBACK = "I couldn't generate a response."


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PROMPTS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _usable(profile: Optional[UserProfile]) -> Optional[UserProfile]:
    return profile if profile is not None and profile.is_onboarded else None


def notes_prompt(prompt_text: str, profile: Optional[UserProfile] = None) -> str:
    profile = _usable(profile)
    context = (
        f"The student is named {profile.name}, in grade {profile.grade}, "
        f"preparing for {profile.target_exam}.\n"
        if profile else ""
    )
    return (
        'You are "Professor Nova", a fun, visual, and highly energetic AI study companion.\n'
        f"{context}\n"
        'Task: Create creative, "handwritten-style" study notes for the student.\n\n'
        "Formatting Rules (Strictly follow these for the renderer):\n"
        "- Use standard Markdown.\n"
        "- Use # for Main Title, ## for Sections, ### for Sub-sections.\n"
        "- Use **bold** for key terms (these will be highlighted in color).\n"
        "- Use * or - for bullet points.\n"
        "- Use emojis liberally to make it fun! 🎨\n"
        "- Keep sentences concise and punchy.\n"
        "- Structure:\n"
        "  1. 🎯 Big Idea (Intro)\n"
        "  2. 🧠 The Core Stuff (Main concepts)\n"
        "  3. ⚡ Quick Summary (Bulleted list)\n\n"
        f"User Instruction: {prompt_text}"
    )


def mind_map_prompt(topic: str) -> str:
    return (
        f'Create a hierarchical mind map structure for the topic: "{topic}".\n'
        "Return ONLY valid JSON.\n"
        "Do not include any markdown formatting like ```json or ```.\n"
        "Just the raw JSON string starting with { and ending with }.\n\n"
        "Structure:\n"
        "{\n"
        '  "name": "Root Topic",\n'
        '  "children": [\n'
        '    { "name": "Subtopic 1", "children": [...] },\n'
        '    { "name": "Subtopic 2" }\n'
        "  ]\n"
        "}"
    )


def tutor_instruction(profile: Optional[UserProfile] = None) -> str:
    profile = _usable(profile)
    if profile is None:
        return "You are a patient, knowledgeable, and encouraging tutor. Explain concepts clearly."
    return (
        "You are Professor Nova, a helpful, encouraging, and witty AI tutor.\n"
        f"You are talking to {profile.name}, who is in {profile.grade} "
        f"and studying for {profile.target_exam}.\n\n"
        "Persona:\n"
        "- Friendly and approachable (not robotic).\n"
        f"- Use analogies relevant to a student in {profile.grade}.\n"
        "- Use emojis occasionally to keep the mood light.\n"
        "- If the student is stressed, offer encouragement."
    )


def learning_path_prompt(
    topic: str,
    level: LearningLevel = LearningLevel.beginner,
    profile: Optional[UserProfile] = None,
) -> str:
    profile = _usable(profile)
    level = LearningLevel(level)
    context = (
        f"Target Audience: {profile.name}, Grade: {profile.grade}, Exam: {profile.target_exam}.\n"
        if profile else ""
    )
    focus = profile.target_exam if profile else "general understanding"
    return (
        f'Create a fun, game-like step-by-step learning path for "{topic}" '
        f'for a student at "{level.value}" level.\n'
        f"{context}\n"
        'Make the Step Titles sound like "Game Levels" or "Adventures".\n'
        'Example: Instead of "Introduction", use "Level 1: The Beginning" or "Mission Start".\n\n'
        "IMPORTANT: Return ONLY valid JSON.\n"
        "JSON Structure:\n"
        "{\n"
        f'  "topic": "{topic}",\n'
        '  "steps": [\n'
        "    {\n"
        '      "title": "Level 1: Basics",\n'
        '      "description": "Brief description of what to learn.",\n'
        '      "estimatedTime": "2 hours",\n'
        '      "keyConcepts": ["concept1", "concept2"]\n'
        "    }\n"
        "  ]\n"
        "}\n\n"
        f"Structure the path to specifically help with {focus}."
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PROVIDER CALLS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _build_model(json_mode: bool = False, system_instruction: Optional[str] = None):
    if not settings.has_api_key:
        raise MissingCredentialError("API Key is missing in environment variables.")

    _configure()
    generation_config = {"response_mime_type": "application/json"} if json_mode else None
    return genai.GenerativeModel(
        model_name=settings.GEMINI_MODEL,
        generation_config=generation_config,
        system_instruction=system_instruction,
    )


async def _run(func, *args) -> str:
    """Run a blocking SDK call off the loop and wrap its failures.

    No timeout: the call runs to completion so the per-action lock held by
    the caller covers the whole request.
    """
    try:
        response = await asyncio.to_thread(func, *args)
    except StudyBuddyError:
        raise
    except Exception as e:
        logger.error(f"Gemini call failed: {e}")
        raise ModelServiceError(str(e) or e.__class__.__name__) from e

    try:
        return response.text or ""
    except ValueError as e:
        # .text raises when the candidate was blocked or has no parts
        raise ModelServiceError(f"The model returned no usable content: {e}") from e


async def _call_gemini(contents: Any, json_mode: bool = False) -> str:
    model = _build_model(json_mode=json_mode)
    logger.info(f"Calling Gemini ({settings.GEMINI_MODEL}, json_mode={json_mode})...")
    text = await _run(model.generate_content, contents)
    logger.info("✓ Gemini call succeeded")
    return text


async def _call_gemini_chat(history: List[dict], parts: List[Any], system_instruction: str) -> str:
    model = _build_model(system_instruction=system_instruction)
    chat = model.start_chat(history=history)
    logger.info(f"Calling Gemini chat ({settings.GEMINI_MODEL}, {len(history)} prior turns)...")
    text = await _run(chat.send_message, parts)
    logger.info("✓ Gemini chat call succeeded")
    return text


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# OPERATIONS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

async def generate_notes(
    prompt_text: str,
    file: Optional[InlineFile] = None,
    profile: Optional[UserProfile] = None,
) -> str:
    """Generate study notes from text and/or an attached PDF/image."""
    logger.info(f"[NOTES] Starting (attachment={file.mime_type if file else None})")

    parts: List[Any] = []
    if file is not None:
        parts.append(file.as_part())
    parts.append(notes_prompt(prompt_text, profile))

    text = await _call_gemini(parts)
    logger.info(f"[NOTES] ✓ Generated {len(text)} chars")
    return text or NO_NOTES_FALLBACK


async def generate_mind_map(topic: str) -> MindMapNode:
    """Generate a hierarchical mind map for a topic."""
    logger.info(f"[MINDMAP] Starting: {topic!r}")
    raw = await _call_gemini(mind_map_prompt(topic), json_mode=True)
    mind_map = decode_model(MindMapNode, raw)
    logger.info(
        f"[MINDMAP] ✓ {sum(1 for _ in mind_map.iter_nodes())} nodes, depth {mind_map.depth()}"
    )
    return mind_map


async def chat_with_tutor(
    history: List[dict],
    message: str,
    profile: Optional[UserProfile] = None,
    image: Optional[InlineFile] = None,
) -> str:
    """One tutor turn. `history` holds prior {"role", "parts"} turns."""
    logger.info(f"[CHAT] Turn with {len(history)} prior messages (image={image is not None})")

    parts: List[Any] = []
    if image is not None:
        parts.append(image.as_part())
    if message:
        parts.append(message)

    text = await _call_gemini_chat(history, parts, tutor_instruction(profile))
    return text or NO_REPLY_FALLBACK


async def generate_learning_path(
    topic: str,
    level: LearningLevel = LearningLevel.beginner,
    profile: Optional[UserProfile] = None,
) -> LearningPath:
    """Generate a game-like learning path (JSON mode, validated)."""
    logger.info(f"[PATH] Starting: {topic!r} at {LearningLevel(level).value}")
    raw = await _call_gemini(learning_path_prompt(topic, level, profile), json_mode=True)
    path = decode_model(LearningPath, raw)
    logger.info(f"[PATH] ✓ {len(path.steps)} steps")
    return path

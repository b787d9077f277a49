import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import PlainTextResponse, Response

from studybuddy.api.deps import require_onboarded
from studybuddy.schemas.common import NotesResponse, RenderVariant
from studybuddy.schemas.learning_path import LearningPath, LearningPathRequest
from studybuddy.schemas.mindmap import MindMapNode, MindMapRequest
from studybuddy.services import gemini_service
from studybuddy.services.file_service import read_upload
from studybuddy.services.markdown_renderer import render_markdown
from studybuddy.services.mindmap_diagram import build_mind_map_graph, render_mind_map
from studybuddy.services.state_store import StudyState

logger = logging.getLogger(__name__)

router = APIRouter()

DIAGRAM_MEDIA_TYPES = {"svg": "image/svg+xml", "png": "image/png"}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 1. NOTES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.post("/notes", response_model=NotesResponse)
async def create_notes(
    prompt: str = Form(default=""),
    variant: RenderVariant = Form(default=RenderVariant.handwritten),
    file: Optional[UploadFile] = File(default=None),
    state: StudyState = Depends(require_onboarded),
):
    """Generate study notes from pasted text and/or an uploaded PDF or image."""
    if not prompt.strip() and file is None:
        raise HTTPException(status_code=400, detail="Provide some text or a file to make notes from.")

    inline = None
    if file is not None:
        inline = await asyncio.to_thread(read_upload, await file.read(), file.filename, file.content_type)

    async with state.busy("notes"):
        markdown = await gemini_service.generate_notes(prompt, inline, state.profile)

    state.set_notes(markdown)
    return NotesResponse(markdown=markdown, html=render_markdown(markdown, variant), variant=variant)


@router.get("/notes/latest", response_model=NotesResponse)
async def latest_notes(
    variant: RenderVariant = Query(default=RenderVariant.handwritten),
    state: StudyState = Depends(require_onboarded),
):
    """Re-render the most recent notes, e.g. after switching variant."""
    if state.latest_notes is None:
        raise HTTPException(status_code=404, detail="No notes generated yet.")
    return NotesResponse(
        markdown=state.latest_notes,
        html=render_markdown(state.latest_notes, variant),
        variant=variant,
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 2. MIND MAP
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.post("/mindmap", response_model=MindMapNode)
async def create_mind_map(request: MindMapRequest, state: StudyState = Depends(require_onboarded)):
    """Generate a hierarchical mind map; replaces the previous one."""
    if not request.topic.strip():
        raise HTTPException(status_code=400, detail="Topic cannot be empty.")

    async with state.busy("mindmap"):
        mind_map = await gemini_service.generate_mind_map(request.topic)

    state.set_mind_map(mind_map)
    return mind_map


@router.get("/mindmap", response_model=MindMapNode)
async def latest_mind_map(state: StudyState = Depends(require_onboarded)):
    if state.latest_mind_map is None:
        raise HTTPException(status_code=404, detail="No mind map generated yet.")
    return state.latest_mind_map


@router.get("/mindmap/diagram")
async def mind_map_diagram(
    fmt: str = Query(default="svg", alias="format", pattern="^(dot|svg|png)$"),
    state: StudyState = Depends(require_onboarded),
):
    """Latest mind map as Graphviz DOT source or a rendered image."""
    if state.latest_mind_map is None:
        raise HTTPException(status_code=404, detail="No mind map generated yet.")

    if fmt == "dot":
        return PlainTextResponse(build_mind_map_graph(state.latest_mind_map).source)

    image = await asyncio.to_thread(render_mind_map, state.latest_mind_map, fmt)
    return Response(content=image, media_type=DIAGRAM_MEDIA_TYPES[fmt])


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 3. LEARNING PATH
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.post("/learning-path", response_model=LearningPath)
async def create_learning_path(
    request: LearningPathRequest,
    state: StudyState = Depends(require_onboarded),
):
    """Generate a game-like learning path tailored to the profile."""
    if not request.topic.strip():
        raise HTTPException(status_code=400, detail="Topic cannot be empty.")

    async with state.busy("learning_path"):
        path = await gemini_service.generate_learning_path(request.topic, request.level, state.profile)

    state.set_learning_path(path)
    return path


@router.get("/learning-path", response_model=LearningPath)
async def latest_learning_path(state: StudyState = Depends(require_onboarded)):
    if state.latest_learning_path is None:
        raise HTTPException(status_code=404, detail="No learning path generated yet.")
    return state.latest_learning_path

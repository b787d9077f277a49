import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from studybuddy.api.deps import get_state, require_onboarded
from studybuddy.core.errors import StudyBuddyError
from studybuddy.schemas.chat import ChatHistory, ChatMessage, ChatTurnResponse
from studybuddy.services import gemini_service
from studybuddy.services.file_service import read_upload
from studybuddy.services.state_store import StudyState

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/chat", response_model=ChatHistory)
async def read_chat(state: StudyState = Depends(get_state)):
    return ChatHistory(messages=state.chat_history)


@router.post("/chat", response_model=ChatTurnResponse)
async def send_message(
    message: str = Form(default=""),
    image: Optional[UploadFile] = File(default=None),
    state: StudyState = Depends(require_onboarded),
):
    """
    One tutor turn. Model failures never fail the request: they are
    appended to the conversation as an error-flagged model message.
    """
    if not message.strip() and image is None:
        raise HTTPException(status_code=400, detail="Type a message or attach an image.")

    inline = None
    if image is not None:
        inline = await asyncio.to_thread(read_upload, await image.read(), image.filename, image.content_type)
        if not inline.mime_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Only images can be attached to chat messages.")

    async with state.busy("chat"):
        history = state.model_history()
        user_message = state.append_message(
            ChatMessage(role="user", text=message, image=inline.base64 if inline else None)
        )

        try:
            text = await gemini_service.chat_with_tutor(history, message, state.profile, inline)
            reply = ChatMessage(role="model", text=text)
        except StudyBuddyError as e:
            logger.warning(f"[CHAT] Turn failed: {e}")
            reply = ChatMessage(role="model", text=f"Error: {str(e) or 'Something went wrong.'}", is_error=True)

        state.append_message(reply)

    return ChatTurnResponse(user_message=user_message, reply=reply)


@router.delete("/chat", status_code=204)
async def clear_chat(state: StudyState = Depends(get_state)):
    state.clear_chat()
    logger.info("[CHAT] History cleared")
    return Response(status_code=204)

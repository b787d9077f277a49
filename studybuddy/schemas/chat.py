import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def new_message_id() -> str:
    return uuid.uuid4().hex


class ChatMessage(BaseModel):
    """A single turn of the tutor conversation."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_message_id)
    role: Literal["user", "model"]
    text: str
    image: Optional[str] = None  # base64, user turns only
    is_error: bool = Field(default=False, alias="isError")


class ChatHistory(BaseModel):
    messages: List[ChatMessage]


class ChatTurnResponse(BaseModel):
    """The user message as stored plus the model's reply (possibly an error)."""
    user_message: ChatMessage
    reply: ChatMessage

"""Chat domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ChatCompletionRequest(BaseModel):
    # Validated by the service so malformed payloads get the API's own error messages
    messages: Optional[Any] = None


class AssistantMessage(BaseModel):
    role: str
    content: str


class ChatCompletionResponse(BaseModel):
    message: AssistantMessage


class ConversationCreate(BaseModel):
    first_message: Optional[str] = None


class ConversationResponse(BaseModel):
    id: str
    title: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageCreate(BaseModel):
    content: str


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    role: str
    content: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConversationReply(BaseModel):
    conversation: ConversationResponse
    user_message: MessageResponse
    assistant_message: MessageResponse

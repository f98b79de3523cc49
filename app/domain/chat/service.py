"""
Chat service - AI assistant completions and persisted staff conversations
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ...config import CHAT_MAX_MESSAGE_CHARS, CHAT_TEMPERATURE
from ...models import ChatConversation, ChatMessage, StaffUser, utcnow
from ...services.llm_client import LLMClient
from ...shared.errors import CRMError, NotFoundError, UpstreamError, ValidationError
from .repository import ConversationRepository, MessageRepository

logger = logging.getLogger(__name__)

ASSISTANT_SYSTEM_PROMPT = (
    "You are Aliice, an AI assistant embedded inside a medical CRM. You help staff with "
    "bookings, post-op documentation, deals/pipelines, workflows, and patient or insurance "
    "communication. Be concise, precise, and always respect that this is an internal "
    "staff-facing tool."
)

NEW_CHAT_TITLE = "New chat"
TITLE_MAX_CHARS = 80


def normalize_messages(raw: Any) -> list[dict]:
    """
    Stringify and truncate each message's content, dropping blank ones.

    Raises:
        ValidationError: no messages array, or nothing left after trimming
    """
    if not raw or not isinstance(raw, list):
        raise ValidationError("Missing messages array")

    trimmed = []
    for message in raw:
        if not isinstance(message, dict):
            continue
        content = message.get("content")
        text = "" if content is None else str(content)
        text = text[:CHAT_MAX_MESSAGE_CHARS]
        if text.strip():
            trimmed.append({"role": message.get("role"), "content": text})

    if not trimmed:
        raise ValidationError("Messages must contain non-empty content")

    return trimmed


def conversation_title(first_message: Optional[str]) -> str:
    source = (first_message or "").strip()
    return source[:TITLE_MAX_CHARS] if source else NEW_CHAT_TITLE


class ChatService:
    """Service layer for the staff AI assistant"""

    def __init__(self, db: Session, llm: LLMClient):
        self.db = db
        self.llm = llm
        self.conversations = ConversationRepository()
        self.messages = MessageRepository()

    def reply(self, messages: Any) -> dict:
        """Complete a chat transcript; returns the assistant's {role, content}"""
        trimmed = normalize_messages(messages)
        prompt = [{"role": "system", "content": ASSISTANT_SYSTEM_PROMPT}, *trimmed]

        try:
            role, content = self.llm.complete(prompt, CHAT_TEMPERATURE)
        except CRMError:
            raise
        except Exception as e:
            logger.error(f"❌ Error in chat completion: {e}", exc_info=True)
            raise CRMError("Failed to generate chat response") from e

        if not content:
            raise UpstreamError("No response from OpenAI")

        return {"role": role or "assistant", "content": content}

    # Conversations

    def list_conversations(self, user: StaffUser) -> list[ChatConversation]:
        return self.conversations.list_for_user(self.db, user.id)

    def create_conversation(
        self, user: StaffUser, first_message: Optional[str] = None
    ) -> ChatConversation:
        return self.conversations.create(self.db, user.id, conversation_title(first_message))

    def get_conversation(self, user: StaffUser, conversation_id: str) -> ChatConversation:
        conversation = self.conversations.get_for_user(self.db, conversation_id, user.id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        return conversation

    def list_messages(self, user: StaffUser, conversation_id: str) -> list[ChatMessage]:
        conversation = self.get_conversation(user, conversation_id)
        return self.messages.list_for_conversation(self.db, conversation.id)

    def send_message(
        self, user: StaffUser, conversation_id: str, content: str
    ) -> tuple[ChatConversation, ChatMessage, ChatMessage]:
        """
        Persist a user message, ask the assistant with the whole history and
        persist its answer. The user message stays saved if the completion fails.
        """
        conversation = self.get_conversation(user, conversation_id)
        if not content or not content.strip():
            raise ValidationError("Messages must contain non-empty content")

        user_message = self.messages.add(self.db, conversation.id, "user", content)
        history = self.messages.list_for_conversation(self.db, conversation.id)
        answer = self.reply([{"role": m.role, "content": m.content} for m in history])

        assistant_message = self.messages.add(
            self.db, conversation.id, "assistant", answer["content"]
        )

        title = None
        if not (conversation.title or "").strip():
            title = conversation_title(content)
        conversation = self.conversations.touch(self.db, conversation, utcnow(), title)

        logger.info(f"💬 Conversation {conversation.id}: {len(history) + 1} message(s)")
        return conversation, user_message, assistant_message

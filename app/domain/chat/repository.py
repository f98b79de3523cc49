"""Chat repository - Database operations for conversations and messages"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import ChatConversation, ChatMessage


class ConversationRepository:
    """Repository for chat conversation database operations"""

    @staticmethod
    def list_for_user(db: Session, user_id: str) -> list[ChatConversation]:
        return (
            db.query(ChatConversation)
            .filter(ChatConversation.user_id == user_id)
            .order_by(ChatConversation.updated_at.desc())
            .all()
        )

    @staticmethod
    def get_for_user(db: Session, conversation_id: str, user_id: str) -> Optional[ChatConversation]:
        return (
            db.query(ChatConversation)
            .filter(ChatConversation.id == conversation_id, ChatConversation.user_id == user_id)
            .first()
        )

    @staticmethod
    def create(db: Session, user_id: str, title: str) -> ChatConversation:
        conversation = ChatConversation(user_id=user_id, title=title)
        db.add(conversation)
        db.commit()
        db.refresh(conversation)
        return conversation

    @staticmethod
    def touch(
        db: Session, conversation: ChatConversation, when: datetime, title: Optional[str] = None
    ) -> ChatConversation:
        conversation.updated_at = when
        if title is not None:
            conversation.title = title
        db.commit()
        db.refresh(conversation)
        return conversation


class MessageRepository:
    """Repository for chat message database operations"""

    @staticmethod
    def list_for_conversation(db: Session, conversation_id: str) -> list[ChatMessage]:
        return (
            db.query(ChatMessage)
            .filter(ChatMessage.conversation_id == conversation_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
            .all()
        )

    @staticmethod
    def add(db: Session, conversation_id: str, role: str, content: str) -> ChatMessage:
        message = ChatMessage(conversation_id=conversation_id, role=role, content=content)
        db.add(message)
        db.commit()
        db.refresh(message)
        return message

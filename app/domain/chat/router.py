"""Chat router - AI assistant proxy and conversation history endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import StaffUser
from ...rate_limiter import create_rate_limiter
from ...services.llm_client import LLMClient, get_llm_client
from .schemas import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ConversationCreate,
    ConversationReply,
    ConversationResponse,
    MessageCreate,
    MessageResponse,
)
from .service import ChatService

router = APIRouter(prefix="/chat", tags=["Chat"])
api_router = APIRouter(prefix="/api", tags=["Chat"])

chat_rate_limit = create_rate_limiter(key_prefix="chat")


def get_chat_service(
    db: Session = Depends(get_db), llm: LLMClient = Depends(get_llm_client)
) -> ChatService:
    """Dependency injection for ChatService"""
    return ChatService(db, llm)


@api_router.post("/chat", response_model=ChatCompletionResponse)
def chat_completion(
    data: ChatCompletionRequest,
    _: None = Depends(chat_rate_limit),
    service: ChatService = Depends(get_chat_service),
):
    """Forward a transcript to the language model behind the assistant's system prompt"""
    return {"message": service.reply(data.messages)}


@router.get("/conversations", response_model=list[ConversationResponse])
async def list_conversations(
    current_user: StaffUser = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    return service.list_conversations(current_user)


@router.post("/conversations", response_model=ConversationResponse, status_code=201)
async def create_conversation(
    data: ConversationCreate,
    current_user: StaffUser = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    return service.create_conversation(current_user, data.first_message)


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: str,
    current_user: StaffUser = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    return service.list_messages(current_user, conversation_id)


@router.post("/conversations/{conversation_id}/messages", response_model=ConversationReply)
def send_message(
    conversation_id: str,
    data: MessageCreate,
    current_user: StaffUser = Depends(get_current_user),
    _: None = Depends(chat_rate_limit),
    service: ChatService = Depends(get_chat_service),
):
    conversation, user_message, assistant_message = service.send_message(
        current_user, conversation_id, data.content
    )
    return ConversationReply(
        conversation=ConversationResponse.model_validate(conversation),
        user_message=MessageResponse.model_validate(user_message),
        assistant_message=MessageResponse.model_validate(assistant_message),
    )

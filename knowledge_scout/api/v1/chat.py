"""
Chat session endpoints for document Q&A.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, status

from knowledge_scout.core.dependencies import get_conversation_service, get_current_user
from knowledge_scout.models.user import User
from knowledge_scout.schemas.chat import (
    ChatMessage,
    ChatSessionCreate,
    ChatSessionCreateResponse,
    ChatSessionList,
    ChatSessionListItem,
    DocumentBrief,
    MessageExchangeResponse,
    MessageRequest,
    SessionMessages,
)
from knowledge_scout.schemas.common import Message
from knowledge_scout.services.conversation_service import ConversationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sessions", response_model=ChatSessionCreateResponse, status_code=status.HTTP_201_CREATED)
def create_session(
    request: ChatSessionCreate,
    current_user: User = Depends(get_current_user),
    conversations: ConversationService = Depends(get_conversation_service),
) -> Any:
    """
    Start a chat session about one of the user's documents.
    """
    session = conversations.create_session(request.document_id, current_user.id, request.title)  # type: ignore
    return {"message": "Chat session created successfully", "session": session}


@router.get("/sessions", response_model=ChatSessionList)
def list_sessions(
    current_user: User = Depends(get_current_user),
    conversations: ConversationService = Depends(get_conversation_service),
) -> Any:
    """
    List the user's chat sessions, most recently active first.
    """
    sessions = []
    for session, message_count in conversations.list_sessions(current_user.id):  # type: ignore
        item = ChatSessionListItem(
            id=session.id,
            title=session.title,
            document_id=session.document_id,
            user_id=session.user_id,
            created_at=session.created_at,
            updated_at=session.updated_at,
            document=DocumentBrief.model_validate(session.document),
            message_count=message_count,
        )
        sessions.append(item)
    return {"sessions": sessions}


@router.get("/sessions/{session_id}", response_model=SessionMessages)
def get_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    conversations: ConversationService = Depends(get_conversation_service),
) -> Any:
    """
    Get a chat session with its document and full message history.
    """
    session = conversations.get_session(session_id, current_user.id)  # type: ignore
    messages = conversations.list_messages(session_id, current_user.id)  # type: ignore
    return {
        "session_id": session.id,
        "title": session.title,
        "document": session.document,
        "messages": messages,
    }


@router.delete("/sessions/{session_id}", response_model=Message)
def delete_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    conversations: ConversationService = Depends(get_conversation_service),
) -> Any:
    """
    Delete a chat session and all its messages.
    """
    conversations.delete_session(session_id, current_user.id)  # type: ignore
    return {"message": "Chat session deleted successfully"}


@router.post("/sessions/{session_id}/messages", response_model=MessageExchangeResponse)
def send_message(
    session_id: int,
    request: MessageRequest,
    current_user: User = Depends(get_current_user),
    conversations: ConversationService = Depends(get_conversation_service),
) -> Any:
    """
    Ask a question about the session's document and get the assistant's answer.
    """
    user_message, assistant_message = conversations.post_message(
        session_id, current_user.id, request.message  # type: ignore
    )
    return {
        "message": "Message sent successfully",
        "user_message": ChatMessage.model_validate(user_message),
        "assistant_message": ChatMessage.model_validate(assistant_message),
    }


@router.get("/sessions/{session_id}/messages", response_model=SessionMessages)
def list_messages(
    session_id: int,
    current_user: User = Depends(get_current_user),
    conversations: ConversationService = Depends(get_conversation_service),
) -> Any:
    """
    Get the messages of a chat session in order.
    """
    return get_session(session_id, current_user, conversations)

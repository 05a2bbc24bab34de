"""
Pydantic schemas for chat sessions and messages.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ChatSessionCreate(BaseModel):
    """Request to start a chat about a document."""

    document_id: int
    title: Optional[str] = Field(None, max_length=255)


class ChatSession(BaseModel):
    """Chat session response."""

    id: int
    title: Optional[str] = None
    document_id: int
    user_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChatSessionCreateResponse(BaseModel):
    message: str
    session: ChatSession


class DocumentBrief(BaseModel):
    """Document fields shown alongside a chat."""

    id: int
    title: str
    filename: str

    class Config:
        from_attributes = True


class ChatSessionListItem(ChatSession):
    """Session entry in the session list."""

    document: DocumentBrief
    message_count: int


class ChatSessionList(BaseModel):
    sessions: List[ChatSessionListItem]


class MessageRequest(BaseModel):
    """Request to send a message."""

    message: str = Field(..., min_length=1, max_length=5000)


class ChatMessage(BaseModel):
    """Message in a chat session."""

    id: int
    role: str
    content: str
    timestamp: datetime
    sources: Optional[List[str]] = None
    confidence: Optional[float] = None

    class Config:
        from_attributes = True


class MessageExchangeResponse(BaseModel):
    """The question and the assistant's answer."""

    message: str
    user_message: ChatMessage
    assistant_message: ChatMessage


class SessionMessages(BaseModel):
    """A session's document and its full message history."""

    session_id: int
    title: Optional[str] = None
    document: DocumentBrief
    messages: List[ChatMessage]

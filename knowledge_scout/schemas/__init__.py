"""Schemas module - Import all schemas."""
from knowledge_scout.schemas.user import (
    User,
    UserCreate,
    LoginRequest,
    Token,
    AuthResponse,
    DemoUserResponse,
)
from knowledge_scout.schemas.document import (
    Document,
    DocumentWithText,
    DocumentUploadResponse,
    DocumentStatusResponse,
    SummaryResponse,
    QuestionsResponse,
    KeyPointsResponse,
)
from knowledge_scout.schemas.chat import (
    ChatSession,
    ChatSessionCreate,
    ChatSessionCreateResponse,
    ChatSessionList,
    ChatSessionListItem,
    ChatMessage,
    DocumentBrief,
    MessageRequest,
    MessageExchangeResponse,
    SessionMessages,
)
from knowledge_scout.schemas.common import Message, ErrorResponse, HealthStatus

__all__ = [
    "User",
    "UserCreate",
    "LoginRequest",
    "Token",
    "AuthResponse",
    "DemoUserResponse",
    "Document",
    "DocumentWithText",
    "DocumentUploadResponse",
    "DocumentStatusResponse",
    "SummaryResponse",
    "QuestionsResponse",
    "KeyPointsResponse",
    "ChatSession",
    "ChatSessionCreate",
    "ChatSessionCreateResponse",
    "ChatSessionList",
    "ChatSessionListItem",
    "ChatMessage",
    "DocumentBrief",
    "MessageRequest",
    "MessageExchangeResponse",
    "SessionMessages",
    "Message",
    "ErrorResponse",
    "HealthStatus",
]

"""
Dependency injection for FastAPI endpoints.
"""
from typing import Generator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from knowledge_scout.core.agents.responder import AIResponder
from knowledge_scout.core.config import settings
from knowledge_scout.core.document_processor import DocumentProcessor
from knowledge_scout.core.security import decode_token
from knowledge_scout.db.base import SessionLocal
from knowledge_scout.models.user import User
from knowledge_scout.services.conversation_service import ConversationService
from knowledge_scout.services.file_service import FileStorage

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_PREFIX}/auth/token")


def get_db() -> Generator:
    """
    Dependency for database session.

    Yields:
        Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        db: Database session
        token: JWT token

    Returns:
        Current user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if payload is None:
        raise credentials_exception

    user_id: Optional[str] = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise credentials_exception

    user = db.query(User).filter(User.id == int(user_id)).first()
    if user is None:
        raise credentials_exception

    return user


def get_ai_responder(request: Request) -> AIResponder:
    """AI responder built at startup."""
    return request.app.state.ai_responder


def get_file_storage(request: Request) -> FileStorage:
    return request.app.state.file_storage


def get_document_processor(request: Request) -> DocumentProcessor:
    """Ingestion pipeline built at startup."""
    return request.app.state.document_processor


def get_conversation_service(
    db: Session = Depends(get_db),
    responder: AIResponder = Depends(get_ai_responder),
) -> ConversationService:
    """Conversation service bound to the request's database session."""
    return ConversationService(db, responder)

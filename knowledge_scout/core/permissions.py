"""
Ownership checks for documents and chat sessions.

A record that exists but belongs to someone else is reported exactly like a
missing record, so callers cannot probe for other users' ids.
"""
import logging

from sqlalchemy.orm import Session

from knowledge_scout.core.exceptions import NotFoundError
from knowledge_scout.models.conversation import ChatSession
from knowledge_scout.models.document import Document

logger = logging.getLogger(__name__)


def get_owned_document(db: Session, document_id: int, user_id: int) -> Document:
    """
    Load a document owned by ``user_id``.

    Raises:
        NotFoundError: If the document is missing or owned by another user
    """
    document = db.query(Document).filter(Document.id == document_id).first()
    if not document:
        raise NotFoundError("Document not found")

    if document.user_id != user_id:  # type: ignore
        logger.info(f"User {user_id} requested document {document_id} owned by user {document.user_id}")
        raise NotFoundError("Document not found")

    return document


def get_owned_session(db: Session, session_id: int, user_id: int) -> ChatSession:
    """
    Load a chat session owned by ``user_id``.

    Raises:
        NotFoundError: If the session is missing or owned by another user
    """
    session = db.query(ChatSession).filter(ChatSession.id == session_id).first()
    if not session:
        raise NotFoundError("Chat session not found")

    if session.user_id != user_id:  # type: ignore
        logger.info(f"User {user_id} requested chat session {session_id} owned by user {session.user_id}")
        raise NotFoundError("Chat session not found")

    return session

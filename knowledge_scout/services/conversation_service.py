"""
Chat sessions bound to a single document, and the question/answer exchange
inside them.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from knowledge_scout.core.agents.responder import AIResponder
from knowledge_scout.core.config import settings
from knowledge_scout.core.exceptions import PreconditionError, ValidationError
from knowledge_scout.core.permissions import get_owned_document, get_owned_session
from knowledge_scout.models.conversation import ChatSession, Message

logger = logging.getLogger(__name__)


class ConversationService:
    """Create chat sessions and exchange messages with the AI responder."""

    def __init__(self, db: Session, responder: AIResponder, history_window: Optional[int] = None):
        self.db = db
        self.responder = responder
        self.history_window = history_window if history_window is not None else settings.CHAT_HISTORY_WINDOW

    def create_session(self, document_id: int, owner_id: int, title: Optional[str] = None) -> ChatSession:
        """
        Start a chat about one of the caller's documents.

        Raises:
            NotFoundError: If the document is missing or not owned by the caller
        """
        document = get_owned_document(self.db, document_id, owner_id)

        session = ChatSession(
            title=title or f"Chat about {document.title}",
            user_id=owner_id,
            document_id=document.id,
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info(f"Created chat session {session.id} on document {document_id} for user {owner_id}")
        return session

    def get_session(self, session_id: int, owner_id: int) -> ChatSession:
        return get_owned_session(self.db, session_id, owner_id)

    def list_sessions(self, owner_id: int) -> List[Tuple[ChatSession, int]]:
        """Return the caller's sessions, most recently active first, with message counts."""
        message_counts = (
            self.db.query(Message.session_id, func.count(Message.id).label("message_count"))
            .group_by(Message.session_id)
            .subquery()
        )
        rows = (
            self.db.query(ChatSession, func.coalesce(message_counts.c.message_count, 0))
            .outerjoin(message_counts, message_counts.c.session_id == ChatSession.id)
            .filter(ChatSession.user_id == owner_id)
            .order_by(func.coalesce(ChatSession.updated_at, ChatSession.created_at).desc(), ChatSession.id.desc())
            .all()
        )
        return [(session, int(count)) for session, count in rows]

    def delete_session(self, session_id: int, owner_id: int) -> None:
        """Delete a session and its messages."""
        session = get_owned_session(self.db, session_id, owner_id)
        self.db.delete(session)
        self.db.commit()
        logger.info(f"Deleted chat session {session_id} for user {owner_id}")

    def list_messages(self, session_id: int, owner_id: int) -> List[Message]:
        """Messages of a session in the order they were written."""
        get_owned_session(self.db, session_id, owner_id)
        return (
            self.db.query(Message)
            .filter(Message.session_id == session_id)
            .order_by(Message.timestamp.asc(), Message.id.asc())
            .all()
        )

    def post_message(self, session_id: int, owner_id: int, text: str) -> Tuple[Message, Message]:
        """
        Ask a question in a session.

        The user message is committed before the model is called and the
        assistant reply is committed separately afterwards.

        Raises:
            ValidationError: If the message is blank
            NotFoundError: If the session is missing or not owned by the caller
            PreconditionError: If the session's document has no extracted text
        """
        if not text or not text.strip():
            raise ValidationError("Message is required")

        session = get_owned_session(self.db, session_id, owner_id)
        document = session.document
        if not document or document.extracted_text is None:
            raise PreconditionError("Document has not been processed yet")
        document_text = str(document.extracted_text)

        history = self._recent_history(session_id)

        user_timestamp = datetime.now(timezone.utc)
        user_message = Message(session_id=session_id, role="user", content=text, timestamp=user_timestamp)
        self.db.add(user_message)
        self.db.commit()

        result = self.responder.answer(text, document_text, history)

        assistant_message = Message(
            session_id=session_id,
            role="assistant",
            content=result.answer,
            sources=result.sources,
            confidence=result.confidence,
            timestamp=max(datetime.now(timezone.utc), user_timestamp + timedelta(microseconds=1)),
        )
        self.db.add(assistant_message)
        session.updated_at = func.now()  # type: ignore
        self.db.commit()
        self.db.refresh(user_message)
        self.db.refresh(assistant_message)

        return user_message, assistant_message

    def _recent_history(self, session_id: int) -> List[dict]:
        """Trailing window of the session's messages, oldest first."""
        if self.history_window <= 0:
            return []

        recent = (
            self.db.query(Message)
            .filter(Message.session_id == session_id)
            .order_by(Message.timestamp.desc(), Message.id.desc())
            .limit(self.history_window)
            .all()
        )
        return [{"role": str(msg.role), "content": str(msg.content)} for msg in reversed(recent)]

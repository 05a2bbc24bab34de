"""
Document model and its ingestion ledger.
"""
import enum

from sqlalchemy import JSON, Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from knowledge_scout.db.base import Base


class DocumentStatus(str, enum.Enum):
    """Ingestion states. PROCESSING is initial, the other two are terminal."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({DocumentStatus.COMPLETED.value, DocumentStatus.ERROR.value})


class Document(Base):
    """Document model."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    filename = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    file_path = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String, nullable=False)
    status = Column(String, nullable=False, default=DocumentStatus.PROCESSING.value, index=True)
    extracted_text = Column(Text, nullable=True)
    summary = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    doc_metadata = Column("metadata", JSON, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    owner = relationship("User", back_populates="documents")
    chat_sessions = relationship(
        "ChatSession", back_populates="document", cascade="all, delete-orphan"
    )
    ingestion_task = relationship(
        "IngestionTask", back_populates="document", uselist=False, cascade="all, delete-orphan"
    )


class IngestionTask(Base):
    """
    Pending background work for a document.

    A row exists from upload until the continuation writes a terminal status,
    so rows left behind by a crash identify documents to resume on startup.
    """

    __tablename__ = "ingestion_tasks"

    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True)
    attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    document = relationship("Document", back_populates="ingestion_task")

"""Models module - Import all models here so metadata is complete."""
from knowledge_scout.db.base import Base
from knowledge_scout.models.user import User
from knowledge_scout.models.document import Document, DocumentStatus, IngestionTask
from knowledge_scout.models.conversation import ChatSession, Message

__all__ = ["Base", "User", "Document", "DocumentStatus", "IngestionTask", "ChatSession", "Message"]

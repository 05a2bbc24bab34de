"""
Pydantic schemas for Document model.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DocumentBase(BaseModel):
    """Base document schema."""

    title: str


class DocumentInDB(DocumentBase):
    """Schema for document in database."""

    id: int
    filename: str
    original_name: str
    file_size: int
    mime_type: str
    status: str
    user_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        """Pydantic config."""

        from_attributes = True


class Document(DocumentInDB):
    """Schema for document response."""

    pass


class DocumentWithText(Document):
    """Schema for document response with extracted text and summary."""

    extracted_text: Optional[str] = None
    summary: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="doc_metadata")


class DocumentUploadResponse(BaseModel):
    """Response after an upload is accepted."""

    message: str
    document: Document


class DocumentStatusResponse(BaseModel):
    """Processing status of a document."""

    document_id: int
    status: str


class SummaryResponse(BaseModel):
    message: str
    summary: str


class QuestionsResponse(BaseModel):
    message: str
    questions: List[str]


class KeyPointsResponse(BaseModel):
    message: str
    key_points: List[str]

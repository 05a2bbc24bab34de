"""
Document management endpoints.
"""
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from knowledge_scout.core.agents.responder import AIResponder
from knowledge_scout.core.dependencies import (
    get_ai_responder,
    get_current_user,
    get_db,
    get_document_processor,
    get_file_storage,
)
from knowledge_scout.core.document_processor import DocumentProcessor
from knowledge_scout.core.exceptions import PreconditionError
from knowledge_scout.core.permissions import get_owned_document
from knowledge_scout.models.document import Document
from knowledge_scout.models.user import User
from knowledge_scout.schemas.common import Message
from knowledge_scout.schemas.document import (
    Document as DocumentSchema,
    DocumentStatusResponse,
    DocumentUploadResponse,
    DocumentWithText,
    KeyPointsResponse,
    QuestionsResponse,
    SummaryResponse,
)
from knowledge_scout.services.file_service import FileStorage

logger = logging.getLogger(__name__)

router = APIRouter()


def _processed_text(db: Session, document_id: int, user: User) -> str:
    document = get_owned_document(db, document_id, user.id)  # type: ignore
    if document.extracted_text is None:
        raise PreconditionError("Document has not been processed yet")
    return str(document.extracted_text)


@router.post("/upload", response_model=DocumentUploadResponse, status_code=status.HTTP_202_ACCEPTED)
async def upload_document(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    processor: DocumentProcessor = Depends(get_document_processor),
) -> Any:
    """
    Upload a document and queue it for text extraction and summarization.

    Returns immediately with status ``processing``; poll the status endpoint
    for the outcome.
    """
    content = await file.read()
    document = processor.submit(
        db,
        content=content,
        original_name=file.filename or "",
        declared_media_type=file.content_type,
        owner_id=current_user.id,  # type: ignore
        title=title,
    )

    background_tasks.add_task(processor.process_document, document.id)
    logger.info(f"Document '{document.original_name}' uploaded by user '{current_user.email}', queued for processing")

    return {"message": "File uploaded successfully", "document": document}


@router.get("", response_model=List[DocumentSchema])
def list_documents(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Get list of user's documents, newest first.
    """
    documents = (
        db.query(Document)
        .filter(Document.user_id == current_user.id)
        .order_by(Document.created_at.desc(), Document.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return documents


@router.get("/{document_id}", response_model=DocumentWithText)
def get_document(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Get document by ID with extracted text and summary.
    """
    return get_owned_document(db, document_id, current_user.id)  # type: ignore


@router.get("/{document_id}/status", response_model=DocumentStatusResponse)
def get_document_status(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Get the processing status of a document: processing, completed or error.
    """
    document = get_owned_document(db, document_id, current_user.id)  # type: ignore
    return {"document_id": document.id, "status": document.status}


@router.delete("/{document_id}", response_model=Message)
def delete_document(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_file_storage),
) -> Any:
    """
    Delete a document, its file, and its chat sessions.
    """
    document = get_owned_document(db, document_id, current_user.id)  # type: ignore
    file_path = str(document.file_path)

    db.delete(document)
    db.commit()
    storage.delete_file(file_path)

    logger.info(f"Document ID '{document_id}' deleted successfully by user '{current_user.email}'.")
    return {"message": "Document deleted successfully"}


@router.post("/{document_id}/summary", response_model=SummaryResponse)
def generate_summary(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    processor: DocumentProcessor = Depends(get_document_processor),
) -> Any:
    """
    Regenerate the AI summary of a processed document.
    """
    summary = processor.regenerate_summary(db, document_id, current_user.id)  # type: ignore
    return {"message": "Summary generated successfully", "summary": summary}


@router.post("/{document_id}/questions", response_model=QuestionsResponse)
def generate_questions(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    responder: AIResponder = Depends(get_ai_responder),
) -> Any:
    """
    Suggest questions to ask about a processed document.
    """
    text = _processed_text(db, document_id, current_user)
    return {"message": "Questions generated successfully", "questions": responder.generate_questions(text)}


@router.post("/{document_id}/key-points", response_model=KeyPointsResponse)
def extract_key_points(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    responder: AIResponder = Depends(get_ai_responder),
) -> Any:
    """
    List the key points of a processed document.
    """
    text = _processed_text(db, document_id, current_user)
    return {"message": "Key points extracted successfully", "key_points": responder.extract_key_points(text)}

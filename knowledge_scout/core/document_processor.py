"""
Document ingestion pipeline: accept an upload, then extract and summarize it
in the background.

A document is created with status ``processing`` and moves exactly once to
``completed`` or ``error``. Pending work is tracked in ``ingestion_tasks`` so
documents interrupted by a restart can be resumed.
"""
import logging
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from knowledge_scout.core.agents.responder import AIResponder
from knowledge_scout.core.config import settings
from knowledge_scout.core.exceptions import AIUnavailableError, PreconditionError
from knowledge_scout.core.helpers.extracter import TextExtractor
from knowledge_scout.core.permissions import get_owned_document
from knowledge_scout.models.document import Document, DocumentStatus, IngestionTask
from knowledge_scout.services.file_service import FileStorage
from knowledge_scout.utils.file_upload import resolve_media_type, validate_upload

logger = logging.getLogger(__name__)

SUMMARY_UNAVAILABLE = "AI summary generation is currently unavailable."


class DocumentProcessor:
    """
    Main document ingestion pipeline.
    Orchestrates validation, storage, extraction, summarization and the
    status transitions between them.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        extractor: TextExtractor,
        responder: AIResponder,
        storage: FileStorage,
        max_upload_size: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ):
        """
        Args:
            session_factory: Creates the database sessions used by background work
            extractor: Text extractor
            responder: AI responder used for summaries
            storage: Where uploaded files are written
            max_upload_size: Size ceiling in bytes (defaults to settings)
            max_attempts: How many times a pending document is resumed before
                it is failed (defaults to settings)
        """
        self.session_factory = session_factory
        self.extractor = extractor
        self.responder = responder
        self.storage = storage
        self.max_upload_size = max_upload_size or settings.MAX_UPLOAD_SIZE
        self.max_attempts = max_attempts if max_attempts is not None else settings.INGESTION_MAX_ATTEMPTS

    def submit(
        self,
        db: Session,
        content: bytes,
        original_name: str,
        declared_media_type: Optional[str],
        owner_id: int,
        title: Optional[str] = None,
    ) -> Document:
        """
        Validate and store an upload and create its document record.

        The record is committed with status ``processing`` together with its
        pending ingestion task. The caller schedules ``process_document``.

        Raises:
            ValidationError: If the media type is not allowed or the file is too
                large. Nothing is written in that case.
        """
        media_type = resolve_media_type(declared_media_type, original_name)
        validate_upload(original_name, media_type, len(content), self.max_upload_size)

        file_path, filename = self.storage.save_file(content, original_name)

        try:
            document = Document(
                title=title or original_name,
                filename=filename,
                original_name=original_name,
                file_path=file_path,
                file_size=len(content),
                mime_type=media_type,
                status=DocumentStatus.PROCESSING.value,
                user_id=owner_id,
            )
            document.ingestion_task = IngestionTask(attempts=0)
            db.add(document)
            db.commit()
            db.refresh(document)
        except Exception:
            db.rollback()
            self.storage.delete_file(file_path)
            raise

        logger.info(f"Document {document.id} '{original_name}' accepted for user {owner_id}")
        return document

    def process_document(self, document_id: int) -> Optional[str]:
        """
        Background continuation: extract text, summarize, write terminal status.

        Extraction and summary failures become placeholder content. Anything
        else marks the document as ``error``.

        Returns:
            The terminal status written, the existing status if the document
            was already terminal, or None if it no longer exists
        """
        db = self.session_factory()
        try:
            document = db.query(Document).filter(Document.id == document_id).first()
            if not document:
                logger.warning(f"Document {document_id} no longer exists, dropping its ingestion task")
                self._drop_task(db, document_id)
                return None

            if document.status != DocumentStatus.PROCESSING.value:
                logger.info(f"Document {document_id} already {document.status}, nothing to do")
                self._drop_task(db, document_id)
                return str(document.status)

            logger.info(f"Extracting text from '{document.original_name}' (document {document_id})")
            text = self.extractor.extract(str(document.file_path), str(document.mime_type))

            logger.info(f"Generating summary for document {document_id}")
            ai_summary = self.responder.enabled
            try:
                summary = self.responder.summarize(text)
            except AIUnavailableError as e:
                logger.error(f"AI summary generation failed for document {document_id}: {e}")
                summary = SUMMARY_UNAVAILABLE
                ai_summary = False

            finished = self._finish(
                db,
                document_id,
                DocumentStatus.COMPLETED,
                extracted_text=text,
                summary=summary,
                doc_metadata={"text_length": len(text), "ai_summary": ai_summary},
            )
            if not finished:
                current = db.query(Document.status).filter(Document.id == document_id).scalar()
                logger.warning(f"Document {document_id} changed during processing, now {current}")
                return str(current) if current is not None else None

            logger.info(f"Completed processing for document {document_id}")
            return DocumentStatus.COMPLETED.value

        except Exception as e:
            logger.exception(f"Document processing error for document {document_id}: {e}")
            db.rollback()
            try:
                self._finish(db, document_id, DocumentStatus.ERROR)
            except Exception as db_e:
                # Task row survives, so the document is retried on next startup
                logger.error(f"Failed to update document {document_id} status to 'error': {db_e}")
                return None
            return DocumentStatus.ERROR.value
        finally:
            db.close()

    def resume_pending(self) -> List[int]:
        """
        Re-run the continuation for documents left pending by a previous process.

        Documents resumed more than ``max_attempts`` times are failed instead.

        Returns:
            IDs of the documents that were re-processed
        """
        db = self.session_factory()
        resumed: List[int] = []
        try:
            task_ids = [
                task.document_id
                for task in db.query(IngestionTask).order_by(IngestionTask.created_at).all()
            ]
            for document_id in task_ids:
                task = db.query(IngestionTask).filter(IngestionTask.document_id == document_id).first()
                if task is None:
                    continue
                if task.attempts >= self.max_attempts:  # type: ignore
                    logger.error(f"Document {document_id} failed after {task.attempts} resumed attempts")
                    self._finish(db, document_id, DocumentStatus.ERROR)
                    continue
                task.attempts = task.attempts + 1  # type: ignore
                db.commit()
                resumed.append(int(document_id))  # type: ignore
        finally:
            db.close()

        if resumed:
            logger.info(f"Resuming ingestion for {len(resumed)} pending documents")
        for document_id in resumed:
            self.process_document(document_id)
        return resumed

    def regenerate_summary(self, db: Session, document_id: int, owner_id: int) -> str:
        """
        Generate a fresh summary for a processed document.

        The stored summary is only replaced when the model call succeeds.

        Raises:
            NotFoundError: If the document is missing or not owned by the caller
            PreconditionError: If the document has no extracted text yet
        """
        document = get_owned_document(db, document_id, owner_id)
        if document.extracted_text is None:
            raise PreconditionError("Document has not been processed yet")

        try:
            summary = self.responder.summarize(str(document.extracted_text))
        except AIUnavailableError:
            return SUMMARY_UNAVAILABLE

        document.summary = summary  # type: ignore
        db.commit()
        return summary

    def _finish(self, db: Session, document_id: int, status: DocumentStatus, **values) -> bool:
        """
        Write a terminal status and drop the pending task in one commit.

        Only a document still in ``processing`` is updated, so a terminal
        status is never overwritten.
        """
        values["status"] = status.value
        updated = (
            db.query(Document)
            .filter(Document.id == document_id, Document.status == DocumentStatus.PROCESSING.value)
            .update(values, synchronize_session=False)
        )
        db.query(IngestionTask).filter(IngestionTask.document_id == document_id).delete(
            synchronize_session=False
        )
        db.commit()

        if not updated:
            logger.warning(f"Document {document_id} was not in 'processing', status left unchanged")
        return bool(updated)

    def _drop_task(self, db: Session, document_id: int) -> None:
        db.query(IngestionTask).filter(IngestionTask.document_id == document_id).delete(
            synchronize_session=False
        )
        db.commit()

"""
Shared fixtures: in-memory SQLite database, stub language models and an API
client wired to per-test services.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ALGORITHM"] = "HS256"
os.environ["LLM_PROVIDER"] = "google"
os.environ["GEMINI_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["SEED_DEMO_USER"] = "false"
os.environ["RESUME_PENDING_ON_STARTUP"] = "false"

from typing import Any, List, Optional

import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from knowledge_scout.core.agents.responder import AIResponder
from knowledge_scout.core.document_processor import DocumentProcessor
from knowledge_scout.core.helpers.extracter import TextExtractor
from knowledge_scout.core.security import create_access_token, get_password_hash
from knowledge_scout.db.base import SessionLocal, engine
from knowledge_scout.main import app
from knowledge_scout.models import Base, ChatSession, Document, User
from knowledge_scout.services.file_service import FileStorage


class FailingChatModel(FakeListChatModel):
    """Chat model whose every call fails."""

    def _call(self, *args: Any, **kwargs: Any) -> str:
        raise RuntimeError("model unavailable")


class RecordingChatModel(FakeListChatModel):
    """Fake chat model that remembers the prompts it was given."""

    prompts: List[str] = []

    def _call(self, messages, stop=None, run_manager=None, **kwargs: Any) -> str:
        self.prompts.append(messages[-1].content)
        return super()._call(messages, stop=stop, run_manager=run_manager, **kwargs)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def responder():
    """AI responder with no credential (disabled mode)."""
    return AIResponder()


@pytest.fixture
def storage(tmp_path):
    return FileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def processor(storage, responder):
    return DocumentProcessor(
        session_factory=SessionLocal,
        extractor=TextExtractor(),
        responder=responder,
        storage=storage,
    )


@pytest.fixture
def client(processor, storage, responder):
    app.state.ai_responder = responder
    app.state.file_storage = storage
    app.state.document_processor = processor
    return TestClient(app)


def create_user(db, email: str = "reader@example.com", name: str = "Reader", password: str = "secret123") -> User:
    user = User(email=email, name=name, hashed_password=get_password_hash(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers_for(user: User) -> dict:
    token = create_access_token(subject=str(user.id), extra_claims={"email": user.email})
    return {"Authorization": f"Bearer {token}"}


def create_document(
    db,
    owner: User,
    status: str = "completed",
    extracted_text: Optional[str] = "The quick brown fox jumps over the lazy dog.",
    title: str = "Foxes",
) -> Document:
    document = Document(
        title=title,
        filename="stored.txt",
        original_name="foxes.txt",
        file_path="/nonexistent/stored.txt",
        file_size=44,
        mime_type="text/plain",
        status=status,
        extracted_text=extracted_text,
        summary="A fox and a dog." if extracted_text else None,
        user_id=owner.id,
    )
    db.add(document)
    db.commit()
    db.refresh(document)
    return document


def create_session(db, owner: User, document: Document) -> ChatSession:
    session = ChatSession(title="Chat", user_id=owner.id, document_id=document.id)
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


@pytest.fixture
def user(db):
    return create_user(db)


@pytest.fixture
def other_user(db):
    return create_user(db, email="someone@example.com", name="Someone Else")


@pytest.fixture
def auth_headers(user):
    return auth_headers_for(user)

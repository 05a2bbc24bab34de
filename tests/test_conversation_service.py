from datetime import datetime

import pytest

from conftest import RecordingChatModel, create_document, create_session
from knowledge_scout.core.agents.responder import ANSWER_DISABLED, AIResponder
from knowledge_scout.core.exceptions import NotFoundError, PreconditionError, ValidationError
from knowledge_scout.models import ChatSession, Message
from knowledge_scout.services.conversation_service import ConversationService


@pytest.fixture
def conversations(db, responder):
    return ConversationService(db, responder)


class TestSessions:
    def test_create_session_defaults_title_to_document(self, db, user, conversations):
        document = create_document(db, user, title="Foxes")

        session = conversations.create_session(document.id, user.id)

        assert session.title == "Chat about Foxes"
        assert session.document_id == document.id
        assert session.user_id == user.id

    def test_create_session_keeps_given_title(self, db, user, conversations):
        document = create_document(db, user)

        assert conversations.create_session(document.id, user.id, "Reading notes").title == "Reading notes"

    def test_create_session_allowed_before_processing_finishes(self, db, user, conversations):
        document = create_document(db, user, status="processing", extracted_text=None)

        assert conversations.create_session(document.id, user.id).id is not None

    def test_create_session_on_other_users_document(self, db, user, other_user, conversations):
        document = create_document(db, other_user)

        with pytest.raises(NotFoundError):
            conversations.create_session(document.id, user.id)
        assert db.query(ChatSession).count() == 0

    def test_list_sessions_orders_by_activity_with_counts(self, db, user, other_user, conversations):
        document = create_document(db, user)
        older = create_session(db, user, document)
        newer = create_session(db, user, document)
        create_session(db, other_user, create_document(db, other_user))
        older.updated_at = datetime(2031, 1, 1)
        newer.updated_at = datetime(2030, 1, 1)
        db.add(Message(session_id=older.id, role="user", content="Hi"))
        db.commit()

        listed = conversations.list_sessions(user.id)

        assert [(session.id, count) for session, count in listed] == [(older.id, 1), (newer.id, 0)]

    def test_delete_session_removes_messages(self, db, user, conversations):
        session = create_session(db, user, create_document(db, user))
        conversations.post_message(session.id, user.id, "What jumps?")

        conversations.delete_session(session.id, user.id)

        assert db.query(ChatSession).count() == 0
        assert db.query(Message).count() == 0

    def test_other_users_session_is_not_found(self, db, user, other_user, conversations):
        session = create_session(db, other_user, create_document(db, other_user))

        with pytest.raises(NotFoundError):
            conversations.get_session(session.id, user.id)
        with pytest.raises(NotFoundError):
            conversations.list_messages(session.id, user.id)
        with pytest.raises(NotFoundError):
            conversations.delete_session(session.id, user.id)
        with pytest.raises(NotFoundError):
            conversations.post_message(session.id, user.id, "Hello?")


class TestPostMessage:
    def test_stores_user_and_assistant_messages_in_order(self, db, user, conversations):
        session = create_session(db, user, create_document(db, user))

        user_message, assistant_message = conversations.post_message(session.id, user.id, "What jumps?")

        assert user_message.role == "user"
        assert user_message.content == "What jumps?"
        assert user_message.sources is None
        assert assistant_message.role == "assistant"
        assert assistant_message.content == ANSWER_DISABLED
        assert assistant_message.sources == []
        assert assistant_message.confidence == 0
        assert user_message.timestamp < assistant_message.timestamp

        messages = conversations.list_messages(session.id, user.id)
        assert [m.id for m in messages] == [user_message.id, assistant_message.id]

    def test_touches_session_activity(self, db, user, conversations):
        session = create_session(db, user, create_document(db, user))
        assert session.updated_at is None

        conversations.post_message(session.id, user.id, "What jumps?")

        db.expire_all()
        assert db.get(ChatSession, session.id).updated_at is not None

    def test_unprocessed_document_is_a_precondition_failure(self, db, user, conversations):
        document = create_document(db, user, status="processing", extracted_text=None)
        session = create_session(db, user, document)

        with pytest.raises(PreconditionError):
            conversations.post_message(session.id, user.id, "Anything?")
        assert db.query(Message).count() == 0

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_message_is_rejected(self, db, user, conversations, text):
        session = create_session(db, user, create_document(db, user))

        with pytest.raises(ValidationError):
            conversations.post_message(session.id, user.id, text)

    def test_answer_sees_document_and_recent_history_only(self, db, user):
        model = RecordingChatModel(responses=["first answer", "second answer", "third answer"])
        conversations = ConversationService(db, AIResponder(model), history_window=2)
        session = create_session(db, user, create_document(db, user))

        conversations.post_message(session.id, user.id, "first question")
        conversations.post_message(session.id, user.id, "second question")
        _, reply = conversations.post_message(session.id, user.id, "third question")

        assert reply.content == "third answer"
        assert reply.confidence == 0.8
        assert "Previous conversation context" not in model.prompts[0]
        last_prompt = model.prompts[-1]
        assert "The quick brown fox jumps over the lazy dog." in last_prompt
        assert "user: second question\nassistant: second answer" in last_prompt
        assert "first question" not in last_prompt
        assert "User question: third question" in last_prompt

    def test_empty_document_still_gets_an_answer(self, db, user, processor, conversations):
        document = processor.submit(db, b"", "empty.txt", "text/plain", user.id)
        processor.process_document(document.id)
        db.expire_all()
        assert document.status == "completed"
        assert document.extracted_text == ""
        session = conversations.create_session(document.id, user.id)

        user_message, assistant_message = conversations.post_message(session.id, user.id, "Anything here?")

        assert user_message.role == "user"
        assert assistant_message.role == "assistant"
        assert assistant_message.content == ANSWER_DISABLED
        assert len(conversations.list_messages(session.id, user.id)) == 2

    def test_message_count_grows_by_two_per_exchange(self, db, user, conversations):
        session = create_session(db, user, create_document(db, user))

        for question in ("one?", "two?", "three?"):
            conversations.post_message(session.id, user.id, question)

        messages = conversations.list_messages(session.id, user.id)
        assert len(messages) == 6
        assert [m.role for m in messages] == ["user", "assistant"] * 3
        assert all(a.timestamp <= b.timestamp for a, b in zip(messages, messages[1:]))

import os

from langchain_core.language_models.fake_chat_models import FakeListChatModel

from conftest import auth_headers_for, create_document, create_session, create_user
from knowledge_scout.core.agents.responder import ANSWER_DISABLED, SUMMARY_DISABLED, AIResponder
from knowledge_scout.models import ChatSession, Document, IngestionTask, Message

API = "/api/v1"


def upload(client, headers, name="hello.txt", content=b"Hello world", media_type="text/plain", **data):
    return client.post(
        f"{API}/documents/upload",
        files={"file": (name, content, media_type)},
        data=data,
        headers=headers,
    )


class TestHealth:
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "OK"


class TestAuth:
    def test_register_returns_user_and_token(self, client):
        response = client.post(
            f"{API}/auth/register",
            json={"email": "new@example.com", "name": "New Reader", "password": "secret123"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "new@example.com"
        assert body["user"]["avatar"]
        assert "hashed_password" not in body["user"]
        assert body["token_type"] == "bearer"

        me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.json()["email"] == "new@example.com"

    def test_register_duplicate_email(self, client, user):
        response = client.post(
            f"{API}/auth/register",
            json={"email": user.email, "name": "Again", "password": "secret123"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "User already exists"

    def test_register_short_password_is_unprocessable(self, client):
        response = client.post(
            f"{API}/auth/register",
            json={"email": "short@example.com", "name": "Short", "password": "123"},
        )

        assert response.status_code == 422

    def test_login(self, client, user):
        response = client.post(f"{API}/auth/login", json={"email": user.email, "password": "secret123"})

        assert response.status_code == 200
        assert response.json()["user"]["id"] == user.id

    def test_login_wrong_password(self, client, user):
        response = client.post(f"{API}/auth/login", json={"email": user.email, "password": "nope-nope"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_token_form_flow(self, client, user):
        response = client.post(f"{API}/auth/token", data={"username": user.email, "password": "secret123"})

        assert response.status_code == 200
        assert response.json()["access_token"]

    def test_protected_route_requires_token(self, client):
        assert client.get(f"{API}/documents").status_code == 401

    def test_garbage_token_is_rejected(self, client):
        response = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401

    def test_init_demo_is_idempotent(self, client):
        first = client.post(f"{API}/auth/init-demo")
        second = client.post(f"{API}/auth/init-demo")

        assert first.json()["message"] == "Demo user created successfully"
        assert second.json()["message"] == "Demo user already exists"
        assert first.json()["user"]["id"] == second.json()["user"]["id"]


class TestDocuments:
    def test_upload_is_accepted_then_completes(self, client, auth_headers):
        response = upload(client, auth_headers, title="Greeting")

        assert response.status_code == 202
        document = response.json()["document"]
        assert document["status"] == "processing"
        assert document["title"] == "Greeting"

        status = client.get(f"{API}/documents/{document['id']}/status", headers=auth_headers)
        assert status.json() == {"document_id": document["id"], "status": "completed"}

        detail = client.get(f"{API}/documents/{document['id']}", headers=auth_headers).json()
        assert detail["extracted_text"] == "Hello world"
        assert detail["summary"] == SUMMARY_DISABLED
        assert detail["metadata"] == {"text_length": 11, "ai_summary": False}

    def test_status_schema_is_distinct_from_status_enum(self, client):
        schemas = client.get(f"{API}/openapi.json").json()["components"]["schemas"]

        assert "DocumentStatusResponse" in schemas
        assert set(schemas["DocumentStatusResponse"]["properties"]) == {"document_id", "status"}

    def test_upload_rejects_disallowed_type(self, client, auth_headers, db):
        response = upload(client, auth_headers, name="photo.png", content=b"\x89PNG", media_type="image/png")

        assert response.status_code == 400
        assert "Invalid file type" in response.json()["detail"]
        assert db.query(Document).count() == 0

    def test_list_only_shows_own_documents_newest_first(self, client, db, user, other_user, auth_headers):
        first = create_document(db, user, title="First")
        second = create_document(db, user, title="Second")
        create_document(db, other_user, title="Theirs")

        response = client.get(f"{API}/documents", headers=auth_headers)

        assert [d["id"] for d in response.json()] == [second.id, first.id]

    def test_other_users_document_is_not_found(self, client, db, other_user, auth_headers):
        document = create_document(db, other_user)

        for path in ("", "/status"):
            response = client.get(f"{API}/documents/{document.id}{path}", headers=auth_headers)
            assert response.status_code == 404
            assert response.json()["detail"] == "Document not found"
        assert client.delete(f"{API}/documents/{document.id}", headers=auth_headers).status_code == 404

    def test_delete_removes_file_sessions_and_messages(self, client, db, auth_headers, storage):
        document = upload(client, auth_headers).json()["document"]
        session = client.post(
            f"{API}/chat/sessions", json={"document_id": document["id"]}, headers=auth_headers
        ).json()["session"]
        client.post(f"{API}/chat/sessions/{session['id']}/messages", json={"message": "Hi?"}, headers=auth_headers)
        stored_path = os.path.join(storage.upload_dir, document["filename"])
        assert os.path.exists(stored_path)

        response = client.delete(f"{API}/documents/{document['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert not os.path.exists(stored_path)
        db.expire_all()
        assert db.query(Document).count() == 0
        assert db.query(ChatSession).count() == 0
        assert db.query(Message).count() == 0
        assert db.query(IngestionTask).count() == 0
        assert client.get(f"{API}/chat/sessions/{session['id']}", headers=auth_headers).status_code == 404

    def test_ai_operations_need_processed_document(self, client, db, user, auth_headers):
        document = create_document(db, user, status="processing", extracted_text=None)

        for operation in ("summary", "questions", "key-points"):
            response = client.post(f"{API}/documents/{document.id}/{operation}", headers=auth_headers)
            assert response.status_code == 409

    def test_ai_operations_accept_empty_extracted_text(self, client, db, user, auth_headers):
        document = create_document(db, user, extracted_text="")

        for operation in ("summary", "questions", "key-points"):
            response = client.post(f"{API}/documents/{document.id}/{operation}", headers=auth_headers)
            assert response.status_code == 200

    def test_questions_and_key_points_from_model(self, client, db, user, auth_headers):
        client.app.state.ai_responder = AIResponder(
            FakeListChatModel(responses=['["What jumps?", "Over what?"]', '["Foxes jump"]'])
        )
        document = create_document(db, user)

        questions = client.post(f"{API}/documents/{document.id}/questions", headers=auth_headers)
        key_points = client.post(f"{API}/documents/{document.id}/key-points", headers=auth_headers)

        assert questions.json()["questions"] == ["What jumps?", "Over what?"]
        assert key_points.json()["key_points"] == ["Foxes jump"]

    def test_regenerate_summary(self, client, db, user, auth_headers):
        document = create_document(db, user)

        response = client.post(f"{API}/documents/{document.id}/summary", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["summary"] == SUMMARY_DISABLED


class TestChat:
    def test_full_conversation(self, client, db, user, auth_headers):
        document = create_document(db, user, title="Foxes")

        created = client.post(f"{API}/chat/sessions", json={"document_id": document.id}, headers=auth_headers)
        assert created.status_code == 201
        session = created.json()["session"]
        assert session["title"] == "Chat about Foxes"

        sent = client.post(
            f"{API}/chat/sessions/{session['id']}/messages",
            json={"message": "What jumps?"},
            headers=auth_headers,
        )
        assert sent.status_code == 200
        body = sent.json()
        assert body["user_message"]["content"] == "What jumps?"
        assert body["assistant_message"]["content"] == ANSWER_DISABLED
        assert body["assistant_message"]["confidence"] == 0

        history = client.get(f"{API}/chat/sessions/{session['id']}/messages", headers=auth_headers).json()
        assert history["document"] == {"id": document.id, "title": "Foxes", "filename": "stored.txt"}
        assert [m["role"] for m in history["messages"]] == ["user", "assistant"]

        listed = client.get(f"{API}/chat/sessions", headers=auth_headers).json()["sessions"]
        assert len(listed) == 1
        assert listed[0]["message_count"] == 2
        assert listed[0]["document"]["title"] == "Foxes"

        assert client.delete(f"{API}/chat/sessions/{session['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"{API}/chat/sessions", headers=auth_headers).json()["sessions"] == []

    def test_message_on_unprocessed_document_conflicts(self, client, db, user, auth_headers):
        session = create_session(db, user, create_document(db, user, status="processing", extracted_text=None))

        response = client.post(
            f"{API}/chat/sessions/{session.id}/messages", json={"message": "Ready?"}, headers=auth_headers
        )

        assert response.status_code == 409

    def test_empty_message_is_unprocessable(self, client, db, user, auth_headers):
        session = create_session(db, user, create_document(db, user))

        response = client.post(
            f"{API}/chat/sessions/{session.id}/messages", json={"message": ""}, headers=auth_headers
        )

        assert response.status_code == 422

    def test_session_on_other_users_document(self, client, db, other_user, auth_headers):
        document = create_document(db, other_user)

        response = client.post(f"{API}/chat/sessions", json={"document_id": document.id}, headers=auth_headers)

        assert response.status_code == 404

    def test_other_users_session_is_not_found(self, client, db):
        owner = create_user(db, email="owner@example.com", name="Owner")
        intruder = create_user(db, email="intruder@example.com", name="Intruder")
        session = create_session(db, owner, create_document(db, owner))
        headers = auth_headers_for(intruder)

        assert client.get(f"{API}/chat/sessions/{session.id}", headers=headers).status_code == 404
        assert client.get(f"{API}/chat/sessions/{session.id}/messages", headers=headers).status_code == 404
        assert client.delete(f"{API}/chat/sessions/{session.id}", headers=headers).status_code == 404

import math

import pytest

from smarttalk.common.models import ChatMessage
from conftest import read_sse_events, sse_contents


@pytest.fixture
def session(sessions_repo, user):
    return sessions_repo.add("session-user-1-1", user.id)


# --- Streaming turn ---

def test_stream_falls_back_and_strips_markup(
    client, auth_headers, session, providers, provider_failure,
    sessions_repo, messages_repo, users_repo, user,
):
    gemini, openai, cohere = providers
    gemini.error = provider_failure("Gemini")
    openai.reply = "**Hello** world"

    response = client.post(
        "/api/chat/stream",
        json={"message": "Explain quantum computing", "sessionId": session.session_id},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    events = read_sse_events(response)
    fragments = sse_contents(events)
    assert "".join(fragments) == "Hello world"
    assert len(fragments) == math.ceil(len("Hello world") / 5)
    assert events[-1] == "[DONE]"
    assert cohere.calls == []

    [user_msg] = messages_repo.for_role("user")
    assert user_msg.content == "Explain quantum computing"
    [assistant_msg] = messages_repo.for_role("assistant")
    assert assistant_msg.provider == "OpenAI"
    assert assistant_msg.model == "openai-default"
    assert assistant_msg.content == "Hello world"

    stored = sessions_repo.sessions[session.session_id]
    assert stored.provider == "OpenAI"
    assert stored.model == "openai-default"
    assert stored.message_count == 2
    assert stored.title == "Explain quantum computing"
    assert users_repo.users[user.id].request_count == 1


def test_stream_for_foreign_session_is_not_found(client, auth_headers, sessions_repo, messages_repo, providers):
    sessions_repo.add("session-other-1", "someone-else")

    response = client.post(
        "/api/chat/stream",
        json={"message": "Hello", "sessionId": "session-other-1"},
        headers=auth_headers,
    )

    assert response.status_code == 404
    assert response.json() == {"detail": "Session not found"}
    assert not response.headers["content-type"].startswith("text/event-stream")
    assert messages_repo.messages == []
    assert all(p.calls == [] for p in providers)


def test_stream_when_every_provider_fails(
    client, auth_headers, session, providers, provider_failure, sessions_repo, messages_repo, users_repo, user,
):
    for provider in providers:
        provider.error = provider_failure(provider.name)

    response = client.post(
        "/api/chat/stream",
        json={"message": "Hello", "sessionId": session.session_id},
        headers=auth_headers,
    )

    assert response.status_code == 200
    events = read_sse_events(response)
    assert len(events) == 2
    [diagnostic] = sse_contents(events)
    assert "All AI providers failed" in diagnostic
    assert "Gemini, OpenAI, Cohere" in diagnostic
    assert events[-1] == "[DONE]"

    assert messages_repo.for_role("assistant") == []
    assert len(messages_repo.for_role("user")) == 1
    assert sessions_repo.sessions[session.session_id].provider == "Gemini"
    assert users_repo.users[user.id].request_count == 0


def test_stream_passes_requested_model(client, auth_headers, session, providers):
    response = client.post(
        "/api/chat/stream",
        json={"message": "Hi", "sessionId": session.session_id, "model": "gemini-1.5-pro"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert providers[0].calls == [("Hi", "gemini-1.5-pro")]


def test_title_only_set_on_first_message(client, auth_headers, sessions_repo, user):
    sessions_repo.add("session-busy", user.id, message_count=4)

    client.post(
        "/api/chat/stream",
        json={"message": "one two three four five six seven", "sessionId": "session-busy"},
        headers=auth_headers,
    )

    assert sessions_repo.sessions["session-busy"].title == "New Chat"


def test_long_first_message_title_is_truncated(client, auth_headers, session, sessions_repo):
    client.post(
        "/api/chat/stream",
        json={"message": "one two three four five six seven", "sessionId": session.session_id},
        headers=auth_headers,
    )
    assert sessions_repo.sessions[session.session_id].title == "one two three four five six..."


def test_stream_requires_authentication(client, session):
    response = client.post("/api/chat/stream", json={"message": "Hi", "sessionId": session.session_id})
    assert response.status_code == 401


def test_stream_rejects_empty_message(client, auth_headers, session):
    response = client.post(
        "/api/chat/stream", json={"message": "", "sessionId": session.session_id}, headers=auth_headers
    )
    assert response.status_code == 422


# --- Session CRUD ---

def test_create_and_list_sessions(client, auth_headers, sessions_repo, user):
    response = client.post("/api/chat/session", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "New Chat"
    assert body["sessionId"] in sessions_repo.sessions
    stored = sessions_repo.sessions[body["sessionId"]]
    assert stored.provider == "Gemini"
    assert stored.model == "gemini-default"

    listed = client.get("/api/chat/sessions", headers=auth_headers).json()
    assert [s["sessionId"] for s in listed["sessions"]] == [body["sessionId"]]
    assert listed["sessions"][0]["messageCount"] == 0


def test_list_sessions_only_returns_own(client, auth_headers, sessions_repo, session):
    sessions_repo.add("session-other-2", "someone-else")
    listed = client.get("/api/chat/sessions", headers=auth_headers).json()
    assert [s["sessionId"] for s in listed["sessions"]] == [session.session_id]


def test_get_messages(client, auth_headers, session, messages_repo):
    client.post(
        "/api/chat/stream",
        json={"message": "Hi there", "sessionId": session.session_id},
        headers=auth_headers,
    )

    response = client.get(f"/api/chat/messages/{session.session_id}", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert [m["role"] for m in body["messages"]] == ["user", "assistant"]
    assert body["messages"][1]["provider"] == "Gemini"
    assert body["session"]["sessionId"] == session.session_id


def test_get_messages_for_missing_session(client, auth_headers):
    response = client.get("/api/chat/messages/nope", headers=auth_headers)
    assert response.status_code == 404


def test_rename_session(client, auth_headers, session, sessions_repo):
    response = client.patch(
        f"/api/chat/session/{session.session_id}/title",
        json={"title": "Quantum notes"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["session"]["title"] == "Quantum notes"
    assert sessions_repo.sessions[session.session_id].title == "Quantum notes"


def test_delete_session_removes_messages(client, auth_headers, session, sessions_repo, messages_repo):
    messages_repo.messages.append(
        ChatMessage(session_id=session.session_id, role="user", content="hi", timestamp=session.created_at)
    )

    response = client.delete(f"/api/chat/session/{session.session_id}", headers=auth_headers)

    assert response.status_code == 200
    assert session.session_id not in sessions_repo.sessions
    assert messages_repo.messages == []


def test_delete_foreign_session_is_not_found(client, auth_headers, sessions_repo, messages_repo):
    sessions_repo.add("session-other-3", "someone-else")
    messages_repo.messages.append(
        ChatMessage(session_id="session-other-3", role="user", content="mine", timestamp=sessions_repo.sessions["session-other-3"].created_at)
    )

    response = client.delete("/api/chat/session/session-other-3", headers=auth_headers)

    assert response.status_code == 404
    assert "session-other-3" in sessions_repo.sessions
    assert len(messages_repo.messages) == 1


def test_clear_chat(client, auth_headers, session, sessions_repo, messages_repo):
    client.post(
        "/api/chat/stream",
        json={"message": "Hi", "sessionId": session.session_id},
        headers=auth_headers,
    )

    response = client.post("/api/chat/clear", json={"sessionId": session.session_id}, headers=auth_headers)

    assert response.status_code == 200
    assert messages_repo.messages == []
    assert sessions_repo.sessions[session.session_id].message_count == 0

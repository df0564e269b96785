import json
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from smarttalk.api.auth_utils import create_access_token
from smarttalk.api.middleware.error_handlers import register_exception_handlers
from smarttalk.api.routes import auth, chat, system
from smarttalk.common.models import ChatMessage, ChatSession, User
from smarttalk.config import ConfigManager
from smarttalk.db.messages import get_messages_repo
from smarttalk.db.sessions import SessionNotFoundError, get_sessions_repo
from smarttalk.db.users import get_users_repo
from smarttalk.providers import BaseProvider, ProviderError, ProviderFallbackManager

TEST_OVERRIDES = {
    "auth_settings": {"jwt_secret": "test-secret", "public_base_url": "http://testserver"},
    "stream_settings": {"chunk_size": 5, "chunk_delay_seconds": 0},
    "fallback_settings": {"retry_delay_seconds": 0},
    "email_settings": {"user": None, "password": None},
}


def _now():
    return datetime.now(timezone.utc)


class FakeProvider(BaseProvider):
    """Provider double: returns `reply` or raises `error`, recording every call."""

    def __init__(self, name: str, reply: Optional[str] = None, error: Optional[Exception] = None,
                 default_model: Optional[str] = None):
        super().__init__(api_key="test-key", base_url="http://fake.invalid",
                         default_model=default_model or f"{name.lower()}-default")
        self.name = name
        self.reply = reply
        self.error = error
        self.calls = []

    async def generate(self, prompt: str, model: Optional[str] = None) -> str:
        self.calls.append((prompt, model))
        if self.error:
            raise self.error
        return self.reply


class InMemoryUsersRepository:
    def __init__(self):
        self.users: Dict[str, User] = {}

    async def create_user(self, name, email, password_hash, verification_token, phone=None, country=None):
        user = User(
            id=str(uuid.uuid4()), name=name, email=email, password_hash=password_hash,
            phone=phone, country=country, verification_token=verification_token, created_at=_now(),
        )
        self.users[user.id] = user
        return user

    async def get_user_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    async def get_user_by_id(self, user_id):
        return self.users.get(user_id)

    async def verify_email(self, token):
        for user in self.users.values():
            if user.verification_token == token:
                updated = user.model_copy(update={"is_verified": True, "verification_token": None})
                self.users[user.id] = updated
                return updated
        return None

    async def increment_request_count(self, user_id):
        user = self.users[user_id]
        self.users[user_id] = user.model_copy(update={"request_count": user.request_count + 1})
        return True


class InMemorySessionsRepository:
    def __init__(self):
        self.sessions: Dict[str, ChatSession] = {}

    def add(self, session_id: str, user_id: str, message_count: int = 0) -> ChatSession:
        session = ChatSession(
            session_id=session_id, user_id=user_id, provider="Gemini", model="gemini-default",
            created_at=_now(), updated_at=_now(), message_count=message_count,
        )
        self.sessions[session_id] = session
        return session

    async def create_session(self, user_id, provider, model):
        session = self.add(f"session-{user_id}-{len(self.sessions) + 1}", user_id)
        session = session.model_copy(update={"provider": provider, "model": model})
        self.sessions[session.session_id] = session
        return session

    async def list_sessions(self, user_id, limit=50):
        owned = [s for s in self.sessions.values() if s.user_id == user_id]
        return sorted(owned, key=lambda s: s.updated_at, reverse=True)[:limit]

    async def get_session(self, session_id, user_id):
        session = self.sessions.get(session_id)
        if not session or session.user_id != user_id:
            raise SessionNotFoundError(session_id)
        return session

    def _update(self, session_id, **changes):
        session = self.sessions[session_id]
        changes["updated_at"] = _now()
        self.sessions[session_id] = session.model_copy(update=changes)
        return self.sessions[session_id]

    async def record_user_message(self, session_id, title=None):
        session = self.sessions[session_id]
        changes = {"message_count": session.message_count + 1}
        if title is not None:
            changes["title"] = title
        self._update(session_id, **changes)

    async def record_assistant_message(self, session_id, provider, model):
        session = self.sessions[session_id]
        self._update(session_id, provider=provider, model=model, message_count=session.message_count + 1)

    async def update_title(self, session_id, user_id, title):
        await self.get_session(session_id, user_id)
        return self._update(session_id, title=title)

    async def reset_message_count(self, session_id, user_id):
        await self.get_session(session_id, user_id)
        self._update(session_id, message_count=0)

    async def delete_session(self, session_id, user_id):
        await self.get_session(session_id, user_id)
        del self.sessions[session_id]


class InMemoryMessagesRepository:
    def __init__(self):
        self.messages: List[ChatMessage] = []

    async def add_message(self, session_id, role, content, provider=None, model=None):
        message = ChatMessage(session_id=session_id, role=role, content=content,
                              timestamp=_now(), provider=provider, model=model)
        self.messages.append(message)
        return message

    async def list_messages(self, session_id):
        return [m for m in self.messages if m.session_id == session_id]

    async def delete_messages(self, session_id):
        before = len(self.messages)
        self.messages = [m for m in self.messages if m.session_id != session_id]
        return before - len(self.messages)

    def for_role(self, role):
        return [m for m in self.messages if m.role == role]


def read_sse_events(response) -> List[str]:
    """Returns the raw payload of each `data:` event in a buffered SSE body."""
    events = []
    for block in response.text.split("\n\n"):
        if block.startswith("data: "):
            events.append(block[len("data: "):])
    return events


def sse_contents(events: List[str]) -> List[str]:
    return [json.loads(e)["content"] for e in events if e != "[DONE]"]


@pytest.fixture
def test_config():
    return ConfigManager(TEST_OVERRIDES).get_active_config()


@pytest.fixture
def users_repo():
    return InMemoryUsersRepository()


@pytest.fixture
def sessions_repo():
    return InMemorySessionsRepository()


@pytest.fixture
def messages_repo():
    return InMemoryMessagesRepository()


@pytest.fixture
def providers():
    return [
        FakeProvider("Gemini", reply="Gemini says hi"),
        FakeProvider("OpenAI", reply="OpenAI says hi"),
        FakeProvider("Cohere", reply="Cohere says hi"),
    ]


@pytest.fixture
def fallback_manager(providers):
    return ProviderFallbackManager(providers, retry_delay=0)


@pytest.fixture
def app(test_config, users_repo, sessions_repo, messages_repo, fallback_manager):
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(system.router)
    app.include_router(auth.router)
    app.include_router(chat.router)

    app.state.config = test_config
    app.state.fallback_manager = fallback_manager

    app.dependency_overrides[get_users_repo] = lambda: users_repo
    app.dependency_overrides[get_sessions_repo] = lambda: sessions_repo
    app.dependency_overrides[get_messages_repo] = lambda: messages_repo
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def user(users_repo):
    stored = User(
        id="user-1", name="Test User", email="test@example.com",
        password_hash="not-a-hash", created_at=_now(),
    )
    users_repo.users[stored.id] = stored
    return stored


@pytest.fixture
def auth_headers(user, test_config):
    token = create_access_token(user.id, test_config["auth_settings"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def provider_failure():
    def _make(name: str, status: int = 500) -> ProviderError:
        return ProviderError(f"{name} API error: {status} - upstream exploded", status_code=status, body="upstream exploded")
    return _make

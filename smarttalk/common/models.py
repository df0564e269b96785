from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON and MongoDB field names are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Users & Auth ---


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    phone: Optional[str] = None
    country: Optional[str] = None


class UserSignIn(BaseModel):
    email: str
    password: str


class User(CamelModel):
    id: str
    name: str
    email: str
    password_hash: str
    phone: Optional[str] = None
    country: Optional[str] = None
    is_verified: bool = False
    verification_token: Optional[str] = None
    created_at: datetime
    request_count: int = 0


class UserPublic(CamelModel):
    id: str
    name: str
    email: str
    is_verified: bool = False


class AuthResponse(CamelModel):
    token: str
    user: UserPublic
    message: Optional[str] = None


# --- Sessions & Messages ---


class ChatSession(CamelModel):
    session_id: str
    user_id: str
    title: str = "New Chat"
    provider: str
    model: str
    created_at: datetime
    updated_at: datetime
    message_count: int = 0


class ChatMessage(CamelModel):
    session_id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime
    provider: Optional[str] = None
    model: Optional[str] = None


class SessionCreated(CamelModel):
    session_id: str
    title: str
    created_at: datetime


class SessionList(CamelModel):
    sessions: List[ChatSession]


class SessionEnvelope(CamelModel):
    session: ChatSession


class MessageList(CamelModel):
    messages: List[ChatMessage]
    session: ChatSession


class TitleUpdate(CamelModel):
    title: str = Field(..., min_length=1)


class ClearRequest(CamelModel):
    session_id: str


class ChatStreamRequest(CamelModel):
    """One chat turn as sent by the client."""

    message: str = Field(..., min_length=1)
    session_id: str
    model: Optional[str] = None


# --- Prompts ---


class SuggestedPrompt(BaseModel):
    icon: str
    text: str
    category: str


class PromptList(BaseModel):
    prompts: List[SuggestedPrompt]

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from smarttalk.api.auth_utils import get_current_user_strict
from smarttalk.api.services import ChatTurnRelay, get_fallback_manager
from smarttalk.common.models import (
    ChatStreamRequest,
    ClearRequest,
    MessageList,
    SessionCreated,
    SessionEnvelope,
    SessionList,
    TitleUpdate,
    User,
)
from smarttalk.db.messages import MessagesRepository, get_messages_repo
from smarttalk.db.sessions import SessionsRepository, get_sessions_repo
from smarttalk.db.users import UsersRepository, get_users_repo
from smarttalk.providers import ProviderFallbackManager

logger = logging.getLogger("SmartTalkAI")

router = APIRouter(prefix="/api/chat")


@router.post("/session", response_model=SessionCreated, summary="Create a new chat session")
async def create_session(
    user: User = Depends(get_current_user_strict),
    sessions_repo: SessionsRepository = Depends(get_sessions_repo),
    fallback_manager: ProviderFallbackManager = Depends(get_fallback_manager),
):
    # New sessions advertise the primary provider until a turn says otherwise.
    primary = fallback_manager.providers[0]
    session = await sessions_repo.create_session(user.id, primary.name, primary.default_model)
    return SessionCreated(
        session_id=session.session_id, title=session.title, created_at=session.created_at
    )


@router.get("/sessions", response_model=SessionList, summary="List the caller's sessions")
async def list_sessions(
    user: User = Depends(get_current_user_strict),
    sessions_repo: SessionsRepository = Depends(get_sessions_repo),
):
    return SessionList(sessions=await sessions_repo.list_sessions(user.id))


@router.get("/messages/{session_id}", response_model=MessageList, summary="Get a session's messages")
async def get_messages(
    session_id: str,
    user: User = Depends(get_current_user_strict),
    sessions_repo: SessionsRepository = Depends(get_sessions_repo),
    messages_repo: MessagesRepository = Depends(get_messages_repo),
):
    session = await sessions_repo.get_session(session_id, user.id)
    messages = await messages_repo.list_messages(session_id)
    return MessageList(messages=messages, session=session)


@router.post("/stream", summary="Send a message and stream the reply as SSE")
async def stream_chat(
    turn: ChatStreamRequest,
    request: Request,
    user: User = Depends(get_current_user_strict),
    sessions_repo: SessionsRepository = Depends(get_sessions_repo),
    messages_repo: MessagesRepository = Depends(get_messages_repo),
    users_repo: UsersRepository = Depends(get_users_repo),
    fallback_manager: ProviderFallbackManager = Depends(get_fallback_manager),
):
    logger.info(f"--- NEW CHAT REQUEST --- User: {user.name}, Session: {turn.session_id}")
    config = getattr(request.app.state, "config", {}) or {}

    relay = ChatTurnRelay(
        fallback_manager,
        sessions_repo,
        messages_repo,
        users_repo,
        stream_settings=config.get("stream_settings"),
    )
    # Raises SessionNotFoundError (404) before any stream is opened.
    session = await relay.open_turn(user, turn)

    return StreamingResponse(
        relay.stream_turn(user, session, turn),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.delete("/session/{session_id}", summary="Delete a session and its messages")
async def delete_session(
    session_id: str,
    user: User = Depends(get_current_user_strict),
    sessions_repo: SessionsRepository = Depends(get_sessions_repo),
    messages_repo: MessagesRepository = Depends(get_messages_repo),
):
    await sessions_repo.delete_session(session_id, user.id)
    await messages_repo.delete_messages(session_id)
    return {"message": "Session deleted successfully"}


@router.patch("/session/{session_id}/title", response_model=SessionEnvelope, summary="Rename a session")
async def update_title(
    session_id: str,
    body: TitleUpdate,
    user: User = Depends(get_current_user_strict),
    sessions_repo: SessionsRepository = Depends(get_sessions_repo),
):
    session = await sessions_repo.update_title(session_id, user.id, body.title)
    return SessionEnvelope(session=session)


@router.post("/clear", summary="Delete all messages of a session")
async def clear_chat(
    body: ClearRequest,
    user: User = Depends(get_current_user_strict),
    sessions_repo: SessionsRepository = Depends(get_sessions_repo),
    messages_repo: MessagesRepository = Depends(get_messages_repo),
):
    await sessions_repo.get_session(body.session_id, user.id)
    await messages_repo.delete_messages(body.session_id)
    await sessions_repo.reset_message_count(body.session_id, user.id)
    return {"message": "Chat cleared successfully"}

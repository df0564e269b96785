import logging
from enum import Enum
from typing import AsyncIterator, Optional

from fastapi import Request
from pymongo.errors import PyMongoError

from smarttalk.common.models import ChatSession, ChatStreamRequest, User
from smarttalk.common.utils import SSE_DONE, format_sse_chunk, generate_title
from smarttalk.db.messages import MessagesRepository
from smarttalk.db.sessions import SessionsRepository
from smarttalk.db.users import UsersRepository
from smarttalk.providers import (
    AllProvidersFailedError,
    ChunkStreamer,
    ProviderFallbackManager,
)

logger = logging.getLogger("SmartTalkAI")


class TurnState(str, Enum):
    RECEIVED = "received"
    PERSISTED_USER_MSG = "persisted_user_msg"
    GENERATING = "generating"
    STREAMING = "streaming"
    PERSISTED_ASSISTANT_MSG = "persisted_assistant_msg"
    DONE = "done"
    FAILED = "failed"


def get_fallback_manager(request: Request) -> ProviderFallbackManager:
    return request.app.state.fallback_manager


class ChatTurnRelay:
    """Runs one chat turn: store the user message, generate with fallback,
    stream the reply as SSE and store the assistant message.

    One instance per turn; `state` records how far the turn got.
    """

    def __init__(
        self,
        fallback_manager: ProviderFallbackManager,
        sessions_repo: SessionsRepository,
        messages_repo: MessagesRepository,
        users_repo: UsersRepository,
        stream_settings: Optional[dict] = None,
    ):
        self.fallback_manager = fallback_manager
        self.sessions_repo = sessions_repo
        self.messages_repo = messages_repo
        self.users_repo = users_repo
        stream_settings = stream_settings or {}
        self.chunk_size = stream_settings.get("chunk_size", 5)
        self.chunk_delay = stream_settings.get("chunk_delay_seconds", 0.03)
        self.state = TurnState.RECEIVED

    async def open_turn(self, user: User, turn: ChatStreamRequest) -> ChatSession:
        """Validates ownership and stores the user message.

        Raises SessionNotFoundError before anything is written.
        """
        session = await self.sessions_repo.get_session(turn.session_id, user.id)

        await self.messages_repo.add_message(session.session_id, "user", turn.message)
        title = generate_title(turn.message) if session.message_count == 0 else None
        await self.sessions_repo.record_user_message(session.session_id, title=title)

        self.state = TurnState.PERSISTED_USER_MSG
        return session

    async def stream_turn(self, user: User, session: ChatSession, turn: ChatStreamRequest) -> AsyncIterator[str]:
        self.state = TurnState.GENERATING
        try:
            result = await self.fallback_manager.generate(turn.message, turn.model)
        except AllProvidersFailedError as e:
            self.state = TurnState.FAILED
            logger.error(f"AI Error for session {session.session_id}: {e}")
            # Failed turns are not stored; the client only sees the diagnostic.
            yield format_sse_chunk({"content": f"⚠️ AI Error: {e}. Please try again."})
            yield SSE_DONE
            return

        logger.info(
            f"Got response for session {session.session_id}: {len(result.content)} chars "
            f"from {result.provider} ({result.model})"
        )

        self.state = TurnState.STREAMING
        streamer = ChunkStreamer(result.content, self.chunk_size, self.chunk_delay)
        logger.debug(f"Streaming {len(streamer)} fragments to session {session.session_id}")
        async for fragment in streamer:
            yield format_sse_chunk({"content": fragment})

        try:
            await self.messages_repo.add_message(
                session.session_id,
                "assistant",
                result.content,
                provider=result.provider,
                model=result.model,
            )
            await self.sessions_repo.record_assistant_message(
                session.session_id, result.provider, result.model
            )
            await self.users_repo.increment_request_count(user.id)
            self.state = TurnState.PERSISTED_ASSISTANT_MSG
        except PyMongoError as e:
            self.state = TurnState.FAILED
            logger.error(f"Could not store reply for session {session.session_id}: {e}", exc_info=True)

        yield SSE_DONE
        if self.state == TurnState.PERSISTED_ASSISTANT_MSG:
            self.state = TurnState.DONE

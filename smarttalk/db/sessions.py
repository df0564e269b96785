import time
import logging
from typing import List, Optional

from pymongo import ReturnDocument

from smarttalk.common.clock import utc_now
from smarttalk.common.models import ChatSession
from smarttalk.db.mongo import get_database

logger = logging.getLogger("SmartTalkAI")

SESSION_LIST_LIMIT = 50


class SessionNotFoundError(Exception):
    """The session does not exist or belongs to another user."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionsRepository:
    def __init__(self, db):
        self.collection = db.sessions

    async def create_session(self, user_id: str, provider: str, model: str) -> ChatSession:
        now = utc_now()
        session = ChatSession(
            session_id=f"session-{user_id}-{int(time.time() * 1000)}",
            user_id=user_id,
            title="New Chat",
            provider=provider,
            model=model,
            created_at=now,
            updated_at=now,
            message_count=0,
        )
        await self.collection.insert_one(session.model_dump(by_alias=True))
        logger.info(f"Created session {session.session_id} for user {user_id}")
        return session

    async def list_sessions(self, user_id: str, limit: int = SESSION_LIST_LIMIT) -> List[ChatSession]:
        cursor = self.collection.find({"userId": user_id}).sort("updatedAt", -1).limit(limit)
        return [ChatSession.model_validate(doc) async for doc in cursor]

    async def get_session(self, session_id: str, user_id: str) -> ChatSession:
        doc = await self.collection.find_one({"sessionId": session_id, "userId": user_id})
        if not doc:
            raise SessionNotFoundError(session_id)
        return ChatSession.model_validate(doc)

    async def record_user_message(self, session_id: str, title: Optional[str] = None) -> None:
        """Bumps the counters after a user message; sets the title on the first one."""
        update = {"$set": {"updatedAt": utc_now()}, "$inc": {"messageCount": 1}}
        if title is not None:
            update["$set"]["title"] = title
        await self.collection.update_one({"sessionId": session_id}, update)

    async def record_assistant_message(self, session_id: str, provider: str, model: str) -> None:
        """Stores which provider/model actually answered the latest turn."""
        await self.collection.update_one(
            {"sessionId": session_id},
            {
                "$set": {"provider": provider, "model": model, "updatedAt": utc_now()},
                "$inc": {"messageCount": 1},
            },
        )

    async def update_title(self, session_id: str, user_id: str, title: str) -> ChatSession:
        doc = await self.collection.find_one_and_update(
            {"sessionId": session_id, "userId": user_id},
            {"$set": {"title": title, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise SessionNotFoundError(session_id)
        return ChatSession.model_validate(doc)

    async def reset_message_count(self, session_id: str, user_id: str) -> None:
        result = await self.collection.update_one(
            {"sessionId": session_id, "userId": user_id},
            {"$set": {"messageCount": 0, "updatedAt": utc_now()}},
        )
        if not result.matched_count:
            raise SessionNotFoundError(session_id)

    async def delete_session(self, session_id: str, user_id: str) -> None:
        result = await self.collection.delete_one({"sessionId": session_id, "userId": user_id})
        if not result.deleted_count:
            raise SessionNotFoundError(session_id)


async def get_sessions_repo() -> SessionsRepository:
    db = await get_database()
    return SessionsRepository(db)

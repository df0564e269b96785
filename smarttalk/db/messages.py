import logging
from typing import List, Optional

from smarttalk.common.clock import utc_now
from smarttalk.common.models import ChatMessage
from smarttalk.db.mongo import get_database

logger = logging.getLogger("SmartTalkAI")


class MessagesRepository:
    def __init__(self, db):
        self.collection = db.messages

    async def add_message(
        self,
        session_id: str,
        role: str,
        content: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
    ) -> ChatMessage:
        message = ChatMessage(
            session_id=session_id,
            role=role,
            content=content,
            timestamp=utc_now(),
            provider=provider,
            model=model,
        )
        await self.collection.insert_one(message.model_dump(by_alias=True, exclude_none=True))
        return message

    async def list_messages(self, session_id: str) -> List[ChatMessage]:
        cursor = self.collection.find({"sessionId": session_id}).sort("timestamp", 1)
        return [ChatMessage.model_validate(doc) async for doc in cursor]

    async def delete_messages(self, session_id: str) -> int:
        result = await self.collection.delete_many({"sessionId": session_id})
        logger.info(f"Deleted {result.deleted_count} messages from session {session_id}")
        return result.deleted_count


async def get_messages_repo() -> MessagesRepository:
    db = await get_database()
    return MessagesRepository(db)

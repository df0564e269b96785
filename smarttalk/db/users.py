import uuid
import logging
from typing import Optional

from pymongo import ReturnDocument

from smarttalk.common.clock import utc_now
from smarttalk.common.models import User
from smarttalk.db.mongo import get_database

logger = logging.getLogger("SmartTalkAI")


class UsersRepository:
    def __init__(self, db):
        self.collection = db.users

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        verification_token: str,
        phone: Optional[str] = None,
        country: Optional[str] = None,
    ) -> User:
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            password_hash=password_hash,
            phone=phone,
            country=country,
            is_verified=False,
            verification_token=verification_token,
            created_at=utc_now(),
            request_count=0,
        )
        await self.collection.insert_one(user.model_dump(by_alias=True))
        logger.info(f"Created new user: {name} (ID: {user.id})")
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        user_doc = await self.collection.find_one({"email": email})
        if user_doc:
            return User.model_validate(user_doc)
        return None

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        user_doc = await self.collection.find_one({"id": user_id})
        if user_doc:
            return User.model_validate(user_doc)
        return None

    async def verify_email(self, token: str) -> Optional[User]:
        """Marks the owner of a verification token as verified and burns the token."""
        user_doc = await self.collection.find_one_and_update(
            {"verificationToken": token},
            {"$set": {"isVerified": True, "verificationToken": None}},
            return_document=ReturnDocument.AFTER,
        )
        if user_doc:
            return User.model_validate(user_doc)
        return None

    async def increment_request_count(self, user_id: str) -> bool:
        result = await self.collection.update_one(
            {"id": user_id}, {"$inc": {"requestCount": 1}}
        )
        return result.acknowledged


async def get_users_repo() -> UsersRepository:
    db = await get_database()
    return UsersRepository(db)

"""User Service — profile updates and the profile-completion bonus.

Invariants:
    - username stays unique (409 on collision)
    - Completion bonus paid once, the first time the profile becomes complete
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.errors import ConflictError
from app.models.user import User
from app.schemas.user import UserUpdate
from app.services.credit_service import CreditService

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def update_profile(self, user: User, body: UserUpdate) -> User:
        changes = body.model_dump(exclude_unset=True)
        new_username = changes.get("username")
        if new_username and new_username != user.username:
            taken = await self.db.execute(
                select(User.id).where(User.username == new_username),
            )
            if taken.scalar_one_or_none() is not None:
                raise ConflictError("Username already taken")

        was_complete = user.profile_complete
        for key, value in changes.items():
            setattr(user, key, value)

        if user.profile_complete and not was_complete:
            awarded = await CreditService(self.db).award_once(
                user.id,
                get_settings().profile_completion_bonus,
                "profile_completion",
                "Profile completion bonus",
            )
            if awarded:
                logger.info("Profile completion bonus awarded", extra={"user_id": user.id})
        await self.db.commit()
        await self.db.refresh(user)
        return user

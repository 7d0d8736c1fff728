"""Admin principal lookups."""


from sqlalchemy import select

from pipevault.domain.admin import AdminUser
from pipevault.repositories.base import BaseRepository


class AdminRepository(BaseRepository[AdminUser]):
    model = AdminUser

    async def is_active_admin(self, user_id: str) -> bool:
        q = (
            select(AdminUser.id)
            .where(AdminUser.user_id == user_id)
            .where(AdminUser.is_active.is_(True))
            .where(AdminUser.deleted_at.is_(None))
        )
        return (await self._session.execute(q)).first() is not None

"""
Session slot repository.

Reads and writes the single "current session account id" row.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from cloudminer.models.session_slot import SESSION_SLOT_ID, SessionSlot
from cloudminer.repositories.base import BaseRepository


class SessionSlotRepository(BaseRepository[SessionSlot]):
    """Repository for the current session slot."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize session slot repository."""
        super().__init__(SessionSlot, session)

    async def get_current(self) -> str | None:
        """Get the id of the signed-in account, if any."""
        slot = await self.get_by_id(SESSION_SLOT_ID)
        return slot.account_id if slot else None

    async def set_current(self, account_id: str | None) -> None:
        """Store the signed-in account id (None signs out)."""
        slot = await self.get_by_id(SESSION_SLOT_ID)
        if slot is None:
            slot = SessionSlot(id=SESSION_SLOT_ID, account_id=account_id)
        else:
            slot.account_id = account_id
        await self.add(slot)

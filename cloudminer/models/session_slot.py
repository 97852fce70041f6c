"""
Session slot model.

Single-row table holding the id of the account currently signed in.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cloudminer.models.base import Base


SESSION_SLOT_ID = 1


class SessionSlot(Base):
    """Current session account id (nullable when signed out)."""

    __tablename__ = "session_slots"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, default=SESSION_SLOT_ID
    )
    account_id: Mapped[str | None] = mapped_column(String(32), nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<SessionSlot(account_id={self.account_id!r})>"

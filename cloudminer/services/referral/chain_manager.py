"""
Referral chain manager.

Maintains the one-level parent/child links between accounts and the
``referral_count`` counters embedded in account records. A parent's
``referral_count`` always equals the number of accounts whose
``referred_by`` points at it.
"""

import secrets

from cloudminer.config.business_constants import (
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
)
from cloudminer.models.account import Account
from cloudminer.services.base_service import BaseService
from cloudminer.services.unit_of_work import UnitOfWork
from cloudminer.utils.exceptions import InvalidCode, SelfReferral


def generate_referral_code() -> str:
    """Generate a random referral code."""
    return "".join(
        secrets.choice(REFERRAL_CODE_ALPHABET)
        for _ in range(REFERRAL_CODE_LENGTH)
    )


class ReferralChainManager(BaseService):
    """Links accounts to their referrer."""

    async def generate_unique_code(self, uow: UnitOfWork) -> str:
        """
        Generate a referral code not used by any account.

        Args:
            uow: Open unit of work

        Returns:
            Unused referral code
        """
        while True:
            code = generate_referral_code()
            # Collisions are unlikely but possible
            if await uow.accounts.get_by_referral_code(code) is None:
                return code

    async def link_on_register(
        self, uow: UnitOfWork, child: Account, raw_code: str | None
    ) -> Account | None:
        """
        Link a freshly created account to the owner of a referral code.

        An unknown code is ignored: registration still succeeds, unlinked.

        Args:
            uow: Open unit of work
            child: New account (not yet persisted)
            raw_code: Referral code as typed, may be empty

        Returns:
            Parent account, or None if no link was made
        """
        if not raw_code or not raw_code.strip():
            return None

        parent = await uow.accounts.get_by_referral_code(raw_code)
        if parent is None:
            self.logger.info(
                "Unknown referral code ignored at registration",
                extra={"code": raw_code.strip().upper(), "email": child.email},
            )
            return None

        child.referred_by = parent.id
        parent.referral_count = (parent.referral_count or 0) + 1
        await uow.accounts.upsert(parent)

        self.logger.info(
            "Account linked to referrer",
            extra={
                "child_email": child.email,
                "parent_id": parent.id,
                "parent_referral_count": parent.referral_count,
            },
        )
        return parent

    async def relink(
        self, uow: UnitOfWork, child: Account, raw_code: str
    ) -> Account:
        """
        Move an account under the owner of another referral code.

        Args:
            uow: Open unit of work
            child: Account to relink
            raw_code: Referral code of the new parent

        Returns:
            New parent account

        Raises:
            InvalidCode: If the code matches no account
            SelfReferral: If the code belongs to the child itself
        """
        parent = await uow.accounts.get_by_referral_code(raw_code)
        if parent is None:
            raise InvalidCode("Invalid referral code")
        if parent.id == child.id:
            raise SelfReferral("Cannot refer self")

        old_parent_id = child.referred_by
        if old_parent_id == parent.id:
            return parent

        if old_parent_id:
            old_parent = await uow.accounts.get_for_update(old_parent_id)
            if old_parent is not None:
                old_parent.referral_count = max(
                    (old_parent.referral_count or 0) - 1, 0
                )
                await uow.accounts.upsert(old_parent)

        child.referred_by = parent.id
        parent.referral_count = (parent.referral_count or 0) + 1
        await uow.accounts.upsert(child)
        await uow.accounts.upsert(parent)

        self.logger.info(
            "Referrer relinked",
            extra={
                "child_id": child.id,
                "old_parent_id": old_parent_id,
                "new_parent_id": parent.id,
            },
        )
        return parent

    async def detach(self, uow: UnitOfWork, child: Account) -> None:
        """
        Remove a departing account from its parent's counter.

        The child's own children keep pointing at it.
        """
        if not child.referred_by:
            return
        parent = await uow.accounts.get_for_update(child.referred_by)
        if parent is None:
            return
        parent.referral_count = max((parent.referral_count or 0) - 1, 0)
        await uow.accounts.upsert(parent)

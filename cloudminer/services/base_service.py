"""
Base service class.

Provides common functionality for all service classes including store
access, logging, and helper decorators.
"""

import functools
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from loguru import logger

from cloudminer.models.account import Account
from cloudminer.services.unit_of_work import LedgerStore, UnitOfWork
from cloudminer.utils.exceptions import AccountBlocked, Unauthorized


# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Ledger store access
    - Logging with bound service context
    - Administrator and account-state guards
    """

    def __init__(self, store: LedgerStore) -> None:
        """
        Initialize base service.

        Args:
            store: Ledger store
        """
        self.store = store
        self.logger = logger.bind(service=self.__class__.__name__)

    def now(self) -> datetime:
        """Current time according to the store clock."""
        return self.store.now()

    async def require_admin(self, uow: UnitOfWork, caller_id: str) -> Account:
        """
        Ensure the caller is the administrator.

        Args:
            uow: Open unit of work
            caller_id: Account id of the caller

        Returns:
            The administrator account

        Raises:
            Unauthorized: If id or email do not match the administrator
        """
        caller = await uow.accounts.get_by_id(caller_id)
        if not self.store.admin.matches(caller):
            self.logger.warning(
                "Privileged operation refused",
                extra={"caller_id": caller_id},
            )
            raise Unauthorized("Access denied: administrator only")
        return caller

    async def require_active(
        self, uow: UnitOfWork, account_id: str, for_update: bool = True
    ) -> Account:
        """
        Load an account that is allowed to transact.

        Raises:
            AccountNotFound: If the account does not exist
            AccountBlocked: If the account is blocked
        """
        account = await uow.accounts.require(account_id, for_update=for_update)
        if account.blocked:
            raise AccountBlocked()
        return account


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to log method entry/exit with timing.

    Logs:
    - Method entry with arguments
    - Method exit with duration
    - Exceptions if any

    Usage:
        @log_operation
        async def my_service_method(self, account_id: str):
            # Your code here
            pass

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        start_time = time.time()

        self.logger.debug(
            f"Starting {func.__name__}",
            extra={
                "function": func.__name__,
                "args_count": len(args),
                "kwargs_keys": list(kwargs.keys()),
            },
        )

        try:
            result = await func(self, *args, **kwargs)
        except Exception as e:
            duration = time.time() - start_time
            self.logger.debug(
                f"Failed {func.__name__}",
                extra={
                    "function": func.__name__,
                    "duration_seconds": round(duration, 3),
                    "error": str(e),
                    "success": False,
                },
            )
            raise

        duration = time.time() - start_time
        self.logger.debug(
            f"Completed {func.__name__}",
            extra={
                "function": func.__name__,
                "duration_seconds": round(duration, 3),
                "success": True,
            },
        )
        return result

    return wrapper

"""
Ledger exception types.

Every refused operation raises a subclass of CloudMinerError. The
``code`` attribute is stable and meant for the presentation layer to map
onto user-facing text.
"""

from sqlalchemy.exc import SQLAlchemyError


class CloudMinerError(Exception):
    """Base class for all ledger errors."""

    code = "error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)


class NotFound(CloudMinerError):
    """Requested record does not exist."""

    code = "not_found"


class AccountNotFound(NotFound):
    """Account not found."""

    code = "account_not_found"


class TransactionNotFound(NotFound):
    """Transaction not found."""

    code = "transaction_not_found"


class Unauthorized(CloudMinerError):
    """Caller is not the administrator."""

    code = "unauthorized"


class ProtectedAccount(CloudMinerError):
    """The administrator account cannot be blocked or deleted."""

    code = "protected_account"


class InvalidAmount(CloudMinerError):
    """Amount must be greater than zero."""

    code = "invalid_amount"


class InsufficientFunds(CloudMinerError):
    """Balance is too low for this operation."""

    code = "insufficient_funds"


class InvalidPlan(CloudMinerError):
    """Plan level does not exist."""

    code = "invalid_plan"


class AlreadyOwned(CloudMinerError):
    """Account already owns this plan level or a higher one."""

    code = "already_owned"


class Cooling(CloudMinerError):
    """Yield collection is cooling down."""

    code = "cooling"

    def __init__(self, hours_remaining: int) -> None:
        self.hours_remaining = hours_remaining
        super().__init__(
            f"Mining cooling down. Try again in {hours_remaining} hours."
        )


class InvalidCode(CloudMinerError):
    """Referral code does not match any account."""

    code = "invalid_code"


class SelfReferral(CloudMinerError):
    """An account cannot refer itself."""

    code = "self_referral"


class EmailInUse(CloudMinerError):
    """Email already in use."""

    code = "email_in_use"


class IncorrectSecret(CloudMinerError):
    """Incorrect password."""

    code = "incorrect_secret"


class AccountBlocked(CloudMinerError):
    """Account blocked. Contact support."""

    code = "account_blocked"


class AlreadySettled(CloudMinerError):
    """Transaction is already settled with the opposite decision."""

    code = "already_settled"


class AccountIdInUse(CloudMinerError):
    """Account id is held by another account."""

    code = "account_id_in_use"


class PriceUnavailable(CloudMinerError):
    """Price quote is unavailable."""

    code = "price_unavailable"


# Exception categories based on handling strategy

# Refused operations: surfaced verbatim to the caller
DOMAIN_ERRORS = (CloudMinerError,)

# Infrastructure failures: logged with context, then re-raised
MUST_LOG = (SQLAlchemyError,)


def is_domain_error(exc: Exception) -> bool:
    """
    Check if exception is a refused ledger operation.

    Args:
        exc: Exception to check

    Returns:
        True if exception belongs to the ledger error taxonomy
    """
    return isinstance(exc, DOMAIN_ERRORS)


def must_log(exc: Exception) -> bool:
    """
    Check if exception must be logged as an infrastructure failure.

    Args:
        exc: Exception to check

    Returns:
        True if exception must be logged
    """
    return isinstance(exc, MUST_LOG)

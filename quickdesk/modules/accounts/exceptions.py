"""Account domain specific exceptions."""


class AccountError(Exception):
    """Base class for account domain errors."""


class AccountAlreadyExistsError(AccountError):
    """Raised when attempting to create an account with a duplicate email."""


class AccountNotFoundError(AccountError):
    """Raised when the requested account cannot be found."""


class AccountDisabledError(AccountError):
    """Raised when a deactivated account tries to sign in."""


class InvalidPasswordError(AccountError):
    """Raised when the supplied current password does not match."""


class AccountInUseError(AccountError):
    """Raised when deleting an account that still owns tickets."""


class SelfDeletionError(AccountError):
    """Raised when an administrator tries to delete their own account."""


class InvalidResetTokenError(AccountError):
    """Raised when a password reset token is unknown or expired."""

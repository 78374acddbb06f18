"""Notification domain exceptions."""


class NotificationError(Exception):
    """Base class for notification errors."""


class NotificationNotFoundError(NotificationError):
    """Raised when a notification does not exist."""


class NotificationAccessDeniedError(NotificationError):
    """Raised when a user touches a notification addressed to someone else."""


class InvalidRecipientError(NotificationError):
    """Raised when the recipient account does not exist."""

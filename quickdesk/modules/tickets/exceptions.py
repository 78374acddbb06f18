"""Ticket domain exceptions."""


class TicketError(Exception):
    """Base class for ticket errors."""


class TicketNotFoundError(TicketError):
    """Raised when the ticket does not exist."""


class TicketAccessDeniedError(TicketError):
    """Raised when the actor may not see or change the ticket."""


class InvalidCategoryError(TicketError):
    """Raised when a ticket references an unknown category."""


class InvalidAssigneeError(TicketError):
    """Raised when the assignee is not an active agent or admin."""


class TicketNotRatableError(TicketError):
    """Raised when rating a ticket that is neither resolved nor closed."""

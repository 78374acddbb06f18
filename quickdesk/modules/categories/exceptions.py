"""Category domain specific exceptions."""


class CategoryError(Exception):
    """Base class for category domain errors."""


class CategoryNotFoundError(CategoryError):
    """Raised when the requested category cannot be found."""


class CategoryAlreadyExistsError(CategoryError):
    """Raised when another category already uses the same name."""


class CategoryInUseError(CategoryError):
    """Raised when deleting a category that tickets still reference."""

    def __init__(self, ticket_count: int) -> None:
        super().__init__(ticket_count)
        self.ticket_count = ticket_count


class InvalidBulkActionError(CategoryError):
    """Raised for an unknown bulk action or an empty id list."""

"""Upload subsystem exceptions."""


class UploadError(Exception):
    """Base class for upload errors."""


class NoFileError(UploadError):
    """Raised when a request carries no file part."""


class UploadNotFoundError(UploadError):
    """Raised when the requested stored file does not exist."""


class InvalidFilenameError(UploadNotFoundError):
    """Raised for names that cannot refer to a file inside the uploads root."""


class StorageError(UploadError):
    """Raised when the filesystem refuses an operation on an existing file."""


class UploadRejectedError(UploadError):
    """Raised when an upload breaks a size, count or type limit."""

    def __init__(self, message: str, *, too_large: bool = False) -> None:
        super().__init__(message)
        self.too_large = too_large

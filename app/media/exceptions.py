from app.core.exceptions import BaseServiceException


class MediaServiceException(BaseServiceException):
    """
    Base exception for the attachment pipeline.
    `error_type` is the machine-readable name reported in failed results.
    """

    error_type = "media_error"


class FileValidationException(MediaServiceException):
    error_type = "validation_error"

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(", ".join(errors))


class UploadException(MediaServiceException):
    error_type = "upload_error"

    def __init__(self, error: str) -> None:
        self.error = error
        super().__init__(f"Upload failed: {error}")


class ThumbnailException(MediaServiceException):
    error_type = "thumbnail_error"

    def __init__(self, error: str) -> None:
        self.error = error
        super().__init__(f"Thumbnail generation failed: {error}")


class DeleteException(MediaServiceException):
    error_type = "delete_error"

    def __init__(self, error: str) -> None:
        self.error = error
        super().__init__(f"Delete failed: {error}")

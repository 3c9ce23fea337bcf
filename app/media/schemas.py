from typing import Annotated, Any

from fastapi import UploadFile
from pydantic import BaseModel, ConfigDict, Field

from app.media.constants import MediaCategory, MessageType

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class UploadCandidate(BaseModel):
    """
    A file selected by the user, not yet validated or uploaded.
    """

    name: str
    content_type: str
    size: int = Field(ge=0)
    content: bytes = Field(default=b"", repr=False)

    @classmethod
    async def from_upload_file(cls, file: UploadFile, max_size: int | None = None) -> "UploadCandidate":
        """
        Read an UploadFile into memory. The size is taken from the bytes actually read.

        With `max_size`, an oversized file is never buffered: the candidate keeps a size above
        the limit so validation still rejects it, and its content stays empty.
        """
        try:
            if max_size is not None and file.size is not None and file.size > max_size:
                content, size = b"", file.size
            else:
                content = await file.read(-1 if max_size is None else max_size + 1)
                size = len(content)
                if max_size is not None and size > max_size:
                    content = b""
        finally:
            await file.close()
        return cls(
            name=file.filename or "",
            content_type=file.content_type or DEFAULT_CONTENT_TYPE,
            size=size,
            content=content,
        )


class ValidationResult(BaseModel):
    is_valid: bool
    errors: list[str] = []


class FileValidationRead(ValidationResult):
    """
    Validation outcome for one named file, as returned by the API
    """

    name: str


class StoredFileDescriptor(BaseModel):
    """
    Immutable record of a successfully uploaded file.
    """

    url: str
    path: str
    name: str
    size: int
    type: str
    category: MediaCategory
    thumbnail_url: str | None = None
    thumbnail_path: str | None = None

    model_config = ConfigDict(frozen=True)


class UploadResult(BaseModel):
    """
    Outcome of a single upload. Failures are reported here instead of raised.
    """

    success: bool
    data: StoredFileDescriptor | None = None
    error: str | None = None
    error_type: str | None = None
    errors: list[str] = []


class DeleteResult(BaseModel):
    success: bool
    deleted: list[str] = []
    error: str | None = None


class MediaFile(BaseModel):
    """
    Entry of `metadata.mediaFiles` on a media group message
    """

    category: MediaCategory
    url: str
    name: str
    size: int
    type: str
    thumbnail_url: Annotated[str | None, Field(alias="thumbnailUrl")] = None

    model_config = ConfigDict(populate_by_name=True)


class MediaMessageCreate(BaseModel):
    """
    Chat message payload carrying uploaded media.
    Single-file messages use the flat `media_*` fields, groups use `metadata.mediaFiles`.
    """

    conversation_id: str
    message_text: str
    message_type: MessageType
    media_url: str | None = None
    media_type: str | None = None
    media_name: str | None = None
    media_size: int | None = None
    thumbnail_url: str | None = None
    metadata: dict[str, Any] = {}


class MediaItem(BaseModel):
    """
    Display-ready media entry reconstructed from a chat message
    """

    category: MediaCategory
    url: str
    name: str | None = None
    size: int | None = None
    type: str | None = None
    thumbnail_url: str | None = None
    size_label: str | None = None
    icon: str

from typing import Any, Mapping, Sequence

from loguru import logger
from pydantic import ValidationError

from app.core.config import MediaSettings
from app.media.constants import MediaCategory, MessageType
from app.media.formatting import format_file_size, get_file_icon
from app.media.schemas import MediaFile, MediaItem, MediaMessageCreate, StoredFileDescriptor

MEDIA_FILES_KEY = "mediaFiles"


def to_media_file(descriptor: StoredFileDescriptor) -> MediaFile:
    return MediaFile(
        category=descriptor.category,
        url=descriptor.url,
        name=descriptor.name,
        size=descriptor.size,
        type=descriptor.type,
        thumbnail_url=descriptor.thumbnail_url,
    )


def build_media_message(
    conversation_id: str,
    message_text: str,
    descriptors: Sequence[StoredFileDescriptor],
) -> MediaMessageCreate:
    """
    Compose the chat message for uploaded files.

    One file produces a message typed by its category with flat `media_*` fields.
    Several files produce a `media_group` message listing them under `metadata.mediaFiles`.
    """
    if not descriptors:
        raise ValueError("At least one uploaded file is required")

    if len(descriptors) == 1:
        descriptor = descriptors[0]
        return MediaMessageCreate(
            conversation_id=conversation_id,
            message_text=message_text or descriptor.name,
            message_type=MessageType(descriptor.category.value),
            media_url=descriptor.url,
            media_type=descriptor.type,
            media_name=descriptor.name,
            media_size=descriptor.size,
            thumbnail_url=descriptor.thumbnail_url,
        )

    return MediaMessageCreate(
        conversation_id=conversation_id,
        message_text=message_text or f"{len(descriptors)} files",
        message_type=MessageType.MEDIA_GROUP,
        metadata={MEDIA_FILES_KEY: [to_media_file(d).model_dump(mode="json", by_alias=True) for d in descriptors]},
    )


def _media_item(file: MediaFile, settings: MediaSettings) -> MediaItem:
    return MediaItem(
        category=file.category,
        url=file.url,
        name=file.name,
        size=file.size,
        type=file.type,
        thumbnail_url=file.thumbnail_url,
        size_label=format_file_size(file.size),
        icon=get_file_icon(file.type, settings),
    )


def _media_files(entries: Sequence[Any]) -> list[MediaFile]:
    files = []
    for index, entry in enumerate(entries):
        try:
            files.append(MediaFile.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Skipping malformed media entry {index}: {e.error_count()} error(s)")
    return files


def render_media_message(message: Mapping[str, Any], settings: MediaSettings) -> list[MediaItem]:
    """
    Rebuild the media entries of a stored chat message, keyed on its `message_type`.
    Text messages and unknown types have no media.
    """
    try:
        message_type = MessageType(message.get("message_type"))
    except ValueError:
        return []

    if message_type == MessageType.MEDIA_GROUP:
        metadata = message.get("metadata")
        entries = metadata.get(MEDIA_FILES_KEY) if isinstance(metadata, Mapping) else None
        return [_media_item(file, settings) for file in _media_files(entries or [])]

    if message_type == MessageType.TEXT or not message.get("media_url"):
        return []

    size = message.get("media_size")
    content_type = message.get("media_type")
    try:
        item = MediaItem(
            category=MediaCategory(message_type.value),
            url=message["media_url"],
            name=message.get("media_name"),
            size=size,
            type=content_type,
            thumbnail_url=message.get("thumbnail_url") if message_type == MessageType.VIDEO else None,
            size_label=format_file_size(size) if isinstance(size, int) else None,
            icon=get_file_icon(content_type if isinstance(content_type, str) else None, settings),
        )
    except ValidationError as e:
        logger.warning(f"Skipping malformed {message_type.value} message: {e.error_count()} error(s)")
        return []
    return [item]

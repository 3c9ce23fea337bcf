from app.core.constants import BaseEnum


class MediaCategory(BaseEnum):
    """
    Category of an attachment, derived from its content type.
    FILE is the default for any content type outside the other allow-lists.
    """

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"


class MessageType(BaseEnum):
    """
    Chat message kinds as stored in `message_type`
    """

    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"
    MEDIA_GROUP = "media_group"


THUMBNAIL_FILENAME = "thumbnail.jpg"
THUMBNAIL_CONTENT_TYPE = "image/jpeg"
THUMBNAIL_MAX_DIMENSION = 1280

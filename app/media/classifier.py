from app.core.config import MediaSettings
from app.media.constants import MediaCategory


def category_allow_lists(settings: MediaSettings) -> list[tuple[MediaCategory, list[str]]]:
    """
    Allow-lists in match order. The document list maps to the FILE category.
    """
    return [
        (MediaCategory.IMAGE, settings.IMAGE_TYPES),
        (MediaCategory.VIDEO, settings.VIDEO_TYPES),
        (MediaCategory.AUDIO, settings.AUDIO_TYPES),
        (MediaCategory.FILE, settings.DOCUMENT_TYPES),
    ]


def classify(content_type: str, settings: MediaSettings) -> MediaCategory:
    """
    Map a content type to its media category.
    The first allow-list containing the type wins; unmatched types fall back to FILE.
    """
    for category, allowed in category_allow_lists(settings):
        if content_type in allowed:
            return category
    return MediaCategory.FILE


def allowed_content_types(settings: MediaSettings) -> set[str]:
    return {content_type for _, allowed in category_allow_lists(settings) for content_type in allowed}

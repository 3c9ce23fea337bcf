import pytest

from app.core.config import MediaSettings
from app.media.classifier import allowed_content_types, classify
from app.media.constants import MediaCategory


@pytest.mark.parametrize(
    "content_type, expected",
    [
        ("image/jpeg", MediaCategory.IMAGE),
        ("image/webp", MediaCategory.IMAGE),
        ("video/mp4", MediaCategory.VIDEO),
        ("audio/mpeg", MediaCategory.AUDIO),
        ("application/pdf", MediaCategory.FILE),
        ("text/plain", MediaCategory.FILE),
    ],
)
def test_classify_known_types(media_settings: MediaSettings, content_type: str, expected: MediaCategory):
    assert classify(content_type, media_settings) == expected


@pytest.mark.parametrize("content_type", ["application/x-unknown", "image/tiff", "", "IMAGE/JPEG"])
def test_unmatched_types_default_to_file(media_settings: MediaSettings, content_type: str):
    assert classify(content_type, media_settings) == MediaCategory.FILE


def test_ogg_is_video_before_audio(media_settings: MediaSettings):
    # "ogg" only overlaps by subtype, the full content types differ
    assert classify("video/ogg", media_settings) == MediaCategory.VIDEO
    assert classify("audio/ogg", media_settings) == MediaCategory.AUDIO


def test_first_matching_list_wins():
    settings = MediaSettings(IMAGE_TYPES=["application/pdf"])
    assert classify("application/pdf", settings) == MediaCategory.IMAGE


def test_allowed_content_types_is_union_of_lists(media_settings: MediaSettings):
    allowed = allowed_content_types(media_settings)
    assert "image/gif" in allowed
    assert "video/webm" in allowed
    assert "audio/wav" in allowed
    assert "application/zip" in allowed
    assert "application/x-unknown" not in allowed
    assert len(allowed) == 19

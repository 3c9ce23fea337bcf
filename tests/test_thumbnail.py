import io

import pytest
from PIL import Image

from app.core.image.constants import ImageLimits
from app.core.image.processor import ImageProcessor
from app.media.exceptions import ThumbnailException
from app.media.thumbnail import FfmpegFrameExtractor


def _png(width: int, height: int, mode: str = "RGBA") -> bytes:
    output = io.BytesIO()
    Image.new(mode, (width, height), color=(200, 40, 40, 255) if mode == "RGBA" else (200, 40, 40)).save(
        output, format="PNG"
    )
    return output.getvalue()


class TestImageProcessor:
    def test_encodes_as_jpeg_within_limits(self):
        encoded = ImageProcessor.encode(_png(2000, 1000), ImageLimits(max_width=1280, max_height=1280))

        with Image.open(io.BytesIO(encoded)) as image:
            assert image.format == "JPEG"
            assert image.size == (1280, 640)
            assert image.mode == "RGB"

    def test_small_images_keep_their_size(self):
        encoded = ImageProcessor.encode(_png(320, 240, mode="RGB"), ImageLimits(max_width=1280, max_height=1280))

        with Image.open(io.BytesIO(encoded)) as image:
            assert image.size == (320, 240)

    def test_rejects_non_images(self):
        with pytest.raises(ValueError):
            ImageProcessor.encode(b"not an image", ImageLimits(max_width=10, max_height=10))


class TestFfmpegFrameExtractor:
    def test_command_seeks_to_offset(self):
        command = FfmpegFrameExtractor(binary="/usr/bin/ffmpeg")._command(1.0)

        assert command[0] == "/usr/bin/ffmpeg"
        assert command[command.index("-ss") + 1] == "1.000"
        assert command[command.index("-frames:v") + 1] == "1"
        assert command[-1] == "pipe:1"

    async def test_missing_binary_raises_thumbnail_error(self):
        extractor = FfmpegFrameExtractor(binary="/nonexistent/ffmpeg-binary")

        with pytest.raises(ThumbnailException):
            await extractor.extract_still_frame(b"video", 1.0)

    async def test_frame_is_reencoded_as_jpeg(self, monkeypatch: pytest.MonkeyPatch):
        extractor = FfmpegFrameExtractor(quality=70)

        async def fake_run(video: bytes, offset_seconds: float) -> bytes:
            return _png(1920, 1080)

        monkeypatch.setattr(extractor, "_run", fake_run)

        thumbnail = await extractor.extract_still_frame(b"video", 1.0)

        with Image.open(io.BytesIO(thumbnail)) as image:
            assert image.format == "JPEG"
            assert image.size == (1280, 720)

    async def test_undecodable_frame_raises_thumbnail_error(self, monkeypatch: pytest.MonkeyPatch):
        extractor = FfmpegFrameExtractor()

        async def fake_run(video: bytes, offset_seconds: float) -> bytes:
            return b"garbage"

        monkeypatch.setattr(extractor, "_run", fake_run)

        with pytest.raises(ThumbnailException):
            await extractor.extract_still_frame(b"video", 1.0)

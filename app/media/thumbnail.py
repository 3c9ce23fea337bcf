import asyncio
from typing import Protocol

from loguru import logger

from app.core.image.constants import ImageLimits
from app.core.image.processor import ImageProcessor
from app.media.constants import THUMBNAIL_MAX_DIMENSION
from app.media.exceptions import ThumbnailException


class FrameExtractor(Protocol):
    async def extract_still_frame(self, video: bytes, offset_seconds: float) -> bytes:
        """
        Return one encoded image of the video at `offset_seconds`.
        Raises ThumbnailException when no frame can be produced.
        """
        ...


class FfmpegFrameExtractor:
    """
    Grabs a single frame with ffmpeg and re-encodes it with Pillow.
    The video is streamed through stdin so nothing touches the disk.
    """

    def __init__(self, binary: str = "ffmpeg", quality: int = 80, timeout: float = 30.0) -> None:
        self.binary = binary
        self.timeout = timeout
        self.limits = ImageLimits(
            max_width=THUMBNAIL_MAX_DIMENSION,
            max_height=THUMBNAIL_MAX_DIMENSION,
            quality=quality,
        )

    def _command(self, offset_seconds: float) -> list[str]:
        return [
            self.binary,
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            "pipe:0",
            "-ss",
            f"{offset_seconds:.3f}",
            "-frames:v",
            "1",
            "-f",
            "image2pipe",
            "-vcodec",
            "png",
            "pipe:1",
        ]

    async def _run(self, video: bytes, offset_seconds: float) -> bytes:
        try:
            process = await asyncio.create_subprocess_exec(
                *self._command(offset_seconds),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ThumbnailException(f"could not start {self.binary}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(input=video), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise ThumbnailException(f"{self.binary} timed out after {self.timeout}s") from e

        if process.returncode != 0:
            raise ThumbnailException(stderr.decode(errors="replace").strip() or f"exit code {process.returncode}")
        if not stdout:
            # Seeking past the end of a short clip produces no frame
            raise ThumbnailException(f"no frame at {offset_seconds}s")
        return stdout

    async def extract_still_frame(self, video: bytes, offset_seconds: float) -> bytes:
        frame = await self._run(video, offset_seconds)
        try:
            encoded = await asyncio.to_thread(ImageProcessor.encode, frame, self.limits)
        except ValueError as e:
            raise ThumbnailException(str(e)) from e
        logger.debug(f"Extracted thumbnail frame at {offset_seconds}s ({len(encoded)} bytes)")
        return encoded

import asyncio
from typing import Sequence

from loguru import logger
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from app.core.config import MediaSettings
from app.media.classifier import classify
from app.media.constants import THUMBNAIL_CONTENT_TYPE, THUMBNAIL_FILENAME, MediaCategory
from app.media.exceptions import (
    DeleteException,
    FileValidationException,
    MediaServiceException,
    ThumbnailException,
    UploadException,
)
from app.media.naming import StoragePathGenerator
from app.media.schemas import (
    DeleteResult,
    StoredFileDescriptor,
    UploadCandidate,
    UploadResult,
    ValidationResult,
)
from app.media.thumbnail import FrameExtractor
from app.media.validator import validate_file
from app.storages.exceptions import ObjectExistsException, StorageException
from app.storages.interface import ObjectStorage


def _is_retryable(error: BaseException) -> bool:
    # A path collision will not go away by writing to the same path again
    return isinstance(error, StorageException) and not isinstance(error, ObjectExistsException)


class MediaUploadService:
    """
    Validates chat attachments and stores them in the configured bucket.

    Public methods report failures through UploadResult / DeleteResult so callers
    can show a status per file; exceptions stay inside the service.
    """

    BACKOFF_MIN = 1  # seconds
    BACKOFF_MAX = 10  # seconds

    def __init__(
        self,
        storage: ObjectStorage,
        settings: MediaSettings,
        path_generator: StoragePathGenerator | None = None,
        frame_extractor: FrameExtractor | None = None,
        cache_control: int | None = 3600,
    ) -> None:
        self.storage = storage
        self.settings = settings
        self.path_generator = path_generator or StoragePathGenerator()
        self.frame_extractor = frame_extractor
        self.cache_control = cache_control

    async def close(self) -> None:
        await self.storage.close()

    def get_file_type_category(self, candidate: UploadCandidate) -> MediaCategory:
        return classify(candidate.content_type, self.settings)

    def validate_file(self, candidate: UploadCandidate) -> ValidationResult:
        return validate_file(candidate, self.settings)

    def generate_file_name(self, candidate: UploadCandidate, conversation_id: str) -> str:
        return self.path_generator.generate_file_name(candidate, conversation_id)

    async def _discard(self, path: str) -> None:
        try:
            await self.storage.delete_objects([path])
        except StorageException as e:
            logger.warning(f"Could not remove {path} after a failed upload: {e.message}")

    async def _put_object(self, path: str, candidate: UploadCandidate) -> None:
        """
        Single non-overwriting write, repeated only when UPLOAD_RETRIES allows it.
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.settings.UPLOAD_RETRIES + 1),
            wait=wait_exponential(multiplier=self.BACKOFF_MIN, max=self.BACKOFF_MAX),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(f"Retrying upload of {path} (attempt {attempt.retry_state.attempt_number})")
                await self.storage.put_object(
                    path=path,
                    content=candidate.content,
                    content_type=candidate.content_type,
                    cache_control=self.cache_control,
                    overwrite=False,
                )

    async def _write(self, path: str, candidate: UploadCandidate) -> None:
        """
        Store the object, bounded by UPLOAD_TIMEOUT_SECONDS when it is set.
        A cancelled request may still have been committed remotely, so a timed-out path is deleted before failing.
        """
        if self.settings.UPLOAD_TIMEOUT_SECONDS is None:
            await self._put_object(path, candidate)
            return
        try:
            await asyncio.wait_for(self._put_object(path, candidate), timeout=self.settings.UPLOAD_TIMEOUT_SECONDS)
        except asyncio.TimeoutError as e:
            await self._discard(path)
            raise UploadException(f"timed out after {self.settings.UPLOAD_TIMEOUT_SECONDS}s") from e

    async def _upload(self, candidate: UploadCandidate, conversation_id: str) -> StoredFileDescriptor:
        validation = self.validate_file(candidate)
        if not validation.is_valid:
            raise FileValidationException(validation.errors)

        category = self.get_file_type_category(candidate)
        path = self.path_generator.generate_path(candidate, conversation_id, category)

        try:
            await self._write(path, candidate)
            url = self.storage.public_url(path)
        except StorageException as e:
            raise UploadException(e.message) from e

        logger.info(f"File {candidate.name} uploaded to {path}")
        return StoredFileDescriptor(
            url=url,
            path=path,
            name=candidate.name,
            size=candidate.size,
            type=candidate.content_type,
            category=category,
        )

    async def upload_file(self, candidate: UploadCandidate, conversation_id: str) -> UploadResult:
        """
        Validate, name and store one file, then resolve its public URL.
        Every step is a hard gate; nothing is written when validation fails.
        """
        try:
            descriptor = await self._upload(candidate, conversation_id)
        except FileValidationException as e:
            logger.warning(f"Rejected {candidate.name}: {e.message}")
            return UploadResult(success=False, error=e.message, error_type=e.error_type, errors=e.errors)
        except MediaServiceException as e:
            logger.error(f"Upload error for {candidate.name}: {e.message}")
            return UploadResult(success=False, error=e.message, error_type=e.error_type)
        return UploadResult(success=True, data=descriptor)

    async def _extract_thumbnail(self, video: UploadCandidate) -> UploadCandidate:
        if self.frame_extractor is None:
            raise ThumbnailException("no frame extractor configured")
        try:
            image = await self.frame_extractor.extract_still_frame(
                video.content, self.settings.THUMBNAIL_OFFSET_SECONDS
            )
        except ThumbnailException:
            raise
        except Exception as e:
            raise ThumbnailException(str(e)) from e
        return UploadCandidate(
            name=THUMBNAIL_FILENAME, content_type=THUMBNAIL_CONTENT_TYPE, size=len(image), content=image
        )

    async def _upload_thumbnail(self, video: UploadCandidate, conversation_id: str) -> StoredFileDescriptor | None:
        """
        Derive and store the still frame of a video. Failures are logged and yield None.
        """
        try:
            thumbnail = await self._extract_thumbnail(video)
        except ThumbnailException as e:
            logger.warning(f"Thumbnail generation failed for {video.name}: {e.error}")
            return None

        result = await self.upload_file(thumbnail, conversation_id)
        if not result.success:
            logger.warning(f"Thumbnail upload failed for {video.name}: {result.error}")
            return None
        return result.data

    async def upload_video_with_thumbnail(self, candidate: UploadCandidate, conversation_id: str) -> UploadResult:
        """
        Upload a video and a still-frame thumbnail of it.
        The video decides the outcome; a missing thumbnail only leaves `thumbnail_url` empty.
        """
        result = await self.upload_file(candidate, conversation_id)
        if not result.success:
            return result

        thumbnail = await self._upload_thumbnail(candidate, conversation_id)
        if thumbnail is None:
            return result
        return UploadResult(
            success=True,
            data=result.data.model_copy(update={"thumbnail_url": thumbnail.url, "thumbnail_path": thumbnail.path}),
        )

    async def upload_media(self, candidate: UploadCandidate, conversation_id: str) -> UploadResult:
        if self.get_file_type_category(candidate) == MediaCategory.VIDEO:
            return await self.upload_video_with_thumbnail(candidate, conversation_id)
        return await self.upload_file(candidate, conversation_id)

    async def upload_files(self, candidates: Sequence[UploadCandidate], conversation_id: str) -> list[UploadResult]:
        """
        Upload several files concurrently. Results are in input order.
        """
        tasks = [self.upload_media(candidate, conversation_id) for candidate in candidates]
        return list(await asyncio.gather(*tasks))

    async def _delete(self, paths: list[str]) -> DeleteResult:
        try:
            deleted = await self.storage.delete_objects(paths)
        except StorageException as e:
            error = DeleteException(e.message)
            logger.error(f"Delete error for {', '.join(paths)}: {error.message}")
            return DeleteResult(success=False, error=error.message)
        logger.info(f"Deleted {', '.join(paths)}")
        return DeleteResult(success=True, deleted=deleted)

    async def delete_file(self, path: str) -> DeleteResult:
        """
        Remove one object. Whatever the backend reports is passed through unchanged.
        """
        return await self._delete([path])

    async def delete_descriptor(self, descriptor: StoredFileDescriptor) -> DeleteResult:
        """
        Remove an uploaded file together with its thumbnail, when it has one.
        """
        paths = [descriptor.path]
        if descriptor.thumbnail_path:
            paths.append(descriptor.thumbnail_path)
        return await self._delete(paths)

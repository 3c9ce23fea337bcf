from fastapi import Depends, Request

from app.media.service import MediaUploadService
from app.storages.interface import ObjectStorage


def get_media_service(request: Request) -> MediaUploadService:
    """
    Get the media upload service built at application startup.
    """
    return request.app.state.media_service


def get_object_storage(service: MediaUploadService = Depends(get_media_service)) -> ObjectStorage:
    return service.storage

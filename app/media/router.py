from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from fastapi.responses import StreamingResponse

from app.api.schemas.error import ErrorResponseModel
from app.core.exceptions import RelayException
from app.media.dependencies import get_media_service, get_object_storage
from app.media.exceptions import FileValidationException
from app.media.messages import build_media_message
from app.media.schemas import (
    DeleteResult,
    FileValidationRead,
    MediaMessageCreate,
    UploadCandidate,
    UploadResult,
)
from app.media.selection import FileSelection
from app.media.service import MediaUploadService
from app.storages.exceptions import StorageException
from app.storages.interface import ObjectStorage
from app.storages.local import LocalStorage
from app.storages.utils import sanitize_filename

router = APIRouter(prefix="/media", tags=["Media"])


@router.post("/validate", response_model=list[FileValidationRead])
async def validate_media(
    files: list[UploadFile] = File(...),
    service: MediaUploadService = Depends(get_media_service),
) -> list[FileValidationRead]:
    """
    ## Validate Files
    Checks files against the size limit and the allowed content types without storing them.

    ### Returns
    One validation result per file, in upload order
    """
    results = []
    for file in files:
        candidate = await UploadCandidate.from_upload_file(file, max_size=service.settings.MAX_FILE_SIZE)
        validation = service.validate_file(candidate)
        results.append(FileValidationRead(name=candidate.name, **validation.model_dump()))
    return results


@router.post(
    "/{conversation_id}/",
    response_model=MediaMessageCreate,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponseModel}, 502: {"model": ErrorResponseModel}},
)
async def upload_media_message(
    conversation_id: str,
    files: list[UploadFile] = File(...),
    message_text: str = Form(""),
    service: MediaUploadService = Depends(get_media_service),
) -> MediaMessageCreate:
    """
    ## Upload Media Message
    Uploads the attached files and returns the chat message that carries them.

    ### Parameters
    - **conversation_id**: Conversation the files belong to
    - **files**: One or more files
    - **message_text**: Optional caption

    ### Returns
    A single-file message typed by the file category, or a `media_group` message

    ### Raises
    - **400**: One or more files failed validation, nothing was uploaded
    - **502**: One or more uploads failed
    """
    selection = FileSelection(service.settings)
    max_size = service.settings.MAX_FILE_SIZE
    rejections = selection.add([await UploadCandidate.from_upload_file(file, max_size=max_size) for file in files])
    if rejections:
        raise RelayException(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=FileValidationException.error_type,
            message="; ".join(rejection.message for rejection in rejections),
            context=[rejection.model_dump() for rejection in rejections],
            loc=["body", "files"],
        )

    results = await service.upload_files(selection.files, conversation_id)
    failed = [result for result in results if not result.success]
    if failed:
        raise RelayException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="upload_error",
            message=f"Failed to upload {len(failed)} file(s). Please try again.",
            context=[
                {"name": candidate.name, **result.model_dump(mode="json")}
                for candidate, result in zip(selection.files, results)
            ],
        )

    return build_media_message(
        conversation_id=conversation_id,
        message_text=message_text.strip(),
        descriptors=[result.data for result in results],
    )


@router.post("/{conversation_id}/file", response_model=UploadResult, status_code=status.HTTP_201_CREATED)
async def upload_single_file(
    conversation_id: str,
    response: Response,
    file: UploadFile = File(...),
    service: MediaUploadService = Depends(get_media_service),
) -> UploadResult:
    """
    ## Upload File
    Uploads one file (with a thumbnail for videos) and reports the outcome.

    ### Raises
    - **400**: The file failed validation
    - **502**: The storage backend rejected the upload
    """
    candidate = await UploadCandidate.from_upload_file(file, max_size=service.settings.MAX_FILE_SIZE)
    result = await service.upload_media(candidate, conversation_id)
    if not result.success:
        if result.error_type == FileValidationException.error_type:
            response.status_code = status.HTTP_400_BAD_REQUEST
        else:
            response.status_code = status.HTTP_502_BAD_GATEWAY
    return result


@router.delete("/files/{path:path}", response_model=DeleteResult)
async def delete_media_file(
    path: str,
    response: Response,
    service: MediaUploadService = Depends(get_media_service),
) -> DeleteResult:
    """
    ## Delete File
    Removes a stored object by its storage path.

    ### Raises
    - **502**: The storage backend rejected the request
    """
    result = await service.delete_file(path)
    if not result.success:
        response.status_code = status.HTTP_502_BAD_GATEWAY
    return result


@router.get("/files/{path:path}", response_class=StreamingResponse)
async def serve_media_file(path: str, storage: ObjectStorage = Depends(get_object_storage)) -> StreamingResponse:
    """
    Serves a stored file when the local backend is in use.
    Remote backends hand out their own public URLs.
    """
    if not isinstance(storage, LocalStorage):
        raise HTTPException(status_code=404, detail="File not found")
    try:
        file_generator = await storage.get_object(path)
    except (FileNotFoundError, StorageException):
        raise HTTPException(status_code=404, detail="File not found")
    safe_filename = sanitize_filename(filename=path.rsplit("/", 1)[-1])
    return StreamingResponse(
        file_generator,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename={safe_filename}"},
    )

"""File upload endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse

from quickdesk.core.security import get_current_account, get_current_admin
from quickdesk.interfaces.http.deps import get_upload_service
from quickdesk.modules.accounts.models import Account
from quickdesk.modules.uploads.exceptions import (
    NoFileError,
    StorageError,
    UploadError,
    UploadNotFoundError,
    UploadRejectedError,
)
from quickdesk.modules.uploads.service import UploadService
from quickdesk.schemas import (
    ApiResponse,
    CleanupOut,
    FileInfoOut,
    FileInfoPayload,
    FilesPayload,
    StoredFileOut,
    StoredFilePayload,
    UploadStatsOut,
)

router = APIRouter()


def upload_http_error(exc: UploadError) -> HTTPException:
    """Translate an upload error into the matching HTTP error."""
    if isinstance(exc, UploadNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    if isinstance(exc, UploadRejectedError):
        code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE if exc.too_large else status.HTTP_400_BAD_REQUEST
        return HTTPException(status_code=code, detail=str(exc))
    if isinstance(exc, NoFileError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, StorageError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Upload failed")


@router.post("/single", response_model=ApiResponse[StoredFilePayload], summary="Upload one file")
async def upload_single(
    file: Optional[UploadFile] = File(default=None),
    current: Account = Depends(get_current_account),
    uploads: UploadService = Depends(get_upload_service),
):
    try:
        stored = await uploads.store_single(file if file is not None and file.filename else None)
    except UploadError as exc:
        raise upload_http_error(exc) from exc
    return ApiResponse(
        message="File uploaded successfully",
        data=StoredFilePayload(file=StoredFileOut.model_validate(stored)),
    )


@router.post("/multiple", response_model=ApiResponse[FilesPayload], summary="Upload several files")
async def upload_multiple(
    files: Optional[list[UploadFile]] = File(default=None),
    current: Account = Depends(get_current_account),
    uploads: UploadService = Depends(get_upload_service),
):
    try:
        stored = await uploads.store_multiple([item for item in files or [] if item.filename])
    except UploadError as exc:
        raise upload_http_error(exc) from exc
    return ApiResponse(
        message=f"{len(stored)} files uploaded successfully",
        data=FilesPayload(files=[StoredFileOut.model_validate(item) for item in stored]),
    )


@router.get("/file/{filename}", summary="Download a stored file", response_class=FileResponse)
async def get_file(
    filename: str,
    current: Account = Depends(get_current_account),
    uploads: UploadService = Depends(get_upload_service),
):
    try:
        path = await uploads.get_file(filename)
    except UploadError as exc:
        raise upload_http_error(exc) from exc
    return FileResponse(path, media_type="application/octet-stream", filename=filename)


@router.delete("/file/{filename}", response_model=ApiResponse, summary="Delete a stored file")
async def delete_file(
    filename: str,
    current: Account = Depends(get_current_account),
    uploads: UploadService = Depends(get_upload_service),
):
    try:
        await uploads.delete_file(filename)
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error deleting file",
        ) from exc
    except UploadError as exc:
        raise upload_http_error(exc) from exc
    return ApiResponse(message="File deleted successfully")


@router.get("/info/{filename}", response_model=ApiResponse[FileInfoPayload], summary="Stored file metadata")
async def get_file_info(
    filename: str,
    current: Account = Depends(get_current_account),
    uploads: UploadService = Depends(get_upload_service),
):
    try:
        info = await uploads.get_file_info(filename)
    except UploadError as exc:
        raise upload_http_error(exc) from exc
    return ApiResponse(data=FileInfoPayload(file=FileInfoOut.model_validate(info)))


@router.get("/stats", response_model=ApiResponse[UploadStatsOut], summary="Upload statistics")
async def upload_stats(
    admin: Account = Depends(get_current_admin),
    uploads: UploadService = Depends(get_upload_service),
):
    stats = await uploads.get_stats()
    return ApiResponse(
        data=UploadStatsOut(
            total_files=stats.total_files,
            total_size=stats.total_size,
            total_size_mb=stats.total_size_mb,
            file_types=stats.file_types,
        )
    )


@router.delete("/cleanup", response_model=ApiResponse[CleanupOut], summary="Delete files older than N days")
async def cleanup(
    days: Optional[float] = Query(default=None, ge=0, le=36500, allow_inf_nan=False),
    admin: Account = Depends(get_current_admin),
    uploads: UploadService = Depends(get_upload_service),
):
    result = await uploads.cleanup(days)
    return ApiResponse(
        message=f"Cleanup completed. {result.deleted_count} files deleted.",
        data=CleanupOut.model_validate(result),
    )

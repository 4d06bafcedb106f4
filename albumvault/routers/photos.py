import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from albumvault.config import settings
from albumvault.core.errors import InvalidRequest
from albumvault.models.photo import Photo
from albumvault.schemas.album import MessageOut
from albumvault.schemas.photo import (
    AlbumPhotosOut,
    AlbumSummary,
    BatchPhotoOut,
    BatchUploadOut,
    Dimensions,
    PhotoOut,
    PhotoUpdate,
)
from albumvault.services.ingestion import IngestionOrchestrator, get_ingestion
from albumvault.services.security import AuthUser, require_user
from albumvault.services.upload_validate import validate_and_read_upload
from albumvault.utils.formatting import format_size

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/photos", tags=["photos"])


def photo_out(photo: Photo) -> PhotoOut:
    dims = None
    if photo.width and photo.height:
        dims = Dimensions(width=photo.width, height=photo.height)
    return PhotoOut(
        id=photo.id,
        title=photo.title,
        description=photo.description,
        acquisition_date=photo.acquired_at,
        size=photo.size_bytes,
        size_formatted=format_size(photo.size_bytes),
        dominant_color=photo.dominant_color,
        album_id=photo.album_id,
        user_id=photo.user_id,
        file_name=photo.original_filename,
        file_url=photo.file_url,
        mime_type=photo.mime_type,
        dimensions=dims,
        created_at=photo.created_at,
    )


async def _read(file: UploadFile):
    return await validate_and_read_upload(file, settings.ALLOWED_IMAGE_TYPES, settings.MAX_UPLOAD_BYTES)


@router.post("/upload/{album_id}", response_model=PhotoOut, status_code=201)
async def upload_photo(
    album_id: str,
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    auth: AuthUser = Depends(require_user),
    ingestion: IngestionOrchestrator = Depends(get_ingestion),
):
    incoming = await _read(file) if file is not None else None
    photo = await ingestion.upload_photo(auth.user_id, album_id, incoming, title, description)
    return photo_out(photo)


@router.post("/upload-multiple/{album_id}", response_model=BatchUploadOut, status_code=201)
async def upload_photos(
    album_id: str,
    files: Optional[List[UploadFile]] = File(None),
    auth: AuthUser = Depends(require_user),
    ingestion: IngestionOrchestrator = Depends(get_ingestion),
):
    files = files or []
    if len(files) > settings.MAX_BATCH_FILES:
        raise InvalidRequest(f"Too many files; at most {settings.MAX_BATCH_FILES} per upload")
    incoming = [await _read(f) for f in files]

    result = await ingestion.upload_photos(auth.user_id, album_id, incoming)
    if result.failed_files:
        log.warning("Batch upload skipped: %s", ", ".join(result.failed_files))
    return BatchUploadOut(
        message=f"{result.uploaded} of {result.total} photos uploaded successfully",
        total=result.total,
        uploaded=result.uploaded,
        failed=result.failed,
        photos=[
            BatchPhotoOut(
                id=p.id,
                title=p.title,
                file_name=p.original_filename,
                file_url=p.file_url,
                size_formatted=format_size(p.size_bytes),
            )
            for p in result.photos
        ],
    )


@router.get("/album/{album_id}", response_model=AlbumPhotosOut)
async def list_album_photos(
    album_id: str,
    sort_by: Literal["title", "size", "acquisitionDate"] = Query("acquisitionDate", alias="sortBy"),
    order: Literal["asc", "desc"] = Query("desc"),
    auth: AuthUser = Depends(require_user),
    ingestion: IngestionOrchestrator = Depends(get_ingestion),
):
    album, photos = await ingestion.list_album_photos(auth.user_id, album_id, sort_by, order)
    return AlbumPhotosOut(
        photos=[photo_out(p) for p in photos],
        count=len(photos),
        album=AlbumSummary(id=album.id, title=album.title, photo_count=album.photo_count),
    )


@router.get("/{photo_id}", response_model=PhotoOut)
async def get_photo(
    photo_id: str,
    auth: AuthUser = Depends(require_user),
    ingestion: IngestionOrchestrator = Depends(get_ingestion),
):
    return photo_out(await ingestion.get_photo(auth.user_id, photo_id))


@router.put("/{photo_id}", response_model=PhotoOut)
async def update_photo(
    photo_id: str,
    payload: PhotoUpdate,
    auth: AuthUser = Depends(require_user),
    ingestion: IngestionOrchestrator = Depends(get_ingestion),
):
    photo = await ingestion.update_photo(
        auth.user_id, photo_id, title=payload.title, description=payload.description
    )
    return photo_out(photo)


@router.delete("/{photo_id}", response_model=MessageOut)
async def delete_photo(
    photo_id: str,
    auth: AuthUser = Depends(require_user),
    ingestion: IngestionOrchestrator = Depends(get_ingestion),
):
    await ingestion.delete_photo(auth.user_id, photo_id)
    return MessageOut(message="Photo deleted successfully")

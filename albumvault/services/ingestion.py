"""
Photo ingestion pipeline.

Stages uploaded bytes to storage, validates the request, derives metadata
(capture time, dimensions, dominant color) on a best-effort basis, persists the
Photo record and then recounts the album's photos. Deletion runs the same
write-then-reconcile sequence in reverse.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePath
from typing import Callable, Iterable, List, Optional, Tuple

from fastapi import Depends, HTTPException

from albumvault.config import settings
from albumvault.core.errors import IngestionFailed, InvalidRequest, NotFound
from albumvault.models.album import Album
from albumvault.models.photo import Photo
from albumvault.services.album_counts import AlbumCountReconciler
from albumvault.services.color import DominantColorSampler
from albumvault.services.dimensions import decode_dimensions
from albumvault.services.metadata import ImageMetadata, extract_metadata
from albumvault.services.metrics import record_upload
from albumvault.services.outcome import Outcome
from albumvault.services.photo_builder import (
    PhotoDraft,
    PhotoRecordBuilder,
    clean_title,
    parse_id,
)
from albumvault.services.storage import LocalStorage, StoredFile, get_storage

log = logging.getLogger(__name__)

SORT_FIELDS = {
    "title": "title",
    "size": "size_bytes",
    "acquisitionDate": "acquired_at",
}


@dataclass
class IncomingFile:
    filename: str
    content_type: str
    data: bytes


@dataclass
class DerivedMetadata:
    acquired_at: Optional[datetime] = None
    width: Optional[int] = None
    height: Optional[int] = None
    dominant_color: Optional[str] = None


@dataclass
class BatchResult:
    total: int
    photos: List[Photo] = field(default_factory=list)
    failed_files: List[str] = field(default_factory=list)

    @property
    def uploaded(self) -> int:
        return len(self.photos)

    @property
    def failed(self) -> int:
        return self.total - self.uploaded


def title_from_filename(filename: str) -> str:
    """Default batch title: the file name without its extension."""
    name = PurePath(filename or "").stem.strip()
    return name or "Untitled"


class IngestionOrchestrator:
    def __init__(
        self,
        storage: LocalStorage,
        builder: PhotoRecordBuilder,
        reconciler: AlbumCountReconciler,
        sampler: DominantColorSampler,
        extract: Callable[[bytes], Outcome[ImageMetadata]] = extract_metadata,
        decode: Callable[[bytes], Outcome[Tuple[int, int]]] = decode_dimensions,
    ):
        self.storage = storage
        self.builder = builder
        self.reconciler = reconciler
        self.sampler = sampler
        self.extract = extract
        self.decode = decode

    # ------------------------------
    # Helpers
    # ------------------------------
    def _cleanup(self, stored: Optional[StoredFile]) -> None:
        """Best-effort removal of a staged file; never masks the caller's error."""
        if stored is None:
            return
        try:
            self.storage.delete(stored.key)
        except Exception as exc:
            log.warning("Could not clean up staged file %s: %s", stored.key, exc)

    def _cleanup_all(self, staged: Iterable[Optional[StoredFile]]) -> None:
        for stored in staged:
            self._cleanup(stored)

    async def describe(self, file: IncomingFile) -> DerivedMetadata:
        """Metadata, dominant color and dimensions; every step may fail independently."""
        derived = DerivedMetadata()

        meta = self.extract(file.data)
        if meta.ok:
            derived.acquired_at = meta.value.acquired_at
            if meta.value.dimensions:
                derived.width, derived.height = meta.value.dimensions
        else:
            log.warning("Metadata unavailable for %s: %s", file.filename, meta.reason)

        color = self.sampler.sample_bytes(file.data)
        if not color.ok:
            log.warning("Dominant color unavailable for %s: %s", file.filename, color.reason)
        derived.dominant_color = color.value_or(self.sampler.default_color)

        if derived.width is None:
            dims = self.decode(file.data)
            if dims.ok:
                derived.width, derived.height = dims.value
            else:
                log.warning("Dimensions unknown for %s: %s", file.filename, dims.reason)

        return derived

    def _draft(
        self,
        file: IncomingFile,
        stored: StoredFile,
        derived: DerivedMetadata,
        title: Optional[str],
        description: Optional[str],
    ) -> PhotoDraft:
        return PhotoDraft(
            title=title,
            description=description,
            size_bytes=stored.size,
            original_filename=file.filename,
            storage_key=stored.key,
            file_url=self.storage.url_for(stored.key),
            mime_type=file.content_type,
            acquired_at=derived.acquired_at,
            dominant_color=derived.dominant_color,
            width=derived.width,
            height=derived.height,
        )

    # ------------------------------
    # Uploads
    # ------------------------------
    async def upload_photo(
        self,
        user_id,
        album_id,
        file: Optional[IncomingFile],
        title: Optional[str],
        description: Optional[str] = None,
    ) -> Photo:
        stored = None
        if file is not None:
            try:
                stored = self.storage.stage(str(user_id), file.filename, file.data)
            except Exception as exc:
                log.exception("Failed to store upload %s", file.filename)
                record_upload("error")
                raise IngestionFailed() from exc

        try:
            parse_id(album_id, "album")
            if stored is None:
                raise InvalidRequest("No image uploaded")
            clean_title(title)
            album = await self.builder.resolve_album(album_id, user_id)
        except HTTPException:
            self._cleanup(stored)
            record_upload("error")
            raise

        derived = await self.describe(file)
        draft = self._draft(file, stored, derived, title, description)

        try:
            photo = await self.builder.build(draft, album, user_id)
        except HTTPException:
            self._cleanup(stored)
            record_upload("error")
            raise
        except Exception as exc:
            log.exception("Failed to persist photo %s", file.filename)
            self._cleanup(stored)
            record_upload("error")
            raise IngestionFailed() from exc

        await self.reconciler.reconcile(album.id)
        record_upload("success")
        log.info("Photo %s uploaded to album %s", photo.id, album.id)
        return photo

    async def upload_photos(self, user_id, album_id, files: List[IncomingFile]) -> BatchResult:
        """Upload a batch into one album; per-file failures are isolated.

        Files are handled one after another. The album count is recomputed once,
        after the last file.
        """
        result = BatchResult(total=len(files))

        staged: List[Optional[StoredFile]] = []
        for file in files:
            try:
                staged.append(self.storage.stage(str(user_id), file.filename, file.data))
            except Exception:
                log.exception("Failed to store upload %s", file.filename)
                staged.append(None)

        try:
            parse_id(album_id, "album")
            if not files:
                raise InvalidRequest("No images uploaded")
            album = await self.builder.resolve_album(album_id, user_id)
        except HTTPException:
            self._cleanup_all(staged)
            record_upload("error", len(files))
            raise

        for file, stored in zip(files, staged):
            if stored is None:
                result.failed_files.append(file.filename)
                continue
            try:
                derived = await self.describe(file)
                draft = self._draft(file, stored, derived, title_from_filename(file.filename), "")
                photo = await self.builder.build(draft, album, user_id)
            except Exception:
                log.exception("Failed to ingest %s into album %s", file.filename, album.id)
                self._cleanup(stored)
                result.failed_files.append(file.filename)
                continue
            result.photos.append(photo)

        await self.reconciler.reconcile(album.id)
        record_upload("success", result.uploaded)
        record_upload("error", result.failed)
        log.info("Batch into album %s: %s of %s uploaded", album.id, result.uploaded, result.total)
        return result

    # ------------------------------
    # Reads, edits, deletion
    # ------------------------------
    async def get_photo(self, user_id, photo_id) -> Photo:
        photo = await Photo.filter(id=parse_id(photo_id, "photo"), user_id=user_id).first()
        if not photo:
            raise NotFound("Photo not found")
        return photo

    async def list_album_photos(
        self,
        user_id,
        album_id,
        sort_by: str = "acquisitionDate",
        order: str = "desc",
    ) -> Tuple[Album, List[Photo]]:
        album = await self.builder.resolve_album(album_id, user_id)
        column = SORT_FIELDS.get(sort_by, "acquired_at")
        ordering = column if order == "asc" else f"-{column}"
        photos = await Photo.filter(album_id=album.id).order_by(ordering, "created_at").all()
        return album, photos

    async def update_photo(
        self,
        user_id,
        photo_id,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Photo:
        photo = await self.get_photo(user_id, photo_id)
        return await self.builder.apply_edit(photo, title=title, description=description)

    async def delete_photo(self, user_id, photo_id) -> None:
        """Remove the stored file (if still there), the record, then recount the album."""
        photo = await self.get_photo(user_id, photo_id)
        album_id = photo.album_id
        try:
            self.storage.delete(photo.storage_key)
        except Exception as exc:
            log.warning("Could not remove stored file %s: %s", photo.storage_key, exc)
        await photo.delete()
        await self.reconciler.reconcile(album_id)
        log.info("Photo %s deleted from album %s", photo_id, album_id)


def get_ingestion(storage: LocalStorage = Depends(get_storage)) -> IngestionOrchestrator:
    return IngestionOrchestrator(
        storage=storage,
        builder=PhotoRecordBuilder(default_color=settings.DEFAULT_DOMINANT_COLOR),
        reconciler=AlbumCountReconciler(),
        sampler=DominantColorSampler(
            stride=settings.COLOR_SAMPLE_STRIDE,
            bucket_size=settings.COLOR_BUCKET_SIZE,
            default_color=settings.DEFAULT_DOMINANT_COLOR,
        ),
    )

from typing import List, Optional
from uuid import UUID
from datetime import datetime

from .base import CamelModel


class Dimensions(CamelModel):
    width: int
    height: int


class PhotoOut(CamelModel):
    id: UUID
    title: str
    description: str = ""
    acquisition_date: datetime
    size: int
    size_formatted: str
    dominant_color: str
    album_id: UUID
    user_id: UUID
    file_name: str
    file_url: str
    mime_type: str
    dimensions: Optional[Dimensions] = None
    created_at: datetime


class PhotoUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None


class BatchPhotoOut(CamelModel):
    id: UUID
    title: str
    file_name: str
    file_url: str
    size_formatted: str


class BatchUploadOut(CamelModel):
    message: str
    total: int
    uploaded: int
    failed: int
    photos: List[BatchPhotoOut]


class AlbumSummary(CamelModel):
    id: UUID
    title: str
    photo_count: int


class AlbumPhotosOut(CamelModel):
    photos: List[PhotoOut]
    count: int
    album: AlbumSummary

from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from .base import CamelModel
from .photo import PhotoOut, Dimensions


class AlbumCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None


class AlbumUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None


class AlbumOut(CamelModel):
    id: UUID
    title: str
    description: str = ""
    user_id: UUID
    is_public: bool = False
    share_token: Optional[str] = None
    photo_count: int = 0
    created_at: datetime
    updated_at: datetime


class AlbumDetailOut(CamelModel):
    album: AlbumOut
    photos: List[PhotoOut]
    photo_count: int


class ShareOut(CamelModel):
    message: str
    share_token: str
    share_url: str


class PublicPhotoOut(CamelModel):
    id: UUID
    title: str
    description: str = ""
    acquisition_date: datetime
    size_formatted: str
    dominant_color: str
    file_url: str
    dimensions: Optional[Dimensions] = None


class PublicAlbumSummary(CamelModel):
    id: UUID
    title: str
    description: str = ""
    photo_count: int
    created_at: datetime


class PublicAlbumOut(CamelModel):
    album: PublicAlbumSummary
    photos: List[PublicPhotoOut]


class MessageOut(BaseModel):
    message: str

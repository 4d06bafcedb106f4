import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from tortoise.exceptions import IntegrityError

from albumvault.config import settings
from albumvault.core.errors import InvalidRequest, NotFound
from albumvault.models.album import Album
from albumvault.models.photo import Photo
from albumvault.routers.photos import photo_out
from albumvault.schemas.album import (
    AlbumCreate,
    AlbumDetailOut,
    AlbumOut,
    AlbumUpdate,
    MessageOut,
    PublicAlbumOut,
    PublicAlbumSummary,
    PublicPhotoOut,
    ShareOut,
)
from albumvault.schemas.photo import Dimensions
from albumvault.services.album_counts import AlbumCountReconciler
from albumvault.services.photo_builder import clean_description, clean_title, parse_id
from albumvault.services.security import AuthUser, require_user
from albumvault.services.tokens import generate_share_token
from albumvault.utils.formatting import format_size

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/albums", tags=["albums"])

SHARE_TOKEN_ATTEMPTS = 3


def _album_out(album: Album) -> AlbumOut:
    return AlbumOut(
        id=album.id,
        title=album.title,
        description=album.description,
        user_id=album.user_id,
        is_public=album.is_public,
        share_token=album.share_token,
        photo_count=album.photo_count,
        created_at=album.created_at,
        updated_at=album.updated_at,
    )


async def _owned_album(album_id: str, auth: AuthUser) -> Album:
    album = await Album.filter(id=parse_id(album_id, "album"), user_id=auth.user_id).first()
    if not album:
        raise NotFound("Album not found")
    return album


# Registered before "/{album_id}" so "public" is not parsed as an id.
@router.get("/public/{token}", response_model=PublicAlbumOut)
async def get_public_album(token: str):
    album = await Album.filter(share_token=token, is_public=True).first()
    if not album:
        raise NotFound("Album not found or not public")
    photos = await Photo.filter(album_id=album.id).order_by("-acquired_at").all()
    return PublicAlbumOut(
        album=PublicAlbumSummary(
            id=album.id,
            title=album.title,
            description=album.description,
            photo_count=album.photo_count,
            created_at=album.created_at,
        ),
        photos=[
            PublicPhotoOut(
                id=p.id,
                title=p.title,
                description=p.description,
                acquisition_date=p.acquired_at,
                size_formatted=format_size(p.size_bytes),
                dominant_color=p.dominant_color,
                file_url=p.file_url,
                dimensions=Dimensions(width=p.width, height=p.height) if p.width and p.height else None,
            )
            for p in photos
        ],
    )


@router.post("", response_model=AlbumOut, status_code=201)
async def create_album(payload: AlbumCreate, auth: AuthUser = Depends(require_user)):
    album = await Album.create(
        user_id=auth.user_id,
        title=clean_title(payload.title, "Album"),
        description=clean_description(payload.description),
    )
    log.info("Album %s created by %s", album.id, auth.user_id)
    return _album_out(album)


@router.get("", response_model=List[AlbumOut])
async def list_albums(auth: AuthUser = Depends(require_user)):
    albums = await Album.filter(user_id=auth.user_id).order_by("-updated_at").all()
    return [_album_out(a) for a in albums]


@router.get("/{album_id}", response_model=AlbumDetailOut)
async def get_album(album_id: str, auth: AuthUser = Depends(require_user)):
    album = await _owned_album(album_id, auth)
    photos = await Photo.filter(album_id=album.id).order_by("-acquired_at").all()
    return AlbumDetailOut(
        album=_album_out(album),
        photos=[photo_out(p) for p in photos],
        photo_count=len(photos),
    )


@router.put("/{album_id}", response_model=AlbumOut)
async def update_album(album_id: str, payload: AlbumUpdate, auth: AuthUser = Depends(require_user)):
    album = await _owned_album(album_id, auth)
    if payload.title is None and payload.description is None:
        raise InvalidRequest("No fields to update")
    if payload.title is not None:
        album.title = clean_title(payload.title, "Album")
    if payload.description is not None:
        album.description = clean_description(payload.description)
    await album.save(update_fields=["title", "description", "updated_at"])
    return _album_out(album)


@router.delete("/{album_id}", response_model=MessageOut)
async def delete_album(album_id: str, auth: AuthUser = Depends(require_user)):
    album = await _owned_album(album_id, auth)
    # Trust the photo table, not a possibly stale cached count
    count = await AlbumCountReconciler().reconcile(album.id)
    if count > 0:
        raise InvalidRequest("Cannot delete an album that still has photos. Delete the photos first.")
    await album.delete()
    log.info("Album %s deleted", album.id)
    return MessageOut(message="Album deleted successfully")


@router.post("/{album_id}/share", response_model=ShareOut)
async def share_album(album_id: str, auth: AuthUser = Depends(require_user)):
    album = await _owned_album(album_id, auth)
    for attempt in range(1, SHARE_TOKEN_ATTEMPTS + 1):
        album.share_token = generate_share_token()
        album.is_public = True
        try:
            await album.save(update_fields=["share_token", "is_public", "updated_at"])
            break
        except IntegrityError:
            log.warning("Share token collision for album %s (attempt %s)", album.id, attempt)
    else:
        raise HTTPException(status_code=500, detail="Could not generate a share link")

    return ShareOut(
        message="Share link generated",
        share_token=album.share_token,
        share_url=f"{settings.FRONTEND_URL.rstrip('/')}/album/public/{album.share_token}",
    )


@router.delete("/{album_id}/share", response_model=MessageOut)
async def unshare_album(album_id: str, auth: AuthUser = Depends(require_user)):
    album = await _owned_album(album_id, auth)
    album.is_public = False
    album.share_token = None
    await album.save(update_fields=["share_token", "is_public", "updated_at"])
    return MessageOut(message="Share link removed")

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from albumvault.core.errors import InvalidRequest, NotFound
from albumvault.models.album import Album
from albumvault.models.photo import Photo, DEFAULT_DOMINANT_COLOR

_HEX_COLOR = re.compile(r"^#[0-9a-f]{6}$")


def parse_id(value, what: str) -> uuid.UUID:
    """Parse a path/form identifier, raising a 400 for anything malformed."""
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise InvalidRequest(f"Invalid {what} id")


def clean_title(title: Optional[str], what: str = "Photo") -> str:
    title = (title or "").strip()
    if not title:
        raise InvalidRequest(f"{what} title is required")
    return title


def clean_description(description: Optional[str]) -> str:
    return (description or "").strip()


@dataclass
class PhotoDraft:
    """Everything known about a photo before it is persisted."""

    title: Optional[str]
    description: Optional[str]
    size_bytes: int
    original_filename: str
    storage_key: str
    file_url: str
    mime_type: str
    acquired_at: Optional[datetime] = None
    dominant_color: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class PhotoRecordBuilder:
    def __init__(self, default_color: str = DEFAULT_DOMINANT_COLOR):
        self.default_color = default_color

    async def resolve_album(self, album_id, user_id) -> Album:
        album_uuid = parse_id(album_id, "album")
        album = await Album.filter(id=album_uuid, user_id=user_id).first()
        if not album:
            raise NotFound("Album not found")
        return album

    def _color(self, color: Optional[str]) -> str:
        color = (color or "").strip().lower()
        return color if _HEX_COLOR.match(color) else self.default_color

    async def build(self, draft: PhotoDraft, album: Album, user_id) -> Photo:
        """Validate ``draft`` and create exactly one Photo in ``album``.

        ``album`` must already be resolved for ``user_id``; the owner is
        checked again so a mismatched pair never gets persisted.
        """
        title = clean_title(draft.title)
        if str(album.user_id) != str(user_id):
            raise NotFound("Album not found")
        if draft.size_bytes < 0:
            raise InvalidRequest("Invalid file size")

        width, height = draft.width, draft.height
        if not (width and height and width > 0 and height > 0):
            width = height = None

        return await Photo.create(
            title=title,
            description=clean_description(draft.description),
            acquired_at=draft.acquired_at or datetime.now(timezone.utc).replace(tzinfo=None),
            size_bytes=draft.size_bytes,
            dominant_color=self._color(draft.dominant_color),
            album_id=album.id,
            user_id=user_id,
            original_filename=draft.original_filename,
            storage_key=draft.storage_key,
            file_url=draft.file_url,
            mime_type=draft.mime_type,
            width=width,
            height=height,
        )

    async def apply_edit(
        self,
        photo: Photo,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Photo:
        """Title/description are the only mutable fields of a photo."""
        update_fields = []
        if title is not None:
            photo.title = clean_title(title)
            update_fields.append("title")
        if description is not None:
            photo.description = clean_description(description)
            update_fields.append("description")
        if not update_fields:
            raise InvalidRequest("No fields to update")
        await photo.save(update_fields=update_fields + ["updated_at"])
        return photo

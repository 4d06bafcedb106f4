"""
Embedded metadata extraction for uploaded photos.

Reads EXIF (and, for the create date, XMP) tags with Pillow. Everything here
is best-effort: a corrupt or unsupported file yields a failed Outcome, never
an exception.
"""

import io
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from PIL import Image as PILImage, ExifTags

from albumvault.services.outcome import Outcome


_EXIF_DATE_FORMATS = ("%Y:%m:%d %H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S")
_TRAILING_FRACTION_OR_OFFSET = re.compile(r"(\.\d+)?([+-]\d{2}:?\d{2})?$")
_XMP_CREATE_DATE = (
    re.compile(r"<xmp:CreateDate>([^<]+)</xmp:CreateDate>"),
    re.compile(r'xmp:CreateDate="([^"]+)"'),
)


@dataclass(frozen=True)
class ImageMetadata:
    acquired_at: Optional[datetime] = None
    width: Optional[int] = None
    height: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    exposure_time: Optional[str] = None
    f_number: Optional[str] = None
    iso: Optional[int] = None

    @property
    def dimensions(self) -> Optional[tuple[int, int]]:
        if self.width and self.height:
            return self.width, self.height
        return None


def _parse_datetime(raw: Any) -> Optional[datetime]:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    if not isinstance(raw, str):
        return None
    text = raw.strip().rstrip("\x00").strip()
    if text.endswith("Z"):
        text = text[:-1]
    # Drop fractional seconds and UTC offsets
    text = _TRAILING_FRACTION_OR_OFFSET.sub("", text)
    for fmt in _EXIF_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _positive_int(raw: Any) -> Optional[int]:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _text(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    text = str(raw).strip().rstrip("\x00").strip()
    return text or None


def _exposure(raw: Any) -> Optional[str]:
    try:
        value = float(raw)
    except (TypeError, ValueError, ZeroDivisionError):
        return _text(raw)
    if 0 < value < 1:
        return f"1/{round(1 / value)}"
    return f"{value:g}"


def _xmp_create_date(im: PILImage.Image) -> Optional[datetime]:
    xmp = im.info.get("XML:com.adobe.xmp") or im.info.get("xmp")
    if not xmp:
        return None
    if isinstance(xmp, bytes):
        xmp = xmp.decode("utf-8", errors="ignore")
    for pattern in _XMP_CREATE_DATE:
        match = pattern.search(xmp)
        if match:
            return _parse_datetime(match.group(1))
    return None


def _read_tags(im: PILImage.Image) -> dict[str, Any]:
    """Flatten IFD0 and the Exif sub-IFD into a name -> value dict."""
    exif = im.getexif()
    tags: dict[str, Any] = {}
    for k, v in exif.items():
        tags[ExifTags.TAGS.get(k, str(k))] = v
    for k, v in exif.get_ifd(ExifTags.IFD.Exif).items():
        tags[ExifTags.TAGS.get(k, str(k))] = v
    return tags


def extract_metadata(data: bytes) -> Outcome[ImageMetadata]:
    """Read capture time, dimensions and camera settings from embedded tags.

    Capture time is resolved as DateTimeOriginal, then DateTime, then the
    create date (DateTimeDigitized or XMP CreateDate). Dimensions are only
    reported when both a width and a height tag are present.
    """
    try:
        with PILImage.open(io.BytesIO(data)) as im:
            tags = _read_tags(im)
            xmp_created = _xmp_create_date(im)
    except Exception as exc:
        return Outcome.failure(f"unreadable metadata: {exc}")

    acquired_at = None
    for name in ("DateTimeOriginal", "DateTime", "DateTimeDigitized"):
        acquired_at = _parse_datetime(tags.get(name))
        if acquired_at:
            break
    if acquired_at is None:
        acquired_at = xmp_created

    width = height = None
    for w_tag, h_tag in (("ExifImageWidth", "ExifImageHeight"), ("ImageWidth", "ImageLength")):
        w, h = _positive_int(tags.get(w_tag)), _positive_int(tags.get(h_tag))
        if w and h:
            width, height = w, h
            break

    iso = tags.get("ISOSpeedRatings")
    if isinstance(iso, (tuple, list)):
        iso = iso[0] if iso else None

    return Outcome.success(
        ImageMetadata(
            acquired_at=acquired_at,
            width=width,
            height=height,
            make=_text(tags.get("Make")),
            model=_text(tags.get("Model")),
            exposure_time=_exposure(tags.get("ExposureTime")) if "ExposureTime" in tags else None,
            f_number=_text(tags.get("FNumber")),
            iso=_positive_int(iso),
        )
    )

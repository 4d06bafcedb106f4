from datetime import datetime

from PIL import Image, ExifTags

from albumvault.services.dimensions import decode_dimensions
from albumvault.services.metadata import _parse_datetime, extract_metadata
from tests.helpers import jpeg_bytes, png_bytes

DATETIME = 0x0132
MAKE = 0x010F
DATETIME_ORIGINAL = 0x9003
DATETIME_DIGITIZED = 0x9004
EXIF_IMAGE_WIDTH = 0xA002
EXIF_IMAGE_HEIGHT = 0xA003


def _exif(ifd0=None, exif_ifd=None) -> Image.Exif:
    exif = Image.Exif()
    for tag, value in (ifd0 or {}).items():
        exif[tag] = value
    if exif_ifd:
        exif[ExifTags.IFD.Exif] = dict(exif_ifd)
    return exif


def test_datetime_only_in_ifd0():
    data = jpeg_bytes(exif=_exif({DATETIME: "2021:07:04 18:30:00", MAKE: "Acme"}))
    out = extract_metadata(data)
    assert out.ok
    assert out.value.acquired_at == datetime(2021, 7, 4, 18, 30)
    assert out.value.make == "Acme"


def test_original_beats_modify_date():
    data = jpeg_bytes(
        exif=_exif(
            {DATETIME: "2021:07:04 18:30:00"},
            {DATETIME_ORIGINAL: "2019:01:02 03:04:05", DATETIME_DIGITIZED: "2020:01:01 00:00:00"},
        )
    )
    assert extract_metadata(data).value.acquired_at == datetime(2019, 1, 2, 3, 4, 5)


def test_digitized_used_when_nothing_else():
    data = jpeg_bytes(exif=_exif(exif_ifd={DATETIME_DIGITIZED: "2020:02:29 12:00:00"}))
    assert extract_metadata(data).value.acquired_at == datetime(2020, 2, 29, 12)


def test_dimension_tags():
    data = jpeg_bytes(exif=_exif(exif_ifd={EXIF_IMAGE_WIDTH: 4000, EXIF_IMAGE_HEIGHT: 3000}))
    assert extract_metadata(data).value.dimensions == (4000, 3000)


def test_no_exif_is_empty_success():
    out = extract_metadata(png_bytes())
    assert out.ok
    assert out.value.acquired_at is None
    assert out.value.dimensions is None


def test_corrupt_file_is_failure():
    out = extract_metadata(b"\xff\xd8garbage")
    assert not out.ok
    assert "metadata" in out.reason


def test_unparseable_dates_are_ignored():
    assert _parse_datetime("0000:00:00 00:00:00") is None
    assert _parse_datetime(None) is None
    assert _parse_datetime(b"2018:12:31 23:59:59\x00") == datetime(2018, 12, 31, 23, 59, 59)
    assert _parse_datetime("2018-12-31T23:59:59.123+02:00") == datetime(2018, 12, 31, 23, 59, 59)


def test_decode_dimensions_from_header():
    out = decode_dimensions(jpeg_bytes(size=(33, 17)))
    assert out.ok
    assert out.value == (33, 17)


def test_decode_dimensions_corrupt():
    assert not decode_dimensions(b"nope").ok

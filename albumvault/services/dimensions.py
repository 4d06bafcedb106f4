import io
from typing import Union

from PIL import Image as PILImage

from albumvault.services.outcome import Outcome


def decode_dimensions(data: Union[bytes, bytearray]) -> Outcome[tuple[int, int]]:
    """Pixel geometry from the container header, for files without size tags.

    Pillow parses the header lazily on open, so pixel data is not decoded.
    """
    try:
        with PILImage.open(io.BytesIO(data)) as im:
            width, height = im.size
    except Exception as exc:
        return Outcome.failure(f"unreadable image header: {exc}")
    if width <= 0 or height <= 0:
        return Outcome.failure(f"invalid dimensions {width}x{height}")
    return Outcome.success((int(width), int(height)))

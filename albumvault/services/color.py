"""
Dominant color detection for uploaded photos.

Samples every Nth pixel of the decoded RGB buffer, snaps each channel to a
bucket of fixed width and returns the most frequent bucket as ``#rrggbb``.
"""

import io
from typing import Union

import numpy as np
from PIL import Image as PILImage

from albumvault.models.photo import DEFAULT_DOMINANT_COLOR
from albumvault.services.outcome import Outcome


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return "#" + "".join(f"{int(c):02x}" for c in (r, g, b))


class DominantColorSampler:
    def __init__(
        self,
        stride: int = 10,
        bucket_size: int = 32,
        default_color: str = DEFAULT_DOMINANT_COLOR,
    ):
        if stride < 1:
            raise ValueError(f"stride must be positive: {stride}")
        if not 1 <= bucket_size <= 256:
            raise ValueError(f"bucket_size must be within [1, 256]: {bucket_size}")
        self.stride = stride
        self.bucket_size = bucket_size
        self.default_color = default_color

    def sample(self, image: PILImage.Image) -> Outcome[str]:
        """Most frequent quantized color of ``image``; first-seen bucket wins ties.

        The stride bounds the counting only. The full image is still decoded
        once, in the caller's thread.
        """
        try:
            # RGB images are viewed as-is; other modes need one converted copy
            if image.mode != "RGB":
                image = image.convert("RGB")
            rgb = np.asarray(image, dtype=np.uint8)
            pixels = rgb.reshape(-1, 3)[:: self.stride]
            if pixels.size == 0:
                return Outcome.failure("image has no pixels")

            buckets = (pixels // self.bucket_size) * self.bucket_size
            # Pack each bucket into one int so np.unique can count them.
            codes = (
                buckets[:, 0].astype(np.int64) << 16
                | buckets[:, 1].astype(np.int64) << 8
                | buckets[:, 2].astype(np.int64)
            )
            uniques, first_seen, counts = np.unique(codes, return_index=True, return_counts=True)
            # Highest count first, then earliest first occurrence.
            best = np.lexsort((first_seen, -counts))[0]
            code = int(uniques[best])
            return Outcome.success(rgb_to_hex(code >> 16 & 0xFF, code >> 8 & 0xFF, code & 0xFF))
        except Exception as exc:
            return Outcome.failure(f"color sampling failed: {exc}")

    def sample_bytes(self, data: Union[bytes, bytearray]) -> Outcome[str]:
        try:
            with PILImage.open(io.BytesIO(data)) as im:
                return self.sample(im)
        except Exception as exc:
            return Outcome.failure(f"undecodable image: {exc}")


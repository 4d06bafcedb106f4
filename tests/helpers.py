"""Image builders and API shortcuts shared by the tests."""

import io

from httpx import AsyncClient
from PIL import Image

from albumvault.services.ingestion import IncomingFile
from albumvault.services.storage import LocalStorage

TEST_PASSWORD = "TestPassword123!"


def jpeg_bytes(size=(32, 24), color=(200, 80, 40), exif=None, pad_to=None) -> bytes:
    buf = io.BytesIO()
    im = Image.new("RGB", size, color)
    if exif is not None:
        im.save(buf, "JPEG", exif=exif)
    else:
        im.save(buf, "JPEG")
    data = buf.getvalue()
    if pad_to is not None:
        assert len(data) <= pad_to
        # Decoders stop at the EOI marker, so trailing bytes are ignored
        data += b"\x00" * (pad_to - len(data))
    return data


def png_bytes(size=(20, 10), color=(10, 120, 250)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, "PNG")
    return buf.getvalue()


def incoming(filename="photo.jpg", data=None, content_type="image/jpeg") -> IncomingFile:
    return IncomingFile(filename=filename, content_type=content_type, data=data if data is not None else jpeg_bytes())


def stored_files(storage: LocalStorage):
    if not storage.base_dir.exists():
        return []
    return [p for p in storage.base_dir.rglob("*") if p.is_file()]


async def register(ac: AsyncClient, email="testuser@example.com", name="Test User") -> dict:
    resp = await ac.post("/api/auth/register", json={"name": name, "email": email, "password": TEST_PASSWORD})
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


async def create_album(ac: AsyncClient, headers: dict, title="Holidays") -> dict:
    resp = await ac.post("/api/albums", json={"title": title}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()

import asyncio
import re

import pytest
from fastapi import HTTPException

from albumvault.models.album import Album
from albumvault.models.photo import Photo
from albumvault.services.album_counts import AlbumCountReconciler
from albumvault.services.color import DominantColorSampler
from albumvault.services.ingestion import IngestionOrchestrator, title_from_filename
from albumvault.services.photo_builder import PhotoRecordBuilder
from albumvault.services.storage import LocalStorage
from tests.helpers import incoming, jpeg_bytes, stored_files


class FlakyStorage(LocalStorage):
    """Refuses to write one particular file name."""

    def __init__(self, base_dir, broken: str):
        super().__init__(base_dir)
        self.broken = broken

    def stage(self, owner, filename, data):
        if filename == self.broken:
            raise OSError("disk full")
        return super().stage(owner, filename, data)


async def _count(album) -> int:
    return (await Album.get(id=album.id)).photo_count


def test_title_from_filename():
    assert title_from_filename("Sunset.beach.jpg") == "Sunset.beach"
    assert title_from_filename("IMG_0001.JPG") == "IMG_0001"
    assert title_from_filename("") == "Untitled"


async def test_single_upload_persists_and_counts(orchestrator, storage, user, album):
    photo = await orchestrator.upload_photo(user.id, str(album.id), incoming("a.jpg"), "  First  ", None)

    assert photo.title == "First"
    assert photo.description == ""
    assert photo.size_bytes == len(jpeg_bytes())
    assert re.match(r"^#[0-9a-f]{6}$", photo.dominant_color)
    assert (photo.width, photo.height) == (32, 24)
    assert photo.file_url == f"/uploads/{photo.storage_key}"
    assert photo.acquired_at is not None
    assert await _count(album) == 1
    assert len(stored_files(storage)) == 1


async def test_count_converges_under_concurrent_uploads_and_deletes(orchestrator, user, album):
    n, m = 6, 4
    photos = await asyncio.gather(
        *[orchestrator.upload_photo(user.id, album.id, incoming(f"{i}.jpg"), f"p{i}") for i in range(n)]
    )
    assert await _count(album) == n

    await asyncio.gather(
        *[orchestrator.delete_photo(user.id, p.id) for p in photos[:m]],
        AlbumCountReconciler().reconcile(album.id),
    )
    assert await _count(album) == n - m
    assert await Photo.filter(album_id=album.id).count() == n - m


async def test_validation_failures_remove_staged_file(orchestrator, storage, user, other_user, album):
    with pytest.raises(HTTPException) as exc:
        await orchestrator.upload_photo(user.id, album.id, incoming(), "   ")
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await orchestrator.upload_photo(user.id, "not-a-uuid", incoming(), "Title")
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await orchestrator.upload_photo(other_user.id, album.id, incoming(), "Title")
    assert exc.value.status_code == 404

    assert stored_files(storage) == []
    assert await Photo.all().count() == 0


async def test_missing_file_is_rejected(orchestrator, user, album):
    with pytest.raises(HTTPException) as exc:
        await orchestrator.upload_photo(user.id, album.id, None, "Title")
    assert exc.value.status_code == 400
    assert exc.value.detail == "No image uploaded"


async def test_persistence_error_is_generic_500_and_cleans_up(storage, user, album):
    class BrokenBuilder(PhotoRecordBuilder):
        async def build(self, draft, album, user_id):
            raise RuntimeError("db went away")

    orchestrator = IngestionOrchestrator(storage, BrokenBuilder(), AlbumCountReconciler(), DominantColorSampler())
    with pytest.raises(HTTPException) as exc:
        await orchestrator.upload_photo(user.id, album.id, incoming(), "Title")
    assert exc.value.status_code == 500
    assert exc.value.detail == "Failed to upload photo"
    assert stored_files(storage) == []


async def test_corrupt_file_in_batch_still_recorded(orchestrator, user, album):
    files = [incoming("one.jpg"), incoming("broken.jpg", data=b"not really a jpeg"), incoming("three.jpg")]
    result = await orchestrator.upload_photos(user.id, album.id, files)

    assert (result.total, result.uploaded, result.failed) == (3, 3, 0)
    broken = next(p for p in result.photos if p.title == "broken")
    assert broken.dominant_color == "#000000"
    assert broken.width is None and broken.height is None
    assert await _count(album) == 3


async def test_storage_failure_in_batch_skips_only_that_file(tmp_path, user, album):
    storage = FlakyStorage(tmp_path / "uploads", broken="two.jpg")
    orchestrator = IngestionOrchestrator(
        storage, PhotoRecordBuilder(), AlbumCountReconciler(), DominantColorSampler()
    )
    files = [incoming("one.jpg"), incoming("two.jpg"), incoming("three.jpg")]
    result = await orchestrator.upload_photos(user.id, album.id, files)

    assert (result.total, result.uploaded, result.failed) == (3, 2, 1)
    assert result.failed_files == ["two.jpg"]
    assert sorted(p.title for p in result.photos) == ["one", "three"]
    assert await _count(album) == 2
    assert len(stored_files(storage)) == 2


async def test_batch_into_foreign_album_processes_nothing(orchestrator, storage, other_user, album):
    with pytest.raises(HTTPException) as exc:
        await orchestrator.upload_photos(other_user.id, album.id, [incoming("a.jpg"), incoming("b.jpg")])
    assert exc.value.status_code == 404
    assert stored_files(storage) == []
    assert await Photo.all().count() == 0


async def test_empty_batch_rejected(orchestrator, user, album):
    with pytest.raises(HTTPException) as exc:
        await orchestrator.upload_photos(user.id, album.id, [])
    assert exc.value.status_code == 400


async def test_delete_tolerates_missing_file(orchestrator, storage, user, album):
    photo = await orchestrator.upload_photo(user.id, album.id, incoming(), "Gone")
    storage.delete(photo.storage_key)

    await orchestrator.delete_photo(user.id, photo.id)
    assert await Photo.filter(id=photo.id).count() == 0
    assert await _count(album) == 0


async def test_delete_by_non_owner_has_no_effect(orchestrator, storage, user, other_user, album):
    photo = await orchestrator.upload_photo(user.id, album.id, incoming(), "Mine")
    with pytest.raises(HTTPException) as exc:
        await orchestrator.delete_photo(other_user.id, photo.id)
    assert exc.value.status_code == 404
    assert await _count(album) == 1
    assert len(stored_files(storage)) == 1


async def test_list_sorting(orchestrator, user, album):
    await orchestrator.upload_photo(user.id, album.id, incoming(data=jpeg_bytes(size=(8, 8))), "b")
    await orchestrator.upload_photo(user.id, album.id, incoming(data=jpeg_bytes(size=(200, 200))), "c")
    await orchestrator.upload_photo(user.id, album.id, incoming(data=jpeg_bytes(size=(40, 40))), "a")

    _, by_title = await orchestrator.list_album_photos(user.id, album.id, "title", "asc")
    assert [p.title for p in by_title] == ["a", "b", "c"]

    _, by_size = await orchestrator.list_album_photos(user.id, album.id, "size", "desc")
    sizes = [p.size_bytes for p in by_size]
    assert sizes == sorted(sizes, reverse=True)


async def test_update_only_title_and_description(orchestrator, user, album):
    photo = await orchestrator.upload_photo(user.id, album.id, incoming(), "Old", "old text")
    updated = await orchestrator.update_photo(user.id, photo.id, title="New")
    assert (updated.title, updated.description) == ("New", "old text")

    with pytest.raises(HTTPException) as exc:
        await orchestrator.update_photo(user.id, photo.id)
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await orchestrator.update_photo(user.id, photo.id, title="  ")
    assert exc.value.status_code == 400


async def test_persistence_failure_in_batch_cleans_up_that_file(storage, user, album):
    class PickyBuilder(PhotoRecordBuilder):
        async def build(self, draft, album, user_id):
            if draft.original_filename == "two.jpg":
                raise RuntimeError("constraint violated")
            return await super().build(draft, album, user_id)

    orchestrator = IngestionOrchestrator(storage, PickyBuilder(), AlbumCountReconciler(), DominantColorSampler())
    files = [incoming("one.jpg"), incoming("two.jpg"), incoming("three.jpg")]
    result = await orchestrator.upload_photos(user.id, album.id, files)

    assert (result.total, result.uploaded, result.failed) == (3, 2, 1)
    assert result.failed_files == ["two.jpg"]
    kept = {storage.base_dir / p.storage_key for p in result.photos}
    assert set(stored_files(storage)) == kept
    assert await _count(album) == 2


async def test_long_titles_and_filenames_are_stored(orchestrator, user, album):
    title = "x" * 300
    photo = await orchestrator.upload_photo(user.id, album.id, incoming("short.jpg"), title)
    assert (await Photo.get(id=photo.id)).title == title

    stem = "y" * 600
    result = await orchestrator.upload_photos(user.id, album.id, [incoming(f"{stem}.jpg")])
    assert (result.uploaded, result.failed) == (1, 0)
    assert result.photos[0].title == stem
    assert result.photos[0].original_filename == f"{stem}.jpg"
    assert await _count(album) == 2

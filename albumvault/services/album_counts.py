import logging

from albumvault.models.album import Album
from albumvault.models.photo import Photo
from albumvault.services.metrics import record_reconciliation

log = logging.getLogger(__name__)


class AlbumCountReconciler:
    """Recomputes an album's cached photo count from its photo records.

    The count is always recounted, never incremented, so concurrent callers
    converge on the true value without locking. Call only after the photo
    write it follows has completed.
    """

    async def reconcile(self, album_id) -> int:
        count = await Photo.filter(album_id=album_id).count()
        await Album.filter(id=album_id).update(photo_count=count)
        record_reconciliation()
        log.debug("Album %s photo_count=%s", album_id, count)
        return count

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from slugify import slugify

from albumvault.config import settings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    key: str
    size: int


class LocalStorage:
    """Uploaded files on local disk, served from a public static mount.

    Keys are paths relative to ``base_dir`` like ``<owner-slug>/<uuid>.jpg``.
    """

    def __init__(self, base_dir: Union[str, Path], url_prefix: str = "/uploads"):
        self.base_dir = Path(base_dir)
        self.url_prefix = "/" + url_prefix.strip("/")

    def _path(self, key: str) -> Path:
        path = (self.base_dir / key).resolve()
        if not path.is_relative_to(self.base_dir.resolve()):
            raise ValueError(f"Storage key escapes the upload dir: {key}")
        return path

    def stage(self, owner: str, filename: str, data: bytes) -> StoredFile:
        folder = self.base_dir / slugify(str(owner))
        folder.mkdir(parents=True, exist_ok=True)
        suffix = Path(filename or "").suffix.lower()
        if not suffix[1:].isalnum():
            suffix = ""
        path = folder / f"{uuid.uuid4().hex}{suffix}"
        with open(path, "wb") as f:
            f.write(data)
        return StoredFile(key=path.relative_to(self.base_dir).as_posix(), size=len(data))

    def delete(self, key: str) -> bool:
        """Remove a stored file. A file that is already gone is logged, not raised."""
        try:
            self._path(key).unlink()
            return True
        except FileNotFoundError:
            log.warning("Stored file already absent: %s", key)
            return False

    def url_for(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"


storage = LocalStorage(settings.UPLOAD_DIR, settings.UPLOAD_URL_PREFIX)


def get_storage() -> LocalStorage:
    return storage

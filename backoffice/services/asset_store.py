# backoffice/services/asset_store.py
import random
import re
import shutil
import time
from pathlib import Path, PurePosixPath

from backoffice.domain.errors import InvalidError
from backoffice.utils.settings import UPLOADS_DIR, UPLOADS_URL
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"})

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def unique_file_name(original: str) -> str:
    """photo 1.png -> photo-1-<ms>-<los>.png"""
    name = Path(original).name
    suffix = Path(name).suffix
    stem = _UNSAFE_NAME_CHARS.sub("-", name[: len(name) - len(suffix)] if suffix else name) or "file"
    return f"{stem}-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{suffix.lower()}"


class AssetStore:
    """
    Pliki (obrazki) katalogu trzymane na dysku:
    <root>/<kind>/<entity_id>/<filename>, publicznie pod <url_prefix>/...
    """

    def __init__(self, root: str | Path | None = None, url_prefix: str | None = None):
        self.root = Path(root or UPLOADS_DIR)
        self.url_prefix = (url_prefix or UPLOADS_URL).rstrip("/")

    def path_for(self, kind: str, entity_id: int) -> Path:
        return self.root / kind / str(entity_id)

    def save(self, kind: str, entity_id: int, filename: str, data: bytes) -> Path:
        name = Path(filename).name
        if not name:
            raise ValueError("Empty file name")

        target_dir = self.path_for(kind, entity_id)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / name
        target.write_bytes(data)

        logger.info(f"Saved asset {target}")
        return target

    def save_image(self, kind: str, entity_id: int, filename: str | None, data: bytes,
                   content_type: str | None) -> str:
        """Zapisuje wgrany obrazek pod nową nazwą i zwraca jego publiczny URL."""
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise InvalidError("Only image files are allowed", details={"content_type": content_type})
        if not data:
            raise InvalidError("Empty file", details={"filename": filename})

        saved = self.save(kind, entity_id, unique_file_name(filename or "image"), data)
        return self.url_for(kind, entity_id, saved.name)

    def url_for(self, kind: str, entity_id: int, name: str) -> str:
        return f"{self.url_prefix}/{kind}/{entity_id}/{name}"

    def delete_url(self, url: str | None) -> bool:
        """Usuwa plik zwrócony wcześniej przez save_image, obce URL-e są pomijane."""
        if not url or not url.startswith(f"{self.url_prefix}/"):
            return False

        relative = PurePosixPath(url[len(self.url_prefix) + 1:])
        if ".." in relative.parts:
            return False

        target = self.root.joinpath(*relative.parts)
        if not target.is_file():
            return False

        target.unlink()
        logger.info(f"Removed asset {target}")
        return True

    def delete_all(self, kind: str, entity_id: int) -> bool:
        target_dir = self.path_for(kind, entity_id)
        if not target_dir.exists():
            return False

        shutil.rmtree(target_dir)
        logger.info(f"Removed assets of {kind} {entity_id}")
        return True

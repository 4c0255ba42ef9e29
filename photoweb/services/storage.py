from pathlib import Path
from typing import BinaryIO

from loguru import logger

from photoweb.errors import ImageNotFoundError, InvalidImageIdError, StorageReadError, StorageWriteError
from photoweb.models.upload import StoredImage

FORBIDDEN_ID_CHARS = ("/", "\\", "\x00")
RESERVED_IDS = {".", ".."}


def validate_image_id(name: str | None) -> str:
    """Return ``name`` unchanged if it is safe to use as a flat storage key."""
    if not name or name in RESERVED_IDS or any(ch in name for ch in FORBIDDEN_ID_CHARS):
        logger.warning("Image id rejected image_id={!r}", name)
        raise InvalidImageIdError(f"Invalid image id: {name!r}")
    return name


class ImageStorage:
    """Flat directory of uploaded images keyed by client filename.

    Writes are not locked. Two uploads with the same id race and the last
    completed write wins; a failed copy leaves the partial file behind.
    """

    def __init__(self, root: Path, chunk_size: int = 64 * 1024) -> None:
        self.root = Path(root)
        self.chunk_size = chunk_size

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, image_id: str) -> Path:
        return self.root / validate_image_id(image_id)

    def exists(self, image_id: str) -> bool:
        try:
            return self.path_for(image_id).is_file()
        except OSError:
            return False

    def save(self, image_id: str, stream: BinaryIO) -> StoredImage:
        destination = self.path_for(image_id)
        try:
            if destination.exists():
                logger.warning("Overwriting stored image image_id={} path={}", image_id, str(destination))
            handle = destination.open("wb")
        except OSError as exc:
            logger.error("Image create failed image_id={} path={} error={}", image_id, str(destination), str(exc))
            raise StorageWriteError(str(exc)) from exc

        with handle:
            try:
                size_bytes = self._copy(stream, handle)
            except OSError as exc:
                logger.error(
                    "Image copy failed image_id={} path={} error={}; partial file left on disk",
                    image_id,
                    str(destination),
                    str(exc),
                )
                raise StorageWriteError(str(exc)) from exc

        logger.debug("Image saved image_id={} path={} size_bytes={}", image_id, str(destination), size_bytes)
        return StoredImage(id=image_id, size_bytes=size_bytes)

    def _copy(self, source: BinaryIO, target: BinaryIO) -> int:
        written = 0
        while True:
            chunk = source.read(self.chunk_size)
            if not chunk:
                break
            target.write(chunk)
            written += len(chunk)
        return written

    def open_path(self, image_id: str) -> Path:
        path = self.path_for(image_id)
        if not self.exists(image_id):
            logger.info("Stored image not found image_id={} path={}", image_id, str(path))
            raise ImageNotFoundError(f"Image not found: {image_id}")
        return path

    def list_ids(self) -> list[str]:
        try:
            names = [entry.name for entry in self.root.iterdir()]
        except OSError as exc:
            logger.error("Storage listing failed root={} error={}", str(self.root), str(exc))
            raise StorageReadError(str(exc)) from exc
        logger.debug("Storage listed root={} count={}", str(self.root), len(names))
        return names

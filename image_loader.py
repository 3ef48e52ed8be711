"""Image loading: media-type gate, Pillow decode and a background worker.

Only one image is ever active. Every accepted load is tagged with a
generation number; a result from an older generation is dropped, so the
most recent upload wins even if an earlier decode finishes later.
"""

import io
import logging
import mimetypes
import os

from PIL import Image
from PySide6.QtCore import QObject, QThread, Signal

from errors import ImageDecodeError
from models import LoadedImage

logger = logging.getLogger(__name__)


def media_type_for(path: str) -> str | None:
    """Guess the declared media type of *path* from its file name."""
    media_type, _ = mimetypes.guess_type(path)
    return media_type


def is_image_type(media_type: str | None) -> bool:
    return bool(media_type) and media_type.startswith("image/")


def decode_image(path: str, media_type: str | None = None) -> LoadedImage:
    """Read and fully decode *path*; raise ImageDecodeError if it is not an image."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ImageDecodeError(f"Cannot read {path}: {e}") from e

    try:
        img = Image.open(io.BytesIO(data))
        img.load()  # force a full decode so truncated files fail here
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Cannot decode {path}: {e}") from e

    return LoadedImage(
        name=os.path.basename(path),
        data=data,
        pixel_width=img.width,
        pixel_height=img.height,
        format=img.format,
        media_type=media_type or media_type_for(path),
    )


class ImageLoadWorker(QThread):
    """Decode one image file off the GUI thread.

    Signals:
        loaded: (generation, LoadedImage) on success
        failed: (generation, message) when the file cannot be decoded
    """

    loaded = Signal(int, object)
    failed = Signal(int, str)

    def __init__(self, path: str, media_type: str | None, generation: int, parent=None):
        super().__init__(parent)
        self.path = path
        self.media_type = media_type
        self.generation = generation

    def run(self):
        try:
            image = decode_image(self.path, self.media_type)
        except ImageDecodeError as e:
            logger.warning("%s", e)
            self.failed.emit(self.generation, e.user_message)
            return
        self.loaded.emit(self.generation, image)


class ImageLoader(QObject):
    """Front door for uploads: filters by media type and publishes results."""

    image_loaded = Signal(object)   # LoadedImage
    load_failed = Signal(str)
    file_rejected = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._generation = 0
        self._workers: list[ImageLoadWorker] = []

    def load(self, path: str, media_type: str | None = None) -> bool:
        """Start decoding *path*. Returns False if the file is not an image."""
        media_type = media_type or media_type_for(path)
        if not is_image_type(media_type):
            name = os.path.basename(path)
            logger.info("Ignoring %s (type %s)", name, media_type or "unknown")
            self.file_rejected.emit(f"{name} is not an image file")
            return False

        self._generation += 1
        worker = ImageLoadWorker(path, media_type, self._generation)
        worker.loaded.connect(self._on_loaded)
        worker.failed.connect(self._on_failed)
        worker.finished.connect(self._on_worker_finished)
        self._workers.append(worker)
        logger.debug("Loading %s (generation %d)", path, self._generation)
        worker.start()
        return True

    def cancel(self):
        """Invalidate any in-flight load; its result will be ignored."""
        self._generation += 1

    def wait(self):
        """Block until every outstanding worker has finished."""
        for worker in list(self._workers):
            worker.wait()

    def _on_loaded(self, generation: int, image: LoadedImage):
        if generation != self._generation:
            logger.debug("Dropping stale load of %s", image.name)
            return
        logger.info("Loaded %s (%d×%d %s)", image.name, image.pixel_width,
                    image.pixel_height, image.format)
        self.image_loaded.emit(image)

    def _on_failed(self, generation: int, message: str):
        if generation != self._generation:
            return
        self.load_failed.emit(message)

    def _on_worker_finished(self):
        worker = self.sender()
        if worker in self._workers:
            self._workers.remove(worker)
        worker.deleteLater()

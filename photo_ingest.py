"""Background image decoding handed off to the tick thread through a queue."""

from __future__ import annotations

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Set

import numpy as np

try:
    import cv2
except ImportError as exc:
    raise ImportError("OpenCV (opencv-python) is required for photo decoding") from exc

from config import PHOTO_EXTENSIONS
from gallery import THUMB_SIZE, make_thumbnail
from scene_objects import Texture


logger = logging.getLogger(__name__)

TEXTURE_MAX_SIDE = 512


@dataclass
class IngestedPhoto:
    texture: Texture
    image_bytes: bytes
    name: str = ""
    thumbnail: Optional[np.ndarray] = None


def decode_texture(data: bytes, name: str = "") -> Texture:
    """Decode raw image bytes into a BGR texture capped at TEXTURE_MAX_SIDE."""
    buf = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buf, cv2.IMREAD_COLOR) if buf.size else None
    if image is None:
        raise ValueError(f"Could not decode image {name or '<bytes>'}")

    height, width = image.shape[:2]
    longest = max(height, width)
    if longest > TEXTURE_MAX_SIDE:
        scale = TEXTURE_MAX_SIDE / longest
        image = cv2.resize(
            image,
            (max(1, int(width * scale)), max(1, int(height * scale))),
            interpolation=cv2.INTER_AREA,
        )
    return Texture(image=image, name=name)


def list_photo_files(folder: Path | str) -> List[Path]:
    path = Path(folder)
    if not path.is_dir():
        return []
    return sorted(p for p in path.iterdir() if p.suffix.lower() in PHOTO_EXTENSIONS)


class PhotoIngestor:
    """Decode submitted images on worker threads.

    Finished photos wait in a queue until :meth:`drain` is called at the start of
    a tick, so registration with the photo pool always happens on the tick
    thread. Thumbnails are built here too, so the tick never decodes. Failed
    decodes are logged and dropped. A path is only ever submitted once.
    """

    def __init__(self, max_workers: int = 4, thumb_size: int = THUMB_SIZE) -> None:
        self.thumb_size = thumb_size
        self._seen_paths: Set[Path] = set()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="photo-ingest")
        self._completed: "queue.SimpleQueue[IngestedPhoto]" = queue.SimpleQueue()
        self._closed = False

    def submit_bytes(self, data: bytes, name: str = "") -> Optional[Future]:
        if self._closed:
            logger.warning(f"Ignoring {name or 'image'}: ingestor is closed")
            return None
        return self._executor.submit(self._decode, data, name)

    def submit_paths(self, paths: Iterable[Path | str]) -> List[Future]:
        futures = []
        for path in paths:
            future = self.submit_path(path)
            if future is not None:
                futures.append(future)
        return futures

    def submit_path(self, path: Path | str) -> Optional[Future]:
        if self._closed:
            return None
        path = Path(path)
        key = path.resolve()
        if key in self._seen_paths:
            logger.debug(f"Already loaded {path}, skipping")
            return None
        self._seen_paths.add(key)
        return self._executor.submit(self._read_and_decode, path)

    def _read_and_decode(self, path: Path) -> None:
        try:
            data = path.read_bytes()
        except OSError as exc:
            logger.warning(f"Failed to read {path}: {exc}")
            return
        self._decode(data, path.name)

    def _decode(self, data: bytes, name: str) -> None:
        try:
            texture = decode_texture(data, name)
        except (ValueError, cv2.error) as exc:
            logger.warning(f"Skipping photo {name or '<bytes>'}: {exc}")
            return
        thumbnail = make_thumbnail(texture.image, self.thumb_size)
        self._completed.put(IngestedPhoto(texture=texture, image_bytes=data, name=name, thumbnail=thumbnail))

    def drain(self) -> List[IngestedPhoto]:
        """Return every photo finished since the previous call."""
        ready: List[IngestedPhoto] = []
        while True:
            try:
                ready.append(self._completed.get_nowait())
            except queue.Empty:
                return ready

    def close(self, wait: bool = True) -> None:
        self._closed = True
        self._executor.shutdown(wait=wait)

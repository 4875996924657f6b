"""Hand landmark tracking powered by MediaPipe Hand Landmarker."""

from __future__ import annotations

import logging
from collections import deque
from pathlib import Path
from typing import Deque, Optional, Tuple
from urllib.request import urlretrieve

import numpy as np

try:
    import cv2
except ImportError as exc:
    raise ImportError("OpenCV (opencv-python) is required for gesture detection") from exc

try:
    from mediapipe import Image as MPImage
    from mediapipe import ImageFormat
    from mediapipe.tasks import python as mp_python
    from mediapipe.tasks.python import vision
except ImportError as exc:
    raise ImportError("MediaPipe is required for gesture detection. Install mediapipe.") from exc

from config import MODEL_PATH, MODEL_URL


logger = logging.getLogger(__name__)


class HandLandmarkSource:
    """Feeds frames to the landmarker without blocking the render tick.

    Runs in LIVE_STREAM mode: results arrive on MediaPipe's callback thread and
    :meth:`detect` always returns the newest one, reusing the previous result
    when nothing new has arrived. If the model cannot be loaded the source stays
    unavailable and reports no hand for the rest of the session.
    """

    def __init__(self, model_path: Path | str | None = None) -> None:
        self._result_queue: Deque[Tuple[int, vision.HandLandmarkerResult]] = deque(maxlen=2)
        self._last_landmarks: Optional[np.ndarray] = None
        self._last_timestamp_ms = -1
        self._landmarker: Optional[vision.HandLandmarker] = None
        try:
            self.model_path = self._ensure_model_exists(model_path)
            self._landmarker = self._create_landmarker()
            logger.info(f"Hand landmarker ready ({self.model_path})")
        except (OSError, RuntimeError, ValueError) as exc:
            logger.warning(f"Hand tracking unavailable, continuing without gestures: {exc}")

    @property
    def available(self) -> bool:
        return self._landmarker is not None

    def _ensure_model_exists(self, model_path: Path | str | None) -> Path:
        """Download the MediaPipe model locally if it is absent."""
        path = Path(model_path) if model_path else MODEL_PATH
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Downloading hand landmarker model to {path}")
            urlretrieve(MODEL_URL, path)
        return path

    def _create_landmarker(self) -> vision.HandLandmarker:
        base_options = mp_python.BaseOptions(model_asset_path=str(self.model_path))
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.LIVE_STREAM,
            num_hands=1,
            min_hand_detection_confidence=0.5,
            min_hand_presence_confidence=0.5,
            min_tracking_confidence=0.5,
            result_callback=self._result_callback,
        )
        return vision.HandLandmarker.create_from_options(options)

    def _result_callback(
        self,
        result: vision.HandLandmarkerResult,
        output_image: MPImage,
        timestamp_ms: int,
    ) -> None:
        self._result_queue.append((timestamp_ms, result))

    def detect(self, frame: np.ndarray, timestamp_ms: int) -> Optional[np.ndarray]:
        """Submit a BGR frame and return the latest (21, 3) landmark array or None."""
        if self._landmarker is None:
            return None

        # detect_async rejects non-increasing timestamps
        timestamp_ms = max(int(timestamp_ms), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = MPImage(image_format=ImageFormat.SRGB, data=rgb_frame)
        try:
            self._landmarker.detect_async(mp_image, timestamp_ms)
        except (RuntimeError, ValueError) as exc:
            logger.warning(f"Landmark detection failed: {exc}")

        if self._result_queue:
            # Skip to the most recent result
            while len(self._result_queue) > 1:
                self._result_queue.popleft()
            _, result = self._result_queue.popleft()
            self._last_landmarks = self._first_hand(result)
        return self._last_landmarks

    @staticmethod
    def _first_hand(result: vision.HandLandmarkerResult) -> Optional[np.ndarray]:
        if not result.hand_landmarks:
            return None
        return np.array([[lm.x, lm.y, lm.z] for lm in result.hand_landmarks[0]])

    def close(self) -> None:
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None

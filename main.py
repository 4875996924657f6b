"""Entry point for the gesture-driven holiday tree.

Usage:
    pip install -e .
    python main.py [--camera 0] [--photos photos/] [--seed 7]

Keys: h toggles overlays, o loads the photo folder, x deletes the focused (or
newest) photo, q / Esc quits.
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional

import cv2

from config import (
    CAMERA_HEIGHT,
    CAMERA_WIDTH,
    DISPLAY_HEIGHT,
    DISPLAY_WIDTH,
    PHOTO_DIR,
    TARGET_FPS,
)
from gallery import GalleryPanel
from gesture_detector import HandLandmarkSource
from photo_ingest import PhotoIngestor, list_photo_files
from renderer import PreviewRenderer
from scene import HolidayScene
from scheduler import FrameTicker
from utils.drawing import draw_landmarks, draw_mode_banner, draw_prompts, overlay_labels, paste_inset


logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

WINDOW_NAME = "Gesture Holiday Tree"

GESTURE_HINTS: List[str] = [
    "Fist: Tree",
    "Open hand: Scatter",
    "Pinch: Focus photo",
    "Victory: Heart",
]


def open_camera(camera_index: int) -> Optional[cv2.VideoCapture]:
    cap = cv2.VideoCapture(camera_index)
    if not cap.isOpened():
        logger.warning(f"Unable to open webcam {camera_index}; running without gestures")
        cap.release()
        return None
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, CAMERA_WIDTH)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, CAMERA_HEIGHT)
    actual_width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    actual_height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
    logger.info(f"Camera resolution: {actual_width}x{actual_height}")
    return cap


def delete_target(scene: HolidayScene) -> Optional[int]:
    """Photo the delete key acts on: the focused one, else the newest."""
    if scene.state.focus_target_id is not None:
        return scene.state.focus_target_id
    ids = scene.pool.photo_ids
    return ids[-1] if ids else None


def run(camera_index: int = 0, photo_dir: Path | str | None = None, seed: Optional[int] = None) -> None:
    photo_dir = Path(photo_dir) if photo_dir else PHOTO_DIR

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
    cv2.resizeWindow(WINDOW_NAME, DISPLAY_WIDTH, DISPLAY_HEIGHT)

    renderer = PreviewRenderer(DISPLAY_WIDTH, DISPLAY_HEIGHT)
    gallery = GalleryPanel()
    ingestor = PhotoIngestor()
    scene = HolidayScene(renderer=renderer, gallery=gallery, ingestor=ingestor, seed=seed)

    cap = open_camera(camera_index)
    tracker = HandLandmarkSource() if cap is not None else None
    ticker = FrameTicker(TARGET_FPS)
    show_ui = True

    def tick(dt: float) -> bool:
        nonlocal show_ui
        landmarks = None
        camera_frame = None
        fresh = True
        if cap is not None:
            success, camera_frame = cap.read()
            if success and tracker is not None:
                landmarks = tracker.detect(camera_frame, int(time.time() * 1000))
            elif not success:
                # dropped frame: keep the previous reading
                camera_frame = None
                fresh = False

        reading = scene.tick(dt, landmarks, fresh=fresh)
        frame = scene.render()

        if show_ui:
            frame = draw_mode_banner(frame, scene.state.mode.value)
            frame = overlay_labels(frame, [reading.label], origin=(20, 80))
            frame = draw_prompts(frame, GESTURE_HINTS, origin=(20, DISPLAY_HEIGHT - 150))
            frame = gallery.draw(frame, selected_id=scene.state.focus_target_id)
            if camera_frame is not None:
                inset = cv2.flip(camera_frame, 1)
                if landmarks is not None:
                    inset = draw_landmarks(inset, [landmarks], mirrored=True)
                frame = paste_inset(frame, inset, (DISPLAY_WIDTH - 340, DISPLAY_HEIGHT - 260), 240)

        cv2.imshow(WINDOW_NAME, frame)
        key = cv2.waitKey(1) & 0xFF
        if key in (ord("q"), 27):
            return False
        if key == ord("h"):
            show_ui = not show_ui
            gallery.visible = show_ui
        elif key == ord("o"):
            files = list_photo_files(photo_dir)
            if not files:
                logger.info(f"No photos found in {photo_dir}/")
            elif not ingestor.submit_paths(files):
                logger.info(f"No new photos in {photo_dir}/")
        elif key == ord("x"):
            target = delete_target(scene)
            if target is not None:
                gallery.request_delete(target)
        return True

    try:
        ticker.run(tick)
    finally:
        ingestor.close(wait=False)
        if tracker is not None:
            tracker.close()
        if cap is not None:
            cap.release()
        cv2.destroyAllWindows()


def main() -> None:
    parser = argparse.ArgumentParser(description="Gesture-driven holiday tree")
    parser.add_argument("--camera", type=int, default=0, help="webcam index")
    parser.add_argument("--photos", type=Path, default=None, help="folder loaded with the 'o' key")
    parser.add_argument("--seed", type=int, default=None, help="seed for the procedural layout")
    args = parser.parse_args()
    run(camera_index=args.camera, photo_dir=args.photos, seed=args.seed)


if __name__ == "__main__":
    main()

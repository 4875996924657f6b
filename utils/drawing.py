# utils/drawing.py
"""Helper functions for drawing overlays, the gallery strip and procedural textures."""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence, Tuple

import cv2
import numpy as np

HAND_CONNECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, 1), (1, 2), (2, 3), (3, 4),  # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),  # Index
    (0, 9), (9, 10), (10, 11), (11, 12),  # Middle
    (0, 13), (13, 14), (14, 15), (15, 16),  # Ring
    (0, 17), (17, 18), (18, 19), (19, 20),  # Pinky
    (5, 9), (9, 13), (13, 17),  # Palm connections
)

PANEL_BG = (30, 30, 30)
PANEL_TEXT = (220, 220, 220)

MODE_COLORS: Dict[str, Tuple[int, int, int]] = {
    "Tree": (40, 110, 30),
    "Scatter": (150, 90, 40),
    "Focus": (40, 140, 200),
    "Heart": (60, 40, 170),
}


# Small utility
def _rounded_rect(img, top_left, bottom_right, color, radius=12, thickness=-1, alpha=1.0):
    x1, y1 = top_left
    x2, y2 = bottom_right
    overlay = img.copy()
    w = x2 - x1
    h = y2 - y1
    if w <= 0 or h <= 0:
        return img
    radius = max(1, min(radius, w // 2, h // 2))
    # draw filled rect with rounded corners using circles & rects
    cv2.rectangle(overlay, (x1 + radius, y1), (x2 - radius, y2), color, thickness)
    cv2.rectangle(overlay, (x1, y1 + radius), (x2, y2 - radius), color, thickness)
    cv2.circle(overlay, (x1 + radius, y1 + radius), radius, color, thickness)
    cv2.circle(overlay, (x2 - radius, y1 + radius), radius, color, thickness)
    cv2.circle(overlay, (x1 + radius, y2 - radius), radius, color, thickness)
    cv2.circle(overlay, (x2 - radius, y2 - radius), radius, color, thickness)
    cv2.addWeighted(overlay, alpha, img, 1 - alpha, 0, img)
    return img


def draw_landmarks(
    frame: np.ndarray,
    hand_landmarks: Iterable[Sequence[Sequence[float]]],
    mirrored: bool = False,
) -> np.ndarray:
    """Render MediaPipe-style landmark points on the frame.

    Args:
        frame: The frame to draw on
        hand_landmarks: Iterable of landmark sequences with normalized coordinates (x, y[, z])
        mirrored: If True, mirror the x coordinates horizontally
    """
    output = frame.copy()
    height, width = output.shape[:2]

    for landmarks in hand_landmarks:
        points = [
            (int(((1.0 - p[0]) if mirrored else p[0]) * width), int(p[1] * height))
            for p in landmarks
        ]
        if not points:
            continue

        for start, end in HAND_CONNECTIONS:
            if start < len(points) and end < len(points):
                cv2.line(output, points[start], points[end], (0, 200, 120), 1, lineType=cv2.LINE_AA)

        for i, point in enumerate(points):
            color = (int(200 - (i * 4) % 180), 120, 255)
            cv2.circle(output, point, 3, color, -1, lineType=cv2.LINE_AA)
            cv2.circle(output, point, 1, (255, 255, 255), -1)

    return output


def paste_inset(frame: np.ndarray, inset: np.ndarray, origin: Tuple[int, int], width: int) -> np.ndarray:
    """Paste a resized copy of ``inset`` (e.g. the webcam feed) onto the frame."""
    output = frame.copy()
    h, w = inset.shape[:2]
    if w == 0 or h == 0:
        return output
    height = max(1, int(h * width / w))
    small = cv2.resize(inset, (width, height), interpolation=cv2.INTER_AREA)
    x, y = origin
    end_y = min(y + height, output.shape[0])
    end_x = min(x + width, output.shape[1])
    if end_y > y and end_x > x:
        output[y:end_y, x:end_x] = small[: end_y - y, : end_x - x]
        cv2.rectangle(output, (x, y), (end_x - 1, end_y - 1), (200, 200, 200), 1)
    return output


def overlay_labels(
    frame: np.ndarray,
    labels: Sequence[str],
    origin: Tuple[int, int] = (20, 30),
) -> np.ndarray:
    """Draw labels inside a translucent rounded panel at a fixed origin."""
    output = frame.copy()
    x, y = origin
    padding_x = 14
    padding_y = 10
    line_h = 28
    total_h = padding_y * 2 + line_h * max(1, len(labels))
    total_w = max((cv2.getTextSize(g, cv2.FONT_HERSHEY_SIMPLEX, 0.7, 2)[0][0] for g in labels), default=120) + padding_x * 2

    _rounded_rect(output, (x - 8, y - 8), (x + total_w + 8, y + total_h + 8), PANEL_BG, radius=12, alpha=0.6)

    yy = y + padding_y + 18
    for label in labels:
        cv2.putText(output, label, (x + padding_x, yy), cv2.FONT_HERSHEY_SIMPLEX, 0.7, PANEL_TEXT, 2, lineType=cv2.LINE_AA)
        yy += line_h
    return output


def draw_mode_banner(
    frame: np.ndarray,
    text: str,
    *,
    color: Optional[Tuple[int, int, int]] = None,
    alpha: float = 0.85,
) -> np.ndarray:
    """Overlay a semi-transparent banner at the top-left with mode text."""
    output = frame.copy()
    color = color or MODE_COLORS.get(text, (56, 142, 60))
    padding = 12
    font_scale = 0.8
    thickness = 2
    text_size, _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, font_scale, thickness)
    width = text_size[0] + padding * 2 + 30
    height = text_size[1] + padding * 2

    # shadow
    shadow = output.copy()
    _rounded_rect(shadow, (10 + 3, 10 + 3), (10 + width + 3, 10 + height + 3), (10, 10, 10), radius=14, alpha=0.35)
    cv2.addWeighted(shadow, 0.6, output, 0.4, 0, output)

    _rounded_rect(output, (10, 10), (10 + width, 10 + height), color, radius=14, alpha=alpha)
    cv2.putText(
        output,
        text,
        (10 + padding, 10 + padding + text_size[1] - 2),
        cv2.FONT_HERSHEY_SIMPLEX,
        font_scale,
        (255, 255, 255),
        thickness,
        lineType=cv2.LINE_AA,
    )
    return output


def draw_prompts(
    frame: np.ndarray,
    prompts: Sequence[str],
    origin: Tuple[int, int] = (20, 60),
    font_scale: float = 0.65,
    line_height: int = 28,
) -> np.ndarray:
    """Display the gesture cheat sheet in a rounded panel."""
    output = frame.copy()
    x, y = origin
    total_w = max((cv2.getTextSize(p, cv2.FONT_HERSHEY_SIMPLEX, font_scale, 2)[0][0] for p in prompts), default=200) + 48
    total_h = line_height * len(prompts) + 16

    _rounded_rect(output, (x - 10, y - 10), (x + total_w + 10, y + total_h + 10), PANEL_BG, radius=18, alpha=0.75)

    yy = y + 8
    for prompt in prompts:
        cv2.putText(output, prompt, (x + 8, yy + 20), cv2.FONT_HERSHEY_SIMPLEX, font_scale, PANEL_TEXT, 2, lineType=cv2.LINE_AA)
        yy += line_height
    return output


def draw_gallery_strip(
    frame: np.ndarray,
    thumbnails: Sequence[Tuple[int, np.ndarray]],
    *,
    selected_id: Optional[int] = None,
    thumb_size: int = 72,
    margin: int = 10,
) -> np.ndarray:
    """Stack photo thumbnails down the right edge, highlighting the focused one."""
    output = frame.copy()
    height, width = output.shape[:2]
    x = width - thumb_size - margin
    y = margin
    for photo_id, thumb in thumbnails:
        if y + thumb_size > height - margin:
            break
        tile = cv2.resize(thumb, (thumb_size, thumb_size), interpolation=cv2.INTER_AREA)
        output[y:y + thumb_size, x:x + thumb_size] = tile
        border = (0, 215, 255) if photo_id == selected_id else (200, 200, 200)
        cv2.rectangle(output, (x - 1, y - 1), (x + thumb_size, y + thumb_size), border, 2 if photo_id == selected_id else 1)
        cv2.putText(output, str(photo_id), (x + 4, y + thumb_size - 6), cv2.FONT_HERSHEY_SIMPLEX, 0.4, (255, 255, 255), 1, lineType=cv2.LINE_AA)
        y += thumb_size + margin
    return output


def make_placeholder_photo(size: int = 512) -> np.ndarray:
    """Default greeting card shown before the user adds any photos."""
    card = np.full((size, size, 3), (213, 232, 238), dtype=np.uint8)
    inset = int(size * 40 / 512)
    cv2.rectangle(card, (inset, inset), (size - inset, int(size * 420 / 512)), (69, 161, 191), -1)
    font_scale = size / 512 * 2.0
    for text, baseline in (("JOYEUX", 0.42), ("NOEL", 0.56)):
        text_size, _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_TRIPLEX, font_scale, 3)
        origin = ((size - text_size[0]) // 2, int(size * baseline) + text_size[1] // 2)
        cv2.putText(card, text, origin, cv2.FONT_HERSHEY_TRIPLEX, font_scale, (221, 221, 221), 3, lineType=cv2.LINE_AA)
    return card


def make_candy_cane_texture(size: int = 128) -> np.ndarray:
    """Diagonal red stripes on white."""
    tex = np.full((size, size, 3), 255, dtype=np.uint8)
    thickness = max(1, int(size * 20 / 128))
    step = max(1, int(size * 40 / 128))
    for i in range(-size, size * 2, step):
        cv2.line(tex, (i, 0), (i + size, size), (0, 0, 255), thickness)
    return tex

import cv2
import numpy as np

from config import PHOTO_ID_BASE, SceneConfig
from gallery import GalleryPanel
from mode_state import Mode
from photo_ingest import PhotoIngestor
from renderer import PreviewRenderer
from scene import HolidayScene
from scene_objects import Texture

DT = 1 / 60


def card():
    return Texture(np.full((30, 40, 3), 90, dtype=np.uint8), name="card")


def png_bytes():
    ok, buf = cv2.imencode(".png", np.full((24, 32, 3), 180, dtype=np.uint8))
    assert ok
    return buf.tobytes()


def test_build_registers_decorations(small_config):
    renderer = PreviewRenderer(160, 120)
    scene = HolidayScene(config=small_config, renderer=renderer, seed=1)
    assert [obj.id for obj in scene.decorations] == list(range(24))
    assert len(renderer) == 24
    assert len(scene.snow) == 12
    assert scene.state.mode is Mode.TREE


def test_placeholder_photo_is_not_in_gallery():
    gallery = GalleryPanel()
    scene = HolidayScene(config=SceneConfig(particle_count=5, snow_count=0), gallery=gallery, seed=1)
    assert scene.pool.photo_ids == [PHOTO_ID_BASE]
    assert len(gallery) == 0


def test_same_seed_same_layout(small_config):
    a = HolidayScene(config=small_config, seed=42)
    b = HolidayScene(config=small_config, seed=42)
    for da, db in zip(a.decorations, b.decorations):
        assert np.array_equal(da.tree_position, db.tree_position)
        assert np.array_equal(da.heart_position, db.heart_position)


def test_gestures_drive_modes(small_config, fist, open_hand, victory):
    scene = HolidayScene(config=small_config, seed=1)
    assert scene.tick(DT, open_hand).mode is Mode.SCATTER
    assert scene.state.mode is Mode.SCATTER
    scene.tick(DT, victory)
    assert scene.state.mode is Mode.HEART
    scene.tick(DT, None)
    assert scene.state.mode is Mode.HEART
    assert not scene.state.hand_detected
    scene.tick(DT, fist)
    assert scene.state.mode is Mode.TREE
    assert scene.last_reading.label == "Fist (Tree)"


def test_pinch_with_no_photos(small_config, pinch):
    scene = HolidayScene(config=small_config, seed=1)
    scene.tick(DT, pinch)
    assert scene.state.mode is Mode.FOCUS
    assert scene.state.focus_target_id is None


def test_pinch_focuses_and_delete_returns_to_tree(small_config, pinch):
    scene = HolidayScene(config=small_config, seed=1)
    ids = [scene.add_photo(card()) for _ in range(3)]
    scene.tick(DT, pinch)
    target = scene.state.focus_target_id
    assert target in ids

    for _ in range(5):
        scene.tick(DT, pinch)
    assert scene.state.focus_target_id == target

    assert scene.remove_photo(target)
    assert scene.state.mode is Mode.TREE
    assert scene.state.focus_target_id is None
    assert target not in [obj.id for obj in scene.live_objects()]


def test_lost_hand_during_focus_keeps_target(small_config, pinch):
    scene = HolidayScene(config=small_config, seed=1)
    scene.add_photo(card())
    scene.tick(DT, pinch)
    target = scene.state.focus_target_id
    for _ in range(10):
        scene.tick(DT, None)
    assert scene.state.mode is Mode.FOCUS
    assert scene.state.focus_target_id == target


def test_live_objects_have_unique_ids(small_config):
    scene = HolidayScene(config=small_config, seed=1)
    for _ in range(4):
        scene.add_photo(card())
    ids = [obj.id for obj in scene.live_objects()]
    assert len(ids) == len(set(ids)) == 28


def test_ingested_photos_join_on_next_tick(small_config):
    gallery = GalleryPanel()
    ingestor = PhotoIngestor(max_workers=1)
    try:
        scene = HolidayScene(config=small_config, gallery=gallery, ingestor=ingestor, seed=1)
        ingestor.submit_bytes(png_bytes(), "a.png").result(timeout=10)
        ingestor.submit_bytes(b"junk", "b.png").result(timeout=10)
        assert len(scene.pool) == 0

        scene.tick(DT)
        assert len(scene.pool) == 1
        (photo_id,) = scene.pool.photo_ids
        assert gallery.photo_ids == [photo_id]
    finally:
        ingestor.close()


def test_gallery_delete_removes_photo_everywhere(small_config):
    gallery = GalleryPanel()
    renderer = PreviewRenderer(160, 120)
    scene = HolidayScene(config=small_config, renderer=renderer, gallery=gallery, seed=1)
    photo_id = scene.add_photo(card(), png_bytes())
    assert photo_id in gallery and photo_id in renderer

    assert gallery.request_delete(photo_id)
    assert photo_id not in scene.pool
    assert photo_id not in gallery
    assert photo_id not in renderer
    assert gallery.request_delete(photo_id) is False


def test_render(small_config, open_hand):
    scene = HolidayScene(config=small_config, renderer=PreviewRenderer(160, 120), seed=1)
    scene.add_photo(card())
    for _ in range(30):
        scene.tick(DT, open_hand)
    frame = scene.render()
    assert frame.shape == (120, 160, 3)


def test_render_without_renderer(small_config):
    assert HolidayScene(config=small_config, seed=1).render() is None


def test_picks_and_snow_do_not_shift_photo_positions(pinch, fist):
    config = SceneConfig(particle_count=10, snow_count=200, include_placeholder_photo=False)
    quiet = HolidayScene(config=config, seed=7)
    busy = HolidayScene(config=config, seed=7)
    for scene in (quiet, busy):
        scene.add_photo(card())
        scene.add_photo(card())

    # focus picks plus enough frames for snowflakes to hit the floor and recycle
    for _ in range(3):
        busy.tick(DT, pinch)
        busy.tick(DT, fist)
    for _ in range(400):
        busy.tick(DT, None)

    a = quiet.pool.get(quiet.add_photo(card()))
    b = busy.pool.get(busy.add_photo(card()))
    for attr in ("tree_position", "scatter_position", "heart_position", "rotation_drift"):
        assert np.array_equal(getattr(a, attr), getattr(b, attr))
    assert np.array_equal(a.pose.rotation, b.pose.rotation)


def test_fist_holds_tree_and_rotation_eases_toward_palm(small_config, hand):
    scene = HolidayScene(config=small_config, seed=1)
    fist = hand(0.1, 0.1, 0.1, 0.1, palm=(0.7, 0.3))
    intent = np.array([-0.4, 0.4])

    previous = np.abs(intent - scene.choreographer.group_rotation[:2])
    for _ in range(10):
        reading = scene.tick(DT, fist)
        assert reading.mode is Mode.TREE
        assert scene.state.mode is Mode.TREE
        rotation = scene.choreographer.group_rotation[:2]
        remaining = np.abs(intent - rotation)
        assert np.all(remaining < previous)
        # no overshoot: still on the starting side of the intent
        assert np.all(np.sign(intent - rotation) == np.sign(intent))
        previous = remaining


def test_add_pinch_delete_bag_bookkeeping(small_config, pinch, fist):
    scene = HolidayScene(config=small_config, seed=3)
    ids = [scene.add_photo(card()) for _ in range(3)]
    assert len(scene.pool) == 3
    assert sorted(scene.pool.shuffle_bag) == ids

    scene.tick(DT, pinch)
    first = scene.state.focus_target_id
    assert first in ids
    assert len(scene.pool.shuffle_bag) == 2
    assert first not in scene.pool.shuffle_bag

    scene.remove_photo(first)
    survivors = [pid for pid in ids if pid != first]
    assert scene.state.mode is Mode.TREE
    assert len(scene.pool) == 2
    assert sorted(scene.pool.shuffle_bag) == survivors

    scene.tick(DT, pinch)
    second = scene.state.focus_target_id
    assert second in survivors
    assert len(scene.pool.shuffle_bag) == 1

    scene.tick(DT, fist)
    scene.tick(DT, pinch)
    third = scene.state.focus_target_id
    assert {second, third} == set(survivors)
    assert scene.pool.shuffle_bag == ()

    # refill with both survivors, last pick excluded from the first draw
    scene.tick(DT, fist)
    scene.tick(DT, pinch)
    assert scene.state.focus_target_id == second
    assert scene.pool.shuffle_bag == (third,)


def test_dropped_frame_reuses_previous_reading(small_config, hand):
    scene = HolidayScene(config=small_config, seed=1)
    open_hand = hand(0.5, 0.5, 0.5, 0.5, palm=(0.8, 0.5))
    first = scene.tick(DT, open_hand)
    for _ in range(5):
        assert scene.tick(DT, None, fresh=False) is first
    assert scene.state.mode is Mode.SCATTER
    assert scene.state.hand_detected
    assert scene.state.rotation_intent == first.rotation_intent

    scene.tick(DT, None)
    assert not scene.state.hand_detected
    assert scene.state.rotation_intent[1] < first.rotation_intent[1]


def test_dropped_first_frame_counts_as_no_hand(small_config):
    scene = HolidayScene(config=small_config, seed=1)
    reading = scene.tick(DT, None, fresh=False)
    assert not reading.hand_detected
    assert scene.state.mode is Mode.TREE


def test_ingested_thumbnail_skips_decode_on_tick(small_config, monkeypatch):
    import gallery as gallery_module

    gallery = GalleryPanel()
    ingestor = PhotoIngestor(max_workers=1)
    try:
        scene = HolidayScene(config=small_config, gallery=gallery, ingestor=ingestor, seed=1)
        ingestor.submit_bytes(png_bytes(), "a.png").result(timeout=10)

        def no_decode(*args, **kwargs):
            raise AssertionError("tick decoded image bytes")

        monkeypatch.setattr(gallery_module.cv2, "imdecode", no_decode)
        scene.tick(DT)
        ((photo_id, thumb),) = gallery.thumbnails()
        assert photo_id in scene.pool
        assert thumb.shape == (gallery.thumb_size, gallery.thumb_size, 3)
    finally:
        ingestor.close()

import numpy as np
import pytest

from choreography import SnowField, StarOrnament
from config import SceneConfig
from mode_state import ModeState
from photo_pool import PhotoPool
from pose_catalog import PoseCatalog
from renderer import BACKGROUND, BaseRenderer, PreviewRenderer
from scene_objects import Texture


def make_scene(renderer, decorations=12, photos=2):
    catalog = PoseCatalog(SceneConfig(particle_count=decorations, snow_count=0), np.random.default_rng(2))
    pool = PhotoPool(catalog, ModeState(), renderer=renderer)
    objects = [catalog.build_decoration(i, decorations) for i in range(decorations)]
    for obj in objects:
        obj.pose.position = np.array(obj.tree_position)
        renderer.add_object(obj)
    texture = Texture(np.full((40, 60, 3), 128, dtype=np.uint8))
    for _ in range(photos):
        pool.add_photo(texture)
    for photo in pool.photos:
        photo.pose.position = np.array(photo.tree_position)
    return objects + pool.photos, pool


def test_base_renderer_is_abstract():
    with pytest.raises(TypeError):
        BaseRenderer()


def test_projection_of_camera_axis():
    renderer = PreviewRenderer(160, 120)
    pixels, depth = renderer.project(np.array([[0.0, 5.0, 0.0]]))
    assert np.allclose(pixels[0], (80, 60))
    assert depth[0] == pytest.approx(90.0)


def test_projection_is_perspective():
    renderer = PreviewRenderer(160, 120)
    pixels, _ = renderer.project(np.array([[10.0, 5.0, 0.0], [10.0, 5.0, -90.0]]))
    near_offset = pixels[0, 0] - 80
    far_offset = pixels[1, 0] - 80
    assert near_offset == pytest.approx(2 * far_offset)


def test_empty_render_is_background():
    renderer = PreviewRenderer(64, 48)
    frame = renderer.render([], np.zeros(3))
    assert frame.shape == (48, 64, 3)
    assert frame.dtype == np.uint8
    assert np.all(frame == BACKGROUND)


def test_render_full_scene():
    renderer = PreviewRenderer(160, 120)
    objects, _ = make_scene(renderer)
    star = StarOrnament()
    snow = SnowField(30, np.random.default_rng(0))
    frame = renderer.render(objects, np.array([0.1, 0.4, 0.0]), star=star, snow=snow)
    assert frame.shape == (120, 160, 3)
    assert np.any(frame != BACKGROUND)


def test_handles_follow_objects():
    renderer = PreviewRenderer(160, 120)
    objects, pool = make_scene(renderer, decorations=5, photos=2)
    assert len(renderer) == 7
    photo_id = pool.photo_ids[0]
    handle = renderer._handles[photo_id]
    assert handle.texture is not None

    pool.remove_photo(photo_id)
    assert photo_id not in renderer
    assert len(renderer) == 6
    assert handle.texture is None
    assert handle.sprites == {}
    assert renderer.remove_object(photo_id) is False


def test_sprite_cache():
    renderer = PreviewRenderer(160, 120)
    _, pool = make_scene(renderer, decorations=0, photos=1)
    handle = renderer._handles[pool.photo_ids[0]]
    sprite = handle.sprite(30, 20)
    assert sprite.shape == (20, 30, 3)
    assert handle.sprite(30, 20) is sprite

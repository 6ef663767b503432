import math

import numpy as np
import pytest

from szafkagl.camera import (
    Camera,
    CameraKey,
    angle_between,
    look_at,
    perspective,
    rotate,
    rotate_vector,
    scale,
    translate,
)


def _apply(m, p):
    v = m @ np.array([*p, 1.0])
    return v[:3] / v[3]


def test_look_at_maps_eye_to_origin_and_center_to_negative_z():
    eye, center = (3.0, 2.5, 5.0), (1.0, 1.5, 0.5)
    m = look_at(eye, center, (0, 1, 0))
    assert np.allclose(_apply(m, eye), 0.0)
    target = _apply(m, center)
    assert np.allclose(target[:2], 0.0)
    assert target[2] < 0
    assert np.isclose(-target[2], np.linalg.norm(np.subtract(center, eye)))


def test_look_at_rotation_is_orthonormal():
    m = look_at((1, 2, 3), (0, 0, 0), (0, 1, 0))
    r = m[:3, :3]
    assert np.allclose(r @ r.T, np.identity(3))


def test_perspective_maps_near_and_far_to_clip_bounds():
    near, far = 0.01, 100.0
    p = perspective(math.radians(45.0), 1.0, near, far)
    assert np.isclose(_apply(p, (0, 0, -near))[2], -1.0)
    assert np.isclose(_apply(p, (0, 0, -far))[2], 1.0)


def test_perspective_rejects_zero_aspect():
    with pytest.raises(ValueError):
        perspective(1.0, 0.0, 0.1, 10.0)


def test_rotate_vector_quarter_turn():
    assert np.allclose(rotate_vector((1, 0, 0), math.pi / 2, (0, 0, 1)), (0, 1, 0))
    assert np.allclose(rotate_vector((1, 0, 0), math.pi / 2, (0, 0, 5)), (0, 1, 0))


def test_rotate_vector_preserves_length():
    v = np.array([0.3, -1.2, 2.0])
    r = rotate_vector(v, 0.7, (1, 1, 0))
    assert np.isclose(np.linalg.norm(r), np.linalg.norm(v))


def test_angle_between():
    assert math.isclose(angle_between((1, 0, 0), (0, 1, 0)), math.pi / 2)
    assert math.isclose(angle_between((0, 1, 0), (0, 1, 0)), 0.0)
    assert math.isclose(angle_between((0, 1, 0), (0, -1, 0)), math.pi)


def test_translate_rotate_scale_compose_in_local_space():
    m = translate(np.identity(4), (1.0, 0.0, 2.5))
    m = rotate(m, math.pi / 2, (0, 1, 0))
    m = scale(m, 2.0)
    # local +X is scaled, rotated about Y onto -Z, then translated
    assert np.allclose(_apply(m, (1, 0, 0)), (1.0, 0.0, 0.5))
    assert np.allclose(_apply(m, (0, 0, 0)), (1.0, 0.0, 2.5))


def test_update_matrix_is_projection_times_view():
    cam = Camera(1000, 1000, (3.0, 2.5, 5.0))
    result = cam.update_matrix(45.0, 0.01, 100.0)
    expected = cam.projection_matrix(45.0, 0.01, 100.0) @ cam.view_matrix()
    assert np.allclose(result, expected)
    assert np.allclose(cam.camera_matrix, expected)


def test_move_forward_then_speed_changes():
    cam = Camera(1000, 1000, (0.0, 0.0, 0.0))
    initial_speed = cam.speed
    cam.move({CameraKey.FORWARD})
    assert np.allclose(cam.position, initial_speed * cam.orientation)
    assert cam.speed == 0.0005
    cam.move({CameraKey.FAST})
    assert cam.speed == 0.01


def test_move_opposite_keys_cancel():
    cam = Camera(800, 600, (1.0, 2.0, 3.0))
    cam.move({CameraKey.LEFT, CameraKey.RIGHT, CameraKey.UP, CameraKey.DOWN})
    assert np.allclose(cam.position, (1.0, 2.0, 3.0))


def test_move_right_is_perpendicular_to_view():
    cam = Camera(800, 600, (0.0, 0.0, 0.0))
    cam.move([CameraKey.RIGHT])
    assert np.isclose(np.dot(cam.position, cam.orientation), 0.0)
    assert cam.position[0] > 0


def test_first_look_only_recentres():
    cam = Camera(1000, 1000, (0, 0, 0))
    before = cam.orientation.copy()
    centre = cam.look(900, 100)
    assert centre == (500, 500)
    assert np.allclose(cam.orientation, before)
    assert cam.first_click is False


def test_look_right_turns_right():
    cam = Camera(1000, 1000, (0, 0, 0))
    cam.look(500, 500)
    cam.look(600, 500)
    assert cam.orientation[0] > 0
    assert np.isclose(np.linalg.norm(cam.orientation), 1.0)


def test_look_down_accepted_within_limit():
    cam = Camera(1000, 1000, (0, 0, 0))
    cam.look(500, 500)
    cam.look(500, 1000)
    assert cam.orientation[1] < 0


def test_look_vertical_beyond_limit_rejected():
    cam = Camera(1000, 1000, (0, 0, 0))
    before = cam.orientation.copy()
    cam.look(500, 500)
    cam.look(500, 1400)
    assert np.allclose(cam.orientation, before)


def test_release_mouse_restarts_drag():
    cam = Camera(1000, 1000, (0, 0, 0))
    cam.look(500, 500)
    cam.release_mouse()
    before = cam.orientation.copy()
    cam.look(800, 800)
    assert cam.first_click is False
    assert np.allclose(cam.orientation, before)
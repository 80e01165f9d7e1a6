"""
Tests for camera aim accumulation, debug movement and renormalization.

Tests cover:
- Pitch/roll accumulation over consecutive frames
- Opposing inputs cancelling
- Rotation applied with the full accumulated angle
- Debug free-fly translation along camera axes
- Periodic quaternion renormalization
- The aim ray built from the camera pose
"""

import math

import numpy as np
import pytest

from settings import (
    DEBUG_MOVE_RATE,
    MAX_RADIUS,
    MOVE_BACK,
    MOVE_FWD,
    MOVE_LEFT,
    MOVE_RIGHT,
    MOVE_UP,
    PITCH_DOWN,
    PITCH_RATE,
    PITCH_UP,
    ROLL_LEFT,
    ROLL_RATE,
    ROLL_RIGHT,
)
from world import AXIS_X, AXIS_Z, Camera, quat_from_axis_angle, quat_identity, quat_rotate


@pytest.fixture
def camera():
    return Camera()


# =============================================================================
# AIM ACCUMULATOR
# =============================================================================

class TestAimAccumulator:
    """Tests for pitch/roll integration."""

    def test_starts_level(self, camera):
        assert camera.aim.pitch == 0.0
        assert camera.aim.roll == 0.0

    @pytest.mark.parametrize("frames", [1, 7, 50])
    def test_pitch_up_accumulates(self, camera, frames):
        for _ in range(frames):
            camera.update({PITCH_UP})
        assert camera.aim.pitch == pytest.approx(frames * PITCH_RATE)
        assert camera.aim.roll == 0.0

    def test_pitch_down_accumulates_negative(self, camera):
        for _ in range(3):
            camera.update({PITCH_DOWN})
        assert camera.aim.pitch == pytest.approx(-3 * PITCH_RATE)

    def test_roll_left_positive_roll_right_negative(self, camera):
        camera.update({ROLL_LEFT})
        assert camera.aim.roll == pytest.approx(ROLL_RATE)
        camera.update({ROLL_RIGHT})
        camera.update({ROLL_RIGHT})
        assert camera.aim.roll == pytest.approx(-ROLL_RATE)

    def test_opposing_inputs_leave_orientation_untouched(self, camera):
        camera.update({PITCH_UP, PITCH_DOWN, ROLL_LEFT, ROLL_RIGHT})
        assert camera.aim.pitch == 0.0
        assert camera.aim.roll == 0.0
        assert not camera.is_rotating
        assert np.array_equal(camera.transform.rotation, quat_identity())

    def test_no_input_leaves_orientation_untouched(self, camera):
        camera.update({PITCH_UP})
        before = camera.transform.rotation.copy()
        camera.update(set())
        assert np.array_equal(camera.transform.rotation, before)
        assert camera.aim.pitch == pytest.approx(PITCH_RATE)


# =============================================================================
# ORIENTATION
# =============================================================================

class TestOrientation:
    """Tests for how the accumulator drives the camera rotation."""

    def test_single_frame_pitches_forward_up(self, camera):
        camera.update({PITCH_UP})
        expected = quat_rotate(quat_from_axis_angle(AXIS_X, PITCH_RATE), -AXIS_Z)
        assert np.allclose(camera.transform.forward(), expected)
        assert camera.transform.forward()[1] > 0.0

    def test_full_accumulated_angle_reapplied(self, camera):
        camera.update({PITCH_UP})
        camera.update({PITCH_UP})
        # r on the first frame, then 2r on top: 3r total
        expected = quat_rotate(quat_from_axis_angle(AXIS_X, 3 * PITCH_RATE), -AXIS_Z)
        assert np.allclose(camera.transform.forward(), expected)

    def test_roll_keeps_forward(self, camera):
        camera.update({ROLL_LEFT})
        assert np.allclose(camera.transform.forward(), -AXIS_Z)
        angle = math.atan2(camera.transform.right()[1], camera.transform.right()[0])
        assert angle == pytest.approx(ROLL_RATE)


# =============================================================================
# DEBUG MOVEMENT
# =============================================================================

class TestDebugMove:
    """Tests for free-fly translation."""

    def test_forward_moves_along_view(self, camera):
        camera.update({MOVE_FWD})
        assert np.allclose(camera.transform.translation, [0.0, 0.0, -DEBUG_MOVE_RATE])

    def test_directions_sum(self, camera):
        camera.update({MOVE_FWD, MOVE_RIGHT, MOVE_UP})
        assert np.allclose(camera.transform.translation,
                           [DEBUG_MOVE_RATE, DEBUG_MOVE_RATE, -DEBUG_MOVE_RATE])

    def test_opposites_cancel(self, camera):
        camera.update({MOVE_LEFT, MOVE_RIGHT, MOVE_FWD, MOVE_BACK})
        assert np.allclose(camera.transform.translation, [0.0, 0.0, 0.0])

    def test_moves_in_camera_frame(self, camera):
        camera.transform.rotation = quat_from_axis_angle(AXIS_X, math.pi / 2)
        camera.update({MOVE_FWD})
        # Pitched straight up, forward is world +Y
        assert np.allclose(camera.transform.translation, [0.0, DEBUG_MOVE_RATE, 0.0])

    def test_movement_does_not_touch_aim(self, camera):
        camera.update({MOVE_BACK})
        assert camera.aim.pitch == 0.0
        assert np.array_equal(camera.transform.rotation, quat_identity())


# =============================================================================
# RENORMALIZATION AND RAY
# =============================================================================

class TestNormalizeAim:
    """Tests for orientation renormalization."""

    def test_restores_unit_length(self, camera):
        camera.transform.rotation = quat_from_axis_angle(AXIS_X, 0.4) * 1.3
        camera.normalize_aim()
        assert np.linalg.norm(camera.transform.rotation) == pytest.approx(1.0)

    def test_long_session_stays_unit(self, camera):
        for frame in range(2000):
            camera.update({PITCH_UP, ROLL_LEFT} if frame % 3 else {PITCH_DOWN})
            if frame % 4 == 0:
                camera.normalize_aim()
        camera.normalize_aim()
        assert np.linalg.norm(camera.transform.rotation) == pytest.approx(1.0, abs=1e-12)

    def test_ray_follows_pose(self, camera):
        camera.update({MOVE_UP, PITCH_UP})
        ray = camera.ray()
        assert np.allclose(ray.origin, camera.transform.translation)
        assert np.allclose(ray.direction, camera.transform.forward())
        assert ray.max_length == MAX_RADIUS

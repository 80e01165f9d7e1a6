"""
Orbit Aim - World Simulation
Camera aim, ray/sphere hit detection, and the Active/Next/Ghost target ring.
All coordinates: X = right, Y = up, camera looks down -Z.
Quaternions are numpy arrays in (x, y, z, w) order.
"""
import logging
import math
import random
from enum import Enum, auto

import numpy as np
from settings import *

log = logging.getLogger(__name__)


# ── Vector helpers ───────────────────────────────────────

def vec3(x, y, z):
    return np.array([x, y, z], dtype=np.float64)


AXIS_X = vec3(1.0, 0.0, 0.0)
AXIS_Y = vec3(0.0, 1.0, 0.0)
AXIS_Z = vec3(0.0, 0.0, 1.0)


def normalize(v):
    n = np.linalg.norm(v)
    return v / n if n > 1e-12 else v


def reject(v, unit_normal):
    """Component of v perpendicular to unit_normal."""
    return v - unit_normal * float(np.dot(v, unit_normal))


def any_orthonormal(v):
    """Some unit vector perpendicular to unit vector v."""
    other = AXIS_X if abs(v[0]) < 0.9 else AXIS_Y
    return normalize(np.cross(v, other))


# ── Quaternion helpers ───────────────────────────────────

def quat(x, y, z, w):
    return np.array([x, y, z, w], dtype=np.float64)


def quat_identity():
    return quat(0.0, 0.0, 0.0, 1.0)


def quat_mul(a, b):
    """Hamilton product a * b (apply b first, then a)."""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return quat(
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    )


def quat_normalize(q):
    n = np.linalg.norm(q)
    return q / n if n > 1e-12 else quat_identity()


def quat_rotate(q, v):
    """Rotate vector v by unit quaternion q."""
    u = q[:3]
    t = 2.0 * np.cross(u, v)
    return v + q[3] * t + np.cross(u, t)


def quat_from_axis_angle(axis, angle):
    axis = normalize(axis)
    s = math.sin(angle * 0.5)
    return quat(axis[0] * s, axis[1] * s, axis[2] * s, math.cos(angle * 0.5))


def quat_from_euler_yxz(yaw, pitch, roll):
    """Yaw about Y, then pitch about X, then roll about Z (intrinsic)."""
    qy = quat_from_axis_angle(AXIS_Y, yaw)
    qx = quat_from_axis_angle(AXIS_X, pitch)
    qz = quat_from_axis_angle(AXIS_Z, roll)
    return quat_mul(quat_mul(qy, qx), qz)


def quat_from_rotation_arc(src, dst):
    """
    Shortest-arc rotation taking unit vector src onto unit vector dst.
    Antiparallel inputs rotate half a turn about an arbitrary
    perpendicular axis.
    """
    d = float(np.dot(src, dst))
    if d > 1.0 - 1e-6:
        return quat_identity()
    if d < -1.0 + 1e-6:
        return quat_from_axis_angle(any_orthonormal(src), math.pi)
    c = np.cross(src, dst)
    return quat_normalize(quat(c[0], c[1], c[2], 1.0 + d))


def slerp(a, b, t):
    """Spherical interpolation between unit directions a and b."""
    q = quat_from_rotation_arc(a, b)
    angle = 2.0 * math.acos(max(-1.0, min(1.0, q[3])))
    if angle < 1e-9:
        return a.copy()
    return quat_rotate(quat_from_axis_angle(q[:3], angle * t), a)


# ── Projection helpers ──────────────────────────────────

def project_to_screen(point_3d, eye_pos, forward, right, up):
    """
    Project a 3D world point into pixel offsets (sx, sy) relative to the
    screen center, plus its view depth.  Returns None if the point is
    behind the near plane.  sy is positive downward (screen convention).
    """
    delta = point_3d - eye_pos
    z = float(np.dot(delta, forward))
    if z < NEAR_CLIP:
        return None
    x = float(np.dot(delta, right))
    y = float(np.dot(delta, up))
    return (x / z * FOCAL, -y / z * FOCAL, z)


# ── Transform ────────────────────────────────────────────

class Transform:
    """Position + orientation of a camera or target."""

    def __init__(self, translation=None, rotation=None):
        if translation is None:
            translation = vec3(0.0, 0.0, 0.0)
        if rotation is None:
            rotation = quat_identity()
        self.translation = np.array(translation, dtype=np.float64)
        self.rotation = np.array(rotation, dtype=np.float64)

    def local_x(self):
        return normalize(quat_rotate(self.rotation, AXIS_X))

    def local_y(self):
        return normalize(quat_rotate(self.rotation, AXIS_Y))

    def local_z(self):
        return normalize(quat_rotate(self.rotation, AXIS_Z))

    def right(self):
        return self.local_x()

    def up(self):
        return self.local_y()

    def forward(self):
        return -self.local_z()

    def rotate_local(self, q):
        """Apply q in this transform's own frame."""
        self.rotation = quat_mul(self.rotation, q)

    def align(self, main_axis, main_direction, secondary_axis, secondary_direction):
        """
        Rotate so that local main_axis points along main_direction and
        local secondary_axis points as close as possible to
        secondary_direction.  The main constraint always wins.
        """
        main_axis = normalize(main_axis)
        main_direction = normalize(main_direction)
        first = quat_from_rotation_arc(main_axis, main_direction)

        # Twist about main_direction to bring the secondary axis into the
        # plane of main_direction and secondary_direction.
        image = quat_rotate(first, normalize(secondary_axis))
        image_ortho = reject(image, main_direction)
        dir_ortho = reject(normalize(secondary_direction), main_direction)
        if np.linalg.norm(image_ortho) < 1e-6 or np.linalg.norm(dir_ortho) < 1e-6:
            self.rotation = first
            return
        a = normalize(image_ortho)
        b = normalize(dir_ortho)
        twist = math.atan2(float(np.dot(np.cross(a, b), main_direction)),
                           float(np.dot(a, b)))
        second = quat_from_axis_angle(main_direction, twist)
        self.rotation = quat_mul(second, first)


# ── Camera ───────────────────────────────────────────────

class CameraAimState:
    """Pitch/roll integrated over every frame since spawn."""

    def __init__(self):
        self.pitch = 0.0
        self.roll = 0.0


class Camera:
    def __init__(self, position=CAMERA_START_POS,
                 pitch_rate=PITCH_RATE, roll_rate=ROLL_RATE):
        self.transform = Transform(vec3(*position))
        self.aim = CameraAimState()
        self.pitch_rate = pitch_rate
        self.roll_rate = roll_rate
        self.is_rotating = False

    def update(self, actions):
        """Process one frame of logical input actions."""
        self._debug_move(actions)

        pitch_total = 0.0
        roll_total = 0.0
        if PITCH_UP in actions:
            pitch_total += self.pitch_rate
        if PITCH_DOWN in actions:
            pitch_total -= self.pitch_rate
        if ROLL_LEFT in actions:
            roll_total += self.roll_rate
        if ROLL_RIGHT in actions:
            roll_total -= self.roll_rate

        self.aim.pitch += pitch_total
        self.aim.roll += roll_total

        # The whole accumulated angle is applied, not just this frame's delta
        self.is_rotating = pitch_total != 0.0 or roll_total != 0.0
        if self.is_rotating:
            self.transform.rotate_local(
                quat_from_euler_yxz(0.0, self.aim.pitch, self.aim.roll))

    def _debug_move(self, actions):
        """Free-fly along the camera's own axes."""
        mov_r = 0.0
        mov_u = 0.0
        mov_f = 0.0
        if MOVE_UP in actions:
            mov_u += DEBUG_MOVE_RATE
        if MOVE_DOWN in actions:
            mov_u -= DEBUG_MOVE_RATE
        if MOVE_RIGHT in actions:
            mov_r += DEBUG_MOVE_RATE
        if MOVE_LEFT in actions:
            mov_r -= DEBUG_MOVE_RATE
        if MOVE_FWD in actions:
            mov_f += DEBUG_MOVE_RATE
        if MOVE_BACK in actions:
            mov_f -= DEBUG_MOVE_RATE

        if mov_r != 0.0 or mov_u != 0.0 or mov_f != 0.0:
            t = self.transform
            t.translation = (t.translation
                             + t.right() * mov_r
                             + t.up() * mov_u
                             + t.forward() * mov_f)

    def normalize_aim(self):
        """Renormalize orientation to keep drift out of the quaternion."""
        self.transform.rotation = quat_normalize(self.transform.rotation)

    def ray(self):
        return Ray(self.transform.translation, self.transform.forward(), MAX_RADIUS)


# ── Collision ────────────────────────────────────────────

class BoundingSphere:
    def __init__(self, center, radius):
        self.center = np.array(center, dtype=np.float64)
        self.radius = radius


class Ray:
    def __init__(self, origin, direction, max_length):
        self.origin = np.array(origin, dtype=np.float64)
        self.direction = normalize(np.array(direction, dtype=np.float64))
        self.max_length = max_length


def ray_sphere_intersect(ray, sphere):
    """
    Test whether the ray, cut off at ray.max_length, touches the sphere.
    The closest point to the center is searched on [0, max_length].
    """
    offset = sphere.center - ray.origin
    t = float(np.dot(offset, ray.direction))
    t = max(0.0, min(ray.max_length, t))
    closest = ray.origin + ray.direction * t
    miss = sphere.center - closest
    return float(np.dot(miss, miss)) <= sphere.radius * sphere.radius


# ── Targets ──────────────────────────────────────────────

class TargetState(Enum):
    """Slot a target occupies in the ring."""
    ACTIVE = auto()     # hittable
    NEXT = auto()       # shown faded, pre-oriented toward the ghost
    GHOST = auto()      # hidden, future next


class Material(Enum):
    BRIGHT = auto()
    FADED = auto()


class Target:
    """A marker parked on the target shell."""

    def __init__(self, position, state):
        self.transform = Transform(position)
        self.state = state
        self.material = Material.BRIGHT if state is TargetState.ACTIVE else Material.FADED
        self.visible = state is not TargetState.GHOST
        self.alive = True

    @property
    def position(self):
        return self.transform.translation

    @property
    def bounding(self):
        return BoundingSphere(self.position, TARGET_RADIUS)

    def face_center(self):
        """Point local X at the shell's center."""
        dir_to_center = -normalize(self.position)
        self.transform.rotation = quat_from_rotation_arc(AXIS_X, dir_to_center)

    def orient_toward(self, aim_point):
        """Keep local X on the center and roll local Y toward aim_point."""
        dir_to_center = -normalize(self.position)
        self.transform.align(AXIS_X, dir_to_center, AXIS_Y, aim_point - self.position)


class SpawnPlacer:
    """Picks spots on the target shell and builds targets there."""

    def __init__(self, rng=None):
        self.rng = rng if rng is not None else random.Random()

    def random_direction(self):
        """
        Unit vector from a cube sample.  This is biased toward the cube's
        corners, not uniform over the sphere.
        """
        while True:
            v = vec3(self.rng.uniform(-1.0, 1.0),
                     self.rng.uniform(-1.0, 1.0),
                     self.rng.uniform(-1.0, 1.0))
            if np.linalg.norm(v) > 1e-12:
                return normalize(v)

    def sample(self):
        """Raw candidate center on the shell."""
        return self.random_direction() * TARGET_DISTANCE

    def avoid_deadzone(self, candidate, deadzone):
        """
        Nudge a candidate away from deadzone once, if it lies within it.
        The nudge is a single small rotation; it may not fully clear the
        deadzone.
        """
        between = candidate - deadzone
        dist_sq = float(np.dot(between, between))
        log.debug("deadzone dist² %.3f before adjustment", dist_sq)
        if dist_sq >= DEADZONE_RADIUS_SQUARED:
            return candidate

        axis = np.cross(between, candidate)
        if np.linalg.norm(axis) < 1e-12:
            axis = any_orthonormal(normalize(candidate))
        rot = quat_from_axis_angle(axis, DEADZONE_ADJ_THETA)
        adjusted = quat_rotate(rot, candidate)

        moved = adjusted - deadzone
        log.debug("deadzone dist² %.3f after adjustment",
                  float(np.dot(moved, moved)))
        return adjusted

    def place(self, state, aim_point=None, deadzone=None):
        """Create a new target in the given state.  Returns the Target."""
        center = self.sample()
        if deadzone is not None:
            center = self.avoid_deadzone(center, deadzone)

        target = Target(center, state)
        target.face_center()
        if aim_point is not None:
            target.orient_toward(aim_point)

        log.debug("spawned %s target at (%.2f, %.2f, %.2f)",
                  state.name, center[0], center[1], center[2])
        return target


class RingInvariantError(RuntimeError):
    """The ring no longer holds exactly one Active, Next and Ghost target."""


class TargetRing:
    """
    Three-slot target cycle.  A hit destroys Active, Next moves up to
    Active, Ghost moves up to Next, and a fresh Ghost is placed.
    """

    def __init__(self, placer):
        self.placer = placer

        # Seed the chain back to front so each target avoids the one ahead
        self.ghost = placer.place(TargetState.GHOST)
        self.next = placer.place(TargetState.NEXT,
                                 aim_point=self.ghost.position,
                                 deadzone=self.ghost.position)
        self.active = placer.place(TargetState.ACTIVE,
                                   aim_point=self.next.position,
                                   deadzone=self.next.position)

    def targets(self):
        """All live targets, Active first."""
        return [t for t in (self.active, self.next, self.ghost) if t is not None]

    def is_hit(self, ray):
        """Only the Active target is hittable."""
        if self.active is None:
            return False
        return ray_sphere_intersect(ray, self.active.bounding)

    def aim_check(self, camera):
        """
        Cast the camera's aim ray at the Active target and advance the
        ring on a hit.  Returns the destroyed target, or None.
        """
        if camera is None:
            return None
        if not self.is_hit(camera.ray()):
            return None
        return self.advance()

    def _check_slots(self):
        for name, expected in (("active", TargetState.ACTIVE),
                               ("next", TargetState.NEXT),
                               ("ghost", TargetState.GHOST)):
            target = getattr(self, name)
            if target is None:
                raise RingInvariantError(f"{name.capitalize()} target missing!")
            if target.state is not expected:
                raise RingInvariantError(
                    f"{name} slot holds a {target.state.name} target")

    def advance(self):
        """Run the promotion transition.  Returns the destroyed target."""
        self._check_slots()

        hit = self.active
        hit.alive = False

        # Old next becomes active and un-fades
        promoted = self.next
        promoted.state = TargetState.ACTIVE
        promoted.material = Material.BRIGHT

        # Old ghost becomes next and shows itself
        recycled = self.ghost
        recycled.state = TargetState.NEXT
        recycled.visible = True

        new_ghost = self.placer.place(TargetState.GHOST,
                                      deadzone=recycled.position)

        # Point new next at new ghost
        recycled.orient_toward(new_ghost.position)

        self.active = promoted
        self.next = recycled
        self.ghost = new_ghost
        return hit


# ── World Manager ────────────────────────────────────────

class World:
    def __init__(self, seed=None):
        self.rng = random.Random(seed)
        self.camera = Camera()
        self.ring = TargetRing(SpawnPlacer(self.rng))
        self.effects = []          # list of {'pos', 'timer', 'max_time'}
        self.frame = 0

    def update(self, dt, actions):
        """Advance one frame: input, then the aim check."""
        self.frame += 1

        if self.camera is not None:
            self.camera.update(actions)

        destroyed = self.ring.aim_check(self.camera)
        if destroyed is not None:
            log.info("frame %d: target hit at (%.2f, %.2f, %.2f)",
                     self.frame, *destroyed.position)
            self.effects.append({
                'pos': destroyed.position.copy(),
                'timer': EFFECT_DURATION,
                'max_time': EFFECT_DURATION,
            })

        for fx in self.effects:
            fx['timer'] -= dt
        self.effects = [fx for fx in self.effects if fx['timer'] > 0]

    def fixed_update(self):
        """Coarse fixed-rate tick, run between frames."""
        if self.camera is not None:
            self.camera.normalize_aim()

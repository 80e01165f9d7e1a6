"""
Orbit Aim - Renderer
All drawing goes through here: targets, axes gizmos, the pointer
toward the active target, hit effects, crosshair and HUD.
"""
import math
import numpy as np
import pygame
from settings import *
from world import Material, project_to_screen, slerp


class Renderer:
    def __init__(self, screen):
        self.screen = screen
        self.cx = SCREEN_WIDTH // 2
        self.cy = SCREEN_HEIGHT // 2

        # Translucent layer for faded targets and effects
        self.overlay = pygame.Surface(
            (SCREEN_WIDTH, SCREEN_HEIGHT), pygame.SRCALPHA)

        self.font_small = pygame.font.SysFont("consolas", 18)

    # ── Coordinate helpers ───────────────────────────────

    def _to_screen(self, sx, sy):
        """Convert center-relative coords to screen coords."""
        return (int(self.cx + sx), int(self.cy + sy))

    def _on_screen(self, sx, sy, margin=0):
        return (abs(sx) <= self.cx + margin) and (abs(sy) <= self.cy + margin)

    # ── Main draw call ───────────────────────────────────

    def draw(self, world):
        """Draw everything for one frame."""
        self.screen.fill(COL_BACKGROUND)
        self.overlay.fill((0, 0, 0, 0))

        camera = world.camera
        if camera is None:
            return
        cam = camera.transform
        view = (cam.translation, cam.forward(), cam.right(), cam.up())

        targets = world.ring.targets()
        self._draw_targets(targets, *view)
        self._draw_axes(targets, *view)
        self._draw_effects(world.effects, *view)
        self._draw_pointer(world.ring.active, *view)

        self.screen.blit(self.overlay, (0, 0))
        self._draw_crosshair()
        self._draw_hud(world)

    # ── Targets ──────────────────────────────────────────

    def _draw_targets(self, targets, eye, forward, right, up):
        """Draw visible targets as shaded discs, far to near."""
        drawn = []
        for target in targets:
            if not target.visible:
                continue
            proj = project_to_screen(target.position, eye, forward, right, up)
            if proj is None:
                continue
            drawn.append((proj, target))
        drawn.sort(key=lambda item: -item[0][2])

        for (sx, sy, z), target in drawn:
            px_r = max(2, int(TARGET_RADIUS / z * FOCAL))
            if not self._on_screen(sx, sy, margin=px_r):
                continue
            center = self._to_screen(sx, sy)
            if target.material is Material.BRIGHT:
                pygame.draw.circle(self.screen, COL_BRIGHT, center, px_r)
                pygame.draw.circle(self.screen, COL_OUTLINE, center, px_r, 2)
            else:
                pygame.draw.circle(self.overlay, (*COL_FADED, 150), center, px_r)

            # Facing marker: where local X (toward the shell center) points
            tip = target.position + target.transform.local_x() * TARGET_RADIUS
            tip_proj = project_to_screen(tip, eye, forward, right, up)
            if tip_proj is not None:
                pygame.draw.line(self.screen, COL_OUTLINE, center,
                                 self._to_screen(tip_proj[0], tip_proj[1]), 2)

    # ── Axes gizmos ──────────────────────────────────────

    def _draw_axes(self, targets, eye, forward, right, up):
        """Local X/Y/Z axes for every target, hidden ones included."""
        for target in targets:
            origin = project_to_screen(target.position, eye, forward, right, up)
            if origin is None:
                continue
            start = self._to_screen(origin[0], origin[1])
            t = target.transform
            for axis, col in ((t.local_x(), COL_AXIS_X),
                              (t.local_y(), COL_AXIS_Y),
                              (t.local_z(), COL_AXIS_Z)):
                end = project_to_screen(target.position + axis * AXES_LENGTH,
                                        eye, forward, right, up)
                if end is None:
                    continue
                pygame.draw.line(self.overlay, (*col, 200), start,
                                 self._to_screen(end[0], end[1]), 1)

    # ── Pointer ──────────────────────────────────────────

    def _draw_pointer(self, active, eye, forward, right, up):
        """Arrow from just off the crosshair toward the active target."""
        if active is None:
            return
        base_dir = slerp(slerp(forward, right, POINTER_RIGHT_SLERP),
                         -up, POINTER_DOWN_SLERP)
        base = project_to_screen(eye + base_dir, eye, forward, right, up)
        if base is None:
            return
        start = np.array(self._to_screen(base[0], base[1]), dtype=np.float64)

        tip = project_to_screen(active.position, eye, forward, right, up)
        if tip is not None:
            end = np.array(self._to_screen(tip[0], tip[1]), dtype=np.float64)
        else:
            # Behind us: point along the target's screen-plane direction
            delta = active.position - eye
            heading = np.array([np.dot(delta, right), -np.dot(delta, up)])
            norm = np.linalg.norm(heading)
            if norm < 1e-9:
                return
            end = start + heading / norm * 80.0
        self._draw_arrow(start, end, COL_POINTER)

    def _draw_arrow(self, start, end, col):
        shaft = end - start
        length = float(np.linalg.norm(shaft))
        if length < 1.0:
            return
        pygame.draw.line(self.screen, col, tuple(start), tuple(end), 2)

        # Arrowhead
        d = shaft / length
        side = np.array([-d[1], d[0]])
        head = min(12.0, length * 0.3)
        left = end - d * head + side * head * 0.5
        rgt = end - d * head - side * head * 0.5
        pygame.draw.polygon(self.screen, col,
                            [tuple(end), tuple(left), tuple(rgt)])

    # ── Effects ──────────────────────────────────────────

    def _draw_effects(self, effects, eye, forward, right, up):
        """Expanding, fading rings where targets were destroyed."""
        for fx in effects:
            proj = project_to_screen(fx['pos'], eye, forward, right, up)
            if proj is None:
                continue
            sx, sy, z = proj
            progress = fx['timer'] / fx['max_time']      # 1.0 → 0.0
            radius = EFFECT_BASE_RADIUS * (1.0 - progress) + TARGET_RADIUS
            px_r = max(3, int(radius / z * FOCAL))
            if not self._on_screen(sx, sy, margin=px_r):
                continue
            alpha = max(0, min(255, int(255 * progress)))
            pygame.draw.circle(self.overlay, (*COL_HIT, alpha),
                               self._to_screen(sx, sy), px_r, 3)

    # ── Crosshair ────────────────────────────────────────

    def _draw_crosshair(self):
        """Downward-facing circular sector at a fixed depth."""
        r = CROSSHAIR_RADIUS / CROSSHAIR_DEPTH * FOCAL
        half = CROSSHAIR_SWEEP / 2.0
        points = [(self.cx, self.cy)]
        steps = 16
        for i in range(steps + 1):
            a = -half + CROSSHAIR_SWEEP * i / steps
            points.append((self.cx + r * math.sin(a),
                           self.cy + r * math.cos(a)))
        pygame.draw.polygon(self.screen, COL_CROSSHAIR, points)

    # ── HUD ──────────────────────────────────────────────

    def _draw_hud(self, world):
        """Aim angles, camera position and range to the active target."""
        camera = world.camera
        pos = camera.transform.translation
        lines = [
            f"PITCH: {math.degrees(camera.aim.pitch):7.1f}°",
            f"ROLL:  {math.degrees(camera.aim.roll):7.1f}°",
            f"POS:   ({pos[0]:.2f}, {pos[1]:.2f}, {pos[2]:.2f})",
        ]
        active = world.ring.active
        if active is not None:
            dist = float(np.linalg.norm(active.position - pos))
            lines.append(f"TGT:   {dist:.1f}")

        for i, line in enumerate(lines):
            txt = self.font_small.render(line, True, COL_HUD_TEXT)
            self.screen.blit(txt, (20, 20 + i * 22))

"""
Orbit Aim - Main
Entry point and game loop.

Requirements:
    pip install pygame numpy
"""
import logging
import sys
import pygame
from settings import *
from world import World, RingInvariantError
from renderer import Renderer

log = logging.getLogger("orbit_aim")


def setup_logging(level=LOG_LEVEL):
    """Send log records to the console."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def resolve_bindings(bindings=KEY_BINDINGS):
    """Map logical actions to pygame key codes."""
    return {action: pygame.key.key_code(name)
            for action, name in bindings.items()}


def read_actions(keys, key_codes):
    """Set of logical actions whose key is held this frame."""
    return {action for action, code in key_codes.items() if keys[code]}


def main():
    setup_logging()
    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
    pygame.display.set_caption(WINDOW_TITLE)
    clock = pygame.time.Clock()

    key_codes = resolve_bindings()
    world = World()
    renderer = Renderer(screen)
    log.info("ring seeded, active target at (%.2f, %.2f, %.2f)",
             *world.ring.active.position)

    fixed_acc = 0.0
    status = 0
    running = True
    while running:
        dt = clock.tick(FPS) / 1000.0
        dt = min(dt, MAX_FRAME_DT)  # clamp to avoid spiral of death

        # ── Events ───────────────────────────────────────
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                running = False

        # ── Update ───────────────────────────────────────
        actions = read_actions(pygame.key.get_pressed(), key_codes)
        try:
            world.update(dt, actions)
        except RingInvariantError:
            log.exception("target ring broken, shutting down")
            status = 1
            break

        # ── Fixed tick ───────────────────────────────────
        fixed_acc += dt
        while fixed_acc >= FIXED_DT:
            world.fixed_update()
            fixed_acc -= FIXED_DT

        # ── Draw ─────────────────────────────────────────
        renderer.draw(world)
        pygame.display.flip()

    pygame.quit()
    sys.exit(status)


if __name__ == "__main__":
    main()

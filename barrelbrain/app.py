"""Window, drawing and main loop of the barrel-dodging game."""

from __future__ import annotations

import argparse
import logging
import random
import time
from collections.abc import Sequence

import pygame

from barrelbrain.simulation import GenerationStats, Simulation
from barrelbrain.world import Action, Entity, GameSettings, GuiSettings, Player, Settings

BACKGROUND_COLOR = (0.1, 0.1, 0.15)
BOARD_COLOR = (0.0, 0.0, 0.0)
LINE_COLOR = (240 / 255, 82 / 255, 156 / 255)
BARREL_COLOR = (0.7, 0.4, 0.4)
LEVEL_COLORS = (
    (0.2, 0.4, 1.0),
    (0.3, 0.5, 0.8),
    (0.5, 0.2, 0.7),
    (0.7, 0.8, 0.7),
    (0.9, 0.2, 0.5),
    (0.5, 0.7, 0.2),
)
CORPSE_VISIBLE_STEPS = 500
MAX_STEPS_PER_FRAME = 25

Color = tuple[float, float, float]


def _rgb(color: Color) -> tuple[int, int, int]:
    red, green, blue = (max(0, min(255, round(c * 255))) for c in color)
    return red, green, blue


def board_to_screen(x: float, y: float, gui: GuiSettings) -> tuple[float, float]:
    """Map board coordinates (origin at centre, y up) to window pixels."""
    return (
        gui.window_width / 2 + x * gui.scale,
        gui.window_height / 2 - y * gui.scale,
    )


def screen_to_board(x: float, y: float, gui: GuiSettings) -> tuple[int, int] | None:
    """Map window pixels to board coordinates, or None outside the board."""
    dx = x - gui.window_width / 2
    dy = y - gui.window_height / 2
    if abs(dx) > gui.scale * gui.board_width / 2:
        return None
    if abs(dy) > gui.scale * gui.board_height / 2:
        return None
    return int(dx / gui.scale), int(-dy / gui.scale)


def player_color(player: Player, step: int) -> Color | None:
    """Colour of a player by level, dimmed when dead; None once it is gone."""
    if not player.alive and step - player.dead_at_step > CORPSE_VISIBLE_STEPS:
        return None
    color = LEVEL_COLORS[player.level]
    if not player.alive:
        red, green, blue = (c * 0.5 for c in color)
        return red, green, blue
    return color


def _entity_rect(entity: Entity, gui: GuiSettings) -> pygame.Rect:
    left, top = board_to_screen(
        entity.offset_x - entity.width / 2, entity.offset_y + entity.height / 2, gui
    )
    return pygame.Rect(
        round(left),
        round(top),
        round(entity.width * gui.scale),
        round(entity.height * gui.scale),
    )


def render(surface: pygame.Surface, simulation: Simulation, gui: GuiSettings) -> None:
    """Draw the board, girders, barrels and players onto a surface."""
    surface.fill(_rgb(BACKGROUND_COLOR))

    left, top = board_to_screen(-gui.board_width / 2, gui.board_height / 2, gui)
    board = pygame.Rect(
        round(left),
        round(top),
        round(gui.board_width * gui.scale),
        round(gui.board_height * gui.scale),
    )
    pygame.draw.rect(surface, _rgb(BOARD_COLOR), board)

    for segment in simulation.line_segments:
        pygame.draw.line(
            surface,
            _rgb(LINE_COLOR),
            board_to_screen(segment.x_start, segment.y_start, gui),
            board_to_screen(segment.x_end, segment.y_end, gui),
        )

    for barrel in simulation.barrels:
        pygame.draw.rect(surface, _rgb(BARREL_COLOR), _entity_rect(barrel, gui))

    for player in simulation.players:
        color = player_color(player, simulation.step)
        if color is None:
            continue
        pygame.draw.rect(surface, _rgb(color), _entity_rect(player, gui))


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return value


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    """Parse the command line."""
    parser = argparse.ArgumentParser(
        prog="barrelbrain",
        description="Evolve neural agents that climb girders and dodge barrels.",
    )
    parser.add_argument(
        "--human", action="store_true", help="play yourself with the arrow keys and space"
    )
    parser.add_argument(
        "--agents",
        type=_positive_int,
        default=GameSettings.num_agents,
        help="number of agents per generation",
    )
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    return parser.parse_args(argv)


def _pressed_actions() -> frozenset[Action]:
    keys = pygame.key.get_pressed()
    actions = set()
    if keys[pygame.K_LEFT]:
        actions.add(Action.LEFT)
    if keys[pygame.K_RIGHT]:
        actions.add(Action.RIGHT)
    if keys[pygame.K_SPACE]:
        actions.add(Action.JUMP)
    return frozenset(actions)


def _report(stats: GenerationStats) -> None:
    print(f"===\nDone with generation {stats.generation}")
    print(
        "Best score in generation (best total): "
        f"{stats.best_score:g} ({stats.best_score_overall:g})"
    )
    print(
        "Best level in generation (best total): "
        f"{stats.best_level} ({stats.best_level_overall})"
    )
    print("===")


def main(argv: Sequence[str] | None = None) -> int:
    """Open the game window and run until it is closed."""
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    settings = Settings(game=GameSettings(num_agents=args.agents))
    gui = settings.gui
    simulation = Simulation(settings, args.human, random.Random(args.seed))
    step_seconds = 1.0 / settings.game.physics_update_rate_hz

    pygame.init()
    try:
        screen = pygame.display.set_mode((gui.window_width, gui.window_height))
        pygame.display.set_caption("Barrel Brain")

        last_physics = time.perf_counter()
        last_fps = last_physics
        frames = 0
        running = True

        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    position = screen_to_board(*event.pos, gui)
                    if position is not None:
                        print(f"x: {position[0]} y: {position[1]}")

            now = time.perf_counter()
            actions = _pressed_actions() if args.human else frozenset()
            steps = 0
            while now - last_physics > step_seconds:
                stats = simulation.update(actions)
                if stats is not None:
                    _report(stats)
                last_physics += step_seconds
                steps += 1
                if steps >= MAX_STEPS_PER_FRAME:
                    last_physics = now
                    break

            frames += 1
            since_fps = now - last_fps
            if since_fps > 1.0:
                print(
                    f"FPS / frame rate: {frames / since_fps:.1f} / "
                    f"{1000 * since_fps / frames:.2f}ms"
                )
                last_fps = now
                frames = 0

            render(screen, simulation, gui)
            pygame.display.flip()
    finally:
        pygame.quit()
    return 0
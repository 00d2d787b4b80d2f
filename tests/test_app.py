import random

import pytest
import pygame

from barrelbrain.app import (
    LEVEL_COLORS,
    board_to_screen,
    parse_args,
    player_color,
    render,
    screen_to_board,
)
from barrelbrain.simulation import Simulation
from barrelbrain.world import GameSettings, GuiSettings, Player, Settings


def _small_gui():
    return GuiSettings(window_width=320, window_height=300, scale=1.0)


def test_window_centre_is_board_origin():
    gui = GuiSettings()
    assert screen_to_board(gui.window_width / 2, gui.window_height / 2, gui) == (0, 0)


@pytest.mark.parametrize("point", [(10, -20), (-100, 120), (0, 0), (37, 5)])
def test_board_screen_round_trip(point):
    gui = GuiSettings()
    assert screen_to_board(*board_to_screen(*point, gui), gui) == point


def test_board_y_axis_points_up():
    gui = GuiSettings()
    _, lower = board_to_screen(0, -10, gui)
    _, upper = board_to_screen(0, 10, gui)
    assert upper < lower


def test_click_outside_board_is_ignored():
    gui = GuiSettings()
    assert screen_to_board(0, 0, gui) is None
    assert screen_to_board(gui.window_width, gui.window_height / 2, gui) is None


def test_living_player_colored_by_level():
    for level, expected in enumerate(LEVEL_COLORS):
        player = Player(alive=True, level=level)
        assert player_color(player, 0) == expected


def test_dead_player_is_dimmed():
    player = Player(alive=False, level=2, dead_at_step=100)
    color = player_color(player, 150)
    assert color == pytest.approx(tuple(c / 2 for c in LEVEL_COLORS[2]))


def test_dead_player_disappears_after_500_steps():
    player = Player(alive=False, level=0, dead_at_step=0)
    assert player_color(player, 500) is not None
    assert player_color(player, 501) is None


def test_render_draws_board_lines_and_barrels():
    gui = _small_gui()
    settings = Settings(game=GameSettings(num_agents=2), gui=gui)
    simulation = Simulation(settings, False, random.Random(5))
    simulation.advance()
    surface = pygame.Surface((gui.window_width, gui.window_height))

    render(surface, simulation, gui)

    corner = surface.get_at((0, 0))
    assert corner.b > corner.r

    empty_board = board_to_screen(-100, 120, gui)
    assert tuple(surface.get_at((round(empty_board[0]), round(empty_board[1]))))[:3] == (
        0,
        0,
        0,
    )

    line_point = board_to_screen(0, 72, gui)
    line = surface.get_at((round(line_point[0]), round(line_point[1])))
    assert line.r > line.b > line.g

    barrel = simulation.barrels[0]
    barrel_point = board_to_screen(barrel.offset_x, barrel.offset_y, gui)
    drawn = surface.get_at((round(barrel_point[0]), round(barrel_point[1])))
    assert drawn.r > drawn.g


def test_parse_args_defaults():
    args = parse_args([])
    assert args.human is False
    assert args.agents == 500
    assert args.seed is None


def test_parse_args_options():
    args = parse_args(["--human", "--agents", "3", "--seed", "7"])
    assert (args.human, args.agents, args.seed) == (True, 3, 7)


def test_parse_args_rejects_empty_population():
    with pytest.raises(SystemExit):
        parse_args(["--agents", "0"])
import random

import pytest

from barrelbrain.simulation import GenerationStats, Simulation, brain_inputs
from barrelbrain.world import (
    PLAYER_START_X,
    Action,
    Entity,
    GameSettings,
    LineSegment,
    Player,
    Settings,
)


def _settings(num_agents=4):
    return Settings(game=GameSettings(num_agents=num_agents))


def _sim(is_human=False, seed=1):
    return Simulation(_settings(), is_human, random.Random(seed))


def _player(**kwargs):
    values = dict(offset_x=-50, offset_y=-100, width=8, height=8, alive=True)
    values.update(kwargs)
    return Player(**values)


def test_brain_inputs_without_surroundings():
    player = _player(is_on_ground=True, level=5)
    inputs = brain_inputs(player, [], [])
    assert len(inputs) == 9
    assert inputs[0] == 1.0
    assert inputs[1] == pytest.approx(player.offset_x / 100)
    assert inputs[2] == pytest.approx(player.offset_y / 100)
    assert inputs[3] == pytest.approx(1.0)
    assert inputs[4:] == pytest.approx([1.0, 0.0, 1.0, 0.0, 1.0])


def test_brain_inputs_in_air():
    inputs = brain_inputs(_player(is_on_ground=False), [], [])
    assert inputs[0] == 0.0


def test_brain_inputs_ceiling_uses_nearest_segment_above():
    player = _player()
    segments = [
        LineSegment(-100, -130, 100, -130),
        LineSegment(-100, -70, 100, -70),
        LineSegment(-100, -110, 100, -110),
    ]
    inputs = brain_inputs(player, segments, [])
    assert inputs[8] == pytest.approx(30 / 100)


def test_brain_inputs_ceiling_ignores_segments_beside_player():
    player = _player()
    segments = [LineSegment(50, -70, 100, -70)]
    assert brain_inputs(player, segments, [])[8] == pytest.approx(1.0)


def test_brain_inputs_reports_nearest_barrel_only_in_first_slot():
    player = _player()
    near = Entity(offset_x=player.offset_x, offset_y=player.offset_y + 10)
    far = Entity(offset_x=player.offset_x + 50, offset_y=player.offset_y)
    inputs = brain_inputs(player, [], [far, near])
    assert inputs[4] == pytest.approx(10 / 100)
    assert inputs[5] == pytest.approx(0.5)
    assert inputs[6:8] == pytest.approx([1.0, 0.0])


def test_brain_inputs_ignores_barrels_out_of_range():
    player = _player()
    barrel = Entity(offset_x=player.offset_x + 200, offset_y=player.offset_y)
    inputs = brain_inputs(player, [], [barrel])
    assert inputs[4:6] == pytest.approx([1.0, 0.0])


def test_machine_mode_starts_everyone_alive():
    sim = _sim()
    assert len(sim.players) == 4
    assert len(sim.genetic.population) == 4
    assert sim.num_alive() == 4
    assert sim.generation == 1


def test_human_mode_has_one_live_player():
    sim = _sim(is_human=True)
    assert len(sim.players) == 4
    assert sim.num_alive() == 1
    assert sim.players[0].alive


def test_advance_spawns_barrel_and_counts_step():
    sim = _sim()
    sim.advance()
    assert sim.step == 1
    assert len(sim.barrels) == 1


@pytest.mark.parametrize(
    "actions, dx",
    [({Action.RIGHT}, 1), ({Action.LEFT}, -1), (set(), 0)],
)
def test_human_actions_move_first_player(actions, dx):
    sim = _sim(is_human=True)
    sim.advance(frozenset(actions))
    assert sim.players[0].offset_x == PLAYER_START_X + dx


def test_same_seed_gives_same_run():
    first = _sim(seed=3)
    second = _sim(seed=3)
    for _ in range(60):
        first.advance()
        second.advance()
    assert [(p.offset_x, p.offset_y) for p in first.players] == [
        (p.offset_x, p.offset_y) for p in second.players
    ]


def test_level_cull_kills_low_players():
    sim = _sim()
    sim.step = 2001
    sim._previous_positions = [(10_000, 10_000)] * len(sim.players)
    assert sim.cull() == 4
    assert sim.num_alive() == 0


def test_no_move_cull_kills_only_idle_players():
    sim = _sim()
    sim.players[0].offset_x += 20
    sim.step = 201
    assert sim.cull() == 3
    assert sim.players[0].alive
    assert sim.num_alive() == 1


def test_cull_does_nothing_for_humans():
    sim = _sim(is_human=True)
    sim.step = 5000
    assert sim.cull() == 0
    assert sim.num_alive() == 1


def test_end_generation_reports_and_resets():
    sim = _sim()
    for player, score, level in zip(sim.players, [5, 40, 10, 0], [0, 2, 1, 0]):
        player.score = score
        player.level = level
        player.alive = False
    sim.advance()
    stats = sim.end_generation()
    assert stats == GenerationStats(1, 40.0, 40.0, 2, 2)
    assert sim.generation == 2
    assert sim.step == 0
    assert len(sim.barrels) == 0
    assert sim.num_alive() == 4
    assert sim.genetic.population[0].fitness == 40.0


def test_overall_bests_persist_between_generations():
    sim = _sim()
    sim.players[1].score = 40
    sim.players[1].level = 3
    sim.end_generation()
    stats = sim.end_generation()
    assert stats.generation == 2
    assert stats.best_score == 0.0
    assert stats.best_score_overall == 40.0
    assert stats.best_level == 0
    assert stats.best_level_overall == 3


def test_update_returns_none_while_players_live():
    sim = _sim()
    assert sim.update() is None
    assert sim.step == 1


def test_update_ends_round_when_everyone_is_dead():
    sim = _sim()
    for player in sim.players:
        player.alive = False
    stats = sim.update()
    assert isinstance(stats, GenerationStats)
    assert stats.generation == 1
    assert sim.generation == 2
    assert sim.num_alive() == 4
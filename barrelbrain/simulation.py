"""One run of the game: agents, barrels, culling and evolution between rounds."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass

from barrelbrain.genetic import GeneticAlgorithm
from barrelbrain.neural_net import NeuralNet
from barrelbrain.world import (
    BARREL_CAPACITY,
    Action,
    CircularBuffer,
    Entity,
    LineSegment,
    Player,
    Settings,
    build_line_segments,
    game_logics,
    init_players,
    jump,
    move_left,
    move_right,
    physics,
)

logger = logging.getLogger(__name__)

PLAYER_SIZE = 8
SENSE_RANGE = 100.0
NUM_LEVELS = 5
LEVEL_CULL_INTERVAL = 2000
NO_MOVE_CULL_INTERVAL = 200
NO_MOVE_DISTANCE = 10.0


def _half(value: int) -> int:
    """Half of an integer, rounded towards zero."""
    return -((-value) // 2) if value < 0 else value // 2


@dataclass(frozen=True)
class GenerationStats:
    """Best results of a finished round and of all rounds so far."""

    generation: int
    best_score: float
    best_score_overall: float
    best_level: int
    best_level_overall: int


def brain_inputs(
    player: Player, line_segments: Iterable[LineSegment], barrels: Iterable[Entity]
) -> list[float]:
    """Normalised sensor readings that a player's network receives."""
    half_width = _half(player.width)

    distance_ceiling = SENSE_RANGE
    for segment in line_segments:
        if segment.y_start < player.offset_y:
            continue
        if (
            segment.x_start <= player.offset_x + half_width
            and segment.x_end >= player.offset_x - half_width
        ):
            distance_ceiling = min(
                distance_ceiling, float(segment.y_start - player.offset_y)
            )

    nearest_distance = SENSE_RANGE
    nearest_angle = 0.0
    for barrel in barrels:
        dx = barrel.offset_x - player.offset_x
        dy = barrel.offset_y - player.offset_y
        distance = math.hypot(dx, dy)
        if distance < nearest_distance:
            nearest_distance = distance
            nearest_angle = math.atan2(dy, dx)

    # The second barrel slot is never filled; it always reads as out of range.
    second_distance = SENSE_RANGE
    second_angle = 0.0

    return [
        1.0 if player.is_on_ground else 0.0,
        player.offset_x / 100.0,
        player.offset_y / 100.0,
        player.level / NUM_LEVELS,
        nearest_distance / SENSE_RANGE,
        nearest_angle / math.pi,
        second_distance / SENSE_RANGE,
        second_angle / math.pi,
        distance_ceiling / SENSE_RANGE,
    ]


class Simulation:
    """The game state together with the brains and the evolution driving them."""

    def __init__(
        self,
        settings: Settings | None = None,
        is_human: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        self.is_human = is_human
        self.rng = rng if rng is not None else random.Random()

        brain = self.settings.brain
        assert brain.num_hidden is not None
        self.net = NeuralNet(brain.num_inputs, brain.num_hidden, brain.num_outputs)
        self.genetic = GeneticAlgorithm(
            self.settings.game.num_agents, brain.num_weights, self.rng
        )

        self.line_segments = build_line_segments()
        self.barrels: CircularBuffer[Entity] = CircularBuffer(BARREL_CAPACITY)
        self.players = self._new_players()

        self.step = 0
        self.generation = 1
        self.best_score_overall = 0.0
        self.best_level_overall = 0
        self._last_level_cull = 0
        self._last_no_move_cull = 0
        self._previous_positions = [(p.offset_x, p.offset_y) for p in self.players]

    def _new_players(self) -> list[Player]:
        return init_players(
            self.settings.game.num_agents, self.is_human, PLAYER_SIZE, PLAYER_SIZE
        )

    def _perform(self, player: Player, actions: Collection[Action]) -> None:
        if Action.LEFT in actions:
            move_left(player)
        if Action.RIGHT in actions:
            move_right(player)
        if Action.JUMP in actions:
            jump(player, self.settings.game.initial_jump_size)

    def _think(self, human_actions: Collection[Action]) -> None:
        if not self.players:
            return
        for player in self.players:
            player.v_x = 0

        if self.is_human:
            self._perform(self.players[0], human_actions)
            return

        for player, genome in zip(self.players, self.genetic.population):
            inputs = brain_inputs(player, self.line_segments, self.barrels)
            action = Action(self.net.forward(inputs, genome.weights))
            self._perform(player, (action,))

    def advance(self, human_actions: Collection[Action] = ()) -> None:
        """Run one physics step: spawn barrels, let brains act, move everything."""
        game_logics(self.step, self.barrels, self.rng)
        self._think(human_actions)
        physics(self.step, self.line_segments, self.players, self.barrels)
        self.step += 1

    def cull(self) -> int:
        """Kill agents that are too slow to climb or stand still.

        Does nothing in human mode. Returns how many living agents were killed.
        """
        if self.is_human:
            return 0
        killed = 0

        if self.step - self._last_level_cull > LEVEL_CULL_INTERVAL:
            min_level = self.step // LEVEL_CULL_INTERVAL
            logger.info("Killing of agents below level %d", min_level)
            for player in self.players:
                if player.level < min_level:
                    killed += player.alive
                    player.alive = False
            self._last_level_cull = min_level * LEVEL_CULL_INTERVAL

        if self.step - self._last_no_move_cull > NO_MOVE_CULL_INTERVAL:
            for idx, player in enumerate(self.players):
                prev_x, prev_y = self._previous_positions[idx]
                moved = math.hypot(player.offset_x - prev_x, player.offset_y - prev_y)
                if moved < NO_MOVE_DISTANCE:
                    killed += player.alive
                    player.alive = False
                self._previous_positions[idx] = (player.offset_x, player.offset_y)
            self._last_no_move_cull = NO_MOVE_CULL_INTERVAL * (
                self.step // NO_MOVE_CULL_INTERVAL
            )

        return killed

    def num_alive(self) -> int:
        """Number of players still in the round."""
        return sum(player.alive for player in self.players)

    def end_generation(self) -> GenerationStats:
        """Score the round, evolve the brains and start a fresh round."""
        for player, genome in zip(self.players, self.genetic.population):
            genome.fitness = float(player.score)

        best_level = max([0, *(p.level for p in self.players)])
        best_score = max([0.0, *(float(p.score) for p in self.players)])
        self.best_level_overall = max(self.best_level_overall, best_level)
        self.best_score_overall = max(self.best_score_overall, best_score)

        stats = GenerationStats(
            generation=self.generation,
            best_score=best_score,
            best_score_overall=self.best_score_overall,
            best_level=best_level,
            best_level_overall=self.best_level_overall,
        )

        self.genetic.new_generation()
        self.players = self._new_players()
        self.step = 0
        self.barrels.clear()
        self.generation += 1
        return stats

    def update(self, human_actions: Collection[Action] = ()) -> GenerationStats | None:
        """Advance one step, cull, and end the round once nobody is alive.

        Returns the round's statistics when a round ended, otherwise None.
        """
        self.advance(human_actions)
        self.cull()
        if self.num_alive() == 0:
            return self.end_generation()
        return None

    @property
    def entities(self) -> Sequence[Entity]:
        """Every barrel currently on the board."""
        return list(self.barrels)
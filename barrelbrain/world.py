"""Game world: entities, the level layout, physics and player actions."""

from __future__ import annotations

import random
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

BOARD_HALF_WIDTH = 14 * 8
BARREL_SPAWN_INTERVAL = 100
BARREL_CAPACITY = 50
PLAYER_START_X = -50
PLAYER_START_Y = -100

# A grounded entity at or above each of these heights has reached the next level.
_LEVEL_THRESHOLDS = (-92, -57, -26, 6, 39)

T = TypeVar("T")


def _tdiv(a: int, b: int) -> int:
    """Integer division rounding towards zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class Action(Enum):
    """What a brain may choose to do; values match the network's output indices."""

    LEFT = 0
    RIGHT = 1
    JUMP = 2


@dataclass
class Entity:
    """Something that moves on the board, centred on its offset."""

    offset_x: int = 0
    offset_y: int = 0
    width: int = 0
    height: int = 0
    v_x: int = 0
    v_y: int = 0
    is_on_ground: bool = False
    level: int = 0


@dataclass
class Player(Entity):
    """An entity steered by a brain, with its score and life state."""

    score: int = 0
    alive: bool = False
    dead_at_step: int = 0


@dataclass(frozen=True)
class LineSegment:
    """A horizontal girder; start and end share the same height."""

    x_start: int
    y_start: int
    x_end: int
    y_end: int


@dataclass
class BrainSettings:
    """Shape of the network that drives each agent."""

    num_inputs: int = 9
    num_hidden: int | None = None
    num_outputs: int = 3

    def __post_init__(self) -> None:
        if self.num_hidden is None:
            self.num_hidden = 2 * self.num_inputs

    @property
    def num_weights(self) -> int:
        """Weights needed by the network; it has no biases."""
        assert self.num_hidden is not None
        return self.num_inputs * self.num_hidden + self.num_hidden * self.num_outputs


@dataclass
class GameSettings:
    """Population size and physics parameters."""

    num_agents: int = 500
    initial_jump_size: int = 6
    physics_update_rate_hz: float = 250.0


@dataclass
class GuiSettings:
    """Window and board geometry."""

    window_width: int = 800 * 2
    window_height: int = 600 * 2
    square_size_pixels: int = 8
    num_squares_x: int = 28
    num_squares_y: int = 32
    scale: float = 4.0

    @property
    def board_width(self) -> int:
        return self.num_squares_x * self.square_size_pixels

    @property
    def board_height(self) -> int:
        return self.num_squares_y * self.square_size_pixels


@dataclass
class Settings:
    """All settings of a run."""

    brain: BrainSettings = field(default_factory=BrainSettings)
    game: GameSettings = field(default_factory=GameSettings)
    gui: GuiSettings = field(default_factory=GuiSettings)


class CircularBuffer(Generic[T]):
    """Fixed-capacity store that overwrites its oldest element once full."""

    def __init__(self, max_count: int) -> None:
        if max_count <= 0:
            raise ValueError("max_count must be positive")
        self.max_count = max_count
        self._elements: list[T] = []
        self._idx_cur = 0

    def add(self, element: T) -> None:
        """Append an element, replacing the oldest one when the buffer is full."""
        if len(self._elements) == self.max_count:
            self._elements[self._idx_cur] = element
        else:
            self._elements.append(element)
        self._idx_cur = (self._idx_cur + 1) % self.max_count

    def clear(self) -> None:
        """Remove every element."""
        self._elements.clear()
        self._idx_cur = 0

    def __iter__(self) -> Iterator[T]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __getitem__(self, index: int) -> T:
        return self._elements[index]


def _find_landing(
    line_segments: Iterable[LineSegment], entity: Entity, y_before: int, y_after: int
) -> LineSegment | None:
    """Return the highest segment crossed going down from y_before to y_after."""
    half_width = _tdiv(entity.width, 2)
    x_left = entity.offset_x - half_width
    x_right = entity.offset_x + half_width
    found: LineSegment | None = None

    for segment in line_segments:
        line_x_min = min(segment.x_start, segment.x_end)
        line_x_max = max(segment.x_start, segment.x_end)
        overlaps = (
            line_x_min <= x_left <= line_x_max or line_x_min <= x_right <= line_x_max
        )
        if not overlaps:
            continue
        line_y = segment.y_start
        if y_before > line_y >= y_after:
            if found is None or found.y_start < line_y:
                found = segment

    return found


def _apply_gravity(entity: Entity, line_segments: Sequence[LineSegment]) -> None:
    half_height = _tdiv(entity.height, 2)
    bottom = entity.offset_y - half_height
    landing: LineSegment | None = None

    if entity.is_on_ground:
        landing = _find_landing(line_segments, entity, bottom + 2, bottom - 1)
    elif entity.v_y < 0:
        landing = _find_landing(line_segments, entity, bottom + 2, bottom + entity.v_y)

    if landing is not None:
        entity.offset_y = landing.y_start + half_height
        entity.is_on_ground = True
        entity.v_y = 0
        entity.level = sum(entity.offset_y >= t for t in _LEVEL_THRESHOLDS)
    elif entity.is_on_ground:
        entity.v_y = -1
        entity.is_on_ground = False

    if not entity.is_on_ground:
        entity.offset_y += entity.v_y
        entity.v_y -= 1


def _apply_movement(entity: Entity) -> bool:
    """Move horizontally within the walls; return True if a wall blocked it."""
    before = entity.offset_x
    entity.offset_x = _clamp(
        entity.offset_x + entity.v_x, -BOARD_HALF_WIDTH, BOARD_HALF_WIDTH
    )
    return entity.offset_x == before and entity.v_x != 0


def _touches(player: Player, barrel: Entity) -> bool:
    half_width = _tdiv(barrel.width, 2)
    half_height = _tdiv(barrel.height, 2)
    return (
        barrel.offset_x - half_width <= player.offset_x <= barrel.offset_x + half_width
        and barrel.offset_y - half_height
        <= player.offset_y
        <= barrel.offset_y + half_height
    )


def physics(
    step: int,
    line_segments: Sequence[LineSegment],
    players: Iterable[Player],
    barrels: Iterable[Entity],
) -> None:
    """Advance every living player and every barrel by one physics step.

    Barrels bounce off the side walls. A living player standing on a girder
    who touches a barrel dies; its score is its height above the bottom girder,
    which is taken to be the last segment.
    """
    players = list(players)
    barrels = list(barrels)

    for player in players:
        if player.alive:
            _apply_gravity(player, line_segments)
            _apply_movement(player)

    for barrel in barrels:
        _apply_gravity(barrel, line_segments)
        if _apply_movement(barrel):
            barrel.v_x = -barrel.v_x

    for player in players:
        if not player.alive or not player.is_on_ground:
            continue
        if any(_touches(player, barrel) for barrel in barrels):
            player.alive = False
            player.dead_at_step = step
            player.score = player.offset_y - line_segments[-1].y_end


def jump(player: Player, jump_size: int = GameSettings.initial_jump_size) -> None:
    """Start a jump if the player stands on a girder."""
    if not player.is_on_ground:
        return
    player.v_y = jump_size
    player.is_on_ground = False


def move_left(player: Player) -> None:
    player.v_x = -1


def move_right(player: Player) -> None:
    player.v_x = 1


def _sloped_run(
    num_blocks: int, x_offset: int, y_offset: int, x_factor: int
) -> list[LineSegment]:
    """Girder pieces that step down by one pixel every two squares."""
    return [
        LineSegment(
            x_offset + 8 * (x_factor * 2 * idx_block),
            y_offset - idx_block,
            x_offset + 8 * (x_factor * 2 * (idx_block + 1)),
            y_offset - idx_block,
        )
        for idx_block in range(num_blocks)
    ]


def build_line_segments(num_squares_x: int = 28) -> list[LineSegment]:
    """Lay out the girders of the level; the bottom girder comes last."""
    right = _tdiv(8 * num_squares_x, 2)
    left = _tdiv(-8 * num_squares_x, 2)

    segments = [
        LineSegment(-3 * 8, 9 * 8, 3 * 8, 9 * 8),
        LineSegment(-_tdiv(num_squares_x, 2) * 8, 5 * 8 + 4, 4 * 8, 5 * 8 + 4),
    ]
    segments += _sloped_run(4, 4 * 8, 5 * 8 + 3, 1)
    segments += _sloped_run(13, right, 8 * 2 + 3, -1)
    segments += _sloped_run(13, left, -8 * 1 - 6, 1)
    segments += _sloped_run(13, right, -8 * 5 - 6, -1)
    segments += _sloped_run(13, left, -8 * 10, 1)
    segments += _sloped_run(7, right, -8 * 14 - 2, -1)
    segments.append(
        LineSegment(_tdiv(-num_squares_x, 2) * 8, -8 * 15, 0, -8 * 15)
    )
    return segments


def spawn_barrel(
    barrels: CircularBuffer[Entity], rng: random.Random | None = None
) -> Entity:
    """Drop a new barrel at the top centre, rolling left or right at random."""
    source = rng if rng is not None else random
    barrel = Entity(
        offset_x=0,
        offset_y=100,
        width=8,
        height=8,
        v_x=2 * (2 * source.randrange(2) - 1),
        is_on_ground=False,
    )
    barrels.add(barrel)
    return barrel


def game_logics(
    step: int, barrels: CircularBuffer[Entity], rng: random.Random | None = None
) -> None:
    """Spawn a barrel every BARREL_SPAWN_INTERVAL steps."""
    if step % BARREL_SPAWN_INTERVAL == 0:
        spawn_barrel(barrels, rng)


def init_players(num_agents: int, is_human: bool, width: int, height: int) -> list[Player]:
    """Create the players of a new round.

    In human mode only the first player is placed and alive; the list still
    holds ``num_agents`` entries.
    """
    num_placed = 1 if is_human else num_agents
    return [
        Player(
            offset_x=PLAYER_START_X,
            offset_y=PLAYER_START_Y,
            width=width,
            height=height,
            alive=True,
        )
        if idx_player < num_placed
        else Player()
        for idx_player in range(num_agents)
    ]
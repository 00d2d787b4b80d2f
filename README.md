# barrelbrain

A small neuroevolution playground. A population of agents starts at the
bottom of a board of sloped girders and tries to climb upwards while barrels
drop in at the top, roll along the girders and bounce off the side walls.
Every agent is steered by a tiny feed-forward neural network: one tanh hidden
layer, no biases, and three outputs (left, right, jump). A genetic algorithm
evolves the network weights from one generation to the next.

## Installing

```
pip install .
```

This installs `pygame`, which the window needs. The tests need `pytest`
(`pip install .[test]`).

## Running

```
barrelbrain
```

This opens a window and trains a population of agents. Options:

- `--agents N` – number of agents per generation (default 500, at least 1).
- `--seed S` – seed for the random number generator, for repeatable runs.
- `--human` – play yourself: the arrow keys move left and right, space jumps.
  Only one player is placed on the board in this mode.

Physics runs at a fixed 250 steps per second. A new barrel is spawned every
100 steps; at most 50 barrels are on the board, the oldest being replaced
first. A player standing on a girder that touches a barrel dies, and its score
is its height above the bottom girder.

When training, agents are also culled: every 2000 steps those below the level
the population should have reached by then are killed, and every 200 steps
those that moved less than 10 units are killed. A generation ends when no
agent is alive. The console then shows the generation number, the best score
and best level of that generation and of all generations so far. Once a
second it also prints the frame rate.

Press Escape or close the window to quit. A left click on the board prints
the board coordinates under the cursor.

## How it works

- `barrelbrain.neural_net.NeuralNet` does the forward pass. `forward(inputs,
  weights)` takes the inputs and a flat weight list and returns the index of
  the strongest output; it raises `ValueError` if either has the wrong length.
- `barrelbrain.genetic.GeneticAlgorithm` holds a population of `Genome`
  objects, each a weight vector with a fitness. `new_generation()` keeps the
  top 5 % of genomes (rounded up) and fills the rest of the population with
  children of those elites: uniform crossover, then a mutation that nudges
  about 10 % of the weights by up to ±0.2.
- `barrelbrain.world` holds the settings dataclasses (`Settings`,
  `BrainSettings`, `GameSettings`, `GuiSettings`), the entities (`Entity`,
  `Player`, `LineSegment`), the girder layout (`build_line_segments`), the
  integer physics of gravity, movement, landing and wall bounces (`physics`),
  the player actions (`jump`, `move_left`, `move_right`), barrel spawning and
  the `CircularBuffer` the barrels live in.
- `barrelbrain.simulation` ties these together. `brain_inputs` builds the nine
  normalised inputs of an agent's network. `Simulation` runs the game:
  `advance()` performs one physics step, `cull()` kills stalled agents,
  `num_alive()` counts survivors, `end_generation()` scores the round, evolves
  the brains and returns a `GenerationStats`, and `update()` does all of that
  in one call, returning the stats when a round ended.
- `barrelbrain.app` draws the game with pygame and holds the `barrelbrain`
  command.

A `Simulation` can also be driven without a window, for example to train
headless:

```python
import random

from barrelbrain.simulation import Simulation
from barrelbrain.world import GameSettings, Settings

sim = Simulation(Settings(game=GameSettings(num_agents=100)), False, random.Random(1))
for _ in range(10_000):
    stats = sim.update()
    if stats is not None:
        print(stats)
```

## What it does not do

Evolved weights are kept in memory only: there is no way to save a trained
population or load one back, and every run starts from random weights.
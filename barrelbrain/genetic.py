"""A simple genetic algorithm over flat weight vectors."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

MUTATION_RATE = 0.1
MUTATION_STDDEV = 0.2
ELITES_RATE = 0.05


def _uniform_unit(rng: random.Random) -> float:
    return rng.random() * 2.0 - 1.0


@dataclass
class Genome:
    """A weight vector together with the fitness it last scored."""

    weights: list[float] = field(default_factory=list)
    fitness: float = 0.0

    @classmethod
    def random(cls, num_weights: int, rng: random.Random) -> Genome:
        """Create a genome with weights drawn uniformly from [-1, 1]."""
        return cls([_uniform_unit(rng) for _ in range(num_weights)])


class GeneticAlgorithm:
    """Population of genomes evolved by elitism, uniform crossover and mutation."""

    def __init__(
        self,
        num_genomes: int,
        num_weights_per_genome: int,
        rng: random.Random | None = None,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.mutation_rate = MUTATION_RATE
        self.mutation_stddev = MUTATION_STDDEV
        self.elites_rate = ELITES_RATE
        self.population = [
            Genome.random(num_weights_per_genome, self.rng) for _ in range(num_genomes)
        ]

    def crossover(self, parent_a: Genome, parent_b: Genome) -> Genome:
        """Return a child taking each weight from either parent with equal odds."""
        if len(parent_a.weights) != len(parent_b.weights):
            raise ValueError("parents have different numbers of weights")
        return Genome(
            [
                a if self.rng.randrange(2) == 0 else b
                for a, b in zip(parent_a.weights, parent_b.weights)
            ]
        )

    def mutate(self, genome: Genome) -> None:
        """Nudge some of the genome's weights in place by a small random amount."""
        genome.weights = [
            weight + _uniform_unit(self.rng) * self.mutation_stddev
            if self.rng.random() < self.mutation_rate
            else weight
            for weight in genome.weights
        ]

    def num_elites(self) -> int:
        """Number of top genomes carried over unchanged into the next generation."""
        # Rounding guards against float noise pushing ceil up by one.
        return math.ceil(round(len(self.population) * self.elites_rate, 6))

    def new_generation(self) -> None:
        """Replace the population with elites plus mutated children of elites."""
        self.population.sort(key=lambda genome: genome.fitness, reverse=True)
        num_genomes = len(self.population)
        num_elites = self.num_elites()
        if num_elites == 0:
            return

        elites = self.population[:num_elites]
        new_population = [Genome(list(g.weights), g.fitness) for g in elites]

        while len(new_population) < num_genomes:
            parent_a = elites[self.rng.randrange(num_elites)]
            parent_b = elites[self.rng.randrange(num_elites)]
            child = self.crossover(parent_a, parent_b)
            self.mutate(child)
            new_population.append(child)

        self.population = new_population
"""A small fully connected feed-forward network with one tanh hidden layer."""

from __future__ import annotations

import math
from collections.abc import Sequence


class NeuralNet:
    """Feed-forward net: inputs -> tanh hidden layer -> linear outputs, no biases.

    The weights are given as one flat sequence. The first
    ``num_inputs * num_hidden`` entries connect inputs to hidden units, laid
    out input-major (``weights[i * num_hidden + h]``). The rest connect hidden
    units to outputs, laid out hidden-major
    (``weights[offset + h * num_outputs + o]``).
    """

    def __init__(self, num_inputs: int, num_hidden: int, num_outputs: int) -> None:
        if min(num_inputs, num_hidden, num_outputs) < 0:
            raise ValueError("layer sizes must not be negative")
        self.num_inputs = num_inputs
        self.num_hidden = num_hidden
        self.num_outputs = num_outputs

    @property
    def num_expected_weights(self) -> int:
        """Number of weights that :meth:`forward` requires."""
        return self.num_inputs * self.num_hidden + self.num_hidden * self.num_outputs

    def forward(self, inputs: Sequence[float], weights: Sequence[float]) -> int:
        """Run the net and return the index of the largest output.

        Ties go to the lowest index. Raises ValueError if the number of
        inputs or weights does not match the net's shape.
        """
        if len(inputs) != self.num_inputs:
            raise ValueError(
                f"expected {self.num_inputs} inputs, got {len(inputs)}"
            )
        if len(weights) != self.num_expected_weights:
            raise ValueError(
                f"expected {self.num_expected_weights} weights, got {len(weights)}"
            )

        hidden = [
            math.tanh(
                sum(
                    value * weights[idx_input * self.num_hidden + idx_hidden]
                    for idx_input, value in enumerate(inputs)
                )
            )
            for idx_hidden in range(self.num_hidden)
        ]

        offset = self.num_inputs * self.num_hidden
        outputs = [
            sum(
                value * weights[offset + idx_hidden * self.num_outputs + idx_output]
                for idx_hidden, value in enumerate(hidden)
            )
            for idx_output in range(self.num_outputs)
        ]

        if not outputs:
            return 0
        return max(range(len(outputs)), key=outputs.__getitem__)
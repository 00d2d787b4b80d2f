"""Neuroevolution of agents climbing girders and dodging rolling barrels."""

__version__ = "0.1.0"
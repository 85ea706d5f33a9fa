"""Seeded randomness for reproducible resolution."""

from deliverability_simulator.sampling.seed_manager import SeedManager

__all__ = ["SeedManager"]

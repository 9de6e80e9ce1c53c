from __future__ import annotations

from typing import Optional

from ..core.agent import Gene, Genome
from ..core.config import GenomeConfig
from ..core.rng import DeterministicRng


def random_genome(rng: DeterministicRng, config: GenomeConfig) -> Genome:
    attraction_low, attraction_high = config.attraction_range
    perception_low, perception_high = config.perception_range
    return Genome(
        food_attraction=rng.next_range(attraction_low, attraction_high),
        poison_attraction=rng.next_range(attraction_low, attraction_high),
        food_perception=rng.next_range(perception_low, perception_high),
        poison_perception=rng.next_range(perception_low, perception_high),
    )


def mutation_spread(gene: int, config: GenomeConfig) -> float:
    if gene in (Gene.FOOD_ATTRACTION, Gene.POISON_ATTRACTION):
        return config.attraction_mutation
    return config.perception_mutation


def inherit_genome(parent: Genome, rng: DeterministicRng, config: GenomeConfig) -> Genome:
    # Every gene is gated by the same mutation rate and drifts without clamping.
    values = []
    for gene in Gene:
        value = parent[gene]
        if rng.next_float() < config.mutation_rate:
            spread = mutation_spread(gene, config)
            value += rng.next_range(-spread, spread)
        values.append(value)
    return Genome.from_values(values)


def create_genome(rng: DeterministicRng, config: GenomeConfig, parent: Optional[Genome] = None) -> Genome:
    if parent is None:
        return random_genome(rng, config)
    return inherit_genome(parent, rng, config)

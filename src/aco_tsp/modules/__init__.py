from .pheromone import PheromoneEvaporator, PheromoneUpdater

__all__ = [
    "PheromoneUpdater",
    "PheromoneEvaporator",
]

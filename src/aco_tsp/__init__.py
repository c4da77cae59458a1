"""
ACO TSP Package

グラフ生成（完全グラフ／k-正則グラフ）とアントコロニー最適化による
巡回路探索パッケージ
"""

__version__ = "1.0.0"

from .algorithms.aco_engine import ACOEngine, AlgorithmStatus, IterationResult
from .algorithms.runner import RunSummary, run_scenario, run_to_completion
from .config import AlgorithmParams, GraphParams, Topology, load_config, params_from_config
from .core.ant import Ant
from .core.graph import TSPGraph
from .core.graph_builder import GraphBuilder
from .core.node import Node
from .core.random_source import RandomSource
from .driver import IterationDriver
from .exceptions import (
    ACOError,
    ConfigurationError,
    DegenerateTourAnomaly,
    StuckAgentAnomaly,
)
from .modules.pheromone import PheromoneEvaporator, PheromoneUpdater
from .utils.metrics import MetricsCalculator
from .utils.visualization import Visualizer

__all__ = [
    "ACOEngine",
    "AlgorithmStatus",
    "IterationResult",
    "RunSummary",
    "run_scenario",
    "run_to_completion",
    "AlgorithmParams",
    "GraphParams",
    "Topology",
    "load_config",
    "params_from_config",
    "Ant",
    "TSPGraph",
    "GraphBuilder",
    "Node",
    "RandomSource",
    "IterationDriver",
    "ACOError",
    "ConfigurationError",
    "DegenerateTourAnomaly",
    "StuckAgentAnomaly",
    "PheromoneUpdater",
    "PheromoneEvaporator",
    "MetricsCalculator",
    "Visualizer",
]

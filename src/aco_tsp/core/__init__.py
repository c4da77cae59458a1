from .ant import Ant
from .graph import TSPGraph
from .graph_builder import GraphBuilder
from .node import Node
from .random_source import RandomLike, RandomSource

__all__ = [
    "Ant",
    "TSPGraph",
    "GraphBuilder",
    "Node",
    "RandomLike",
    "RandomSource",
]

from .metrics import MetricsCalculator
from .visualization import Visualizer

__all__ = [
    "MetricsCalculator",
    "Visualizer",
]

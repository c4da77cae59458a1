from .aco_engine import ACOEngine, AlgorithmStatus, IterationResult
from .runner import RunSummary, run_scenario, run_to_completion

__all__ = [
    "ACOEngine",
    "AlgorithmStatus",
    "IterationResult",
    "RunSummary",
    "run_scenario",
    "run_to_completion",
]

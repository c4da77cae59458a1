"""
実行ヘルパー

エンジンを最後まで回して結果をまとめる関数群です。
実験スクリプトと統合テストから利用します。
"""

import math
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..config import AlgorithmParams, GraphParams
from ..core.graph import TSPGraph
from ..core.graph_builder import GraphBuilder
from ..core.random_source import RandomSource
from ..utils.metrics import MetricsCalculator
from .aco_engine import ACOEngine, IterationResult


@dataclass
class RunSummary:
    """
    1シナリオの実行結果

    Attributes:
        scenario: シナリオ名
        graph_params: グラフ生成パラメータ
        algorithm_params: ACOパラメータ
        iterations: 全反復の結果
        best_tour: 全反復を通じた最良巡回路（反復がなければ空）
        final_best_length: best_tour の長さ（反復がなければ +inf）
        convergence_iteration: 収束した反復番号（収束しなければNone）
        total_iterations: 反復数
        execution_time_ms: 実行時間（ミリ秒）
        graph: 実行に使ったグラフ
    """

    scenario: str
    graph_params: GraphParams
    algorithm_params: AlgorithmParams
    iterations: List[IterationResult] = field(default_factory=list)
    best_tour: Tuple[int, ...] = ()
    final_best_length: float = math.inf
    convergence_iteration: Optional[int] = None
    total_iterations: int = 0
    execution_time_ms: float = 0.0
    graph: Optional[TSPGraph] = None


def run_to_completion(
    engine: ACOEngine, graph: TSPGraph, params: AlgorithmParams
) -> List[IterationResult]:
    """シーケンスが終わるまで反復を取り出す"""
    return list(engine.start(graph, params))


def run_scenario(
    scenario: str,
    graph_params: GraphParams,
    algorithm_params: AlgorithmParams,
) -> RunSummary:
    """
    シナリオを1回実行します。

    graph_params.seed から乱数源を1つ作り、グラフ生成とエンジンの両方で共有します。
    同じシードなら同じ結果になります。

    Args:
        scenario: シナリオ名
        graph_params: グラフ生成パラメータ
        algorithm_params: ACOパラメータ

    Returns:
        実行結果のまとめ
    """
    start_time = time.perf_counter()

    random = RandomSource(graph_params.seed)
    graph = GraphBuilder.build(
        graph_params, random, initial_pheromone=algorithm_params.initial_pheromone
    )
    engine = ACOEngine(random)
    iterations = run_to_completion(engine, graph, algorithm_params)

    execution_time_ms = (time.perf_counter() - start_time) * 1000.0
    best_ant = engine.best_ant
    return RunSummary(
        scenario=scenario,
        graph_params=graph_params,
        algorithm_params=algorithm_params,
        iterations=iterations,
        best_tour=tuple(best_ant.tour) if best_ant is not None else (),
        final_best_length=best_ant.tour_length if best_ant is not None else math.inf,
        convergence_iteration=MetricsCalculator().convergence_iteration(iterations),
        total_iterations=len(iterations),
        execution_time_ms=execution_time_ms,
        graph=graph,
    )

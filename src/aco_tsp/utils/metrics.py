"""
評価指標モジュール

反復結果の履歴とフェロモン行列から、収束・改善率・巡回路の妥当性などを計算します。
"""

import math
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

import numpy as np

from ..core.graph import TSPGraph

if TYPE_CHECKING:
    from ..algorithms.aco_engine import IterationResult


class MetricsCalculator:
    """
    評価指標を計算するクラス

    - 収束した反復番号、最良長・平均長の推移、初回からの改善率
    - フェロモン行列の統計（辺が存在する要素のみ）
    - 巡回路の妥当性（全ノードをちょうど1回ずつ訪問して開始ノードへ戻るか）

    Attributes:
        tolerance (float): 長さ比較の許容誤差（相対）
    """

    def __init__(self, tolerance: float = 1e-9):
        self.tolerance = tolerance

    def convergence_iteration(self, results: Sequence["IterationResult"]) -> Optional[int]:
        """最初に converged=True となった反復番号（なければNone）"""
        for result in results:
            if result.converged:
                return result.iteration
        return None

    def best_length_history(self, results: Sequence["IterationResult"]) -> List[float]:
        return [result.best_length for result in results]

    def average_length_history(self, results: Sequence["IterationResult"]) -> List[float]:
        return [result.average_length for result in results]

    def improvement_ratio(self, results: Sequence["IterationResult"]) -> float:
        """
        最初の有限な最良長から、全反復を通じた最短長への改善率

        定義: (L_first - L_min) / L_first

        Returns:
            改善率（0.0 ~ 1.0）。有限な最良長がなければ0.0
        """
        finite = [r.best_length for r in results if math.isfinite(r.best_length)]
        if not finite or finite[0] <= 0:
            return 0.0
        return (finite[0] - min(finite)) / finite[0]

    def pheromone_statistics(self, graph: TSPGraph) -> Dict[str, float]:
        """
        辺が存在する要素（i < j）のフェロモン統計

        Returns:
            {"mean", "min", "max", "edges"} の辞書（辺がなければ値は0）
        """
        pheromones = graph.get_pheromones()
        distances = graph.get_distances()
        upper = np.triu(np.isfinite(distances), k=1)
        values = pheromones[upper]
        if values.size == 0:
            return {"mean": 0.0, "min": 0.0, "max": 0.0, "edges": 0}
        return {
            "mean": float(values.mean()),
            "min": float(values.min()),
            "max": float(values.max()),
            "edges": int(values.size),
        }

    def is_valid_tour(self, tour: Sequence[int], num_nodes: int) -> bool:
        """
        巡回路が全ノードをちょうど1回ずつ訪問し、開始ノードへ戻るか判定します。

        Args:
            tour: 閉じた巡回路（末尾は開始ノード）
            num_nodes: ノード数
        """
        if len(tour) != num_nodes + 1 or tour[0] != tour[-1]:
            return False
        return sorted(tour[:-1]) == list(range(num_nodes))

    def verify_result(self, result: "IterationResult", graph: TSPGraph) -> bool:
        """
        反復結果の最良巡回路が妥当で、best_length が独立に再計算した長さと一致するか

        Returns:
            妥当ならTrue
        """
        if not self.is_valid_tour(result.best_tour, graph.num_nodes):
            return False
        recomputed = graph.calculate_distance(result.best_tour)
        return math.isclose(recomputed, result.best_length, rel_tol=self.tolerance)

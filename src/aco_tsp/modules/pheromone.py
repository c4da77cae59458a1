"""
フェロモン更新・揮発ロジック

【フェロモン更新式】
τ(i,j) ← (1 - ρ)·τ(i,j) + Σ_k Δτ_k(i,j) + Δτ_elite(i,j)

- ρ: 揮発率
- Δτ_k(i,j) = Q / L_k（アリkの巡回路が辺(i,j)を含む場合）
- Δτ_elite(i,j) = Q·e / L*（これまでの最良巡回路が辺(i,j)を含む場合、eはエリート数）

【不変条件】
- 付加は常に双方向（行列の対称性を維持）
- 付加量は常に正、揮発は (1 - ρ) 倍のみ（0 ≤ ρ ≤ 1）なので、値は負にならない
- 長さが0または有限でない巡回路には付加しない（NaN/inf を行列に持ち込まない）
"""

import math
from typing import Sequence, Tuple

from ..config import AlgorithmParams
from ..core.graph import TSPGraph
from ..exceptions import DegenerateTourAnomaly


class PheromoneUpdater:
    """
    フェロモン付加を管理するクラス

    Attributes:
        q (float): フェロモン付加定数Q
        elitist_count (int): エリートアリの数（0で無効）
    """

    def __init__(self, params: AlgorithmParams):
        """
        Args:
            params: ACOパラメータ
        """
        self.q = params.q
        self.elitist_count = params.elitist_count

    def deposit_amount(self, tour_length: float, weight: float = 1.0) -> float:
        """
        1本の巡回路が各辺に付加するフェロモン量を計算します。

        Args:
            tour_length: 巡回路長
            weight: 付加量の倍率（エリート付加ではエリート数）

        Returns:
            Q·weight / tour_length

        Raises:
            DegenerateTourAnomaly: 巡回路長が0以下、または有限でない場合
        """
        if not math.isfinite(tour_length) or tour_length <= 0:
            raise DegenerateTourAnomaly(tour_length)
        return self.q * weight / tour_length

    def deposit_tour(
        self,
        graph: TSPGraph,
        edges: Sequence[Tuple[int, int]],
        tour_length: float,
        weight: float = 1.0,
    ) -> float:
        """
        巡回路上の各エッジにフェロモンを付加します（双方向）。

        Args:
            graph: 対象グラフ
            edges: 巡回路のエッジリスト（Ant.get_route_edges()）
            tour_length: 巡回路長
            weight: 付加量の倍率

        Returns:
            各エッジに付加した量

        Raises:
            DegenerateTourAnomaly: 付加量が定義できない巡回路の場合（行列は変更されない）
        """
        amount = self.deposit_amount(tour_length, weight)
        for a, b in edges:
            graph.deposit_pheromone(a, b, amount)
        return amount

    def deposit_elite(
        self, graph: TSPGraph, edges: Sequence[Tuple[int, int]], tour_length: float
    ) -> float:
        """
        最良巡回路へのエリート付加（Q·e / L*）

        Returns:
            各エッジに付加した量（エリート無効時は0）
        """
        if self.elitist_count <= 0:
            return 0.0
        return self.deposit_tour(graph, edges, tour_length, weight=self.elitist_count)


class PheromoneEvaporator:
    """
    フェロモン揮発を管理するクラス

    Attributes:
        evaporation_rate (float): 揮発率ρ
    """

    def __init__(self, params: AlgorithmParams):
        self.evaporation_rate = params.evaporation_rate

    def evaporate(self, graph: TSPGraph) -> None:
        """
        全エッジのフェロモンを (1 - ρ) 倍に揮発させます。

        Note:
            世代（反復）ごとの付加の直前に呼び出され、古い情報を忘却します。
        """
        graph.evaporate_pheromones(self.evaporation_rate)

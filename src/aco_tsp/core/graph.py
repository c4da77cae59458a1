"""
グラフモジュール

巡回路探索用のグラフ（ノード座標・距離行列・フェロモン行列）を管理します。

【データ構造】
1. 距離行列：対称な密行列（numpy）。辺が存在しない組は +inf、対角成分は 0
2. フェロモン行列：距離行列と同じインデックスの対称な密行列
3. ノード：生成後は不変の座標（Node）

距離行列は生成後に変更されません。フェロモン行列はACOエンジンのみが
update/deposit/evaporate を通じて更新します。外部（可視化など）からは
get_distances()/get_pheromones() のスナップショット（コピー）を参照します。
"""

import math
from typing import Iterable, List, Sequence, Tuple

import networkx as nx
import numpy as np

from .node import Node


class TSPGraph:
    """
    ACO用のグラフクラス

    Attributes:
        nodes (Tuple[Node, ...]): ノードのタプル（ID順）
        distances (np.ndarray): 距離行列（n×n、読み取り専用）
        pheromones (np.ndarray): フェロモン行列（n×n）

    Example:
        >>> graph = TSPGraph(nodes, distances, initial_pheromone=0.1)
        >>> graph.get_distance(0, 1) == graph.get_distance(1, 0)
        True
        >>> graph.calculate_distance([0, 1, 2, 0])
        123.4
    """

    def __init__(
        self,
        nodes: Sequence[Node],
        distances: np.ndarray,
        initial_pheromone: float = 0.1,
    ):
        """
        Args:
            nodes: ノードのリスト（node.id == インデックスであること）
            distances: 対称な距離行列
            initial_pheromone: フェロモンの初期値

        Raises:
            ValueError: 距離行列の形状・対称性・符号が不正な場合
        """
        n = len(nodes)
        matrix = np.array(distances, dtype=float)
        if matrix.shape != (n, n):
            raise ValueError(f"Distance matrix must be {n}x{n}, got {matrix.shape}")
        if np.any(matrix < 0):
            raise ValueError("Distance matrix must not contain negative entries")
        if not np.array_equal(matrix, matrix.T):
            raise ValueError("Distance matrix must be symmetric")
        np.fill_diagonal(matrix, 0.0)
        matrix.setflags(write=False)

        self.nodes: Tuple[Node, ...] = tuple(nodes)
        self.distances: np.ndarray = matrix
        self.pheromones: np.ndarray = np.full((n, n), float(initial_pheromone))

    @property
    def num_nodes(self) -> int:
        return len(self.nodes)

    # ---- 距離 ---------------------------------------------------------------
    def get_distance(self, i: int, j: int) -> float:
        return float(self.distances[i, j])

    def get_distances(self) -> np.ndarray:
        """距離行列のコピー"""
        return self.distances.copy()

    def has_edge(self, i: int, j: int) -> bool:
        """i != j かつ有限距離なら辺あり"""
        return i != j and math.isfinite(self.distances[i, j])

    def get_neighbors(self, node: int) -> List[int]:
        """指定ノードと有限距離で結ばれたノードのリスト"""
        return [j for j in range(self.num_nodes) if self.has_edge(node, j)]

    def degree(self, node: int) -> int:
        return len(self.get_neighbors(node))

    def calculate_distance(self, tour: Sequence[int]) -> float:
        """
        巡回路（ノード列）の総距離を計算します。

        Args:
            tour: ノードIDの列（閉路の場合は末尾に開始ノードを含む）

        Returns:
            連続するノード間距離の合計。長さ1以下の巡回路は0、
            到達不能な区間を含む場合は +inf
        """
        if len(tour) <= 1:
            return 0.0
        length = 0.0
        for a, b in zip(tour, tour[1:]):
            length += float(self.distances[a, b])
        return length

    def get_reachable_nodes(self, current_node: int, candidate_nodes: Iterable[int]) -> List[int]:
        """
        候補ノードのうち、現在ノードから到達可能なもの（有限かつ正の距離）を返します。

        Args:
            current_node: 現在のノードID
            candidate_nodes: 候補ノードID（順序は保持される）
        """
        row = self.distances[current_node]
        return [j for j in candidate_nodes if math.isfinite(row[j]) and row[j] > 0]

    # ---- フェロモン ---------------------------------------------------------
    def get_pheromone(self, i: int, j: int) -> float:
        return float(self.pheromones[i, j])

    def get_pheromones(self) -> np.ndarray:
        """フェロモン行列のスナップショット（コピー）"""
        return self.pheromones.copy()

    def update_pheromone(self, i: int, j: int, value: float) -> None:
        """
        辺(i, j)のフェロモンを設定します（双方向）。

        Args:
            i: ノードiのID
            j: ノードjのID
            value: 新しいフェロモン値

        Note:
            双方向に同じ値を書き込むことで、行列の対称性が保たれます。
        """
        self.pheromones[i, j] = value
        self.pheromones[j, i] = value

    def deposit_pheromone(self, i: int, j: int, amount: float) -> None:
        """辺(i, j)にフェロモンを付加（双方向）"""
        self.update_pheromone(i, j, self.pheromones[i, j] + amount)

    def evaporate_pheromones(self, evaporation_rate: float) -> None:
        """
        全エッジのフェロモンを揮発させます。

        Args:
            evaporation_rate: 揮発率（0.0 ~ 1.0）。各要素が (1 - evaporation_rate) 倍される
        """
        self.pheromones *= 1.0 - evaporation_rate

    def reset_pheromones(self, value: float) -> None:
        """フェロモン行列を一様な値に戻す"""
        self.pheromones.fill(float(value))

    # ---- 変換 ---------------------------------------------------------------
    def to_networkx(self) -> nx.Graph:
        """
        有限距離の辺のみを持つNetworkXグラフに変換します。

        Returns:
            ノード属性 pos=(x, y)、エッジ属性 weight/pheromone を持つ nx.Graph
        """
        graph = nx.Graph()
        for node in self.nodes:
            graph.add_node(node.id, pos=(node.x, node.y))
        n = self.num_nodes
        for i in range(n):
            for j in range(i + 1, n):
                if self.has_edge(i, j):
                    graph.add_edge(
                        i,
                        j,
                        weight=float(self.distances[i, j]),
                        pheromone=float(self.pheromones[i, j]),
                    )
        return graph

    def is_connected(self) -> bool:
        """有限距離の辺だけで全ノードが連結か"""
        if self.num_nodes == 0:
            return False
        return nx.is_connected(self.to_networkx())

    def __repr__(self) -> str:
        n = self.num_nodes
        edges = int(np.isfinite(self.distances).sum() - n) // 2
        return f"TSPGraph(nodes={n}, edges={edges})"

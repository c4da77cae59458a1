"""
グラフ生成モジュール

GraphParamsに従ってノード座標と距離行列を生成し、TSPGraphを構築します。

【サポートするトポロジ】
1. complete：完全グラフ。min/max距離の範囲外の辺は削除（連結性は保証しない）
2. ring_chords：ハミルトン閉路＋弦によるk-正則グラフ（閉路があるため巡回路が必ず存在）
3. mst_knn：Prim法の最小全域木＋k近傍。連結性は保証されるが次数はkを超えうる

【座標のスケーリング】
ノード座標は [0, 100·√n) の正方形に一様配置します。ノード数によらず
ノード間距離がおおむね同程度になります。
"""

import logging
import math
from typing import List, Optional

import networkx as nx
import numpy as np

from ..config import GraphParams, Topology
from .graph import TSPGraph
from .node import Node
from .random_source import RandomLike

logger = logging.getLogger(__name__)


class GraphBuilder:
    """
    GraphParamsからTSPGraphを構築するクラス

    構築後のグラフの距離行列は不変で、GraphBuilder自身は状態を持ちません。

    Example:
        >>> rng = RandomSource(seed=11111)
        >>> graph = GraphBuilder.build(GraphParams(count=20, edges_per_node=4), rng)
        >>> graph.is_connected()
        True
    """

    @classmethod
    def build(
        cls,
        params: GraphParams,
        random: RandomLike,
        initial_pheromone: float = 0.1,
    ) -> TSPGraph:
        """
        グラフを生成します。

        Args:
            params: グラフ生成パラメータ
            random: 一様乱数源（座標と重みの生成に使用）
            initial_pheromone: フェロモン行列の初期値

        Returns:
            生成されたTSPGraph

        Raises:
            ConfigurationError: count < 1、edges_per_node < 2、または重みの範囲が逆転している場合
        """
        params.validate()
        nodes = cls.generate_nodes(params.count, random)
        topology = params.resolved_topology

        if topology == Topology.COMPLETE:
            distances = cls._complete_distances(nodes, params.min_distance, params.max_distance)
        elif topology == Topology.RING_CHORDS:
            distances = cls._ring_chords_distances(nodes, params, random)
        elif topology == Topology.MST_KNN:
            distances = cls._mst_knn_distances(nodes, params)
        else:
            raise ValueError(f"Unknown topology: {topology}")

        graph = TSPGraph(nodes, distances, initial_pheromone=initial_pheromone)
        logger.info("Built %s graph: %r", topology.value, graph)
        return graph

    @staticmethod
    def generate_nodes(count: int, random: RandomLike) -> List[Node]:
        """
        ノードを一様ランダムに配置します。

        Args:
            count: ノード数
            random: 一様乱数源（各ノードで x, y の順に2回引く）

        Returns:
            ID順のノードのリスト
        """
        coordinate_range = 100.0 * math.sqrt(count)
        nodes = []
        for i in range(count):
            x = random.next() * coordinate_range
            y = random.next() * coordinate_range
            nodes.append(Node(id=i, x=x, y=y))
        return nodes

    @staticmethod
    def euclidean_matrix(nodes: List[Node]) -> np.ndarray:
        """全ノード対のユークリッド距離行列"""
        coords = np.array([(node.x, node.y) for node in nodes], dtype=float).reshape(-1, 2)
        diff = coords[:, np.newaxis, :] - coords[np.newaxis, :, :]
        return np.sqrt((diff**2).sum(axis=-1))

    @classmethod
    def _complete_distances(
        cls,
        nodes: List[Node],
        min_distance: Optional[float],
        max_distance: Optional[float],
    ) -> np.ndarray:
        """完全グラフ（範囲外の距離は +inf）"""
        distances = cls.euclidean_matrix(nodes)
        out_of_range = np.zeros(distances.shape, dtype=bool)
        if min_distance is not None:
            out_of_range |= distances < min_distance
        if max_distance is not None:
            out_of_range |= distances > max_distance
        np.fill_diagonal(out_of_range, False)
        distances[out_of_range] = math.inf
        np.fill_diagonal(distances, 0.0)
        return distances

    @classmethod
    def _ring_chords_distances(
        cls,
        nodes: List[Node],
        params: GraphParams,
        random: RandomLike,
    ) -> np.ndarray:
        """
        閉路＋弦によるk-正則グラフの距離行列

        【構築手順】
        1. ハミルトン閉路 0→1→…→(n-1)→0
        2. オフセット o = 2 … ⌊k/2⌋ の弦 (i, i+o mod n)（両端の次数 < k の場合のみ）
        3. kが奇数かつnが偶数なら直径方向の辺 (i, i+n/2)
        4. 次数不足のノードを、次数が最小の非隣接ノードと貪欲に接続
        5. 重み付け（min/max指定時は一様乱数、それ以外はユークリッド距離）
        """
        k = params.edges_per_node
        structure = cls.ring_chords_structure(len(nodes), k)

        euclidean = cls.euclidean_matrix(nodes)
        weight_range = params.random_weight_range

        n = len(nodes)
        distances = np.full((n, n), math.inf)
        np.fill_diagonal(distances, 0.0)
        # 乱数の消費順序を固定するため (i < j) の昇順で重み付け
        for i, j in sorted((min(u, v), max(u, v)) for u, v in structure.edges()):
            if weight_range is not None:
                low, high = weight_range
                weight = random.next() * (high - low) + low
            else:
                weight = float(euclidean[i, j])
            distances[i, j] = weight
            distances[j, i] = weight

        short = [node for node in structure.nodes() if structure.degree(node) < k]
        if short:
            logger.debug("k-regular construction left %d node(s) with degree < %d", len(short), k)
        return distances

    @staticmethod
    def ring_chords_structure(n: int, k: int) -> nx.Graph:
        """
        閉路＋弦による辺構造（重みなし）を生成します。

        Args:
            n: ノード数
            k: 目標次数

        Returns:
            辺構造を表す nx.Graph（ノード 0 … n-1）

        Note:
            グラフが小さすぎる場合、一部のノードの次数はkに届きません。
        """
        structure = nx.Graph()
        structure.add_nodes_from(range(n))

        def can_link(u: int, v: int) -> bool:
            return (
                u != v
                and not structure.has_edge(u, v)
                and structure.degree(u) < k
                and structure.degree(v) < k
            )

        # 1. ハミルトン閉路
        for i in range(n):
            j = (i + 1) % n
            if i != j and not structure.has_edge(i, j):
                structure.add_edge(i, j)

        # 2. 弦
        for offset in range(2, k // 2 + 1):
            for i in range(n):
                j = (i + offset) % n
                if can_link(i, j):
                    structure.add_edge(i, j)

        # 3. 直径方向の辺
        if k % 2 == 1 and n % 2 == 0:
            half = n // 2
            for i in range(half):
                if can_link(i, i + half):
                    structure.add_edge(i, i + half)

        # 4. 次数不足の解消
        changed = True
        while changed:
            changed = False
            for i in range(n):
                while structure.degree(i) < k:
                    partner = None
                    for j in range(n):
                        if not can_link(i, j):
                            continue
                        if partner is None or structure.degree(j) < structure.degree(partner):
                            partner = j
                    if partner is None:
                        break
                    structure.add_edge(i, partner)
                    changed = True

        return structure

    @classmethod
    def _mst_knn_distances(cls, nodes: List[Node], params: GraphParams) -> np.ndarray:
        """
        最小全域木＋k近傍の距離行列

        【構築手順】
        1. ユークリッド距離に min/max の範囲制約を適用（範囲外は辺なし）
        2. Prim法で最小全域木（非連結なら全域森）を構築し、その辺を採用
        3. 各ノードについて、ユークリッド距離が近い順（同距離はID順）にk個の辺を追加

        Note:
            MSTの辺は常に保持されるため、次数はkを超える場合があります。
        """
        k = params.edges_per_node
        n = len(nodes)
        euclidean = cls.euclidean_matrix(nodes)
        pruned = cls._complete_distances(nodes, params.min_distance, params.max_distance)

        candidate = nx.Graph()
        candidate.add_nodes_from(range(n))
        for i in range(n):
            for j in range(i + 1, n):
                if math.isfinite(pruned[i, j]):
                    candidate.add_edge(i, j, weight=float(pruned[i, j]))
        mst = nx.minimum_spanning_tree(candidate, algorithm="prim")

        distances = np.full((n, n), math.inf)
        np.fill_diagonal(distances, 0.0)
        for u, v, data in mst.edges(data=True):
            distances[u, v] = data["weight"]
            distances[v, u] = data["weight"]

        for i in range(n):
            neighbours = sorted((j for j in range(n) if j != i), key=lambda j: (euclidean[i, j], j))
            for j in neighbours[:k]:
                distances[i, j] = euclidean[i, j]
                distances[j, i] = euclidean[i, j]

        return distances

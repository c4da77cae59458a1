"""
テスト共通のフィクスチャ
"""

import math
import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

# srcをPythonパスに追加
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from aco_tsp.config import AlgorithmParams
from aco_tsp.core.graph import TSPGraph
from aco_tsp.core.graph_builder import GraphBuilder
from aco_tsp.core.node import Node
from aco_tsp.core.random_source import RandomSource

INF = math.inf


def make_graph(coords, edges=None, initial_pheromone=0.1):
    """
    座標と辺リストからグラフを作る

    Args:
        coords: [(x, y), ...]
        edges: [(i, j), ...]（Noneなら完全グラフ）
    """
    nodes = [Node(id=i, x=x, y=y) for i, (x, y) in enumerate(coords)]
    euclidean = GraphBuilder.euclidean_matrix(nodes)
    if edges is None:
        distances = euclidean
    else:
        n = len(nodes)
        distances = np.full((n, n), INF)
        np.fill_diagonal(distances, 0.0)
        for i, j in edges:
            distances[i, j] = euclidean[i, j]
            distances[j, i] = euclidean[i, j]
    return TSPGraph(nodes, distances, initial_pheromone=initial_pheromone)


@pytest.fixture
def graph_factory():
    return make_graph


@pytest.fixture
def square_graph():
    """一辺10の正方形（最短巡回路は周長40）"""
    return make_graph([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)])


@pytest.fixture
def star_graph():
    """中心0と葉1, 2, 3だけの星型グラフ（巡回路が存在しない）"""
    coords = [(0.0, 0.0), (10.0, 0.0), (0.0, 10.0), (-10.0, 0.0)]
    return make_graph(coords, edges=[(0, 1), (0, 2), (0, 3)])


@pytest.fixture
def base_params():
    """既定値のACOパラメータ"""
    return AlgorithmParams()


@pytest.fixture
def fast_params():
    """小さなグラフ用の短い実行パラメータ"""
    return AlgorithmParams(ant_count=5, max_iterations=30, improvement_threshold=5)


@pytest.fixture
def rng():
    return RandomSource(seed=12345)

"""
コアモジュールのテスト
"""

import math

import numpy as np
import pytest

from aco_tsp.core.ant import Ant
from aco_tsp.core.node import Node
from aco_tsp.core.random_source import RandomSource


class TestNode:
    """Nodeクラスのテスト"""

    def test_immutable(self):
        node = Node(id=0, x=1.0, y=2.0)
        with pytest.raises(AttributeError):
            node.x = 5.0


class TestRandomSource:
    """RandomSourceクラスのテスト"""

    def test_same_seed_same_sequence(self):
        a = RandomSource(seed=42)
        b = RandomSource(seed=42)
        assert [a.next() for _ in range(20)] == [b.next() for _ in range(20)]

    def test_range(self):
        rng = RandomSource(seed=1)
        for _ in range(1000):
            value = rng.next()
            assert 0.0 <= value < 1.0

    def test_set_seed_restarts_sequence(self):
        rng = RandomSource(seed=7)
        first = [rng.next() for _ in range(5)]
        rng.next()
        rng.set_seed(7)
        assert [rng.next() for _ in range(5)] == first
        assert rng.seed == 7

    def test_clear_seed(self):
        rng = RandomSource(seed=7)
        rng.clear_seed()
        assert rng.seed is None
        assert 0.0 <= rng.next() < 1.0

    def test_next_int_inclusive(self):
        rng = RandomSource(seed=3)
        values = {rng.next_int(1, 3) for _ in range(500)}
        assert values == {1, 2, 3}

    def test_next_range(self):
        rng = RandomSource(seed=3)
        for _ in range(200):
            value = rng.next_range(10.0, 20.0)
            assert 10.0 <= value < 20.0


class TestAnt:
    """Antクラスのテスト"""

    def test_initialization(self):
        """初期化のテスト"""
        ant = Ant(ant_id=1, start_node=2)
        assert ant.ant_id == 1
        assert ant.position == 2
        assert ant.start_node == 2
        assert ant.tour == [2]
        assert ant.visited_count == 1
        assert ant.tour_length == 0.0
        assert not ant.is_closed

    def test_move_to(self):
        """移動のテスト"""
        ant = Ant(ant_id=0, start_node=0)
        ant.move_to(3)
        ant.move_to(1)
        assert ant.position == 1
        assert ant.tour == [0, 3, 1]
        assert ant.has_visited(3)
        assert not ant.has_visited(2)
        assert ant.get_unvisited_nodes(4) == [2]

    def test_move_to_visited_node_raises(self):
        ant = Ant(ant_id=0, start_node=0)
        ant.move_to(1)
        with pytest.raises(ValueError):
            ant.move_to(1)
        with pytest.raises(ValueError):
            ant.move_to(0)

    def test_close_tour_is_idempotent(self):
        """閉路化は1回だけ開始ノードを追加する"""
        ant = Ant(ant_id=0, start_node=2)
        ant.move_to(0)
        ant.move_to(1)
        ant.close_tour()
        ant.close_tour()
        assert ant.tour == [2, 0, 1, 2]
        assert ant.position == 2
        assert ant.is_closed
        # 戻った開始ノードは訪問数に数えない
        assert ant.visited_count == 3

    def test_move_after_close_raises(self):
        ant = Ant(ant_id=0, start_node=0)
        ant.close_tour()
        with pytest.raises(ValueError):
            ant.move_to(1)

    def test_single_node_tour(self):
        ant = Ant(ant_id=0, start_node=0)
        ant.close_tour()
        assert ant.tour == [0, 0]
        assert ant.has_visited_all(1)

    def test_reset(self):
        """リセットのテスト"""
        ant = Ant(ant_id=0, start_node=0)
        ant.move_to(1)
        ant.close_tour()
        ant.tour_length = 12.5

        ant.reset(3)
        assert ant.tour == [3]
        assert ant.position == 3
        assert ant.visited_count == 1
        assert ant.tour_length == 0.0
        assert not ant.is_closed

    def test_route_edges(self):
        ant = Ant(ant_id=0, start_node=0)
        ant.move_to(1)
        ant.move_to(2)
        ant.close_tour()
        assert ant.get_route_edges() == [(0, 1), (1, 2), (2, 0)]

    def test_copy_has_no_aliasing(self):
        """複製は元のアリと状態を共有しない"""
        ant = Ant(ant_id=4, start_node=0)
        ant.move_to(1)
        clone = ant.copy()

        ant.move_to(2)
        ant.tour_length = 99.0
        assert clone.tour == [0, 1]
        assert not clone.has_visited(2)
        assert clone.tour_length == 0.0
        assert clone.ant_id == 4

    def test_tour_property_is_copy(self):
        ant = Ant(ant_id=0, start_node=0)
        tour = ant.tour
        tour.append(5)
        assert ant.tour == [0]


class TestTSPGraph:
    """TSPGraphクラスのテスト"""

    def test_initialization(self, square_graph):
        assert square_graph.num_nodes == 4
        assert square_graph.get_distance(0, 1) == 10.0
        assert square_graph.get_distance(0, 2) == pytest.approx(math.sqrt(200))
        assert np.all(square_graph.pheromones == 0.1)
        assert repr(square_graph) == "TSPGraph(nodes=4, edges=6)"

    def test_rejects_asymmetric_matrix(self, graph_factory):
        graph = graph_factory([(0.0, 0.0), (1.0, 0.0)])
        distances = graph.get_distances()
        distances[0, 1] = 5.0
        with pytest.raises(ValueError):
            type(graph)(graph.nodes, distances)

    def test_rejects_negative_and_misshapen_matrix(self, graph_factory):
        graph = graph_factory([(0.0, 0.0), (1.0, 0.0)])
        with pytest.raises(ValueError):
            type(graph)(graph.nodes, np.array([[0.0, -1.0], [-1.0, 0.0]]))
        with pytest.raises(ValueError):
            type(graph)(graph.nodes, np.zeros((3, 3)))

    def test_distances_are_read_only(self, square_graph):
        with pytest.raises(ValueError):
            square_graph.distances[0, 1] = 1.0
        snapshot = square_graph.get_distances()
        snapshot[0, 1] = 1.0
        assert square_graph.get_distance(0, 1) == 10.0

    def test_calculate_distance(self, square_graph):
        """巡回路長の計算"""
        assert square_graph.calculate_distance([0, 1, 2, 3, 0]) == pytest.approx(40.0)
        assert square_graph.calculate_distance([0]) == 0.0
        assert square_graph.calculate_distance([]) == 0.0

    def test_calculate_distance_unreachable(self, star_graph):
        assert star_graph.calculate_distance([1, 0, 2]) == pytest.approx(20.0)
        assert star_graph.calculate_distance([1, 2]) == math.inf

    def test_reachable_nodes(self, star_graph, graph_factory):
        assert star_graph.get_reachable_nodes(0, [3, 1, 2]) == [3, 1, 2]
        assert star_graph.get_reachable_nodes(1, [2, 3]) == []

        # 距離0のノードは到達可能として扱わない
        graph = graph_factory([(0.0, 0.0), (0.0, 0.0), (5.0, 0.0)])
        assert graph.get_reachable_nodes(0, [1, 2]) == [2]

    def test_neighbors_and_degree(self, star_graph):
        assert star_graph.get_neighbors(0) == [1, 2, 3]
        assert star_graph.degree(0) == 3
        assert star_graph.degree(1) == 1
        assert not star_graph.has_edge(1, 2)
        assert not star_graph.has_edge(0, 0)

    def test_pheromone_update_is_symmetric(self, square_graph):
        """フェロモン更新は双方向"""
        square_graph.update_pheromone(0, 2, 0.7)
        assert square_graph.get_pheromone(2, 0) == 0.7

        square_graph.deposit_pheromone(1, 3, 0.4)
        assert square_graph.get_pheromone(1, 3) == pytest.approx(0.5)
        assert square_graph.get_pheromone(3, 1) == pytest.approx(0.5)

    def test_evaporate_and_reset(self, square_graph):
        square_graph.evaporate_pheromones(0.25)
        assert np.allclose(square_graph.pheromones, 0.075)

        square_graph.reset_pheromones(0.3)
        assert np.all(square_graph.get_pheromones() == 0.3)

    def test_pheromone_snapshot_is_copy(self, square_graph):
        snapshot = square_graph.get_pheromones()
        snapshot[0, 1] = 100.0
        assert square_graph.get_pheromone(0, 1) == 0.1

    def test_to_networkx(self, star_graph):
        nx_graph = star_graph.to_networkx()
        assert sorted(nx_graph.edges()) == [(0, 1), (0, 2), (0, 3)]
        assert nx_graph[0][1]["weight"] == 10.0
        assert nx_graph[0][1]["pheromone"] == 0.1
        assert nx_graph.nodes[2]["pos"] == (0.0, 10.0)

    def test_is_connected(self, star_graph, graph_factory):
        assert star_graph.is_connected()
        disconnected = graph_factory(
            [(0.0, 0.0), (1.0, 0.0), (5.0, 5.0)], edges=[(0, 1)]
        )
        assert not disconnected.is_connected()

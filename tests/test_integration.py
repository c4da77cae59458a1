"""
統合テスト

グラフ生成からACOの実行完了までをシナリオ単位で検証します。
"""

import math

import numpy as np
import pytest

from aco_tsp.algorithms.aco_engine import ACOEngine
from aco_tsp.algorithms.runner import run_scenario
from aco_tsp.config import AlgorithmParams, GraphParams, Topology
from aco_tsp.core.graph_builder import GraphBuilder
from aco_tsp.core.random_source import RandomSource
from aco_tsp.utils.metrics import MetricsCalculator

BASE_ALGORITHM_PARAMS = AlgorithmParams(
    ant_count=10,
    max_iterations=100,
    alpha=1.0,
    beta=5.0,
    evaporation_rate=0.5,
    q=100.0,
    elitist_count=5,
    improvement_threshold=10,
    initial_pheromone=0.1,
)


class FirstCandidateRandom:
    """常に0を返し、ルーレットで先頭の候補を選ばせる乱数源"""

    def next(self):
        return 0.0


def assert_well_formed(summary):
    """有限長の最良巡回路は妥当で、長さは再計算と一致する"""
    metrics = MetricsCalculator()
    graph = summary.graph
    assert summary.total_iterations == len(summary.iterations)
    assert 0 < summary.total_iterations <= summary.algorithm_params.max_iterations
    for result in summary.iterations:
        if math.isfinite(result.best_length):
            assert metrics.verify_result(result, graph)
            assert result.best_length <= result.average_length + 1e-9
    pheromones = graph.get_pheromones()
    assert np.array_equal(pheromones, pheromones.T)
    assert np.all(pheromones >= 0)


class TestCompleteGraphScenarios:
    """完全グラフのシナリオ"""

    def test_small_complete_graph(self):
        summary = run_scenario(
            "Small Complete Graph", GraphParams(count=10, seed=12345), BASE_ALGORITHM_PARAMS
        )

        assert math.isfinite(summary.final_best_length)
        assert summary.final_best_length > 0
        assert summary.total_iterations <= 100
        assert_well_formed(summary)
        # 完全グラフでは行き詰まらない
        assert all(math.isfinite(r.average_length) for r in summary.iterations)

        metrics = MetricsCalculator()
        assert metrics.is_valid_tour(summary.best_tour, 10)
        assert summary.graph.calculate_distance(summary.best_tour) == pytest.approx(
            summary.final_best_length
        )
        assert summary.final_best_length == min(r.best_length for r in summary.iterations)

    def test_medium_complete_graph(self):
        summary = run_scenario(
            "Medium Complete Graph", GraphParams(count=20, seed=54321), BASE_ALGORITHM_PARAMS
        )
        assert math.isfinite(summary.final_best_length)
        assert_well_formed(summary)

    def test_convergence_is_final(self):
        summary = run_scenario(
            "Small Complete Graph", GraphParams(count=10, seed=12345), BASE_ALGORITHM_PARAMS
        )
        converged = [r for r in summary.iterations if r.converged]
        assert len(converged) <= 1
        if converged:
            assert summary.iterations[-1] is converged[0]
            assert summary.convergence_iteration == converged[0].iteration
        else:
            assert summary.total_iterations == 100
            assert summary.convergence_iteration is None


class TestDeterminism:
    """再現性のシナリオ"""

    def test_same_seed_identical_results(self):
        graph_params = GraphParams(count=10, seed=12345)
        first = run_scenario("Determinism 1", graph_params, BASE_ALGORITHM_PARAMS)
        second = run_scenario("Determinism 2", graph_params, BASE_ALGORITHM_PARAMS)

        assert first.final_best_length == second.final_best_length
        assert first.convergence_iteration == second.convergence_iteration
        assert first.iterations == second.iterations
        assert first.best_tour == second.best_tour

    def test_k_regular_determinism(self):
        graph_params = GraphParams(count=15, edges_per_node=4, seed=2024)
        first = run_scenario("K-Regular 1", graph_params, BASE_ALGORITHM_PARAMS)
        second = run_scenario("K-Regular 2", graph_params, BASE_ALGORITHM_PARAMS)
        assert first.iterations == second.iterations


class TestKRegularScenarios:
    """k-正則グラフのシナリオ"""

    def test_sparse_k_regular_graph(self):
        summary = run_scenario(
            "Sparse K-Regular Graph",
            GraphParams(count=20, edges_per_node=4, seed=11111),
            BASE_ALGORITHM_PARAMS,
        )
        graph = summary.graph
        assert graph.is_connected()
        assert math.isfinite(graph.calculate_distance(list(range(20)) + [0]))
        assert_well_formed(summary)
        # 最初の構築以降、どの反復にも完成した巡回路がある
        assert all(math.isfinite(r.average_length) for r in summary.iterations[1:])
        if math.isfinite(summary.final_best_length):
            assert MetricsCalculator().is_valid_tour(summary.best_tour, 20)

    def test_dense_k_regular_graph(self):
        summary = run_scenario(
            "Dense K-Regular Graph",
            GraphParams(count=15, edges_per_node=8, seed=22222),
            BASE_ALGORITHM_PARAMS,
        )
        assert summary.graph.is_connected()
        assert_well_formed(summary)

    def test_mst_knn_graph(self):
        summary = run_scenario(
            "MST kNN Graph",
            GraphParams(count=15, edges_per_node=4, seed=33333, topology=Topology.MST_KNN),
            BASE_ALGORITHM_PARAMS,
        )
        assert summary.graph.is_connected()
        assert_well_formed(summary)


class TestParameterScenarios:
    """パラメータ感度のシナリオ"""

    def test_evaporation_rate_decay(self):
        """揮発率が高いほど、付加のない要素のフェロモンが速く減衰する"""
        graph_params = GraphParams(count=10, seed=12345)
        iterations = 5
        runs = {}
        for rate in (0.9, 0.1):
            params = AlgorithmParams(
                max_iterations=iterations, improvement_threshold=10, evaporation_rate=rate
            )
            summary = run_scenario(f"Evaporation {rate}", graph_params, params)
            assert summary.total_iterations == iterations
            runs[rate] = summary.graph.get_pheromones()

        high, low = runs[0.9], runs[0.1]
        # 対角要素には付加されないので、揮発だけが効く
        assert np.allclose(np.diag(high), 0.1 * (1 - 0.9) ** iterations, rtol=1e-9, atol=0)
        assert np.allclose(np.diag(low), 0.1 * (1 - 0.1) ** iterations, rtol=1e-9, atol=0)
        assert high.min() < low.min()

    def test_evaporation_rate_decay_on_unused_edges(self):
        """どの巡回路にも使われなかった辺は揮発だけで減衰する"""
        graph_params = GraphParams(count=10, seed=12345)
        iterations = 5
        runs = {}
        for rate in (0.9, 0.1):
            graph = GraphBuilder.build(graph_params, RandomSource(graph_params.seed))
            # 常に先頭の候補を選ぶので、アリ s の巡回路は s → 0 → 1 → … → 9 → s
            engine = ACOEngine(FirstCandidateRandom())
            params = AlgorithmParams(
                max_iterations=iterations, improvement_threshold=10, evaporation_rate=rate
            )
            used = set()
            results = []
            for result in engine.start(graph, params):
                results.append(result)
                for ant in engine.ants:
                    used.update(frozenset(edge) for edge in ant.get_route_edges())
            assert len(results) == iterations

            pheromones = graph.get_pheromones()
            unused = [
                (i, j)
                for i in range(10)
                for j in range(i + 1, 10)
                if frozenset((i, j)) not in used
            ]
            assert (3, 7) in unused
            for i, j in unused:
                assert pheromones[i, j] == pytest.approx(0.1 * (1 - rate) ** iterations, rel=1e-9)
            runs[rate] = pheromones

        high, low = runs[0.9], runs[0.1]
        assert high[3, 7] < low[3, 7]
        assert high[3, 7] < 0.1 * (1 - 0.1) ** iterations

    def test_single_ant(self):
        params = AlgorithmParams(ant_count=1)
        summary = run_scenario("Single Ant", GraphParams(count=10, seed=12345), params)
        for result in summary.iterations:
            assert result.average_length == result.best_length
        assert_well_formed(summary)

    @pytest.mark.parametrize(
        "overrides",
        [{"alpha": 2.0}, {"beta": 10.0}, {"ant_count": 50}, {"elitist_count": 0}],
    )
    def test_parameter_variants(self, overrides):
        params = AlgorithmParams(**{**BASE_ALGORITHM_PARAMS.to_dict(), **overrides})
        summary = run_scenario("Variant", GraphParams(count=10, seed=12345), params)
        assert math.isfinite(summary.final_best_length)
        assert_well_formed(summary)

"""
実験実行スクリプト

config.yamlの設定に基づきグラフを生成し、一定間隔でACOを実行して
反復ごとの結果と最終結果を表示します。
"""

import argparse
import logging
import math
import sys
from dataclasses import replace
from pathlib import Path

# プロジェクトルートをPythonパスに追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from aco_tsp.algorithms.aco_engine import ACOEngine
from aco_tsp.config import load_config, params_from_config
from aco_tsp.core.graph_builder import GraphBuilder
from aco_tsp.core.random_source import RandomSource
from aco_tsp.driver import IterationDriver
from aco_tsp.exceptions import ConfigurationError
from aco_tsp.utils.metrics import MetricsCalculator
from aco_tsp.utils.visualization import Visualizer


def build_argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ant Colony Optimization on a generated graph")
    parser.add_argument(
        "--config",
        type=Path,
        default=project_root / "config" / "config.yaml",
        help="設定ファイルのパス",
    )
    parser.add_argument("--seed", type=int, default=None, help="シード（設定ファイルより優先）")
    parser.add_argument("--interval", type=float, default=None, help="反復間隔（秒）")
    parser.add_argument("--plot", action="store_true", help="グラフと収束の図を保存")
    parser.add_argument("--verbose", action="store_true", help="DEBUGログを表示")
    return parser


def format_length(value: float) -> str:
    return f"{value:.2f}" if math.isfinite(value) else "inf"


def main(argv=None) -> int:
    args = build_argparser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = load_config(args.config)
    try:
        graph_params, algorithm_params = params_from_config(config)
    except ConfigurationError as e:
        print(f"設定エラー: {e}")
        return 2
    if args.seed is not None:
        graph_params = replace(graph_params, seed=args.seed)

    interval = args.interval
    if interval is None:
        interval = config.get("driver", {}).get("interval", 0.2)

    print(f"\n{'='*80}")
    print(f"Graph: count={graph_params.count}, topology={graph_params.resolved_topology.value}")
    print(f"Seed: {graph_params.seed}")
    print(f"{'='*80}")

    random = RandomSource(graph_params.seed)
    graph = GraphBuilder.build(
        graph_params, random, initial_pheromone=algorithm_params.initial_pheromone
    )
    print(f"  {graph!r}, connected={graph.is_connected()}")

    engine = ACOEngine(random)
    driver = IterationDriver(engine, interval=interval)

    def report(result):
        mark = " *converged*" if result.converged else ""
        print(
            f"  Iteration {result.iteration:4d}: best={format_length(result.best_length)}, "
            f"avg={format_length(result.average_length)}{mark}"
        )

    try:
        results = driver.run(graph, algorithm_params, on_iteration=report)
    except KeyboardInterrupt:
        driver.stop()
        results = driver.history
        print("\n中断しました")

    metrics = MetricsCalculator()
    print(f"\n{'='*80}")
    best_ant = engine.best_ant
    if results and best_ant is not None:
        print(f"Best Tour: {' -> '.join(map(str, best_ant.tour))}")
        print(f"Best Length: {format_length(best_ant.tour_length)}")
        print(f"Iterations: {len(results)}")
        print(f"Converged at: {driver.convergence_iteration or 'N/A'}")
        print(f"Improvement: {metrics.improvement_ratio(results) * 100:.1f}%")
        print(f"Valid Tour: {metrics.is_valid_tour(best_ant.tour, graph.num_nodes)}")
        stats = metrics.pheromone_statistics(graph)
        print(
            f"Pheromone: mean={stats['mean']:.4f}, min={stats['min']:.4f}, "
            f"max={stats['max']:.4f}, edges={stats['edges']}"
        )
    else:
        print("反復結果がありません")

    if args.plot and results:
        output_dir = project_root / config.get("output", {}).get("dir", "results")
        visualizer = Visualizer(output_dir)
        visualizer.plot_graph(graph, best_ant.tour if best_ant is not None else None)
        visualizer.plot_convergence(results)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

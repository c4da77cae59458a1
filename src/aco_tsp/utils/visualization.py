"""
可視化モジュール

グラフ（ノード・辺・フェロモン・最良巡回路）と、反復ごとの最良長/平均長の推移を描画します。
グラフはスナップショット（get_distances()/get_pheromones()）のみを参照します。
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from ..algorithms.aco_engine import IterationResult
from ..core.graph import TSPGraph
from .metrics import MetricsCalculator

logger = logging.getLogger(__name__)


class Visualizer:
    """可視化を行うクラス"""

    def __init__(self, output_dir: Path):
        """
        Args:
            output_dir: 出力ディレクトリ（存在しなければ作成）
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.metrics = MetricsCalculator()

    def plot_graph(
        self,
        graph: TSPGraph,
        best_tour: Optional[Sequence[int]] = None,
        filename: str = "graph.png",
    ) -> Path:
        """
        ノード座標に辺と最良巡回路を描画します。

        辺の太さはフェロモン量に比例します（最大値で正規化）。

        Args:
            graph: 描画するグラフ
            best_tour: 強調表示する巡回路（Noneなら描画しない）
            filename: 保存するファイル名

        Returns:
            保存したファイルのパス
        """
        distances = graph.get_distances()
        pheromones = graph.get_pheromones()
        xs = [node.x for node in graph.nodes]
        ys = [node.y for node in graph.nodes]

        n = graph.num_nodes
        upper = np.triu(np.isfinite(distances), k=1)
        max_pheromone = float(pheromones[upper].max()) if upper.any() else 0.0

        fig, ax = plt.subplots(figsize=(8, 8))

        for i in range(n):
            for j in range(i + 1, n):
                if not upper[i, j]:
                    continue
                width = 0.3
                if max_pheromone > 0:
                    width += 4.0 * pheromones[i, j] / max_pheromone
                ax.plot([xs[i], xs[j]], [ys[i], ys[j]], color="gray", linewidth=width, alpha=0.5)

        if best_tour:
            tour_x = [xs[node] for node in best_tour]
            tour_y = [ys[node] for node in best_tour]
            ax.plot(tour_x, tour_y, color="red", linewidth=2.0, label="Best Tour")
            ax.legend()

        ax.scatter(xs, ys, c="lightblue", edgecolors="black", s=150, zorder=3)
        for node in graph.nodes:
            ax.annotate(str(node.id), (node.x, node.y), ha="center", va="center", fontsize=8, zorder=4)

        ax.set_xlabel("x", fontsize=12)
        ax.set_ylabel("y", fontsize=12)
        ax.set_aspect("equal")

        output_path = self.output_dir / filename
        plt.tight_layout()
        plt.savefig(output_path, dpi=150)
        plt.close(fig)
        logger.info("Saved: %s", output_path)
        return output_path

    def plot_convergence(
        self,
        results: Sequence[IterationResult],
        filename: str = "convergence.png",
    ) -> Path:
        """
        反復ごとの最良長・平均長と、それまでの最短長の推移

        有限でない値は描画しません。収束した反復には縦線を引きます。

        Args:
            results: 反復結果のリスト
            filename: 保存するファイル名

        Returns:
            保存したファイルのパス
        """
        fig, ax = plt.subplots(figsize=(10, 6))

        iterations = [r.iteration for r in results]
        best = np.array(self.metrics.best_length_history(results), dtype=float)
        average = np.array(self.metrics.average_length_history(results), dtype=float)
        best[~np.isfinite(best)] = np.nan
        average[~np.isfinite(average)] = np.nan

        best_so_far = np.fmin.accumulate(best)

        ax.plot(iterations, best, marker="o", markersize=3, label="Iteration Best")
        ax.plot(iterations, best_so_far, color="black", linestyle="--", label="Best So Far")
        ax.plot(iterations, average, marker="x", markersize=3, alpha=0.7, label="Average Length")

        converged = self.metrics.convergence_iteration(results)
        if converged is not None:
            ax.axvline(converged, color="red", linestyle="--", label=f"Converged ({converged})")

        ax.set_xlabel("Iteration", fontsize=12)
        ax.set_ylabel("Tour Length", fontsize=12)
        ax.legend()
        ax.grid(True, alpha=0.3)

        output_path = self.output_dir / filename
        plt.tight_layout()
        plt.savefig(output_path, dpi=150)
        plt.close(fig)
        logger.info("Saved: %s", output_path)
        return output_path

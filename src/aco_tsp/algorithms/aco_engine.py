"""
ACOエンジンモジュール

Ant Systemに基づく巡回路探索のメインループを実装します。

【アルゴリズム概要】
1. 構築フェーズ：(n-1)ステップの間、各アリが確率的遷移規則で次のノードへ移動
2. 閉路化：各アリが開始ノードへ戻り、巡回路長を計算
3. 反復内最良：有限長の巡回路の中で最短のアリを選び、これまでの最良解と比較
4. フェロモン更新：全体を揮発させ、全アリとエリート（最良解）が付加
5. 収束判定：最良解が改善しない反復が improvement_threshold 回続けば収束
6. 次の反復に備えてアリを初期位置（index mod n）に戻す

【実行モデル】
start() は反復結果を1件ずつ返す遅延シーケンス（ジェネレータ）を返します。
1回の next() で1反復分の処理を同期的に行い、反復の間でのみ制御を返します。
stop() は協調的な停止要求で、実行中の反復は完了・出力された後に停止します。
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple

import numpy as np

from ..config import AlgorithmParams
from ..core.ant import Ant
from ..core.graph import TSPGraph
from ..core.random_source import RandomLike, RandomSource
from ..exceptions import ConfigurationError, DegenerateTourAnomaly, StuckAgentAnomaly
from ..modules.pheromone import PheromoneEvaporator, PheromoneUpdater

logger = logging.getLogger(__name__)


class AlgorithmStatus(Enum):
    """エンジンの実行状態"""

    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True)
class IterationResult:
    """
    1反復分の結果（不変のスナップショット）

    Attributes:
        iteration: 反復番号（1始まり）
        best_tour: この反復で最短の巡回路（閉路、末尾は開始ノード）
        best_length: best_tour の長さ（これまでの最良解は ACOEngine.best_ant で参照）
        average_length: この反復で完成した巡回路の平均長（完成した巡回路がなければ +inf）
        converged: この反復で収束と判定されたか（Trueなら最後の反復）
    """

    iteration: int
    best_tour: Tuple[int, ...]
    best_length: float
    average_length: float
    converged: bool


StatusListener = Callable[[AlgorithmStatus], None]


class ACOEngine:
    """
    ACOエンジン

    - アリの集団を保持し、反復ごとの構築・更新プロトコルを実行
    - グラフ（距離・フェロモン）は参照のみ保持し、フェロモンの更新はこのクラスだけが行う
    - 状態は STOPPED → RUNNING → STOPPED と遷移

    Attributes:
        random (RandomLike): 遷移規則で使う一様乱数源
        graph (Optional[TSPGraph]): 実行中のグラフ
        params (Optional[AlgorithmParams]): 実行中のパラメータ

    Example:
        >>> engine = ACOEngine(RandomSource(seed=1))
        >>> for result in engine.start(graph, AlgorithmParams()):
        ...     print(result.iteration, result.best_length)
    """

    def __init__(self, random: Optional[RandomLike] = None):
        """
        Args:
            random: 一様乱数源（Noneならシードなしの RandomSource）
        """
        self.random: RandomLike = random if random is not None else RandomSource()
        self.graph: Optional[TSPGraph] = None
        self.params: Optional[AlgorithmParams] = None

        self._status = AlgorithmStatus.STOPPED
        self._listeners: List[StatusListener] = []
        self._run_token: Optional[object] = None

        self._ants: List[Ant] = []
        self._best_ant: Optional[Ant] = None
        self._no_improvement_count = 0
        self._updater: Optional[PheromoneUpdater] = None
        self._evaporator: Optional[PheromoneEvaporator] = None

    # ---- 状態 ---------------------------------------------------------------
    @property
    def status(self) -> AlgorithmStatus:
        return self._status

    @property
    def ants(self) -> List[Ant]:
        """各アリの複製（エンジン内部のアリは変更できない）"""
        return [ant.copy() for ant in self._ants]

    @property
    def best_ant(self) -> Optional[Ant]:
        """これまでの最良アリの複製（未実行ならNone）"""
        return self._best_ant.copy() if self._best_ant is not None else None

    def add_status_listener(self, listener: StatusListener) -> None:
        """状態が変化したときに呼ばれるコールバックを登録"""
        self._listeners.append(listener)

    def remove_status_listener(self, listener: StatusListener) -> None:
        self._listeners.remove(listener)

    def _set_status(self, status: AlgorithmStatus) -> None:
        if status == self._status:
            return
        self._status = status
        for listener in list(self._listeners):
            listener(status)

    # ---- 公開API ------------------------------------------------------------
    def start(self, graph: TSPGraph, params: AlgorithmParams) -> Iterator[IterationResult]:
        """
        ACOを開始し、反復結果の遅延シーケンスを返します。

        Args:
            graph: 対象グラフ（フェロモンは params.initial_pheromone に初期化される）
            params: ACOパラメータ

        Returns:
            IterationResult を1反復ごとに返すイテレータ。収束・最大反復数・stop() で終了

        Raises:
            ConfigurationError: パラメータまたはグラフが不正な場合（反復は1件も生成されない）

        Note:
            実行中に再度 start() した場合、前の実行は停止扱いとなり、
            前のイテレータは次の next() で終了します。
        """
        params.validate()
        if graph.num_nodes < 1:
            raise ConfigurationError("graph must contain at least one node")

        if self._status == AlgorithmStatus.RUNNING:
            logger.info("Restarting: previous run is stopped")
            self._set_status(AlgorithmStatus.STOPPED)

        self.graph = graph
        self.params = params
        self._updater = PheromoneUpdater(params)
        self._evaporator = PheromoneEvaporator(params)
        self._best_ant = None
        self._no_improvement_count = 0

        graph.reset_pheromones(params.initial_pheromone)
        self._ants = [Ant(ant_id=i, start_node=i % graph.num_nodes) for i in range(params.ant_count)]

        token = object()
        self._run_token = token
        self._set_status(AlgorithmStatus.RUNNING)
        logger.info(
            "ACO started: %d ants, %d nodes, max %d iterations",
            params.ant_count,
            graph.num_nodes,
            params.max_iterations,
        )
        return self._iterate(token)

    def stop(self) -> None:
        """
        停止を要求します（冪等）。

        実行中の反復は完了し、その結果は出力されます。
        """
        if self._status == AlgorithmStatus.RUNNING:
            logger.info("ACO stop requested")
        self._set_status(AlgorithmStatus.STOPPED)

    # ---- メインループ -------------------------------------------------------
    def _is_active(self, token: object) -> bool:
        return self._run_token is token and self._status == AlgorithmStatus.RUNNING

    def _iterate(self, token: object) -> Iterator[IterationResult]:
        iteration = 0
        try:
            while iteration < self.params.max_iterations and self._is_active(token):
                iteration += 1
                result = self._execute_iteration(iteration)
                yield result

                if not self._is_active(token) or result.converged:
                    break
                if iteration >= self.params.max_iterations:
                    break
                self._reset_ants()
        finally:
            if self._run_token is token:
                self._set_status(AlgorithmStatus.STOPPED)

    def _execute_iteration(self, iteration: int) -> IterationResult:
        """
        1反復分の処理を行います。

        Args:
            iteration: 反復番号（1始まり）

        Returns:
            この反復の結果
        """
        graph = self.graph
        n = graph.num_nodes

        # 1. 構築フェーズ
        for _ in range(n - 1):
            self._move_ants()

        # 2. 閉路化と巡回路長
        for ant in self._ants:
            ant.close_tour()
            if ant.visited_count == n:
                ant.tour_length = graph.calculate_distance(ant.tour)
            else:
                # 途中で行き詰まった巡回路は無限大として扱う
                ant.tour_length = math.inf

        # 3. 反復内最良と最良解の更新
        iteration_best = self._find_best_ant()
        best_ever_length = self._best_ant.tour_length if self._best_ant is not None else math.inf
        improved = iteration_best.tour_length < best_ever_length
        if self._best_ant is None or improved:
            self._best_ant = iteration_best.copy()
        if improved:
            self._no_improvement_count = 0
        else:
            self._no_improvement_count += 1

        finite_lengths = [ant.tour_length for ant in self._ants if math.isfinite(ant.tour_length)]
        if finite_lengths:
            average_length = sum(finite_lengths) / len(finite_lengths)
        else:
            logger.warning("Iteration %d: every ant produced an incomplete tour", iteration)
            average_length = math.inf

        # 4. フェロモン更新
        self._update_pheromones()

        # 5. 収束判定
        converged = self._no_improvement_count >= self.params.improvement_threshold
        if converged:
            logger.info(
                "Converged at iteration %d (best %.4f)", iteration, self._best_ant.tour_length
            )

        result = IterationResult(
            iteration=iteration,
            best_tour=tuple(iteration_best.tour),
            best_length=iteration_best.tour_length,
            average_length=average_length,
            converged=converged,
        )
        logger.debug(
            "Iteration %d: best=%.4f avg=%.4f", iteration, result.best_length, average_length
        )
        return result

    def _move_ants(self) -> None:
        """全アリを1ステップ進める（全ノード訪問済み・閉路化済みのアリは待機）"""
        n = self.graph.num_nodes
        for ant in self._ants:
            if ant.is_closed or ant.has_visited_all(n):
                continue
            try:
                next_node = self._select_next_node(ant)
            except StuckAgentAnomaly as anomaly:
                logger.warning("%s; closing tour early", anomaly)
                ant.close_tour()
                continue
            ant.move_to(next_node)

    def _select_next_node(self, ant: Ant) -> int:
        """
        確率的遷移規則で次のノードを選択します。

        【遷移確率】
        p(j) ∝ τ(i,j)^α · η(i,j)^β、η(i,j) = 1 / d(i,j)

        - 候補：未訪問かつ到達可能（有限かつ正の距離）なノード
        - 候補が1つなら決定的に選択
        - 重みの合計が0以下なら候補から一様に選択

        Raises:
            StuckAgentAnomaly: 到達可能な未訪問ノードがない場合
        """
        graph = self.graph
        current = ant.position
        unvisited = ant.get_unvisited_nodes(graph.num_nodes)
        if not unvisited:
            return ant.start_node

        candidates = graph.get_reachable_nodes(current, unvisited)
        if not candidates:
            raise StuckAgentAnomaly(ant.ant_id, current)
        if len(candidates) == 1:
            return candidates[0]

        weights = self._attractiveness(current, candidates)
        total = float(weights.sum())
        if not total > 0:
            index = int(self.random.next() * len(candidates))
            return candidates[min(index, len(candidates) - 1)]

        threshold = self.random.next() * total
        cumulative = 0.0
        for node, weight in zip(candidates, weights):
            cumulative += float(weight)
            if threshold <= cumulative:
                return node
        return candidates[-1]

    def _attractiveness(self, current: int, candidates: List[int]) -> np.ndarray:
        """各候補への τ^α · η^β（距離0の候補は η = +inf）"""
        graph = self.graph
        pheromone = graph.pheromones[current, candidates]
        distance = graph.distances[current, candidates]
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            visibility = np.where(distance == 0, np.inf, 1.0 / distance)
            weights = np.power(pheromone, self.params.alpha) * np.power(visibility, self.params.beta)
        return np.nan_to_num(weights, nan=0.0)

    def _find_best_ant(self) -> Ant:
        """
        有限長の巡回路の中で最短のアリを返します。

        全アリが無限大の場合は先頭のアリを返します。
        """
        best = self._ants[0]
        for ant in self._ants:
            if not math.isfinite(ant.tour_length):
                continue
            if not math.isfinite(best.tour_length) or ant.tour_length < best.tour_length:
                best = ant
        return best

    def _update_pheromones(self) -> None:
        """揮発 → 全アリの付加 → エリート付加"""
        graph = self.graph
        self._evaporator.evaporate(graph)

        for ant in self._ants:
            try:
                self._updater.deposit_tour(graph, ant.get_route_edges(), ant.tour_length)
            except DegenerateTourAnomaly as anomaly:
                logger.debug("Ant %d skipped: %s", ant.ant_id, anomaly)

        if self._best_ant is not None and self.params.elitist_count > 0:
            try:
                self._updater.deposit_elite(
                    graph, self._best_ant.get_route_edges(), self._best_ant.tour_length
                )
            except DegenerateTourAnomaly as anomaly:
                logger.debug("Elitist deposit skipped: %s", anomaly)

    def _reset_ants(self) -> None:
        n = self.graph.num_nodes
        for i, ant in enumerate(self._ants):
            ant.reset(i % n)

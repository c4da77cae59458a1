"""
実行ドライバ

一定間隔（tick）ごとにエンジンから1反復ずつ取り出す外部ドライバです。
反復の間で停止要求を確認し、履歴と収束した反復番号を保持します。
"""

import logging
import time
from typing import Callable, List, Optional

from .algorithms.aco_engine import ACOEngine, AlgorithmStatus, IterationResult
from .config import AlgorithmParams
from .core.graph import TSPGraph

logger = logging.getLogger(__name__)


class IterationDriver:
    """
    一定間隔でACOエンジンを駆動するクラス

    Attributes:
        engine (ACOEngine): 駆動するエンジン
        interval (float): 反復間の待ち時間（秒）
        history (List[IterationResult]): これまでに受け取った反復結果
        convergence_iteration (Optional[int]): 収束した反復番号
    """

    def __init__(
        self,
        engine: ACOEngine,
        interval: float = 0.2,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            engine: 駆動するエンジン
            interval: 反復間の待ち時間（秒）
            sleep: 待機関数（テストでは差し替え可能）
        """
        if interval < 0:
            raise ValueError(f"interval must be >= 0, got {interval}")
        self.engine = engine
        self.interval = interval
        self._sleep = sleep
        self.history: List[IterationResult] = []
        self.convergence_iteration: Optional[int] = None

    @property
    def running(self) -> bool:
        return self.engine.status == AlgorithmStatus.RUNNING

    def run(
        self,
        graph: TSPGraph,
        params: AlgorithmParams,
        on_iteration: Optional[Callable[[IterationResult], None]] = None,
    ) -> List[IterationResult]:
        """
        シーケンスが終わるか停止されるまで、tickごとに1反復ずつ実行します。

        Args:
            graph: 対象グラフ
            params: ACOパラメータ
            on_iteration: 反復結果を受け取るコールバック（コールバック内で stop() してよい）

        Returns:
            受け取った反復結果のリスト
        """
        self.history = []
        self.convergence_iteration = None
        iterator = self.engine.start(graph, params)

        for result in iterator:
            self.history.append(result)
            if result.converged and self.convergence_iteration is None:
                self.convergence_iteration = result.iteration
            if on_iteration is not None:
                on_iteration(result)
            if not self.running:
                break
            # 最後の結果の後は待たない（次の next() でシーケンスが終わる）
            if not (result.converged or result.iteration >= params.max_iterations):
                self._sleep(self.interval)

        logger.info("Driver finished after %d iteration(s)", len(self.history))
        return list(self.history)

    def stop(self) -> None:
        """エンジンに停止を要求（次の反復の前に反映される）"""
        self.engine.stop()

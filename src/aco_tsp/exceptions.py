"""
例外モジュール

【分類】
- ConfigurationError: 実行前に検出されるパラメータ不正（致命的、再試行しない）
- StuckAgentAnomaly: 未訪問ノードへ到達できないアリ（回復可能、ログのみ）
- DegenerateTourAnomaly: 長さ0または無限大の巡回路へのフェロモン付加（回復可能、スキップ）
"""


class ACOError(Exception):
    """パッケージ内の全例外の基底クラス"""


class ConfigurationError(ACOError, ValueError):
    """GraphParams / AlgorithmParams が不正な場合に送出"""


class StuckAgentAnomaly(ACOError):
    """
    到達可能な未訪問ノードが存在しないアリ

    Attributes:
        ant_id (int): アリの識別子
        node (int): 行き止まりとなったノードID
    """

    def __init__(self, ant_id: int, node: int):
        super().__init__(f"Ant {ant_id} at node {node} has no reachable unvisited nodes")
        self.ant_id = ant_id
        self.node = node


class DegenerateTourAnomaly(ACOError):
    """
    フェロモン付加量を定義できない巡回路（長さが0または有限でない）

    Attributes:
        tour_length (float): 問題の巡回路長
    """

    def __init__(self, tour_length: float):
        super().__init__(f"Cannot deposit pheromone for tour of length {tour_length}")
        self.tour_length = tour_length

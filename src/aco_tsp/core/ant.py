"""
アリ（Ant）クラス

ACOにおける探索エージェントを表現するモジュール。

【アリの役割】
開始ノードから全ノードを一度ずつ訪問し、最後に開始ノードへ戻る巡回路を構築する。

【主要機能】
1. 経路記憶（タブーリスト）：訪問済みノードを集合で保持し、O(1)で判定
2. 巡回路：訪問順のノード列（閉路化すると末尾に開始ノードが付く）
3. 巡回路長：閉路化後にグラフ側で計算された総距離
"""

from typing import List, Set, Tuple


class Ant:
    """
    ACOにおけるアリを表現するクラス

    各アリは反復ごとに reset() され、同じ反復内では互いに独立して移動します。

    Attributes:
        ant_id (int): アリの識別子（エンジン内の挿入順）
        position (int): 現在のノードID
        tour_length (float): 巡回路長（閉路化前は0）

    Example:
        >>> ant = Ant(ant_id=0, start_node=2)
        >>> ant.move_to(0)
        >>> ant.move_to(1)
        >>> ant.close_tour()
        >>> ant.tour
        [2, 0, 1, 2]
    """

    def __init__(self, ant_id: int, start_node: int = 0):
        """
        Args:
            ant_id: アリの識別子
            start_node: 開始ノードID
        """
        self.ant_id = ant_id
        self.reset(start_node)

    def reset(self, start_node: int = 0) -> None:
        """
        新しい反復のために状態を初期化します。

        Args:
            start_node: 開始ノードID

        Note:
            巡回路とタブーリストは [start_node] のみになり、tour_length は0に戻ります。
        """
        self.position = start_node
        self._tour: List[int] = [start_node]
        self._tabu: Set[int] = {start_node}
        self._closed = False
        self.tour_length: float = 0.0

    @property
    def tour(self) -> List[int]:
        """訪問順のノード列（コピー）"""
        return list(self._tour)

    @property
    def start_node(self) -> int:
        return self._tour[0]

    @property
    def visited_count(self) -> int:
        """訪問済みノード数（閉路化で戻った開始ノードは数えない）"""
        return len(self._tabu)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def move_to(self, node: int) -> None:
        """
        次のノードへ移動します。

        Args:
            node: 移動先ノードID

        Raises:
            ValueError: 訪問済みのノード、または閉路化済みの巡回路に対して呼ばれた場合

        Note:
            開始ノードへ戻る移動は close_tour() でのみ行います。
        """
        if self._closed:
            raise ValueError(f"Ant {self.ant_id} has already closed its tour")
        if self.has_visited(node):
            raise ValueError(f"Ant {self.ant_id} has already visited node {node}")
        self.position = node
        self._tour.append(node)
        self._tabu.add(node)

    def close_tour(self) -> None:
        """
        開始ノードへ戻って巡回路を閉じます。

        Note:
            既に閉じている場合、または巡回路が空の場合は何もしません（冪等）。
            単一ノードの巡回路も [s, s] として閉じます。
        """
        if self._closed or not self._tour:
            return
        self._tour.append(self._tour[0])
        self.position = self._tour[0]
        self._closed = True

    def has_visited(self, node: int) -> bool:
        """タブーリストに含まれるか"""
        return node in self._tabu

    def get_unvisited_nodes(self, total_nodes: int) -> List[int]:
        """未訪問ノードのIDを昇順で返す"""
        return [i for i in range(total_nodes) if not self.has_visited(i)]

    def has_visited_all(self, total_nodes: int) -> bool:
        return len(self._tabu) >= total_nodes

    def get_route_edges(self) -> List[Tuple[int, int]]:
        """
        巡回路のエッジリストを取得します。

        Returns:
            [(node_i, node_j), ...] のリスト。巡回路の連続するノードペア
        """
        return [(self._tour[i], self._tour[i + 1]) for i in range(len(self._tour) - 1)]

    def copy(self) -> "Ant":
        """エイリアスを持たない複製（最良解の保持用）"""
        clone = Ant.__new__(Ant)
        clone.ant_id = self.ant_id
        clone.position = self.position
        clone._tour = list(self._tour)
        clone._tabu = set(self._tabu)
        clone._closed = self._closed
        clone.tour_length = self.tour_length
        return clone

    def __repr__(self) -> str:
        return (
            f"Ant(id={self.ant_id}, position={self.position}, "
            f"tour_len={len(self._tour)}, closed={self._closed}, L={self.tour_length:.2f})"
        )

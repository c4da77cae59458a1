"""
乱数源モジュール

グラフ生成とACOエンジンが共有する一様乱数 [0, 1) の供給源です。
シードを与えると再現可能な乱数列になります。
"""

import random
from typing import Optional, Protocol


class RandomLike(Protocol):
    """next() で [0, 1) の一様乱数を返すオブジェクト"""

    def next(self) -> float:
        ...


class RandomSource:
    """
    シード付き/シードなしの一様乱数源

    Attributes:
        seed (Optional[int]): 現在のシード（Noneならシステム時刻等から初期化）

    Example:
        >>> rng = RandomSource(seed=42)
        >>> 0.0 <= rng.next() < 1.0
        True
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def set_seed(self, seed: int) -> None:
        """シードを設定し、乱数列を先頭から再開"""
        self.seed = seed
        self._rng = random.Random(seed)

    def clear_seed(self) -> None:
        """シードを解除（以降は非決定的）"""
        self.seed = None
        self._rng = random.Random()

    def next(self) -> float:
        """[0, 1) の一様乱数"""
        return self._rng.random()

    def next_int(self, low: int, high: int) -> int:
        """[low, high] の一様な整数（両端を含む）"""
        return int(self.next() * (high - low + 1)) + low

    def next_range(self, low: float, high: float) -> float:
        """[low, high) の一様乱数"""
        return self.next() * (high - low) + low

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"

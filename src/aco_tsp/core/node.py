"""
ノードモジュール

平面上に配置された巡回対象ノード（都市）を表します。
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Node:
    """
    グラフのノード（生成後は不変）

    Attributes:
        id (int): ノードID（距離行列のインデックスと一致）
        x (float): x座標
        y (float): y座標
    """

    id: int
    x: float
    y: float

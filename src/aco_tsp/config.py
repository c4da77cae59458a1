"""
設定モジュール

グラフ生成パラメータ（GraphParams）とACOパラメータ（AlgorithmParams）を定義し、
config.yamlから読み込む機能を提供します。

config.yamlのキーはsnake_caseが基本ですが、既存のcamelCase表記
（antCount, evaporationRate, Q など）も受け付けます。
"""

import math
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .exceptions import ConfigurationError

# ring_chords で片側のみ指定された場合の重みの既定範囲
DEFAULT_MIN_WEIGHT = 10.0
DEFAULT_MAX_WEIGHT = 100.0


class Topology(Enum):
    """グラフの接続トポロジ"""

    COMPLETE = "complete"
    RING_CHORDS = "ring_chords"
    MST_KNN = "mst_knn"


_GRAPH_KEYS = {
    "count": "count",
    "edges_per_node": "edges_per_node",
    "edgesPerNode": "edges_per_node",
    "maxEdgesPerNode": "edges_per_node",
    "min_distance": "min_distance",
    "minDistance": "min_distance",
    "max_distance": "max_distance",
    "maxDistance": "max_distance",
    "seed": "seed",
    "topology": "topology",
}

_ALGORITHM_KEYS = {
    "ant_count": "ant_count",
    "antCount": "ant_count",
    "max_iterations": "max_iterations",
    "maxIterations": "max_iterations",
    "alpha": "alpha",
    "beta": "beta",
    "evaporation_rate": "evaporation_rate",
    "evaporationRate": "evaporation_rate",
    "rho": "evaporation_rate",
    "q": "q",
    "Q": "q",
    "elitist_count": "elitist_count",
    "elitistCount": "elitist_count",
    "improvement_threshold": "improvement_threshold",
    "improvementThreshold": "improvement_threshold",
    "initial_pheromone": "initial_pheromone",
    "initialPheromone": "initial_pheromone",
}


def _normalize_keys(data: Dict[str, Any], mapping: Dict[str, str], section: str) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in mapping:
            raise ConfigurationError(f"Unknown {section} parameter: {key}")
        normalized[mapping[key]] = value
    return normalized


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class GraphParams:
    """
    グラフ生成パラメータ

    Attributes:
        count: ノード数（1以上）
        edges_per_node: 1ノードあたりの辺数k（指定時はk-正則トポロジ、2以上）
        min_distance: 距離の下限（範囲外の辺は削除）／ring_chordsでは重みの下限
        max_distance: 距離の上限（範囲外の辺は削除）／ring_chordsでは重みの上限
        seed: 乱数シード（Noneの場合は非決定的）
        topology: トポロジを明示する場合に指定（Noneなら edges_per_node から決定）
    """

    count: int = 10
    edges_per_node: Optional[int] = None
    min_distance: Optional[float] = None
    max_distance: Optional[float] = None
    seed: Optional[int] = None
    topology: Optional[Topology] = None

    @property
    def resolved_topology(self) -> Topology:
        """実際に使用するトポロジ"""
        if self.topology is not None:
            return self.topology
        if self.edges_per_node is not None:
            return Topology.RING_CHORDS
        return Topology.COMPLETE

    @property
    def random_weight_range(self) -> Optional[Tuple[float, float]]:
        """
        ring_chords の一様乱数重みの範囲 [low, high)

        Returns:
            min/max のどちらも指定されていない、またはring_chords以外の場合はNone
        """
        if self.resolved_topology != Topology.RING_CHORDS:
            return None
        if self.min_distance is None and self.max_distance is None:
            return None
        low = self.min_distance if self.min_distance is not None else DEFAULT_MIN_WEIGHT
        high = self.max_distance if self.max_distance is not None else DEFAULT_MAX_WEIGHT
        return low, high

    def validate(self) -> "GraphParams":
        """
        パラメータを検証します。

        Returns:
            自分自身（チェーン呼び出し用）

        Raises:
            ConfigurationError: 値が範囲外の場合
        """
        if not _is_int(self.count) or self.count < 1:
            raise ConfigurationError(f"count must be an integer >= 1, got {self.count!r}")
        if self.edges_per_node is not None:
            if not _is_int(self.edges_per_node) or self.edges_per_node < 2:
                raise ConfigurationError(
                    f"edges_per_node must be an integer >= 2, got {self.edges_per_node!r}"
                )
        if self.resolved_topology != Topology.COMPLETE and self.edges_per_node is None:
            raise ConfigurationError(
                f"topology {self.resolved_topology.value} requires edges_per_node"
            )
        if self.min_distance is not None and not self.min_distance >= 0:
            raise ConfigurationError(f"min_distance must be >= 0, got {self.min_distance!r}")
        if self.max_distance is not None and not self.max_distance > 0:
            raise ConfigurationError(f"max_distance must be > 0, got {self.max_distance!r}")
        if (
            self.min_distance is not None
            and self.max_distance is not None
            and self.min_distance > self.max_distance
        ):
            raise ConfigurationError(
                f"min_distance ({self.min_distance}) exceeds max_distance ({self.max_distance})"
            )
        weight_range = self.random_weight_range
        if weight_range is not None and weight_range[0] > weight_range[1]:
            raise ConfigurationError(
                f"ring_chords weight range is reversed: [{weight_range[0]}, {weight_range[1]})"
            )
        return self

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "GraphParams":
        """辞書（config.yamlの graph セクション）から生成"""
        values = _normalize_keys(data or {}, _GRAPH_KEYS, "graph")
        topology = values.get("topology")
        if topology is not None and not isinstance(topology, Topology):
            try:
                values["topology"] = Topology(str(topology).lower())
            except ValueError:
                raise ConfigurationError(f"Unknown topology: {topology}") from None
        return cls(**values)


@dataclass(frozen=True)
class AlgorithmParams:
    """
    ACOパラメータ

    Attributes:
        ant_count: アリの数
        max_iterations: 最大反復回数
        alpha: フェロモンの重み
        beta: 可視度（1/距離）の重み
        evaporation_rate: 揮発率ρ（0 ~ 1）
        q: フェロモン付加定数Q
        elitist_count: エリートアリの数（0で無効）
        improvement_threshold: 改善なしで収束とみなす連続反復回数
        initial_pheromone: フェロモンの初期値
    """

    ant_count: int = 10
    max_iterations: int = 100
    alpha: float = 1.0
    beta: float = 5.0
    evaporation_rate: float = 0.5
    q: float = 100.0
    elitist_count: int = 5
    improvement_threshold: int = 10
    initial_pheromone: float = 0.1

    def validate(self) -> "AlgorithmParams":
        """
        パラメータを検証します。

        Raises:
            ConfigurationError: 値が範囲外の場合
        """
        if not _is_int(self.ant_count) or self.ant_count < 1:
            raise ConfigurationError(f"ant_count must be an integer >= 1, got {self.ant_count!r}")
        if not _is_int(self.max_iterations) or self.max_iterations < 1:
            raise ConfigurationError(
                f"max_iterations must be an integer >= 1, got {self.max_iterations!r}"
            )
        if not self.alpha >= 0 or not math.isfinite(self.alpha):
            raise ConfigurationError(f"alpha must be a finite value >= 0, got {self.alpha!r}")
        if not self.beta >= 0 or not math.isfinite(self.beta):
            raise ConfigurationError(f"beta must be a finite value >= 0, got {self.beta!r}")
        if not 0.0 <= self.evaporation_rate <= 1.0:
            raise ConfigurationError(
                f"evaporation_rate must be within [0, 1], got {self.evaporation_rate!r}"
            )
        if not self.q > 0 or not math.isfinite(self.q):
            raise ConfigurationError(f"q must be a finite value > 0, got {self.q!r}")
        if not _is_int(self.elitist_count) or self.elitist_count < 0:
            raise ConfigurationError(
                f"elitist_count must be an integer >= 0, got {self.elitist_count!r}"
            )
        if not _is_int(self.improvement_threshold) or self.improvement_threshold < 1:
            raise ConfigurationError(
                f"improvement_threshold must be an integer >= 1, got {self.improvement_threshold!r}"
            )
        if not self.initial_pheromone > 0 or not math.isfinite(self.initial_pheromone):
            raise ConfigurationError(
                f"initial_pheromone must be a finite value > 0, got {self.initial_pheromone!r}"
            )
        return self

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AlgorithmParams":
        """辞書（config.yamlの aco セクション）から生成"""
        values = _normalize_keys(data or {}, _ALGORITHM_KEYS, "aco")
        # elitistCount は省略可能（null は 0 と同義）
        if "elitist_count" in values and values["elitist_count"] is None:
            values["elitist_count"] = 0
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    設定ファイルを読み込む

    Args:
        config_path: 設定ファイルのパス

    Returns:
        設定辞書（空ファイルの場合は空の辞書）
    """
    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)
    return config or {}


def params_from_config(config: Dict[str, Any]) -> Tuple[GraphParams, AlgorithmParams]:
    """
    設定辞書から検証済みのパラメータを生成

    Args:
        config: load_config() が返す設定辞書

    Returns:
        (GraphParams, AlgorithmParams)

    Raises:
        ConfigurationError: いずれかのパラメータが不正な場合
    """
    graph_params = GraphParams.from_dict(config.get("graph")).validate()
    algorithm_params = AlgorithmParams.from_dict(config.get("aco")).validate()
    return graph_params, algorithm_params

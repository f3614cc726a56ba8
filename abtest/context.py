
import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from abtest.bucketing.traffic import normalize_range
from abtest.errors import ConfigurationError


@dataclass(frozen=True)
class Group:
    name: str
    weight: float

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise ConfigurationError(f"Group name must be a string, got {self.name!r}")
        if isinstance(self.weight, bool) or not isinstance(self.weight, Real):
            raise ConfigurationError(f"Group {self.name!r} weight must be a number, got {self.weight!r}")
        if not math.isfinite(self.weight) or self.weight < 0:
            raise ConfigurationError(f"Group {self.name!r} weight must be a non-negative finite number, got {self.weight}")

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "weight": self.weight}


@dataclass(frozen=True)
class Experiment:
    name: str
    traffic_percent_range: Union[float, Tuple[float, float]] = 1.0
    groups: Tuple[Group, ...] = ()

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise ConfigurationError(f"Experiment name must be a string, got {self.name!r}")
        # list -> tuple (frozen dataclass must stay hashable)
        if isinstance(self.traffic_percent_range, list):
            object.__setattr__(self, "traffic_percent_range", tuple(self.traffic_percent_range))
        object.__setattr__(self, "groups", tuple(self.groups))

        normalize_range(self.traffic_percent_range)

        names = [g.name for g in self.groups]
        if len(names) != len(set(names)):
            raise ConfigurationError(f"Group names must be unique in experiment {self.name!r}: {names}")

    @property
    def bounds(self) -> Tuple[float, float]:
        return normalize_range(self.traffic_percent_range)

    def to_dict(self) -> Dict[str, Any]:
        traffic = self.traffic_percent_range
        return {
            "name": self.name,
            "trafficPercentRange": list(traffic) if isinstance(traffic, tuple) else traffic,
            "groups": [g.to_dict() for g in self.groups],
        }


@dataclass
class Context:
    """
    現在のユーザーと実験定義の一覧をまとめた、呼び出し側が明示的に組み立てる値。
    """
    user_id: Optional[str]
    experiments: Iterable[Experiment] = ()

    def find_experiment(self, name: str) -> Optional[Experiment]:
        # ExperimentSet は名前で直接引ける
        if hasattr(self.experiments, "get"):
            return self.experiments.get(name)

        # first match wins, same as a list lookup by name
        for experiment in self.experiments:
            if experiment.name == name:
                return experiment
        return None

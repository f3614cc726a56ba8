
from numbers import Real
from typing import Optional, Sequence, Tuple, Union

from abtest.errors import ConfigurationError

# スカラー p は [0, p] と同じ意味 (旧形式)
TrafficRange = Union[float, Sequence[float]]


def _as_bound(value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ConfigurationError(f"Traffic range bound must be a number, got {value!r}")
    return float(value)


def normalize_range(traffic_range: TrafficRange) -> Tuple[float, float]:
    """
    trafficPercentRange を (min, max) のタプルに正規化する。
    境界が [0, 1] の外、または min > max の場合は ConfigurationError。
    """
    if isinstance(traffic_range, (list, tuple)):
        if len(traffic_range) != 2:
            raise ConfigurationError(f"Traffic range must be [min, max], got {traffic_range!r}")
        lower, upper = (_as_bound(v) for v in traffic_range)
    else:
        lower, upper = 0.0, _as_bound(traffic_range)

    # NaN fails both comparisons
    if not (0.0 <= lower <= 1.0 and 0.0 <= upper <= 1.0):
        raise ConfigurationError(f"Traffic range bounds must lie within [0, 1], got [{lower}, {upper}]")
    if lower > upper:
        raise ConfigurationError(f"Traffic range min must not exceed max, got [{lower}, {upper}]")

    return lower, upper


def filter_range(identity: float, traffic_range: TrafficRange) -> Optional[float]:
    """
    identity が実験のトラフィック範囲 [min, max) に入っていれば [0, 1) に再正規化した値を、
    入っていなければ None を返す。

    Lower bound inclusive, upper bound exclusive, so adjacent ranges such as
    [0, 0.4] and [0.4, 1] never share an identity. A zero-width range admits nobody.
    """
    lower, upper = normalize_range(traffic_range)

    if identity < lower or identity >= upper:
        return None

    return (identity - lower) / (upper - lower)

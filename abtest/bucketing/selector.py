
from typing import Optional, Sequence

from abtest.context import Group
from abtest.errors import ConfigurationError


def select_group(normalized_id: float, groups: Sequence[Group]) -> Optional[Group]:
    """
    Weighted selection over [0, 1).

    Groups own contiguous slices of the interval in declaration order, each
    sized weight / total_weight. Returns the first group whose cumulative
    share exceeds normalized_id. An empty group list means no assignment.
    """
    if not groups:
        return None

    total_weight = sum(group.weight for group in groups)
    if total_weight <= 0:
        names = [group.name for group in groups]
        raise ConfigurationError(f"Total group weight must be positive, got {total_weight} for {names}")

    accumulated = 0.0
    for group in groups:
        accumulated += group.weight / total_weight
        if normalized_id < accumulated:
            return group

    # Rounding can leave the final share a hair below 1.0
    return groups[-1]

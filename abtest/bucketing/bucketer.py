
from typing import Optional

from abtest.bucketing.cache import AssignmentCache
from abtest.bucketing.hasher import hash_identity
from abtest.bucketing.selector import select_group
from abtest.bucketing.traffic import filter_range
from abtest.context import Experiment, Group


def assign(user_id: str, experiment: Experiment) -> Optional[Group]:
    """
    ユーザーを実験のグループに決定的に割り当てる。

    hash -> traffic range filter -> weighted selection の順に処理し、
    トラフィック範囲外またはグループ未設定なら None を返す。
    Raises ConfigurationError when the groups' total weight is not positive.
    """
    identity = hash_identity(experiment.name, user_id)

    normalized_id = filter_range(identity, experiment.traffic_percent_range)
    if normalized_id is None:
        return None

    return select_group(normalized_id, experiment.groups)


class Bucketer:
    def __init__(self, cache: Optional[AssignmentCache] = None):
        self.cache = cache

    def determine_group(self, user_id: str, experiment: Experiment) -> Optional[Group]:
        """
        assign() と同じ結果を返す。cache があれば (実験名, user_id) で結果を再利用する。
        """
        if self.cache is None:
            return assign(user_id, experiment)

        return self.cache.get_or_compute(experiment, user_id, assign)


from dataclasses import dataclass
from typing import Any, Optional, Sequence

from abtest.bucketing.bucketer import Bucketer
from abtest.context import Context, Group
from abtest.observability.logging import log_assignment


@dataclass(frozen=True)
class Variant:
    """
    実験の表示候補の1つ。content は値そのもの、または引数なしの callable。
    default=True の候補は、割り当てなし / 名前が一致しない場合に使われる。
    """
    name: Optional[str] = None
    content: Any = None
    default: bool = False

    def render(self) -> Any:
        if callable(self.content):
            return self.content()
        return self.content


def use_variant(context: Context, experiment_name: str, bucketer: Optional[Bucketer] = None) -> Optional[Group]:
    """
    Context から実験を名前で引き、ユーザーのグループを返す。
    user_id が無い、または実験が見つからない場合は None。
    """
    if not context.user_id:
        return None

    experiment = context.find_experiment(experiment_name)
    if experiment is None:
        return None

    bucketer = bucketer or Bucketer()
    group = bucketer.determine_group(context.user_id, experiment)
    if group is not None:
        log_assignment(context, experiment, group)

    return group


def choose_variant(group: Optional[Group], variants: Sequence[Variant]) -> Optional[Variant]:
    """
    Lookup order: the first variant named like the group, then the first
    default variant, otherwise None.
    """
    if group is not None:
        for variant in variants:
            if variant.name == group.name:
                return variant

    for variant in variants:
        if variant.default:
            return variant

    return None


def render_experiment(
    context: Context,
    experiment_name: str,
    variants: Sequence[Variant],
    bucketer: Optional[Bucketer] = None,
) -> Any:
    group = use_variant(context, experiment_name, bucketer)
    variant = choose_variant(group, variants)
    if variant is None:
        return None
    return variant.render()

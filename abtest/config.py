
import hashlib
import json
import time
from typing import Any, Dict, Iterable, Iterator, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from abtest.context import Experiment, Group
from abtest.errors import ConfigurationError
from abtest.observability.logging import log_config_fallback, log_experiments_loaded

DEFAULT_PARAMETER_NAME = '/abtest/experiments'


class ExperimentSet:
    """
    実験定義の順序付き・不変な集合。名前での検索と内容のフィンガープリントを提供する。
    """
    def __init__(self, experiments: Iterable[Experiment] = ()):
        self._experiments = tuple(experiments)
        self._by_name: Dict[str, Experiment] = {}
        for experiment in self._experiments:
            if experiment.name in self._by_name:
                raise ConfigurationError(f"Duplicate experiment name: {experiment.name!r}")
            self._by_name[experiment.name] = experiment
        self._fingerprint: Optional[str] = None

    def __iter__(self) -> Iterator[Experiment]:
        return iter(self._experiments)

    def __len__(self) -> int:
        return len(self._experiments)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Optional[Experiment]:
        return self._by_name.get(name)

    @property
    def names(self) -> List[str]:
        return [e.name for e in self._experiments]

    @property
    def fingerprint(self) -> str:
        # 定義が変わったらキャッシュを捨てる判断に使う
        if self._fingerprint is None:
            canonical = json.dumps([e.to_dict() for e in self._experiments], sort_keys=True)
            self._fingerprint = hashlib.sha256(canonical.encode('utf-8')).hexdigest()
        return self._fingerprint


def _parse_group(raw: Any, experiment_name: str) -> Group:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Group of experiment {experiment_name!r} must be an object, got {raw!r}")
    if 'name' not in raw or 'weight' not in raw:
        raise ConfigurationError(f"Group of experiment {experiment_name!r} needs name and weight: {raw!r}")
    return Group(name=raw['name'], weight=raw['weight'])


def parse_experiment(raw: Any) -> Experiment:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Experiment definition must be an object, got {raw!r}")
    if 'name' not in raw:
        raise ConfigurationError(f"Experiment definition is missing a name: {raw!r}")

    name = raw['name']
    # camelCase (クライアントSDKと共通) と snake_case の両方を受け付ける
    traffic = raw.get('trafficPercentRange', raw.get('traffic_percent_range', 1.0))
    raw_groups = raw.get('groups') or []
    if not isinstance(raw_groups, list):
        raise ConfigurationError(f"groups of experiment {name!r} must be a list, got {raw_groups!r}")

    return Experiment(
        name=name,
        traffic_percent_range=traffic,
        groups=tuple(_parse_group(g, name) for g in raw_groups),
    )


def parse_experiments(payload: Any) -> ExperimentSet:
    """
    デコード済みJSON (実験定義のリスト、または {"experiments": [...]}) を ExperimentSet に変換する。
    不正な定義は ConfigurationError。
    """
    if isinstance(payload, dict) and 'experiments' in payload:
        payload = payload['experiments']
    if not isinstance(payload, list):
        raise ConfigurationError(f"Experiments payload must be a list, got {type(payload).__name__}")

    return ExperimentSet(parse_experiment(raw) for raw in payload)


def load_experiments_file(path: str) -> ExperimentSet:
    with open(path, encoding='utf-8') as f:
        payload = json.load(f)

    experiments = parse_experiments(payload)
    log_experiments_loaded(str(path), experiments.fingerprint, experiments.names)
    return experiments


class ConfigManager:
    def __init__(self, parameter_name: str = DEFAULT_PARAMETER_NAME, ttl_seconds: float = 60.0):
        self.parameter_name = parameter_name
        self.ttl_seconds = ttl_seconds
        self._cached_experiments: Optional[ExperimentSet] = None
        self._last_fetched_at: float = 0.0
        self._ssm_client = boto3.client('ssm')

    def get_experiments(self) -> ExperimentSet:
        current_time = time.time()

        if self._cached_experiments is not None and (current_time - self._last_fetched_at < self.ttl_seconds):
            return self._cached_experiments

        try:
            payload = self._fetch_from_ssm()
        except (BotoCoreError, ClientError, KeyError, ValueError) as e:
            # 取得失敗時は前回の定義、なければ空集合 (全員デフォルト表示) に倒す
            fallback = self._cached_experiments if self._cached_experiments is not None else ExperimentSet()
            log_config_fallback(self.parameter_name, e, fallback.fingerprint)
            return fallback

        # 定義の誤りは握りつぶさない
        experiments = parse_experiments(payload)

        previous = self._cached_experiments
        if previous is None or previous.fingerprint != experiments.fingerprint:
            log_experiments_loaded(self.parameter_name, experiments.fingerprint, experiments.names)

        self._cached_experiments = experiments
        self._last_fetched_at = current_time
        return experiments

    def _fetch_from_ssm(self) -> Any:
        response = self._ssm_client.get_parameter(Name=self.parameter_name, WithDecryption=True)
        value = response['Parameter']['Value']
        return json.loads(value)

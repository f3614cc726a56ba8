
import json
import logging
from typing import Optional

from abtest.bucketing.hasher import hash_identity
from abtest.context import Context, Experiment, Group

logger = logging.getLogger("abtest")
logger.setLevel(logging.INFO)
# Handler設定は実行環境に依存するため、ここでは標準出力への出力のみを想定
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter('%(message)s'))
logger.addHandler(handler)


def log_assignment(context: Context, experiment: Experiment, group: Group):
    """
    割り当て (exposure) を構造化ログ(JSON)として出力する。
    割り当て対象外 (None) のユーザーについては呼ばないこと。
    """
    log_data = {
        "event": "assignment",
        "experiment": experiment.name,
        "group": group.name,
        "user_id": context.user_id,
        "identity": hash_identity(experiment.name, context.user_id),
    }

    logger.info(json.dumps(log_data))


def log_experiments_loaded(source: str, fingerprint: str, experiment_names: list):
    logger.info(json.dumps({
        "event": "experiments_loaded",
        "source": source,
        "fingerprint": fingerprint,
        "experiments": experiment_names,
    }))


def log_config_fallback(source: str, error: Exception, fallback_fingerprint: Optional[str]):
    logger.warning(json.dumps({
        "event": "config_fallback",
        "source": source,
        "error": f"{type(error).__name__}: {error}",
        "fallback_fingerprint": fallback_fingerprint,
    }))

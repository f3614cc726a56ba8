
import hashlib
import hmac

MAX_UINT32 = 0xFFFFFFFF


def identity_digest(experiment_name: str, user_id: str) -> bytes:
    """
    HMAC-MD5 (key = user_id, message = experiment_name) を返す。
    user_id が空文字の場合は experiment_name の素の MD5 になる。

    Changing the key/message order or the encoding reassigns every user of
    every live experiment, and breaks parity with the other client SDKs.
    """
    if not isinstance(experiment_name, str):
        raise TypeError(f"experiment_name must be str, got {type(experiment_name).__name__}")
    if not isinstance(user_id, str):
        raise TypeError(f"user_id must be str, got {type(user_id).__name__}")

    message = experiment_name.encode("utf-8")
    if not user_id:
        return hashlib.md5(message).digest()
    return hmac.new(user_id.encode("utf-8"), message, hashlib.md5).digest()


def hash_identity(experiment_name: str, user_id: str) -> float:
    """
    (experiment_name, user_id) を [0, 1] の一様な実数に写像する。
    ダイジェスト先頭32bitをビッグエンディアンの符号なし整数として 0xFFFFFFFF で割る。
    """
    digest = identity_digest(experiment_name, user_id)
    return int.from_bytes(digest[:4], "big") / MAX_UINT32


import hashlib
import hmac

import pytest
from abtest.bucketing.hasher import MAX_UINT32, hash_identity, identity_digest

QUICK_FOX = "The quick brown fox jumps over the lazy dog"

# 公開されているHMAC-MD5 / MD5のテストベクタ (他言語SDKと共有する基準値)
@pytest.mark.parametrize("experiment_name, user_id, prefix", [
    (QUICK_FOX, "key", 0x80070713),
    ("what do ya want for nothing?", "Jefe", 0x750C783E),
    ("", "", 0xD41D8CD9),
    (QUICK_FOX, "", 0x9E107D9D),
])
def test_hash_identity_reference_vectors(experiment_name, user_id, prefix):
    assert hash_identity(experiment_name, user_id) == prefix / MAX_UINT32

def test_digest_is_hmac_keyed_by_user_id():
    expected = hmac.new(b"user-42", b"checkout_button", hashlib.md5).digest()
    assert identity_digest("checkout_button", "user-42") == expected

def test_argument_order_matters():
    assert hash_identity("Jefe", "what do ya want for nothing?") != hash_identity("what do ya want for nothing?", "Jefe")

def test_deterministic_and_within_unit_interval():
    for i in range(1000):
        value = hash_identity("exp", f"user_{i}")
        assert value == hash_identity("exp", f"user_{i}")
        assert 0.0 <= value <= 1.0

def test_non_ascii_input_is_utf8_encoded():
    expected = hmac.new("ユーザー".encode("utf-8"), "実験".encode("utf-8"), hashlib.md5).digest()
    assert identity_digest("実験", "ユーザー") == expected

@pytest.mark.parametrize("experiment_name, user_id", [
    ("exp", 123),
    (None, "user"),
    ("exp", b"user"),
])
def test_non_string_inputs_are_rejected(experiment_name, user_id):
    with pytest.raises(TypeError):
        hash_identity(experiment_name, user_id)

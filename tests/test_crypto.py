import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path for direct `python tests/test_crypto.py` runs.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dealroom import crypto  # noqa: E402


def test_b64_roundtrip_is_url_safe():
    data = bytes(range(256))
    encoded = crypto.b64e(data)
    assert "+" not in encoded and "/" not in encoded
    assert crypto.b64d(encoded) == data


def test_pem_reload_keeps_address():
    priv = crypto.generate_signing_key()
    reloaded = crypto.load_signing_private_key(crypto.private_key_pem(priv))
    assert crypto.address_from_public_key(reloaded.public_key()) == crypto.address_from_public_key(priv.public_key())
    assert crypto.public_key_pem(priv.public_key()).startswith(b"-----BEGIN PUBLIC KEY-----")


def test_sign_verify_and_wrong_key():
    priv = crypto.generate_signing_key()
    other = crypto.generate_signing_key()
    sig = crypto.sign(priv, b"challenge")
    assert crypto.verify(priv.public_key(), b"challenge", sig) is True
    assert crypto.verify(priv.public_key(), b"tampered", sig) is False
    assert crypto.verify(other.public_key(), b"challenge", sig) is False


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-vv", "-s", "--capture=no"]))

import hashlib
import hmac
import json
import re

import pytest

from services.payments.crypto import (
    PaymentCrypto,
    build_signature_payload,
    format_amount,
    generate_secure_token,
)
from services.payments.errors import EncryptionError


def _crypto(**overrides) -> PaymentCrypto:
    options = {"signing_secret": "sign_secret", "encryption_key": PaymentCrypto.generate_key()}
    options.update(overrides)
    return PaymentCrypto(**options)


def test_generate_secure_token_returns_requested_hex_length():
    token = generate_secure_token(16)
    assert re.fullmatch(r"[0-9a-f]{16}", token)
    assert len(generate_secure_token(7)) == 7
    assert generate_secure_token(16) != generate_secure_token(16)


def test_generate_secure_token_rejects_non_positive_length():
    with pytest.raises(ValueError):
        generate_secure_token(0)


def test_signature_payload_formats_amount_without_trailing_zeros():
    assert format_amount(500) == "500"
    assert format_amount("499.50") == "499.5"
    assert build_signature_payload("ORD1", 500.0, "cod_abc") == "ORD1:500:cod_abc"


def test_generate_signature_is_hmac_sha256_hex():
    crypto = _crypto()
    payload = build_signature_payload("ORD1", 500, "txn_1")
    expected = hmac.new(b"sign_secret", payload.encode("utf-8"), hashlib.sha256).hexdigest()

    assert crypto.generate_signature(payload) == expected
    assert crypto.verify_signature(payload, expected)
    assert not crypto.verify_signature("ORD1:501:txn_1", expected)
    assert not crypto.verify_signature(payload, None)


def test_generate_signature_requires_secret():
    with pytest.raises(EncryptionError):
        _crypto(signing_secret=None).generate_signature("ORD1:500:txn")


def test_encrypted_payment_data_is_opaque_and_decryptable():
    crypto = _crypto()
    plaintext = json.dumps({"customerEmail": "a@b.com", "customerPhone": "+201000000000"})

    token = crypto.encrypt_payment_data(plaintext)

    assert "a@b.com" not in token
    assert crypto.decrypt_payment_data(token) == plaintext


@pytest.mark.parametrize("key", [None, "", "not-a-fernet-key"])
def test_encrypt_fails_closed_without_valid_key(key):
    crypto = _crypto(encryption_key=key)
    with pytest.raises(EncryptionError):
        crypto.encrypt_payment_data('{"customerEmail": "a@b.com"}')


def test_decrypt_rejects_token_from_another_key():
    token = _crypto().encrypt_payment_data("secret")
    with pytest.raises(EncryptionError):
        _crypto().decrypt_payment_data(token)

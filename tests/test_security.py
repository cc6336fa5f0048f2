import pytest

from utils.security import SecurityManager, generate_secure_key

PRIVATE_KEY = "0x" + "4c" * 32


def test_encrypted_key_decrypts_to_original():
    manager = SecurityManager(generate_secure_key())

    encrypted = manager.encrypt_private_key(PRIVATE_KEY)

    assert PRIVATE_KEY[2:] not in encrypted
    assert manager.load_private_key(encrypted) == PRIVATE_KEY


def test_plain_hex_key_is_accepted_as_is():
    manager = SecurityManager("k")

    assert manager.load_private_key(PRIVATE_KEY[2:]) == PRIVATE_KEY


def test_wrong_encryption_key_fails():
    encrypted = SecurityManager("first-key").encrypt_private_key(PRIVATE_KEY)

    with pytest.raises(ValueError):
        SecurityManager("second-key").decrypt_private_key(encrypted)


def test_missing_encryption_key_is_rejected(monkeypatch):
    monkeypatch.delenv("ENCRYPTION_KEY", raising=False)

    with pytest.raises(ValueError):
        SecurityManager()


def test_validate_private_key():
    manager = SecurityManager("k")

    assert manager.validate_private_key(PRIVATE_KEY)
    assert not manager.validate_private_key("0x1234")

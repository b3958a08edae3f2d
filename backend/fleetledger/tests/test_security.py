"""
Tests for password hashing and legacy credential verification.
"""
import pytest
from fleetledger.core.security import (
    create_access_token, decode_access_token, generate_salt, get_password_hash,
    legacy_hash_password, verify_legacy_password, verify_password
)

PASSWORD = "caminhao42"


def mutations(password: str):
    """Every single-character substitution, deletion and insertion."""
    for i, ch in enumerate(password):
        yield password[:i] + ("x" if ch != "x" else "y") + password[i + 1:]
        yield password[:i] + password[i + 1:]
    yield password + "!"
    yield "!" + password


def test_legacy_password_accepts_correct_password():
    salt = generate_salt()
    stored = legacy_hash_password(PASSWORD, salt)
    assert verify_legacy_password(PASSWORD, salt, stored)


def test_legacy_password_rejects_any_single_character_change():
    salt = generate_salt()
    stored = legacy_hash_password(PASSWORD, salt)
    for candidate in mutations(PASSWORD):
        assert not verify_legacy_password(candidate, salt, stored), candidate


def test_legacy_password_requires_salt_and_hash():
    assert not verify_legacy_password(PASSWORD, "", "abc")
    assert not verify_legacy_password(PASSWORD, "salt", None)


def test_legacy_hash_is_sha256_of_password_plus_salt():
    # sha256("abc" + "") is the standard "abc" test vector
    assert legacy_hash_password("abc", "") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_bcrypt_round_trip_and_mutations():
    hashed = get_password_hash(PASSWORD)
    assert hashed.startswith("$2")
    assert verify_password(PASSWORD, hashed)
    assert not verify_password(PASSWORD[:-1], hashed)
    assert not verify_password(PASSWORD + "a", hashed)


def test_verify_password_without_hash():
    assert not verify_password(PASSWORD, None)


@pytest.mark.parametrize("role", ["admin", "driver", "finance"])
def test_token_round_trip(role):
    token = create_access_token({"sub": "FELIPE", "user_id": 3, "role": role})
    payload = decode_access_token(token)
    assert payload["user_id"] == 3
    assert payload["role"] == role


def test_tampered_token_is_rejected():
    token = create_access_token({"sub": "FELIPE", "user_id": 3, "role": "admin"})
    assert decode_access_token(token[:-2] + "xx") is None

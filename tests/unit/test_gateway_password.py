"""Unit tests for bcrypt password hashing."""

from src.mb_gateway.auth import password
from src.mb_gateway.auth.password import hash_password, spend_verify_time, verify_password


def test_cost_comes_from_settings():
    # conftest lowers BCRYPT_ROUNDS to 4
    assert hash_password("Wallet-pass-42").startswith("$2b$04$")


def test_round_trip_and_mismatch():
    hashed = hash_password("Wallet-pass-42")
    assert verify_password("Wallet-pass-42", hashed) is True
    assert verify_password("wallet-pass-42", hashed) is False


def test_corrupt_stored_hash_is_a_mismatch():
    assert verify_password("Wallet-pass-42", "not-a-bcrypt-hash") is False


def test_non_ascii_password():
    hashed = hash_password("contraseña-segura-7")
    assert verify_password("contraseña-segura-7", hashed) is True


def test_decoy_check_reuses_one_hash():
    password._decoy_hash.cache_clear()
    spend_verify_time("anything-1")
    spend_verify_time("anything-2")
    assert password._decoy_hash.cache_info().misses == 1

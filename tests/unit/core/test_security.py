"""Unit tests for password and token helpers."""

import hashlib

from core.security import (
    generate_share_token,
    generate_token,
    hash_password,
    hash_token,
    tokens_match,
    verify_password,
)


class TestPasswords:
    def test_hash_roundtrip(self) -> None:
        stored = hash_password("s3cret-pass", iterations=1_000)

        assert stored.startswith("pbkdf2_sha256$1000$")
        assert verify_password("s3cret-pass", stored)
        assert not verify_password("wrong", stored)

    def test_same_password_gets_different_salts(self) -> None:
        assert hash_password("pw", iterations=1_000) != hash_password("pw", iterations=1_000)

    def test_missing_or_malformed_hash_never_matches(self) -> None:
        assert not verify_password("pw", None)
        assert not verify_password("pw", "")
        assert not verify_password("pw", "plaintext")
        assert not verify_password("pw", "bcrypt$10$abc$def")
        assert not verify_password("pw", "pbkdf2_sha256$many$abc$def")


class TestTokens:
    def test_generated_tokens_are_unique(self) -> None:
        assert generate_token() != generate_token()
        assert len(generate_share_token()) == 64

    def test_hash_token_is_sha256_hex(self) -> None:
        assert hash_token("abc") == hashlib.sha256(b"abc").hexdigest()

    def test_tokens_match(self) -> None:
        assert tokens_match("abc", "abc")
        assert not tokens_match("abc", "abd")
        assert not tokens_match(None, "abc")
        assert not tokens_match("abc", None)
        assert not tokens_match("", "")

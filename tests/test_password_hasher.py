"""Unit tests for the PBKDF2 credential verifier."""

import pytest

from session_api.infrastructure.security.password_hasher import PasswordHasher


@pytest.fixture
def hasher():
    return PasswordHasher(iterations=1_000)


class TestHashing:
    def test_hash_is_not_plaintext(self, hasher):
        stored = hasher.hash_password("Passw0rd!")

        assert "Passw0rd!" not in stored
        assert stored.startswith("pbkdf2_sha256$1000$")

    def test_same_password_gets_different_salts(self, hasher):
        assert hasher.hash_password("Passw0rd!") != hasher.hash_password("Passw0rd!")

    def test_empty_password_cannot_be_hashed(self, hasher):
        with pytest.raises(ValueError):
            hasher.hash_password("")

    def test_cost_factor_is_configurable(self):
        assert PasswordHasher().iterations == PasswordHasher.DEFAULT_ITERATIONS
        assert PasswordHasher(iterations=5).iterations == 5


class TestVerification:
    def test_correct_password_verifies(self, hasher):
        stored = hasher.hash_password("Passw0rd!")
        assert hasher.verify_password("Passw0rd!", stored) is True

    def test_wrong_password_fails(self, hasher):
        stored = hasher.hash_password("Passw0rd!")
        assert hasher.verify_password("Passw0rd?", stored) is False

    def test_hash_from_other_cost_factor_still_verifies(self, hasher):
        stored = PasswordHasher(iterations=2_000).hash_password("Passw0rd!")
        assert hasher.verify_password("Passw0rd!", stored) is True

    @pytest.mark.parametrize(
        "password,stored",
        [
            (None, "pbkdf2_sha256$1000$c2FsdA==$aGFzaA=="),
            ("", "pbkdf2_sha256$1000$c2FsdA==$aGFzaA=="),
            ("Passw0rd!", None),
            ("Passw0rd!", ""),
            ("Passw0rd!", "not-a-hash"),
            ("Passw0rd!", "bcrypt$1000$c2FsdA==$aGFzaA=="),
            ("Passw0rd!", "pbkdf2_sha256$abc$c2FsdA==$aGFzaA=="),
            ("Passw0rd!", "pbkdf2_sha256$0$c2FsdA==$aGFzaA=="),
            ("Passw0rd!", "pbkdf2_sha256$1000$!!!$aGFzaA=="),
        ],
    )
    def test_malformed_input_returns_false(self, hasher, password, stored):
        assert hasher.verify_password(password, stored) is False


class TestUnencodableInput:
    LONE_SURROGATE = "\ud800abc12345"

    def test_verify_returns_false_instead_of_raising(self, hasher):
        stored = hasher.hash_password("Passw0rd!")
        assert hasher.verify_password(self.LONE_SURROGATE, stored) is False

    def test_hash_raises_value_error(self, hasher):
        with pytest.raises(ValueError):
            hasher.hash_password(self.LONE_SURROGATE)

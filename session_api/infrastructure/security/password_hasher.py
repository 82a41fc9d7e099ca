# session_api/infrastructure/security/password_hasher.py

import base64
import binascii
import hashlib
import hmac
import os


class PasswordHasher:
    """PBKDF2-SHA256 credential verifier.

    Stored format: ``pbkdf2_sha256$<iterations>$<salt b64>$<hash b64>`` so the
    cost factor travels with each hash and can be raised without a migration.
    """

    ALGO = "pbkdf2_sha256"
    DEFAULT_ITERATIONS = 600_000
    SALT_BYTES = 16

    def __init__(self, *, iterations: int | None = None) -> None:
        self._iterations = iterations or self.DEFAULT_ITERATIONS

    @property
    def iterations(self) -> int:
        return self._iterations

    def hash_password(self, password: str) -> str:
        if not password:
            raise ValueError("Password is required for hashing.")

        try:
            secret = password.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValueError("Password is not valid UTF-8 text.") from e

        salt = os.urandom(self.SALT_BYTES)
        dk = hashlib.pbkdf2_hmac("sha256", secret, salt, self._iterations)

        password_salt = base64.b64encode(salt).decode("utf-8")
        password_hash = base64.b64encode(dk).decode("utf-8")
        return f"{self.ALGO}${self._iterations}${password_salt}${password_hash}"

    def verify_password(self, password: str | None, stored_hash: str | None) -> bool:
        # never raises: a missing or corrupt input is just a mismatch
        if not password or not stored_hash:
            return False

        parts = stored_hash.split("$")
        if len(parts) != 4 or parts[0] != self.ALGO:
            return False

        try:
            secret = password.encode("utf-8")
            iterations = int(parts[1])
            salt = base64.b64decode(parts[2].encode("utf-8"), validate=True)
            expected = base64.b64decode(parts[3].encode("utf-8"), validate=True)
        except (UnicodeEncodeError, ValueError, binascii.Error):
            return False

        if iterations <= 0:
            return False

        dk = hashlib.pbkdf2_hmac("sha256", secret, salt, iterations)
        return hmac.compare_digest(dk, expected)

import hashlib
import json
import random
import time


class Credentials:
    """Password hashing for player accounts.

    The configured secret is appended to the password before it goes through
    bcrypt, so a leaked record store alone is not enough to brute-force it.
    """

    def __init__(self, bcrypt, secret: str = ''):
        self._bcrypt = bcrypt
        self._secret = secret

    def hash_password(self, password: str) -> str:
        digest = self._bcrypt.generate_password_hash(password + self._secret)
        return digest.decode('utf-8') if isinstance(digest, bytes) else digest

    def verify_password(self, password: str, digest: str) -> bool:
        if not digest or not isinstance(password, str):
            return False
        return self._bcrypt.check_password_hash(digest, password + self._secret)


def generate_game_id(seed=None) -> str:
    """Opaque 16-character game id."""
    value = f"{time.time()}{random.random()}{json.dumps(seed or {}, sort_keys=True)}"
    return hashlib.md5(value.encode('utf-8')).hexdigest()[:16]

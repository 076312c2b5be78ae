"""
Password hashing with bcrypt.
"""

import bcrypt

# bcrypt only uses the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def hash_password(password: str, rounds: int = 10) -> str:
    password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if the password matches the stored hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(
            password.encode("utf-8")[:BCRYPT_MAX_BYTES], password_hash.encode("utf-8")
        )
    except ValueError:
        return False

"""bcrypt password hashing.

Seeded accounts are hashed in SQL by pgcrypto (``$2a$`` prefix, cost 10);
``bcrypt.checkpw`` accepts those alongside the ``$2b$`` hashes written here.
"""

import bcrypt

from config.settings import settings


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """False for a wrong password or a stored value that is not a bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False

"""bcrypt password hashes (the ``bcrypt`` package directly, not passlib).

Cost comes from ``BCRYPT_ROUNDS``. A stored hash bcrypt cannot parse counts as
a mismatch rather than an error, so a corrupt row behaves like a wrong password.
"""

from functools import cache

import bcrypt

from config.settings import settings


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("ascii")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("ascii"))
    except ValueError:
        return False


@cache
def _decoy_hash() -> str:
    return hash_password("decoy-password-0")


def spend_verify_time(plain: str) -> None:
    """Run one bcrypt check for a login whose email matched no user.

    Unknown and known emails then take the same time to reject.
    """
    verify_password(plain, _decoy_hash())

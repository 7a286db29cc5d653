"""
Snippetbox — Password Hashing
===============================

What:  bcrypt hashing and verification shared by both user stores.
How:   bcrypt is CPU-bound and deliberately slow, so both operations run in
       Starlette's threadpool instead of on the event loop.

bcrypt only looks at the first 72 bytes of a password. Recent bcrypt
releases raise instead of truncating, so the truncation is done here,
identically for hashing and checking.
"""

import bcrypt
from starlette.concurrency import run_in_threadpool

BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def _hash(password: str, cost: int) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=cost)).decode("ascii")


def _check(password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(_password_bytes(password), hashed_password.encode("ascii"))


async def hash_password(password: str, cost: int = 12) -> str:
    return await run_in_threadpool(_hash, password, cost)


async def check_password(password: str, hashed_password: str) -> bool:
    """Constant-time comparison of `password` against a stored bcrypt hash."""
    return await run_in_threadpool(_check, password, hashed_password)

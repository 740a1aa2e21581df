"""
utils/security_utils.py

Purpose: Secrets handling

- Verification code generation
- Constant-time code comparison
- Password hashing (bcrypt)
"""

import asyncio
import hmac
import secrets

import bcrypt

CODE_MIN = 100000
CODE_MAX = 999999


def generate_verification_code() -> int:
    """Returns a random 6-digit code in [100000, 999999]."""
    return CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1)


def codes_match(expected: int, received: int) -> bool:
    # Constant-time compare to avoid timing leaks
    return hmac.compare_digest(str(expected), str(received))


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


async def hash_password_async(password: str, rounds: int = 10) -> str:
    """bcrypt is CPU bound; keep it off the event loop."""
    return await asyncio.to_thread(hash_password, password, rounds)

"""
Identifier and hash tokens.

These draw from the OS CSPRNG (uuid4 / secrets), never from the
caller's random.Random, so seeding a run does not make ids guessable
or collide across processes.
"""
import secrets
import uuid

from drumfeed.synthesis.distributions import (
    BATCH_CODE_PREFIX,
    DRUM_ID_PREFIX,
    SCAN_HASH_BYTES,
    USER_ID_PREFIX,
)


def _token(prefix: str) -> str:
    return f"{prefix}{uuid.uuid4()}"


def new_drum_id() -> str:
    return _token(DRUM_ID_PREFIX)


def new_batch_code() -> str:
    return _token(BATCH_CODE_PREFIX)


def new_user_id() -> str:
    return _token(USER_ID_PREFIX)


def new_scan_hash() -> str:
    """32 random bytes, hex encoded (64 lowercase chars)."""
    return secrets.token_hex(SCAN_HASH_BYTES)

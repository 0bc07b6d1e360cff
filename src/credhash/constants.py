"""Constant values and environment-driven limits."""

import os


def _load_limit(name: str, default: int) -> int:
    """Return positive integer from environment variable ``name``.

    Args:
        name: Environment variable to read.
        default: Value used when the variable is unset.

    Raises:
        RuntimeError: When the variable is set but not a positive integer.

    Returns:
        int: Configured limit.
    """

    env = os.getenv(name)
    if env is None:
        return default
    try:
        value = int(env)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be a positive integer")
    return value


# Hard bounds enforced on every parameter set and password
MAX_PASSWORD_BYTES = 1024
MAX_KEY_LENGTH = 128
MAX_SALT_LENGTH = 128

# Argon2 primitive floors
ARGON2_MIN_SALT_LENGTH = 8
ARGON2_MIN_KEY_LENGTH = 4

FIELD_SEPARATOR = "$"

# Safety ceiling for decoded or configured cost parameters
MAX_COST_N = _load_limit("CREDHASH_MAX_COST_N", 2**20)
MAX_MEMORY_BYTES = _load_limit("CREDHASH_MAX_MEMORY_BYTES", 2**30 + 2**20)
MAX_BLOCK_SIZE = _load_limit("CREDHASH_MAX_BLOCK_SIZE", 32)
MAX_PARALLELISM = _load_limit("CREDHASH_MAX_PARALLELISM", 16)

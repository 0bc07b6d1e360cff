"""Key derivation engine.

This module turns a password, salt and :class:`~credhash.params.ParameterSet`
into a digest. Each :class:`~credhash.params.Algorithm` is served by a
registered :class:`Kdf` implementation: :class:`ScryptKdf` wraps
``hashlib.scrypt`` and :class:`Argon2idKdf` wraps argon2-cffi's low level
API. Every call is checked against a :class:`CostCeiling` before any
expensive work starts, so hostile parameters read from a stored token cannot
pin a worker or exhaust memory.
"""

import hashlib
import logging
import os
import secrets
import threading
from dataclasses import dataclass
from typing import Protocol

from .constants import (
    MAX_BLOCK_SIZE,
    MAX_COST_N,
    MAX_MEMORY_BYTES,
    MAX_PARALLELISM,
    MAX_PASSWORD_BYTES,
)
from .errors import ResourceExhausted, UnsupportedAlgorithm
from .params import Algorithm, ParameterSet

try:
    from argon2.low_level import Type, hash_secret_raw  # type: ignore
except Exception as exc:  # pragma: no cover - enforce dependency
    raise ImportError(
        "argon2-cffi must be installed; run 'pip install argon2-cffi'"
    ) from exc

logger = logging.getLogger(__name__)

# Headroom handed to OpenSSL on top of the scrypt working set
_SCRYPT_MAXMEM_SLACK = 1024 * 1024
# hashlib.scrypt refuses maxmem above INT_MAX
_SCRYPT_MAXMEM_LIMIT = 2**31 - 1


@dataclass(frozen=True)
class CostCeiling:
    """Upper bounds on the work a single derivation may request."""

    max_cost_n: int = MAX_COST_N
    max_memory_bytes: int = MAX_MEMORY_BYTES
    max_block_size: int = MAX_BLOCK_SIZE
    max_parallelism: int = MAX_PARALLELISM

    def check(self, params: ParameterSet, memory_bytes: int) -> None:
        """Raise :class:`ResourceExhausted` if ``params`` exceed this ceiling.

        Args:
            params: Parameters about to be used.
            memory_bytes: Working-set estimate for ``params``.
        """

        if params.cost_n > self.max_cost_n:
            raise ResourceExhausted(
                f"cost_n {params.cost_n} exceeds ceiling {self.max_cost_n}"
            )
        if params.block_size_r > self.max_block_size:
            raise ResourceExhausted(
                f"block_size_r {params.block_size_r} exceeds ceiling "
                f"{self.max_block_size}"
            )
        if params.parallelism_p > self.max_parallelism:
            raise ResourceExhausted(
                f"parallelism_p {params.parallelism_p} exceeds ceiling "
                f"{self.max_parallelism}"
            )
        if memory_bytes > self.max_memory_bytes:
            raise ResourceExhausted(
                f"derivation needs {memory_bytes} bytes, ceiling is "
                f"{self.max_memory_bytes}"
            )


class Kdf(Protocol):
    def memory_bytes(self, params: ParameterSet) -> int:
        """Return the working-set size ``params`` would require."""

    def derive(self, password: bytes, salt: bytes, params: ParameterSet) -> bytes:
        """Return ``params.key_length`` bytes derived from password and salt."""


@dataclass
class ScryptKdf:
    """scrypt via ``hashlib.scrypt``."""

    def memory_bytes(self, params: ParameterSet) -> int:
        """Return scrypt memory use for ``params``.

        Args:
            params: scrypt parameters.

        Returns:
            int: Bytes OpenSSL allocates for the V and B arrays.
        """

        return 128 * params.block_size_r * (params.cost_n + params.parallelism_p + 2)

    def derive(self, password: bytes, salt: bytes, params: ParameterSet) -> bytes:
        """Return scrypt digest of ``password`` and ``salt``.

        Args:
            password: Password bytes.
            salt: Salt bytes.
            params: scrypt parameters.

        Returns:
            bytes: Derived key of ``params.key_length`` bytes.
        """

        memory = self.memory_bytes(params)
        if memory > _SCRYPT_MAXMEM_LIMIT:
            raise ResourceExhausted(
                f"scrypt needs {memory} bytes, hashlib allows {_SCRYPT_MAXMEM_LIMIT}"
            )
        return hashlib.scrypt(
            password,
            salt=salt,
            n=params.cost_n,
            r=params.block_size_r,
            p=params.parallelism_p,
            maxmem=min(
                memory + _SCRYPT_MAXMEM_SLACK,
                _SCRYPT_MAXMEM_LIMIT,
            ),
            dklen=params.key_length,
        )


@dataclass
class Argon2idKdf:
    """Argon2id via ``argon2.low_level.hash_secret_raw``."""

    def memory_bytes(self, params: ParameterSet) -> int:
        return params.cost_n * 1024

    def derive(self, password: bytes, salt: bytes, params: ParameterSet) -> bytes:
        """Return Argon2id digest of ``password`` and ``salt``.

        Args:
            password: Password bytes.
            salt: Salt bytes.
            params: Argon2id parameters; ``cost_n`` is KiB of memory and
                ``block_size_r`` the number of passes.

        Returns:
            bytes: Derived key of ``params.key_length`` bytes.
        """

        return hash_secret_raw(
            password,
            salt,
            time_cost=params.block_size_r,
            memory_cost=params.cost_n,
            parallelism=params.parallelism_p,
            hash_len=params.key_length,
            type=Type.ID,
        )


_registry: dict[Algorithm, Kdf] = {}


def register_kdf(algorithm: Algorithm, kdf: Kdf) -> None:
    """Register ``kdf`` as the implementation for ``algorithm``.

    Args:
        algorithm: Algorithm served by ``kdf``.
        kdf: Object implementing :class:`Kdf`.
    """

    _registry[algorithm] = kdf


def get_kdf(algorithm: Algorithm) -> Kdf:
    """Return the registered implementation for ``algorithm``.

    Raises:
        UnsupportedAlgorithm: If nothing is registered for ``algorithm``.
    """

    try:
        return _registry[algorithm]
    except KeyError as exc:
        raise UnsupportedAlgorithm(f"no KDF registered for {algorithm!r}") from exc


register_kdf(Algorithm.SCRYPT, ScryptKdf())
register_kdf(Algorithm.ARGON2ID, Argon2idKdf())


def derive(
    password: bytes,
    salt: bytes,
    params: ParameterSet,
    ceiling: CostCeiling | None = None,
) -> bytes:
    """Derive a digest from ``password`` and ``salt`` under ``params``.

    The result depends only on the arguments. Empty passwords go through the
    full computation like any other.

    Args:
        password: Password bytes, at most ``MAX_PASSWORD_BYTES`` long.
        salt: Salt bytes.
        params: Algorithm and cost parameters.
        ceiling: Limits to enforce; defaults to the environment-configured
            :class:`CostCeiling`.

    Returns:
        bytes: Digest of ``params.key_length`` bytes.

    Raises:
        InvalidParameters: If ``params`` violate their invariants.
        ResourceExhausted: If the password or the cost exceeds its limit.
        UnsupportedAlgorithm: If no KDF is registered for the algorithm.
    """
    if not isinstance(password, (bytes, bytearray)):
        raise TypeError("password must be bytes")
    if not isinstance(salt, (bytes, bytearray)):
        raise TypeError("salt must be bytes")
    if len(password) > MAX_PASSWORD_BYTES:
        raise ResourceExhausted(f"password may not exceed {MAX_PASSWORD_BYTES} bytes")
    params.validate()
    if ceiling is None:
        ceiling = CostCeiling()
    kdf = get_kdf(params.algorithm)
    ceiling.check(params, kdf.memory_bytes(params))
    logger.debug(
        "deriving %s digest (cost_n=%d, block_size_r=%d, parallelism_p=%d)",
        params.algorithm.value,
        params.cost_n,
        params.block_size_r,
        params.parallelism_p,
    )
    return kdf.derive(bytes(password), bytes(salt), params)


def constant_time_equals(a: bytes, b: bytes) -> bool:
    """Compare secrets without leaking the position of the first difference."""

    return secrets.compare_digest(a, b)


_warmed_up = False
_warm_up_lock = threading.Lock()


def _warm_up() -> None:
    """Run one derivation with the recommended parameters.

    Returns:
        None
    """
    global _warmed_up
    if _warmed_up:
        return
    with _warm_up_lock:
        if _warmed_up:
            return
        params = ParameterSet.current_recommended()
        derive(b"x", b"\x00" * params.salt_length, params)
        _warmed_up = True


def warm_up() -> None:
    """Public wrapper enabling explicit warm-up."""

    _warm_up()


if os.getenv("CREDHASH_WARMUP"):
    _warm_up()

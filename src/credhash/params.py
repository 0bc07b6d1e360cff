"""Algorithm identities and cost parameter sets.

A :class:`ParameterSet` is an immutable snapshot of everything needed to
reproduce a derivation apart from the password and salt. The same three cost
fields are shared by every algorithm:

* scrypt: ``cost_n`` is N, ``block_size_r`` is r, ``parallelism_p`` is p.
* argon2id: ``cost_n`` is the memory cost in KiB, ``block_size_r`` is the
  time cost (number of passes), ``parallelism_p`` is the number of lanes.
"""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass

from .constants import (
    ARGON2_MIN_KEY_LENGTH,
    ARGON2_MIN_SALT_LENGTH,
    MAX_KEY_LENGTH,
    MAX_SALT_LENGTH,
)
from .errors import InvalidParameters, UnsupportedAlgorithm


class Algorithm(str, enum.Enum):
    """Key derivation algorithms; the value is the token identifier."""

    SCRYPT = "scrypt"
    ARGON2ID = "argon2id"

    @classmethod
    def from_identifier(cls, identifier: str) -> "Algorithm":
        """Return member named by ``identifier``.

        Raises:
            UnsupportedAlgorithm: If no member uses ``identifier``.
        """
        try:
            return cls(identifier)
        except ValueError as exc:
            raise UnsupportedAlgorithm(
                f"unsupported algorithm: {identifier!r}"
            ) from exc


@dataclass(frozen=True)
class ParameterSet:
    """Algorithm identity plus cost parameters."""

    algorithm: Algorithm
    cost_n: int
    block_size_r: int
    parallelism_p: int
    key_length: int = 32
    salt_length: int = 16

    def validate(self) -> "ParameterSet":
        """Check invariants and return ``self``.

        Returns:
            ParameterSet: This instance, for chaining.

        Raises:
            InvalidParameters: When a field is out of range.
        """
        if not isinstance(self.algorithm, Algorithm):
            raise InvalidParameters(f"unknown algorithm: {self.algorithm!r}")
        for name in (
            "cost_n",
            "block_size_r",
            "parallelism_p",
            "key_length",
            "salt_length",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidParameters(f"{name} must be an integer")
            if value <= 0:
                raise InvalidParameters(f"{name} must be positive")
        if self.key_length > MAX_KEY_LENGTH:
            raise InvalidParameters(f"key_length may not exceed {MAX_KEY_LENGTH}")
        if self.salt_length > MAX_SALT_LENGTH:
            raise InvalidParameters(f"salt_length may not exceed {MAX_SALT_LENGTH}")

        if self.algorithm is Algorithm.SCRYPT:
            n = self.cost_n
            if n < 2 or n & (n - 1):
                raise InvalidParameters("scrypt cost_n must be a power of two")
            if n >= 1 << (16 * self.block_size_r):
                raise InvalidParameters(
                    "scrypt cost_n must be below 2**(16 * block_size_r)"
                )
        elif self.algorithm is Algorithm.ARGON2ID:
            if self.salt_length < ARGON2_MIN_SALT_LENGTH:
                raise InvalidParameters(
                    f"argon2id salt_length must be at least {ARGON2_MIN_SALT_LENGTH}"
                )
            if self.key_length < ARGON2_MIN_KEY_LENGTH:
                raise InvalidParameters(
                    f"argon2id key_length must be at least {ARGON2_MIN_KEY_LENGTH}"
                )
            if self.cost_n < 8 * self.parallelism_p:
                raise InvalidParameters(
                    "argon2id cost_n must be at least 8 * parallelism_p"
                )
        return self

    def replace(self, **changes: int) -> "ParameterSet":
        """Return a validated copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes).validate()

    @classmethod
    def current_recommended(cls) -> "ParameterSet":
        """Return the default parameters used for new credentials.

        Raising this default does not invalidate older records; they keep the
        parameters embedded in their tokens and are flagged for upgrade on
        the next successful verification.
        """
        return SCRYPT_INTERACTIVE


SCRYPT_INTERACTIVE = ParameterSet(
    algorithm=Algorithm.SCRYPT,
    cost_n=2**14,
    block_size_r=8,
    parallelism_p=1,
).validate()

# About 1 GiB of memory per derivation
SCRYPT_SENSITIVE = ParameterSet(
    algorithm=Algorithm.SCRYPT,
    cost_n=2**20,
    block_size_r=8,
    parallelism_p=1,
).validate()

# Second recommended option per RFC 9106
ARGON2ID_LOW_MEMORY = ParameterSet(
    algorithm=Algorithm.ARGON2ID,
    cost_n=65536,  # 64 MiB
    block_size_r=3,
    parallelism_p=4,
).validate()

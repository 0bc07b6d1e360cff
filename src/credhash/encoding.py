"""Hash records and their single-string token form.

Tokens look like::

    scrypt$16384$8$1$<base64 salt>$<base64 digest>

Fields are separated by ``$``, which never appears in the base64 alphabet or
in an algorithm identifier. Salt and key lengths are implied by the decoded
byte strings.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass, field

from .constants import FIELD_SEPARATOR
from .errors import InvalidParameters, MalformedRecord
from .params import Algorithm, ParameterSet

logger = logging.getLogger(__name__)

_FIELD_COUNT = 6
_DECIMAL = re.compile(r"(?:0|[1-9][0-9]*)\Z")
# Longest decimal accepted for an integer field
_MAX_DIGITS = 10


@dataclass(frozen=True)
class HashRecord:
    """Parameters, salt and digest of one stored credential."""

    params: ParameterSet
    salt: bytes = field(repr=False)
    digest: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.salt, bytes) or not isinstance(self.digest, bytes):
            raise TypeError("salt and digest must be bytes")
        if len(self.salt) != self.params.salt_length:
            raise InvalidParameters(
                f"salt is {len(self.salt)} bytes, expected {self.params.salt_length}"
            )
        if len(self.digest) != self.params.key_length:
            raise InvalidParameters(
                f"digest is {len(self.digest)} bytes, expected {self.params.key_length}"
            )

    @property
    def algorithm(self) -> Algorithm:
        return self.params.algorithm


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(text: str, name: str) -> bytes:
    try:
        data = base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise MalformedRecord(f"{name} is not valid base64") from exc
    # Non-canonical padding bits would let two tokens decode identically
    if _b64encode(data) != text:
        raise MalformedRecord(f"{name} is not canonical base64")
    if not data:
        raise MalformedRecord(f"{name} is empty")
    return data


def _parse_int(text: str, name: str) -> int:
    if len(text) > _MAX_DIGITS or not _DECIMAL.match(text):
        raise MalformedRecord(f"{name} is not a decimal integer")
    return int(text)


def encode(record: HashRecord) -> str:
    """Return the token string for ``record``.

    Args:
        record: Record to serialize.

    Returns:
        str: ``$``-separated token embedding algorithm, costs, salt and digest.
    """
    params = record.params
    return FIELD_SEPARATOR.join(
        [
            params.algorithm.value,
            str(params.cost_n),
            str(params.block_size_r),
            str(params.parallelism_p),
            _b64encode(record.salt),
            _b64encode(record.digest),
        ]
    )


def decode(token: str) -> HashRecord:
    """Parse ``token`` back into a :class:`HashRecord`.

    Args:
        token: String produced by :func:`encode`.

    Returns:
        HashRecord: Record carrying the token's own parameters.

    Raises:
        MalformedRecord: If the token's structure, numbers, base64 fields or
            implied parameters are inconsistent.
        UnsupportedAlgorithm: If the algorithm identifier is unknown.
    """
    if not isinstance(token, str):
        raise MalformedRecord("token must be a string")
    if not token.isascii():
        logger.warning("rejected token containing non-ASCII characters")
        raise MalformedRecord("token must be ASCII")
    fields = token.split(FIELD_SEPARATOR)
    if len(fields) != _FIELD_COUNT:
        logger.warning("rejected token with %d fields", len(fields))
        raise MalformedRecord(
            f"token has {len(fields)} fields, expected {_FIELD_COUNT}"
        )
    ident, cost_text, block_text, par_text, salt_text, digest_text = fields
    algorithm = Algorithm.from_identifier(ident)
    salt = _b64decode(salt_text, "salt")
    digest = _b64decode(digest_text, "digest")
    try:
        params = ParameterSet(
            algorithm=algorithm,
            cost_n=_parse_int(cost_text, "cost_n"),
            block_size_r=_parse_int(block_text, "block_size_r"),
            parallelism_p=_parse_int(par_text, "parallelism_p"),
            key_length=len(digest),
            salt_length=len(salt),
        ).validate()
    except InvalidParameters as exc:
        logger.warning("rejected token with invalid parameters: %s", exc)
        raise MalformedRecord(f"invalid parameters: {exc}") from exc
    return HashRecord(params=params, salt=salt, digest=digest)

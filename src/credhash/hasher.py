"""Enrollment and verification of stored credentials."""

from __future__ import annotations

import logging
import secrets
from typing import NamedTuple, Protocol

from .core import CostCeiling, constant_time_equals, derive, get_kdf
from .encoding import HashRecord, decode, encode
from .errors import RandomSourceUnavailable
from .params import ParameterSet

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def token_bytes(self, nbytes: int) -> bytes:
        """Return ``nbytes`` cryptographically secure random bytes."""


class SystemRandomSource:
    """Random source backed by :func:`secrets.token_bytes`."""

    def token_bytes(self, nbytes: int) -> bytes:
        return secrets.token_bytes(nbytes)


class VerifyResult(NamedTuple):
    """Outcome of :meth:`CredentialHasher.verify`."""

    matched: bool
    needs_upgrade: bool


def _password_bytes(password: str | bytes) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    if isinstance(password, (bytes, bytearray)):
        return bytes(password)
    raise TypeError("password must be str or bytes")


class CredentialHasher:
    """Produce and check salted, cost-tuned password tokens.

    The hasher holds no per-call state; one instance can serve concurrent
    callers. It never stores tokens itself: :meth:`verify` only reports
    whether a successfully verified token should be replaced by a fresh
    :meth:`enroll` result.
    """

    def __init__(
        self,
        recommended: ParameterSet | None = None,
        ceiling: CostCeiling | None = None,
        random_source: RandomSource | None = None,
    ) -> None:
        """Configure the hasher.

        Args:
            recommended: Parameters for new tokens. Defaults to
                :meth:`ParameterSet.current_recommended`.
            ceiling: Cost limits applied to every derivation, including
                those driven by parameters decoded from stored tokens.
            random_source: Salt generator. Defaults to
                :class:`SystemRandomSource`.

        Raises:
            InvalidParameters: If ``recommended`` is invalid.
            ResourceExhausted: If ``recommended`` exceeds ``ceiling``.
        """

        if recommended is None:
            recommended = ParameterSet.current_recommended()
        self.recommended = recommended.validate()
        self.ceiling = ceiling if ceiling is not None else CostCeiling()
        self.random_source = (
            random_source if random_source is not None else SystemRandomSource()
        )
        kdf = get_kdf(self.recommended.algorithm)
        self.ceiling.check(self.recommended, kdf.memory_bytes(self.recommended))

    def _new_salt(self) -> bytes:
        length = self.recommended.salt_length
        try:
            salt = self.random_source.token_bytes(length)
        except Exception as exc:
            logger.error("random source failed: %s", exc)
            raise RandomSourceUnavailable("secure random source failed") from exc
        if not isinstance(salt, bytes) or len(salt) != length:
            logger.error("random source returned an unusable salt")
            raise RandomSourceUnavailable(
                f"random source did not return {length} bytes"
            )
        return salt

    def enroll(self, password: str | bytes) -> str:
        """Hash ``password`` with a fresh salt and the recommended parameters.

        Args:
            password: Password to store. Empty passwords are accepted.

        Returns:
            str: Token ready to be persisted.

        Raises:
            RandomSourceUnavailable: If no salt could be generated.
            ResourceExhausted: If the password or parameters exceed limits.
        """

        secret = _password_bytes(password)
        salt = self._new_salt()
        digest = derive(secret, salt, self.recommended, self.ceiling)
        return encode(HashRecord(params=self.recommended, salt=salt, digest=digest))

    def verify(self, password: str | bytes, token: str) -> VerifyResult:
        """Check ``password`` against a stored ``token``.

        The digest is recomputed with the token's own parameters and salt and
        compared in constant time.

        Args:
            password: Candidate password.
            token: Token previously returned by :meth:`enroll`.

        Returns:
            VerifyResult: ``matched`` plus ``needs_upgrade``, which is only
            ever true for a matching token whose parameters differ from the
            recommended ones.

        Raises:
            MalformedRecord: If ``token`` is structurally broken.
            UnsupportedAlgorithm: If ``token`` names an unknown algorithm.
            ResourceExhausted: If the token's costs exceed the ceiling.
        """

        secret = _password_bytes(password)
        record = decode(token)
        candidate = derive(secret, record.salt, record.params, self.ceiling)
        matched = constant_time_equals(candidate, record.digest)
        upgrade = matched and record.params != self.recommended
        if upgrade:
            logger.debug(
                "token uses outdated %s parameters; upgrade suggested",
                record.algorithm.value,
            )
        return VerifyResult(matched=matched, needs_upgrade=upgrade)

    def needs_upgrade(self, token: str) -> bool:
        """Return whether ``token`` was made with non-recommended parameters.

        Only the token structure is inspected; no derivation runs.

        Raises:
            MalformedRecord: If ``token`` is structurally broken.
            UnsupportedAlgorithm: If ``token`` names an unknown algorithm.
        """

        return decode(token).params != self.recommended

"""Error types raised by the credential hashing service.

Every error derives from :class:`CredentialError` so callers can tell system
or data problems apart from a plain password mismatch, which is reported as a
``False`` result and never as an exception.
"""


class CredentialError(Exception):
    """Base class for all credhash errors."""


class InvalidParameters(CredentialError, ValueError):
    """Cost parameters violate a :class:`~credhash.params.ParameterSet` invariant."""


class UnsupportedAlgorithm(CredentialError, ValueError):
    """Token or parameter set names an algorithm with no registered KDF."""


class MalformedRecord(CredentialError, ValueError):
    """Stored token is structurally broken."""


class ResourceExhausted(CredentialError):
    """Requested work exceeds the configured safety ceiling."""


class RandomSourceUnavailable(CredentialError, RuntimeError):
    """Secure random generator failed to produce a salt."""

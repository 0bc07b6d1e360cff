"""Salted, cost-tuned password hashing package."""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import re

from .core import (
    Argon2idKdf,
    CostCeiling,
    ScryptKdf,
    constant_time_equals,
    derive,
    get_kdf,
    register_kdf,
    warm_up,
)
from .encoding import HashRecord, decode, encode
from .errors import (
    CredentialError,
    InvalidParameters,
    MalformedRecord,
    RandomSourceUnavailable,
    ResourceExhausted,
    UnsupportedAlgorithm,
)
from .hasher import CredentialHasher, SystemRandomSource, VerifyResult
from .params import (
    ARGON2ID_LOW_MEMORY,
    SCRYPT_INTERACTIVE,
    SCRYPT_SENSITIVE,
    Algorithm,
    ParameterSet,
)
from .testing import DeterministicRandom
from .tuning import calibrate
from .cli import main as cli

_pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"


def _read_version(path: Path) -> str:
    text = path.read_text(encoding="utf-8")
    match = re.search(r'^version\s*=\s*"([^"]+)"', text, flags=re.MULTILINE)
    if not match:
        raise RuntimeError("version not found in pyproject.toml")
    return match.group(1)


try:
    __version__ = version("credhash")
except PackageNotFoundError:
    __version__ = _read_version(_pyproject)

__all__ = [
    "ARGON2ID_LOW_MEMORY",
    "Algorithm",
    "Argon2idKdf",
    "CostCeiling",
    "CredentialError",
    "CredentialHasher",
    "DeterministicRandom",
    "HashRecord",
    "InvalidParameters",
    "MalformedRecord",
    "ParameterSet",
    "RandomSourceUnavailable",
    "ResourceExhausted",
    "SCRYPT_INTERACTIVE",
    "SCRYPT_SENSITIVE",
    "ScryptKdf",
    "SystemRandomSource",
    "UnsupportedAlgorithm",
    "VerifyResult",
    "calibrate",
    "cli",
    "constant_time_equals",
    "decode",
    "derive",
    "encode",
    "get_kdf",
    "register_kdf",
    "warm_up",
    "__version__",
]

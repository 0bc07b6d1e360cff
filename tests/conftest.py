import pytest

from credhash import Algorithm, ParameterSet

# Cheap parameter sets so the suite stays fast
FAST_SCRYPT = ParameterSet(
    algorithm=Algorithm.SCRYPT,
    cost_n=16,
    block_size_r=8,
    parallelism_p=1,
)

FAST_ARGON2ID = ParameterSet(
    algorithm=Algorithm.ARGON2ID,
    cost_n=64,
    block_size_r=1,
    parallelism_p=1,
)


@pytest.fixture
def fast_scrypt() -> ParameterSet:
    return FAST_SCRYPT


@pytest.fixture
def fast_argon2id() -> ParameterSet:
    return FAST_ARGON2ID

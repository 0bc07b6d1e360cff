import hashlib

import pytest
from argon2.low_level import Type, hash_secret_raw

from credhash import (
    Algorithm,
    CostCeiling,
    InvalidParameters,
    ParameterSet,
    ResourceExhausted,
    ScryptKdf,
    UnsupportedAlgorithm,
    constant_time_equals,
    derive,
    get_kdf,
)
from credhash import core
from credhash.constants import MAX_PASSWORD_BYTES

SALT = b"\x01" * 16


class SpyKdf:
    """Records derive calls while reporting scrypt memory use."""

    def __init__(self):
        self.calls = []

    def memory_bytes(self, params):
        return ScryptKdf().memory_bytes(params)

    def derive(self, password, salt, params):
        self.calls.append((password, salt, params))
        return b"\x00" * params.key_length


def test_derive_deterministic(fast_scrypt):
    digest1 = derive(b"pw", SALT, fast_scrypt)
    digest2 = derive(b"pw", SALT, fast_scrypt)
    assert digest1 == digest2
    assert len(digest1) == fast_scrypt.key_length


def test_derive_matches_hashlib_scrypt(fast_scrypt):
    expected = hashlib.scrypt(b"pw", salt=SALT, n=16, r=8, p=1, dklen=32)
    assert derive(b"pw", SALT, fast_scrypt) == expected


def test_derive_matches_argon2id(fast_argon2id):
    expected = hash_secret_raw(
        b"pw",
        SALT,
        time_cost=1,
        memory_cost=64,
        parallelism=1,
        hash_len=32,
        type=Type.ID,
    )
    assert derive(b"pw", SALT, fast_argon2id) == expected


def test_derive_depends_on_every_input(fast_scrypt):
    base = derive(b"pw", SALT, fast_scrypt)
    assert derive(b"pW", SALT, fast_scrypt) != base
    assert derive(b"pw", b"\x02" * 16, fast_scrypt) != base
    assert derive(b"pw", SALT, fast_scrypt.replace(cost_n=32)) != base
    assert derive(b"pw", SALT, fast_scrypt.replace(block_size_r=4)) != base


def test_key_length_respected(fast_scrypt, fast_argon2id):
    assert len(derive(b"pw", SALT, fast_scrypt.replace(key_length=64))) == 64
    assert len(derive(b"pw", SALT, fast_argon2id.replace(key_length=16))) == 16


def test_empty_password_is_derived(fast_scrypt):
    digest = derive(b"", SALT, fast_scrypt)
    assert len(digest) == 32
    assert digest != derive(b"\x00", SALT, fast_scrypt)


def test_password_length_limit(fast_scrypt):
    assert len(derive(b"a" * MAX_PASSWORD_BYTES, SALT, fast_scrypt)) == 32
    with pytest.raises(ResourceExhausted):
        derive(b"a" * (MAX_PASSWORD_BYTES + 1), SALT, fast_scrypt)


def test_derive_rejects_text(fast_scrypt):
    with pytest.raises(TypeError):
        derive("pw", SALT, fast_scrypt)
    with pytest.raises(TypeError):
        derive(b"pw", "salt", fast_scrypt)


def test_derive_validates_parameters(fast_scrypt):
    bad = ParameterSet(
        algorithm=Algorithm.SCRYPT, cost_n=24, block_size_r=8, parallelism_p=1
    )
    with pytest.raises(InvalidParameters):
        derive(b"pw", SALT, bad)


def test_cost_above_ceiling_does_no_work(monkeypatch):
    spy = SpyKdf()
    monkeypatch.setitem(core._registry, Algorithm.SCRYPT, spy)
    huge = ParameterSet(
        algorithm=Algorithm.SCRYPT, cost_n=2**30, block_size_r=8, parallelism_p=1
    )
    with pytest.raises(ResourceExhausted):
        derive(b"pw", SALT, huge)
    assert spy.calls == []


@pytest.mark.parametrize(
    "ceiling",
    [
        CostCeiling(max_cost_n=8),
        CostCeiling(max_block_size=4),
        CostCeiling(max_parallelism=0),
        CostCeiling(max_memory_bytes=1024),
    ],
)
def test_custom_ceiling(fast_scrypt, ceiling):
    with pytest.raises(ResourceExhausted):
        derive(b"pw", SALT, fast_scrypt, ceiling)


def test_argon2id_memory_ceiling(fast_argon2id):
    ceiling = CostCeiling(max_memory_bytes=32 * 1024)
    with pytest.raises(ResourceExhausted):
        derive(b"pw", SALT, fast_argon2id, ceiling)
    assert len(derive(b"pw", SALT, fast_argon2id, CostCeiling())) == 32


def test_scrypt_memory_estimate(fast_scrypt):
    assert ScryptKdf().memory_bytes(fast_scrypt) == 128 * 8 * (16 + 1 + 2)
    assert get_kdf(Algorithm.ARGON2ID).memory_bytes(
        ParameterSet(
            algorithm=Algorithm.ARGON2ID, cost_n=64, block_size_r=1, parallelism_p=1
        )
    ) == 64 * 1024


def test_unregistered_algorithm(monkeypatch, fast_argon2id):
    monkeypatch.delitem(core._registry, Algorithm.ARGON2ID)
    with pytest.raises(UnsupportedAlgorithm):
        get_kdf(Algorithm.ARGON2ID)
    with pytest.raises(UnsupportedAlgorithm):
        derive(b"pw", SALT, fast_argon2id)


def test_register_kdf_replaces_implementation(monkeypatch, fast_scrypt):
    spy = SpyKdf()
    monkeypatch.setitem(core._registry, Algorithm.SCRYPT, spy)
    assert derive(b"pw", SALT, fast_scrypt) == b"\x00" * 32
    assert spy.calls == [(b"pw", SALT, fast_scrypt)]


def test_register_kdf(monkeypatch):
    monkeypatch.setattr(core, "_registry", dict(core._registry))
    spy = SpyKdf()
    core.register_kdf(Algorithm.SCRYPT, spy)
    assert get_kdf(Algorithm.SCRYPT) is spy


def test_constant_time_equals():
    assert constant_time_equals(b"abc", b"abc")
    assert not constant_time_equals(b"abc", b"abd")
    assert not constant_time_equals(b"abc", b"abcd")
    assert constant_time_equals(b"", b"")


def test_scrypt_memory_beyond_hashlib_limit():
    params = ParameterSet(
        algorithm=Algorithm.SCRYPT, cost_n=2**22, block_size_r=8, parallelism_p=1
    )
    generous = CostCeiling(max_cost_n=2**30, max_memory_bytes=2**40)
    with pytest.raises(ResourceExhausted):
        derive(b"pw", SALT, params, generous)
    with pytest.raises(ResourceExhausted):
        ScryptKdf().derive(b"pw", SALT, params)

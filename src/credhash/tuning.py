"""Pick scrypt cost parameters for a target derivation latency."""

import logging
import time
from typing import Callable

from .core import CostCeiling, derive, get_kdf
from .errors import InvalidParameters, ResourceExhausted
from .params import Algorithm, ParameterSet

logger = logging.getLogger(__name__)


def calibrate(
    target_seconds: float,
    base: ParameterSet | None = None,
    ceiling: CostCeiling | None = None,
    timer: Callable[[], float] = time.perf_counter,
    derive_fn: Callable[..., bytes] = derive,
) -> ParameterSet:
    """Double scrypt ``cost_n`` until one derivation takes ``target_seconds``.

    Args:
        target_seconds: Minimum acceptable time for one derivation.
        base: Starting parameters; defaults to
            :meth:`ParameterSet.current_recommended`, so the result is never
            cheaper than the current default.
        ceiling: Limits the search may not cross.
        timer: Monotonic clock returning seconds.
        derive_fn: Derivation callable, replaceable in tests.

    Returns:
        ParameterSet: First parameters meeting the target, or the most
        expensive ones the ceiling allows.

    Raises:
        ValueError: If ``target_seconds`` is not positive.
        InvalidParameters: If ``base`` is not a scrypt parameter set.
        ResourceExhausted: If ``base`` itself exceeds ``ceiling``.
    """
    if target_seconds <= 0:
        raise ValueError("target_seconds must be positive")
    params = base if base is not None else ParameterSet.current_recommended()
    params.validate()
    if params.algorithm is not Algorithm.SCRYPT:
        raise InvalidParameters("calibration only supports scrypt")
    if ceiling is None:
        ceiling = CostCeiling()
    kdf = get_kdf(Algorithm.SCRYPT)
    ceiling.check(params, kdf.memory_bytes(params))
    salt = b"\x00" * params.salt_length

    while True:
        start = timer()
        derive_fn(b"calibration", salt, params, ceiling)
        elapsed = timer() - start
        logger.debug("cost_n=%d took %.3fs", params.cost_n, elapsed)
        if elapsed >= target_seconds:
            return params
        candidate = params.replace(cost_n=params.cost_n * 2)
        try:
            ceiling.check(candidate, kdf.memory_bytes(candidate))
        except ResourceExhausted as exc:
            logger.warning("calibration stopped at ceiling: %s", exc)
            return params
        params = candidate

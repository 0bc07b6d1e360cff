import random

__all__ = ["DeterministicRandom"]
__test__ = False


class DeterministicRandom:
    """Reproducible stand-in for the secure random source in tests."""

    def __init__(self, seed: int = 42):
        """Initialize generator with ``seed``."""
        self.random = random.Random(seed)  # nosec B311 - deterministic helper

    def token_bytes(self, nbytes: int) -> bytes:
        """Return ``nbytes`` pseudo-random bytes."""
        return self.random.randbytes(nbytes)

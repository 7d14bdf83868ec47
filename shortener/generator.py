"""Short code generation.

Codes are fixed-length strings drawn symbol by symbol, uniformly, from the
62-character base alphabet. The generator knows nothing about the registry:
uniqueness is the caller's concern.
"""

import random
from typing import Optional

from nanoid import generate

__all__ = ["BASE62_ALPHABET", "DEFAULT_SHORT_CODE_LENGTH", "ShortCodeGenerator"]

BASE62_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
DEFAULT_SHORT_CODE_LENGTH = 6


class ShortCodeGenerator:
    """Produce short code candidates on demand.

    By default codes come from nanoid, which reads the OS entropy pool, so
    calls made within the same clock tick do not repeat. Passing ``rng``
    swaps in a seeded ``random.Random`` for deterministic tests.

    Example:
        >>> generator = ShortCodeGenerator(length=6)
        >>> generator.generate()
        'q9Zk0P'
        >>> ShortCodeGenerator(rng=random.Random(7)).generate()  # repeatable
    """

    def __init__(
        self,
        length: int = DEFAULT_SHORT_CODE_LENGTH,
        alphabet: str = BASE62_ALPHABET,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not isinstance(length, int) or length <= 0:
            raise ValueError(f"length must be a positive integer, got {length!r}")
        if len(alphabet) < 2 or len(set(alphabet)) != len(alphabet):
            raise ValueError("alphabet must contain at least two distinct symbols and no duplicates")
        self._length = length
        self._alphabet = alphabet
        self._rng = rng

    def generate(self) -> str:
        if self._rng is None:
            return generate(self._alphabet, self._length)
        return "".join(self._rng.choice(self._alphabet) for _ in range(self._length))

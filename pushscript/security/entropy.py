"""Shannon entropy with a per-scan memo."""

import math
from collections import Counter

DEFAULT_MIN_ENTROPY = 4.0  # bits/char a key-like string is expected to reach


def shannon_entropy(data: str) -> float:
    """Shannon entropy of *data* in bits per character. Empty string is 0.0."""
    if not data:
        return 0.0

    length = len(data)
    result = 0.0
    for count in Counter(data).values():
        p = count / length
        result -= p * math.log2(p)
    return result


class EntropyCache:
    """Memoizes entropy by exact string value.

    One instance lives as long as one scanner; nothing is shared across
    scanners or CLI runs.
    """

    def __init__(self):
        self._values: dict[str, float] = {}
        self.hits = 0
        self.misses = 0

    def entropy_of(self, data: str) -> float:
        cached = self._values.get(data)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        value = shannon_entropy(data)
        self._values[data] = value
        return value

    def clear(self) -> None:
        self._values.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict:
        return {'size': len(self._values), 'hits': self.hits, 'misses': self.misses}

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, data: str) -> bool:
        return data in self._values

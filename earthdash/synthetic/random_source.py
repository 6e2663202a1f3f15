"""
EarthDash - Random Sources for Synthetic Data

Generators take any object with a ``random()`` method returning a float in
[0, 1). ``random.Random`` satisfies this, so a seeded instance makes the
synthetic output reproducible.
"""

import random
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    def random(self) -> float:
        ...


def create_random_source(seed: Optional[int] = None) -> RandomSource:
    """A fresh generator; unseeded instances draw from OS entropy."""
    return random.Random(seed)

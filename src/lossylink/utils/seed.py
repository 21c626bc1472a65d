from __future__ import annotations

import random
from typing import List, Optional


def derive_rngs(seed: Optional[int], count: int) -> List[random.Random]:
    if seed is None:
        return [random.Random() for _ in range(count)]
    master = random.Random(int(seed))
    return [random.Random(master.getrandbits(64)) for _ in range(count)]

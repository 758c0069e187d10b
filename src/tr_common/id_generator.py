"""Transaction-style IDs for simulated bets and claims.

Format: "<prefix>_<epoch ms>_<9 base36 chars>", e.g. "sim_1718000000000_k3j9x0a1b".
The random suffix comes from the caller's RNG so seeded runs produce the same IDs.
"""

import random

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_SUFFIX_LEN = 9


def make_tx_id(prefix: str, timestamp_ms: int, rng: random.Random) -> str:
    suffix = "".join(rng.choice(_ALPHABET) for _ in range(_SUFFIX_LEN))
    return f"{prefix}_{timestamp_ms}_{suffix}"

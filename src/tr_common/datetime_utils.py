"""Wall-clock helpers. Tick math works in epoch milliseconds."""

import time


def now_ms() -> int:
    """Wall-clock milliseconds since the Unix epoch."""
    return int(time.time() * 1000)

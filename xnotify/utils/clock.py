"""
Wall clock in epoch milliseconds, the unit of every stored timestamp.
"""
import time


def epoch_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)

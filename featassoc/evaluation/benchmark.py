"""
Timing of association policies over repeated calls.

Buffers are allocated once and reused for every trial, which is how the
associator is driven in a per-frame loop.
"""

import time


def time_policy(associator, desc_a, desc_b, trials: int = 10) -> float:
    """Return the mean wall-clock seconds per :meth:`associate` call."""
    if trials < 1:
        raise ValueError(f"trials must be >= 1, got {trials}")

    buffers = associator.allocate(len(desc_a), len(desc_b))

    # warm-up call outside the timed loop
    associator.associate(desc_a, desc_b, buffers)

    t0 = time.perf_counter()
    for _ in range(trials):
        associator.associate(desc_a, desc_b, buffers)
    return (time.perf_counter() - t0) / trials

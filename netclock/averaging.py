"""
Robust Averaging
================

Outlier-trimmed mean used to smooth a window of offset or latency samples.

A sample is an outlier when it is more than twice the median AND above a
noise floor. The median resists a single huge spike; the floor keeps a
near-zero median (a near-perfect link) from flagging every non-zero sample.

Trimming is a single filter pass over a sorted snapshot, with the median
taken once before anything is removed.
"""

import logging
from typing import Iterable, List, NamedTuple

logger = logging.getLogger(__name__)


class SmoothedAverage(NamedTuple):
    value: int
    kept: List[int]
    dropped: List[int]
    fallback: bool      # every sample was trimmed; value is the unfiltered mean


def trunc_div(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero (``//`` floors)."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def smooth_average(samples: Iterable[int], noise_floor: int) -> SmoothedAverage:
    """Trimmed mean of ``samples`` with diagnostics.

    Args:
        samples:     Integer samples, any order.
        noise_floor: Samples at or below this value are never trimmed.

    Raises:
        ValueError: ``samples`` is empty.
    """
    ordered = sorted(samples)
    if not ordered:
        raise ValueError("Cannot average an empty sample set")

    median = ordered[len(ordered) // 2]

    kept = []
    dropped = []
    for value in ordered:
        if value > 2 * median and value > noise_floor:
            dropped.append(value)
        else:
            kept.append(value)

    if not kept:
        mean = trunc_div(sum(ordered), len(ordered))
        logger.warning(
            f"All {len(ordered)} samples trimmed (median={median}, floor={noise_floor}); "
            f"using unfiltered mean {mean}"
        )
        return SmoothedAverage(mean, kept, dropped, True)

    return SmoothedAverage(trunc_div(sum(kept), len(kept)), kept, dropped, False)


def robust_average(samples: Iterable[int], noise_floor: int) -> int:
    """Trimmed mean of ``samples`` (see module docstring)."""
    return smooth_average(samples, noise_floor).value


def jitter(samples: Iterable[int]) -> int:
    """Spread of the samples: largest minus smallest."""
    ordered = sorted(samples)
    if not ordered:
        raise ValueError("Cannot compute jitter of an empty sample set")
    return ordered[-1] - ordered[0]

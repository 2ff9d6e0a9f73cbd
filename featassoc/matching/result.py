"""
Association output containers.

Output and scratch memory is owned by the caller and reused from one call
to the next (for example once per video frame).  A buffer's capacity is its
array size; the length that is valid after a call is the number of source
descriptors in that call.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

UNMATCHED = -1


class CapacityError(ValueError):
    """A caller-supplied output or scratch buffer is too small."""


def check_capacity(label: str, buffer, required: int) -> None:
    """Raise :class:`CapacityError` when *buffer* holds fewer than *required* slots."""
    if buffer is None:
        if required == 0:
            return
        raise CapacityError(f"{label} buffer is required (need {required})")
    if len(buffer) < required:
        raise CapacityError(f"{label} buffer too small: "
                            f"{len(buffer)} < {required}")


def check_scratch(label: str, buffer, required: int) -> None:
    """Like :func:`check_capacity`, and also require a C-contiguous float64 array.

    Scores are written in place through reshaped views, so any other dtype
    or layout is rejected before the scan starts.
    """
    check_capacity(label, buffer, required)
    if buffer is None or required == 0:
        return
    if not isinstance(buffer, np.ndarray) or buffer.dtype != np.float64:
        dtype = getattr(buffer, "dtype", type(buffer).__name__)
        raise CapacityError(f"{label} buffer must be a float64 array, got {dtype}")
    if not buffer.flags.c_contiguous:
        raise CapacityError(f"{label} buffer must be C-contiguous")


@dataclass
class AssociationBuffers:
    """Pre-sized numpy buffers handed to every association call."""

    pairs: np.ndarray
    fit_score: np.ndarray
    work: Optional[np.ndarray] = None

    @classmethod
    def allocate(cls, n: int, m: int, scratch_size: int = None):
        """Allocate buffers for up to *n* sources and *m* targets.

        Parameters
        ----------
        n, m : int
            Maximum source / target collection sizes.
        scratch_size : int, optional
            Length of the scratch buffer; defaults to one row (*m*).
        """
        if scratch_size is None:
            scratch_size = m
        return cls(
            pairs=np.full(n, UNMATCHED, dtype=np.int64),
            fit_score=np.zeros(n, dtype=np.float64),
            work=np.zeros(scratch_size, dtype=np.float64),
        )

    @property
    def capacity(self) -> int:
        return len(self.pairs)


@dataclass
class MatchResult:
    """Association sequence and its parallel fit-score sequence.

    Both arrays are views into the caller's buffers and are only valid until
    the buffers are reused.  ``fit_score`` is ``None`` for the basic policy;
    for other policies its meaning depends on the policy and is undefined
    where ``pairs`` is :data:`UNMATCHED` under mutual consistency.
    """

    pairs: np.ndarray
    fit_score: Optional[np.ndarray]
    policy: str

    def __len__(self):
        return len(self.pairs)

    def matched_mask(self) -> np.ndarray:
        return self.pairs != UNMATCHED

    @property
    def num_matches(self) -> int:
        return int(np.count_nonzero(self.matched_mask()))

    def matches(self) -> list:
        """Accepted correspondences as ``(source, target, fit)`` tuples.

        *fit* is ``None`` when the policy reports no fit score.
        """
        out = []
        for i in np.flatnonzero(self.matched_mask()):
            fit = None if self.fit_score is None else float(self.fit_score[i])
            out.append((int(i), int(self.pairs[i]), fit))
        return out

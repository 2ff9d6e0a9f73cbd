"""
Greedy descriptor association.

Each source descriptor in A is paired with its single best-scoring target in
B, without any global (bipartite-optimal) reassignment.  Four policies share
the same scanning primitive and differ only in when a match is rejected and
what is reported as its fit score:

* **basic** -- Lowe-style ratio test between the best and second-best
  score; no fit score.
* **error_report** -- always assigns the best target; the fit score is the
  raw best score.
* **ambiguity_count** -- always assigns the best target; the fit score is
  the number of targets scoring within ``max_ratio`` times the best.
* **mutual_consistency** -- keeps a match only when the target's own best
  source is the same descriptor; the fit score is the best score.

All working memory is supplied by the caller.  Buffers are checked before
anything is written, and a :class:`CapacityError` is raised when one is
too small.
"""

from enum import Enum

import numpy as np

from featassoc.matching.result import (
    UNMATCHED,
    AssociationBuffers,
    MatchResult,
    check_capacity,
    check_scratch,
)
from featassoc.matching.scan import best_in_column, best_in_row, scan_row
from featassoc.scoring.score import get_score


class Policy(Enum):
    BASIC = "basic"
    ERROR_REPORT = "error_report"
    AMBIGUITY_COUNT = "ambiguity_count"
    MUTUAL_CONSISTENCY = "mutual_consistency"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown association policy '{value}', expected "
                             f"one of {[p.value for p in cls]}") from None


def _prepare(desc_a, desc_b, score):
    return score.prepare(desc_a), score.prepare(desc_b)


def _row_buffer(work_buffer, m: int) -> np.ndarray:
    if work_buffer is None:
        return np.empty(m, dtype=np.float64)
    check_scratch("work", work_buffer, m)
    return work_buffer


def basic(desc_a, desc_b, score, fit_threshold: float, pairs,
          work_buffer=None) -> int:
    """Greedy association with ratio-test rejection.

    A match is accepted when B has a single entry, when the best score is
    exactly zero, or when ``best < fit_threshold * second_best``.  Otherwise
    the source is left unmatched.

    Parameters
    ----------
    desc_a, desc_b : descriptor collections
        Source (n) and target (m) descriptors.
    score : ScoreFunction
        Lower is better.
    fit_threshold : float
        Ratio threshold in (0, 1].  Lower values are more selective.
    pairs : np.ndarray
        Integer output buffer of length >= n.
    work_buffer : np.ndarray, optional
        C-contiguous float64 scratch row of length >= m.

    Returns
    -------
    int
        Number of source descriptors processed (n).
    """
    if not 0.0 < fit_threshold <= 1.0:
        raise ValueError(f"fit_threshold must lie in (0, 1], got {fit_threshold}")

    desc_a, desc_b = _prepare(desc_a, desc_b, score)
    n, m = len(desc_a), len(desc_b)
    check_capacity("pairs", pairs, n)
    row = _row_buffer(work_buffer, m)

    if m == 0:
        pairs[:n] = UNMATCHED
        return n

    for i in range(n):
        scan = scan_row(desc_a[i], desc_b, score, row)
        if (scan.second is None or scan.best == 0
                or scan.best < fit_threshold * scan.second):
            pairs[i] = scan.best_index
        else:
            pairs[i] = UNMATCHED
    return n


def error_report(desc_a, desc_b, score, pairs, fit_score,
                 work_buffer=None) -> int:
    """Assign every source to its best target and report the raw score.

    Nothing is rejected, which makes this policy suitable for measuring the
    error distribution of a descriptor / metric combination.
    """
    desc_a, desc_b = _prepare(desc_a, desc_b, score)
    n, m = len(desc_a), len(desc_b)
    check_capacity("pairs", pairs, n)
    check_capacity("fit_score", fit_score, n)
    row = _row_buffer(work_buffer, m)

    if m == 0:
        pairs[:n] = UNMATCHED
        return n

    for i in range(n):
        scan = scan_row(desc_a[i], desc_b, score, row)
        pairs[i] = scan.best_index
        fit_score[i] = scan.best
    return n


def ambiguity_count(desc_a, desc_b, score, max_ratio: float, work_buffer,
                    pairs, fit_score) -> int:
    """Assign every source to its best target and count near-ties.

    ``fit_score[i]`` is the number of targets whose score is at most
    ``max_ratio * best``.  The best target is always counted, so the
    smallest possible value is 1.

    Parameters
    ----------
    max_ratio : float
        Tolerance multiple of the best score, >= 1.
    work_buffer : np.ndarray
        C-contiguous float64 scratch row of length >= m, rewritten for
        every source.
    """
    if max_ratio < 1.0:
        raise ValueError(f"max_ratio must be >= 1, got {max_ratio}")

    desc_a, desc_b = _prepare(desc_a, desc_b, score)
    n, m = len(desc_a), len(desc_b)
    check_capacity("pairs", pairs, n)
    check_capacity("fit_score", fit_score, n)
    check_scratch("work", work_buffer, m)

    if m == 0:
        pairs[:n] = UNMATCHED
        return n

    for i in range(n):
        row = score.score_row(desc_a[i], desc_b, work_buffer)
        best, best_index = best_in_row(row)
        pairs[i] = best_index
        fit_score[i] = np.count_nonzero(row <= max_ratio * best)
    return n


def mutual_consistency(desc_a, desc_b, score, work_buffer, pairs,
                       fit_score) -> int:
    """Forward/backward (mutual nearest neighbour) association.

    The full n x m score matrix is written into *work_buffer*.  Source i
    keeps its best target j only if i is also the best source for j, with
    earliest-index tie-breaking in both directions.  For rejected sources
    the content of ``fit_score[i]`` is unspecified.

    Parameters
    ----------
    work_buffer : np.ndarray
        C-contiguous float64 scratch buffer of length >= n * m.
    """
    desc_a, desc_b = _prepare(desc_a, desc_b, score)
    n, m = len(desc_a), len(desc_b)
    check_capacity("pairs", pairs, n)
    check_capacity("fit_score", fit_score, n)
    check_scratch("work", work_buffer, n * m)

    if m == 0:
        pairs[:n] = UNMATCHED
        return n
    if n == 0:
        return 0

    matrix = score.score_matrix(desc_a, desc_b, work_buffer)

    # forward: best target per source
    for i in range(n):
        fit_score[i], pairs[i] = best_in_row(matrix[i])

    # backward: only the columns some source picked need checking
    for i in range(n):
        _, source = best_in_column(matrix, pairs[i])
        if source != i:
            pairs[i] = UNMATCHED
    return n


class GreedyAssociator:
    """A greedy association policy bound to a score function and parameters.

    The associator holds configuration only.  It may be shared between
    threads as long as every concurrent call receives its own buffers.

    Parameters
    ----------
    policy : Policy or str
        One of ``basic``, ``error_report``, ``ambiguity_count`` or
        ``mutual_consistency``.
    score : str, ScoreFunction or callable
        Metric resolved once, here, with :func:`get_score`.
    fit_threshold : float
        Ratio-test threshold for the basic policy.
    max_ratio : float
        Tolerance multiple for the ambiguity-count policy.
    """

    def __init__(self, policy="basic", score="euclidean",
                 fit_threshold: float = 0.8, max_ratio: float = 1.5):
        self.policy = Policy.parse(policy)
        self.score = get_score(score)
        self.fit_threshold = fit_threshold
        self.max_ratio = max_ratio

        if self.policy is Policy.BASIC and not 0.0 < fit_threshold <= 1.0:
            raise ValueError(f"fit_threshold must lie in (0, 1], got {fit_threshold}")
        if self.policy is Policy.AMBIGUITY_COUNT and max_ratio < 1.0:
            raise ValueError(f"max_ratio must be >= 1, got {max_ratio}")

    def __repr__(self):
        return (f"GreedyAssociator(policy={self.policy.value!r}, "
                f"score={self.score!r})")

    @property
    def reports_fit(self) -> bool:
        return self.policy is not Policy.BASIC

    def scratch_size(self, n: int, m: int) -> int:
        """Scratch buffer length needed for *n* sources and *m* targets."""
        if self.policy is Policy.MUTUAL_CONSISTENCY:
            return n * m
        return m

    def allocate(self, n: int, m: int) -> AssociationBuffers:
        """Allocate reusable buffers for collections up to *n* x *m*."""
        return AssociationBuffers.allocate(n, m, self.scratch_size(n, m))

    def associate(self, desc_a, desc_b, buffers: AssociationBuffers) -> MatchResult:
        """Associate *desc_a* with *desc_b* using the configured policy.

        Returns
        -------
        MatchResult
            Views of length n into ``buffers``.
        """
        if self.policy is Policy.BASIC:
            n = basic(desc_a, desc_b, self.score, self.fit_threshold,
                      buffers.pairs, buffers.work)
        elif self.policy is Policy.ERROR_REPORT:
            n = error_report(desc_a, desc_b, self.score, buffers.pairs,
                             buffers.fit_score, buffers.work)
        elif self.policy is Policy.AMBIGUITY_COUNT:
            n = ambiguity_count(desc_a, desc_b, self.score, self.max_ratio,
                                buffers.work, buffers.pairs, buffers.fit_score)
        else:
            n = mutual_consistency(desc_a, desc_b, self.score, buffers.work,
                                   buffers.pairs, buffers.fit_score)

        fit = buffers.fit_score[:n] if self.reports_fit else None
        return MatchResult(buffers.pairs[:n], fit, self.policy.value)

"""
Pairwise scanning primitive shared by the greedy association policies.

For one source descriptor the scanner scores every target, in index order,
into a caller-provided row and extracts the best and second-best
candidates.  Ties always resolve to the earliest index so that results are
reproducible.
"""

from typing import NamedTuple, Optional

import numpy as np


class RowScan(NamedTuple):
    best: float
    best_index: int
    second: Optional[float]
    second_index: Optional[int]


def best_in_row(row: np.ndarray):
    """Return ``(score, index)`` of the lowest entry; earliest index wins."""
    # argmin returns the first occurrence of the minimum
    idx = int(np.argmin(row))
    return float(row[idx]), idx


def best_in_column(matrix: np.ndarray, j: int):
    """Return ``(score, index)`` of the lowest entry in column *j*."""
    return best_in_row(matrix[:, j])


def second_in_row(row: np.ndarray, best_index: int):
    """Lowest entry over all indices except *best_index*.

    The best entry is masked in place and restored before returning, so the
    row is unchanged afterwards.

    Returns
    -------
    second : float or None
        ``None`` when the row has a single entry.
    second_index : int or None
    """
    if row.shape[0] < 2:
        return None, None

    saved = row[best_index]
    row[best_index] = np.inf
    try:
        return best_in_row(row)
    finally:
        row[best_index] = saved


def scan_row(a, targets, score, row: np.ndarray) -> RowScan:
    """Score *a* against every target and find the two best candidates.

    Parameters
    ----------
    a : descriptor
        Source descriptor (already prepared by *score*).
    targets : sequence of descriptors
        Target collection of length m >= 1 (already prepared by *score*).
    score : ScoreFunction
        Metric where lower is better.
    row : np.ndarray
        Scratch buffer of length >= m; ``row[:m]`` receives every score.

    Returns
    -------
    RowScan
        Best and second-best scores and indices.
    """
    scores = score.score_row(a, targets, row)
    best, best_index = best_in_row(scores)
    second, second_index = second_in_row(scores, best_index)
    return RowScan(best, best_index, second, second_index)

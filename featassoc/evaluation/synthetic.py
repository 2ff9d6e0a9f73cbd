"""
Synthetic descriptor pairs with known ground truth.

Target descriptors are drawn from a standard normal distribution.  The
source collection holds noisy copies of a random subset of the targets
(the true correspondences) together with unrelated outlier descriptors, and
both collections are shuffled so that index order carries no information.
"""

import numpy as np

from featassoc.matching.result import UNMATCHED


def make_descriptor_pair(n_inliers: int, n_outliers_a: int = 0,
                         n_outliers_b: int = 0, dim: int = 64,
                         noise: float = 0.1, rng=None):
    """Build a source / target descriptor pair with ground truth.

    Parameters
    ----------
    n_inliers : int
        Number of source descriptors that have a true match in the target set.
    n_outliers_a : int
        Source descriptors with no counterpart in the target set.
    n_outliers_b : int
        Extra target descriptors that nothing should match.
    dim : int
        Descriptor length.
    noise : float
        Standard deviation of the Gaussian noise added to matched copies.
    rng : np.random.Generator or int, optional
        Random generator or seed.

    Returns
    -------
    desc_a : np.ndarray
        (n_inliers + n_outliers_a) x dim source descriptors.
    desc_b : np.ndarray
        (n_inliers + n_outliers_b) x dim target descriptors.
    truth : np.ndarray
        Index into *desc_b* for every source descriptor, or -1 for outliers.
    """
    rng = np.random.default_rng(rng)
    m = n_inliers + n_outliers_b
    n = n_inliers + n_outliers_a

    desc_b = rng.standard_normal((m, dim))

    matched = rng.choice(m, size=n_inliers, replace=False)
    inliers = desc_b[matched] + noise * rng.standard_normal((n_inliers, dim))
    outliers = rng.standard_normal((n_outliers_a, dim))

    desc_a = np.vstack([inliers, outliers])
    truth = np.concatenate([matched, np.full(n_outliers_a, UNMATCHED)])

    order = rng.permutation(n)
    return desc_a[order], desc_b, truth[order].astype(np.int64)


def score_associations(pairs, truth) -> dict:
    """Compare an association sequence against the ground truth.

    Returns
    -------
    dict
        ``matches`` (accepted associations), ``correct`` (accepted and equal
        to the truth), ``precision`` (correct / matches) and ``recall``
        (correct / sources that have a true match).  Rates are 0.0 when the
        denominator is zero.
    """
    pairs = np.asarray(pairs)
    truth = np.asarray(truth)
    accepted = pairs != UNMATCHED

    n_matches = int(np.count_nonzero(accepted))
    n_correct = int(np.count_nonzero(accepted & (pairs == truth)))
    n_true = int(np.count_nonzero(truth != UNMATCHED))

    return {
        "matches": n_matches,
        "correct": n_correct,
        "precision": n_correct / n_matches if n_matches else 0.0,
        "recall": n_correct / n_true if n_true else 0.0,
    }

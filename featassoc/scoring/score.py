"""
Score functions for descriptor association.

A score function measures how well two descriptors match.  Every policy in
the greedy associator assumes that *lower is better* and that scores are
deterministic, finite and non-negative.  The standard metrics are evaluated
with ``scipy.spatial.distance.cdist`` directly into a caller-owned buffer so
that the scan loop never allocates a fresh distance matrix.
"""

import numpy as np
from scipy.spatial.distance import cdist


class ScoreFunction:
    """Base class for descriptor score functions.

    Subclasses must implement :meth:`score`.  The row and matrix methods
    fall back to calling :meth:`score` pair by pair; vectorised metrics
    override them.
    """

    name = "custom"

    def score(self, a, b) -> float:
        raise NotImplementedError

    def prepare(self, collection):
        """Normalise a descriptor collection once per association call."""
        return collection

    def score_row(self, a, targets, out: np.ndarray) -> np.ndarray:
        """Write ``score(a, targets[j])`` into ``out[:m]`` in index order."""
        m = len(targets)
        row = out[:m]
        for j in range(m):
            row[j] = self.score(a, targets[j])
        return row

    def score_matrix(self, sources, targets, out: np.ndarray) -> np.ndarray:
        """Write the n x m score matrix, row-major, into ``out[:n * m]``."""
        n, m = len(sources), len(targets)
        matrix = out[:n * m].reshape(n, m)
        for i in range(n):
            self.score_row(sources[i], targets, matrix[i])
        return matrix

    def __call__(self, a, b) -> float:
        return self.score(a, b)

    def __repr__(self):
        return f"{type(self).__name__}()"


class _CdistScore(ScoreFunction):
    """Score function backed by a ``cdist`` metric over numeric vectors."""

    metric = None

    def prepare(self, collection):
        # 1-D input is a collection of scalar descriptors
        desc = np.asarray(collection, dtype=np.float64)
        if desc.ndim == 1:
            desc = desc.reshape(-1, 1)
        return desc

    def score(self, a, b) -> float:
        a = np.atleast_2d(np.asarray(a, dtype=np.float64))
        b = np.atleast_2d(np.asarray(b, dtype=np.float64))
        return float(cdist(a, b, metric=self.metric)[0, 0])

    def score_row(self, a, targets, out: np.ndarray) -> np.ndarray:
        m = targets.shape[0]
        row = out[:m]
        if m:
            cdist(a.reshape(1, -1), targets, metric=self.metric,
                  out=row.reshape(1, m))
        return row

    def score_matrix(self, sources, targets, out: np.ndarray) -> np.ndarray:
        n, m = sources.shape[0], targets.shape[0]
        matrix = out[:n * m].reshape(n, m)
        if n and m:
            cdist(sources, targets, metric=self.metric, out=matrix)
        return matrix


class EuclideanScore(_CdistScore):
    """Euclidean (L2) distance."""

    name = "euclidean"
    metric = "euclidean"


class SquaredEuclideanScore(_CdistScore):
    """Squared Euclidean distance (SSD)."""

    name = "sqeuclidean"
    metric = "sqeuclidean"


class CityBlockScore(_CdistScore):
    """Sum of absolute differences (L1)."""

    name = "cityblock"
    metric = "cityblock"


class FunctionScore(ScoreFunction):
    """Adapt a plain ``fn(a, b) -> float`` callable to :class:`ScoreFunction`.

    Descriptors are treated as opaque objects and passed to *fn* unchanged.
    """

    def __init__(self, fn, name: str = None):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "custom")

    def score(self, a, b) -> float:
        return float(self.fn(a, b))

    def __repr__(self):
        return f"FunctionScore({self.name})"


SCORES = {
    EuclideanScore.name: EuclideanScore,
    SquaredEuclideanScore.name: SquaredEuclideanScore,
    CityBlockScore.name: CityBlockScore,
}


def get_score(score) -> ScoreFunction:
    """Resolve *score* to a :class:`ScoreFunction` instance.

    Parameters
    ----------
    score : str, ScoreFunction or callable
        A registered metric name (``"euclidean"``, ``"sqeuclidean"``,
        ``"cityblock"``), an existing score function, or a plain callable.

    Returns
    -------
    ScoreFunction
    """
    if isinstance(score, ScoreFunction):
        return score
    if isinstance(score, str):
        try:
            return SCORES[score.lower()]()
        except KeyError:
            raise ValueError(f"Unknown score function '{score}', expected "
                             f"one of {sorted(SCORES)}") from None
    if callable(score):
        return FunctionScore(score)
    raise TypeError(f"Cannot build a score function from {score!r}")

"""
Pytest configuration and shared fixtures.
"""

import numpy as np
import pytest

from featassoc.scoring.score import EuclideanScore


@pytest.fixture
def source_values() -> list:
    """One-dimensional source descriptors."""
    return [1, 2, 3, 4]


@pytest.fixture
def target_values() -> list:
    """One-dimensional target descriptors; 2 is equidistant from 3 and 1."""
    return [3, 4, 1, 40]


@pytest.fixture
def score() -> EuclideanScore:
    return EuclideanScore()


@pytest.fixture
def pairs() -> np.ndarray:
    return np.full(4, 99, dtype=np.int64)


@pytest.fixture
def fit_score() -> np.ndarray:
    return np.full(4, -5.0)

"""
Tests for the pairwise scanning primitive.
"""

import numpy as np

from featassoc.matching.scan import best_in_column, best_in_row, scan_row, second_in_row
from featassoc.scoring.score import EuclideanScore


def _prepared(values):
    return EuclideanScore().prepare(values)


def test_scan_row_best_and_second():
    targets = _prepared([3, 4, 1, 40])
    row = np.zeros(4)

    scan = scan_row(_prepared([2])[0], targets, EuclideanScore(), row)

    # 2 is equidistant from 3 (index 0) and 1 (index 2)
    assert scan.best == 1 and scan.best_index == 0
    assert scan.second == 1 and scan.second_index == 2
    np.testing.assert_allclose(row, [1, 2, 1, 38])


def test_second_best_tie_keeps_earliest_index():
    targets = _prepared([2, 1, -1, 3, 1])
    row = np.zeros(5)

    scan = scan_row(_prepared([0])[0], targets, EuclideanScore(), row)

    assert scan.best_index == 1
    assert scan.second_index == 2


def test_single_target_has_no_second_best():
    row = np.zeros(3)
    scan = scan_row(_prepared([0])[0], _prepared([5]), EuclideanScore(), row)

    assert scan.best == 5 and scan.best_index == 0
    assert scan.second is None and scan.second_index is None


def test_row_tail_untouched():
    row = np.full(6, -1.0)
    scan_row(_prepared([0])[0], _prepared([1, 2]), EuclideanScore(), row)

    assert row.tolist() == [1, 2, -1, -1, -1, -1]


def test_second_in_row_restores_row():
    row = np.array([4.0, 0.5, 3.0])
    second, idx = second_in_row(row, 1)

    assert (second, idx) == (3.0, 2)
    assert row.tolist() == [4.0, 0.5, 3.0]


def test_best_helpers():
    matrix = np.array([[3.0, 1.0],
                       [1.0, 1.0],
                       [1.0, 5.0]])

    assert best_in_row(matrix[1]) == (1.0, 0)
    assert best_in_column(matrix, 0) == (1.0, 1)
    assert best_in_column(matrix, 1) == (1.0, 0)

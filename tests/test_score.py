"""
Tests for the score functions.
"""

import numpy as np
import pytest

from featassoc.scoring.score import (
    CityBlockScore,
    EuclideanScore,
    FunctionScore,
    ScoreFunction,
    SquaredEuclideanScore,
    get_score,
)


@pytest.mark.parametrize("score, expected", [
    (EuclideanScore(), 5.0),
    (SquaredEuclideanScore(), 25.0),
    (CityBlockScore(), 7.0),
])
def test_pair_scores(score, expected):
    assert score.score([0, 0], [3, 4]) == pytest.approx(expected)
    assert score([3, 4], [0, 0]) == pytest.approx(expected)


def test_prepare_promotes_scalars_to_vectors():
    desc = EuclideanScore().prepare([1, 2, 3])

    assert desc.shape == (3, 1)
    assert desc.dtype == np.float64


def test_prepare_does_not_copy_float_matrix():
    desc = np.random.default_rng(0).standard_normal((5, 8))

    assert EuclideanScore().prepare(desc) is desc


@pytest.mark.parametrize("cls", [EuclideanScore, SquaredEuclideanScore, CityBlockScore])
def test_matrix_matches_pairwise(cls):
    rng = np.random.default_rng(1)
    score = cls()
    a = rng.standard_normal((4, 6))
    b = rng.standard_normal((3, 6))

    out = np.zeros(20)
    matrix = score.score_matrix(a, b, out)

    expected = [[score.score(x, y) for y in b] for x in a]
    np.testing.assert_allclose(matrix, expected)
    np.testing.assert_allclose(out[:12], np.ravel(expected))
    assert np.all(out[12:] == 0)


def test_generic_matrix_fallback():
    score = FunctionScore(lambda x, y: abs(x - y), name="absdiff")
    out = np.zeros(6)

    matrix = score.score_matrix([1, 2], [0, 5, 2], out)

    assert matrix.tolist() == [[1, 4, 1], [2, 3, 0]]
    assert repr(score) == "FunctionScore(absdiff)"


def test_base_class_requires_score():
    with pytest.raises(NotImplementedError):
        ScoreFunction().score(1, 2)


def test_get_score_by_name():
    assert isinstance(get_score("euclidean"), EuclideanScore)
    assert isinstance(get_score("SqEuclidean"), SquaredEuclideanScore)
    assert isinstance(get_score("cityblock"), CityBlockScore)


def test_get_score_passthrough_and_callable():
    score = CityBlockScore()
    assert get_score(score) is score

    wrapped = get_score(lambda x, y: 0.0)
    assert isinstance(wrapped, FunctionScore)
    assert wrapped(1, 2) == 0.0


def test_get_score_rejects_unknown():
    with pytest.raises(ValueError):
        get_score("hamming-ish")
    with pytest.raises(TypeError):
        get_score(42)

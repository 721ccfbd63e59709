from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from rosvizkit.core.linalg import LUDecomposition, SingularMatrixError, lu_solve, matrix_decompose, matrix_inverse


def _random_well_conditioned(rng, n):
    return rng.normal(size=(n, n)) + n * np.eye(n)


@pytest.mark.parametrize("n", [1, 2, 3, 4])
def test_inverse_roundtrip_random(n):
    rng = np.random.default_rng(n)
    for _ in range(5):
        M = _random_well_conditioned(rng, n)
        inv = matrix_inverse(M)
        assert np.max(np.abs(M @ inv - np.eye(n))) < 1e-9


def test_decompose_does_not_mutate_input():
    M = np.array([[0.0, 2.0], [3.0, 4.0]])
    before = M.copy()
    matrix_decompose(M)
    assert np.array_equal(M, before)


def test_lu_reconstructs_permuted_matrix():
    rng = np.random.default_rng(1)
    M = _random_well_conditioned(rng, 4)
    dec = matrix_decompose(M)
    L = np.tril(dec.lu, -1) + np.eye(4)
    U = np.triu(dec.lu)
    assert np.allclose(L @ U, M[dec.perm], atol=1e-12)


def test_toggle_even_when_no_swap():
    dec = matrix_decompose(np.array([[4.0, 1.0], [2.0, 3.0]]))
    assert dec.toggle == 1
    assert dec.perm.tolist() == [0, 1]


def test_toggle_odd_after_one_swap():
    M = np.array([[1.0, 2.0], [3.0, 4.0]])
    dec = matrix_decompose(M)
    assert dec.toggle == -1
    assert dec.perm.tolist() == [1, 0]
    assert dec.determinant() == pytest.approx(np.linalg.det(M))


def test_determinant_sign_from_toggle():
    rng = np.random.default_rng(7)
    M = _random_well_conditioned(rng, 3)[[2, 0, 1]]
    dec = matrix_decompose(M)
    assert dec.determinant() == pytest.approx(np.linalg.det(M), rel=1e-9)


def test_zero_row_is_singular():
    M = np.array([[1.0, 2.0, 3.0], [0.0, 0.0, 0.0], [4.0, 5.0, 6.0]])
    with pytest.raises(SingularMatrixError):
        matrix_inverse(M)


def test_zero_column_is_singular():
    with pytest.raises(SingularMatrixError):
        matrix_decompose(np.array([[0.0, 1.0], [0.0, 2.0]]))


def test_rank_deficient_last_pivot_is_singular():
    with pytest.raises(SingularMatrixError):
        matrix_inverse(np.array([[1.0, 2.0], [2.0, 4.0]]))


def test_singular_error_is_linalg_error():
    assert issubclass(SingularMatrixError, np.linalg.LinAlgError)


def test_non_square_rejected_as_precondition():
    with pytest.raises(ValueError) as exc:
        matrix_decompose(np.zeros((2, 3)))
    assert not isinstance(exc.value, SingularMatrixError)


def test_lu_solve_with_permuted_rhs():
    rng = np.random.default_rng(3)
    M = _random_well_conditioned(rng, 3)
    b = rng.normal(size=3)
    dec = matrix_decompose(M)
    x = lu_solve(dec, b[dec.perm])
    assert np.allclose(M @ x, b, atol=1e-12)
    # Bare LU array is accepted too.
    assert np.allclose(lu_solve(dec.lu, b[dec.perm]), x)


def test_decomposition_is_frozen():
    dec = matrix_decompose(np.eye(2))
    assert isinstance(dec, LUDecomposition)
    with pytest.raises(FrozenInstanceError):
        dec.toggle = -1  # type: ignore[misc]

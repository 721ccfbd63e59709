from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)


class SingularMatrixError(np.linalg.LinAlgError):
    pass


@dataclass(frozen=True)
class LUDecomposition:
    """
    Doolittle LU factors of a row-permuted square matrix.

    `lu` holds L strictly below the diagonal (unit diagonal implied) and U on
    and above it. `perm[i]` is the original row now stored at row i; `toggle`
    is +1 for an even number of row swaps, -1 for odd.
    """

    lu: np.ndarray  # (n,n)
    perm: np.ndarray  # (n,)
    toggle: int

    @property
    def n(self) -> int:
        return int(self.lu.shape[0])

    def determinant(self) -> float:
        return float(self.toggle * np.prod(np.diag(self.lu)))


def _swap_rows(a: np.ndarray, perm: np.ndarray, i: int, j: int) -> None:
    a[[i, j]] = a[[j, i]]
    perm[[i, j]] = perm[[j, i]]


def matrix_decompose(matrix: np.ndarray) -> LUDecomposition:
    """
    LU decomposition with partial pivoting.

    The caller's matrix is copied, never modified. Raises ValueError for a
    non-square input and SingularMatrixError when a column has no usable pivot.
    """
    a = np.array(matrix, dtype=np.float64, copy=True)
    if a.ndim != 2 or a.shape[0] == 0 or a.shape[0] != a.shape[1]:
        raise ValueError(f"cannot decompose a non-square matrix of shape {a.shape}")

    n = a.shape[0]
    perm = np.arange(n, dtype=np.int64)
    toggle = 1

    for j in range(n - 1):
        # Largest magnitude in column j; the first maximum wins ties.
        p_row = j + int(np.argmax(np.abs(a[j:, j])))
        if p_row != j:
            _swap_rows(a, perm, p_row, j)
            toggle = -toggle

        if a[j, j] == 0.0:
            # Rescue a zero pivot with the last nonzero row below it.
            nonzero = np.flatnonzero(a[j + 1 :, j] != 0.0)
            if nonzero.size == 0:
                raise SingularMatrixError(f"matrix is singular (no pivot in column {j})")
            good_row = j + 1 + int(nonzero[-1])
            _swap_rows(a, perm, good_row, j)
            toggle = -toggle

        a[j + 1 :, j] /= a[j, j]
        a[j + 1 :, j + 1 :] -= np.outer(a[j + 1 :, j], a[j, j + 1 :])

    if a[n - 1, n - 1] == 0.0:
        raise SingularMatrixError("matrix is singular (zero on the last diagonal entry)")

    logger.debug("LU decomposition n=%d perm=%s toggle=%d", n, perm.tolist(), toggle)
    return LUDecomposition(lu=a, perm=perm, toggle=toggle)


def lu_solve(lu: LUDecomposition | np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Solve L U x = b by forward then back substitution.

    `b` must already be permuted with the decomposition's `perm`; this
    function does not apply it.
    """
    m = lu.lu if isinstance(lu, LUDecomposition) else np.asarray(lu, dtype=np.float64)
    n = m.shape[0]
    x = np.array(b, dtype=np.float64, copy=True).reshape(n)

    for i in range(1, n):
        x[i] -= m[i, :i] @ x[:i]

    x[n - 1] /= m[n - 1, n - 1]
    for i in range(n - 2, -1, -1):
        x[i] = (x[i] - m[i, i + 1 :] @ x[i + 1 :]) / m[i, i]
    return x


def matrix_inverse(matrix: np.ndarray) -> np.ndarray:
    dec = matrix_decompose(matrix)
    n = dec.n
    result = np.empty((n, n), dtype=np.float64)
    for i in range(n):
        b = (dec.perm == i).astype(np.float64)
        result[:, i] = lu_solve(dec, b)
    return result

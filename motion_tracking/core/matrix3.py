"""Fixed-size 3x3 matrix algebra for the tracking Kalman filter."""

from typing import Iterable, Sequence
import numpy as np
from numpy.typing import ArrayLike, NDArray

from .errors import InvalidDimensionError, IndexOutOfRangeError, SingularMatrixError

SINGULAR_TOLERANCE = 1e-10


class Matrix3:
    """3x3 real matrix.

    Arithmetic operators return new instances. The only in-place
    mutation is ``set``.

    Example:
        >>> m = Matrix3.from_flat([2, 0, 0, 0, 2, 0, 0, 0, 2])
        >>> (m @ m.inverse()).allclose(Matrix3.identity())
        True
    """

    __slots__ = ("_data",)

    def __init__(self, data: ArrayLike):
        """Create a matrix from a 3x3 nested sequence or array.

        Args:
            data: Row-major 3x3 values.

        Raises:
            InvalidDimensionError: If data is not exactly 3x3.
        """
        try:
            array = np.array(data, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidDimensionError(f"Cannot build 3x3 matrix: {e}") from e

        if array.shape != (3, 3):
            raise InvalidDimensionError(
                f"Matrix must be 3x3, got shape {array.shape}"
            )
        self._data = array

    @classmethod
    def from_flat(cls, values: Sequence[float]) -> "Matrix3":
        """Create from 9 values in row-major order."""
        if len(values) != 9:
            raise InvalidDimensionError(
                f"Flat sequence must contain exactly 9 elements, got {len(values)}"
            )
        return cls([values[0:3], values[3:6], values[6:9]])

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix3":
        """Create from three rows of three values."""
        try:
            well_formed = len(rows) == 3 and all(len(row) == 3 for row in rows)
        except TypeError:
            well_formed = False
        if not well_formed:
            raise InvalidDimensionError("Nested sequence must be 3x3")
        return cls(rows)

    @classmethod
    def identity(cls) -> "Matrix3":
        """Return the 3x3 identity matrix."""
        return cls(np.eye(3))

    @classmethod
    def zeros(cls) -> "Matrix3":
        """Return the 3x3 zero matrix."""
        return cls(np.zeros((3, 3)))

    @classmethod
    def diagonal(cls, values: Iterable[float]) -> "Matrix3":
        """Return a matrix with values on the diagonal, zero elsewhere."""
        diag = np.asarray(list(values), dtype=np.float64)
        if diag.shape != (3,):
            raise InvalidDimensionError(
                f"Diagonal must have 3 elements, got shape {diag.shape}"
            )
        return cls(np.diag(diag))

    def multiply(self, other: "Matrix3") -> "Matrix3":
        """Matrix product self * other."""
        a = self._data
        b = other._data
        result = np.zeros((3, 3))
        for i in range(3):
            for j in range(3):
                total = 0.0
                for k in range(3):
                    total += a[i, k] * b[k, j]
                result[i, j] = total
        return Matrix3(result)

    def add(self, other: "Matrix3") -> "Matrix3":
        """Elementwise sum."""
        return Matrix3(self._data + other._data)

    def subtract(self, other: "Matrix3") -> "Matrix3":
        """Elementwise difference."""
        return Matrix3(self._data - other._data)

    def transpose(self) -> "Matrix3":
        """Return the transposed matrix."""
        return Matrix3(self._data.T)

    def determinant(self) -> float:
        """Determinant by cofactor expansion along the first row."""
        m = self._data
        return float(
            m[0, 0] * (m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1])
            - m[0, 1] * (m[1, 0] * m[2, 2] - m[1, 2] * m[2, 0])
            + m[0, 2] * (m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0])
        )

    def adjugate(self) -> "Matrix3":
        """Transposed cofactor matrix."""
        m = self._data
        adj = np.empty((3, 3))
        adj[0, 0] = m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1]
        adj[0, 1] = -(m[0, 1] * m[2, 2] - m[0, 2] * m[2, 1])
        adj[0, 2] = m[0, 1] * m[1, 2] - m[0, 2] * m[1, 1]
        adj[1, 0] = -(m[1, 0] * m[2, 2] - m[1, 2] * m[2, 0])
        adj[1, 1] = m[0, 0] * m[2, 2] - m[0, 2] * m[2, 0]
        adj[1, 2] = -(m[0, 0] * m[1, 2] - m[0, 2] * m[1, 0])
        adj[2, 0] = m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0]
        adj[2, 1] = -(m[0, 0] * m[2, 1] - m[0, 1] * m[2, 0])
        adj[2, 2] = m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0]
        return Matrix3(adj)

    def inverse(self) -> "Matrix3":
        """Inverse via adjugate / determinant.

        Raises:
            SingularMatrixError: If |determinant| < 1e-10.
        """
        det = self.determinant()
        if abs(det) < SINGULAR_TOLERANCE:
            raise SingularMatrixError(
                f"Matrix is not invertible (determinant={det:.3e})"
            )
        return Matrix3(self.adjugate()._data / det)

    def get(self, i: int, j: int) -> float:
        """Return entry (i, j)."""
        self._check_index(i, j)
        return float(self._data[i, j])

    def set(self, i: int, j: int, value: float) -> None:
        """Overwrite entry (i, j) in place."""
        self._check_index(i, j)
        self._data[i, j] = float(value)

    def column(self, j: int) -> NDArray[np.float64]:
        """Return column j as a vector."""
        self._check_index(0, j)
        return self._data[:, j].copy()

    def to_array(self) -> NDArray[np.float64]:
        """Copy of the underlying 3x3 array."""
        return self._data.copy()

    def copy(self) -> "Matrix3":
        """Independent copy."""
        return Matrix3(self._data)

    def allclose(self, other: "Matrix3", atol: float = 1e-9) -> bool:
        """Elementwise comparison within an absolute tolerance."""
        return bool(np.allclose(self._data, other._data, rtol=0.0, atol=atol))

    @staticmethod
    def _check_index(i: int, j: int) -> None:
        for idx in (i, j):
            if isinstance(idx, bool) or not isinstance(idx, (int, np.integer)):
                raise IndexOutOfRangeError(f"Matrix index must be an int, got {idx!r}")
            if not 0 <= idx < 3:
                raise IndexOutOfRangeError(f"Matrix index {idx} out of range [0, 3)")

    def __getitem__(self, key) -> float:
        if not isinstance(key, tuple) or len(key) != 2:
            raise IndexOutOfRangeError(f"Matrix index must be an (i, j) pair, got {key!r}")
        i, j = key
        return self.get(i, j)

    def __matmul__(self, other: "Matrix3") -> "Matrix3":
        return self.multiply(other)

    def __add__(self, other: "Matrix3") -> "Matrix3":
        return self.add(other)

    def __sub__(self, other: "Matrix3") -> "Matrix3":
        return self.subtract(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix3):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self) -> str:
        rows = ", ".join(
            "[" + ", ".join(f"{v:g}" for v in row) + "]" for row in self._data
        )
        return f"Matrix3([{rows}])"

"""Exceptions raised by the matrix algebra layer."""


class MatrixError(Exception):
    """Base class for 3x3 matrix errors."""


class InvalidDimensionError(MatrixError, ValueError):
    """Raised when a matrix is built from data that is not 3x3."""


class IndexOutOfRangeError(MatrixError, IndexError):
    """Raised when a matrix entry is addressed outside [0, 3)."""


class SingularMatrixError(MatrixError, ArithmeticError):
    """Raised when inverting a matrix whose determinant is ~0."""

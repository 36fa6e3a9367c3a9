import pytest

from sparsepm.sparse import SparseTripletTensor


def _csc(entries, shape=None):
    rows = [e[0] for e in entries]
    cols = [e[1] for e in entries]
    values = [e[2] for e in entries]
    return SparseTripletTensor.from_entries(rows, cols, values, shape=shape).compress()


@pytest.fixture
def make_csc():
    """Build a compressed matrix from a list of (row, col, value) entries."""
    return _csc


@pytest.fixture
def matrix_2x2():
    """[[13, 5], [2, 4]], eigenvalues 14 and 3."""
    return _csc([(0, 0, 13.0), (0, 1, 5.0), (1, 0, 2.0), (1, 1, 4.0)])


@pytest.fixture
def matrix_2x2_negative():
    """[[2, -12], [1, -5]], eigenvalues -2 and -1."""
    return _csc([(0, 0, 2.0), (0, 1, -12.0), (1, 0, 1.0), (1, 1, -5.0)])


@pytest.fixture
def matrix_blocks():
    """The negative 2x2 matrix spread over indices 1 and 3 of a 5x5 matrix.

    Indices 0, 2 and 4 hold large diagonal values that dominate unless ignored.
    """
    return _csc(
        [
            (0, 0, 2000.0),
            (1, 1, 2.0),
            (1, 3, -12.0),
            (2, 2, 2000.0),
            (3, 1, 1.0),
            (3, 3, -5.0),
            (4, 4, 2000.0),
        ]
    )


@pytest.fixture
def matrix_3x3():
    """[[2, 3, 0], [3, 0, 5], [0, 5, 2]], dominant eigenvalue 1 + sqrt(35)."""
    return _csc(
        [
            (0, 0, 2.0),
            (0, 1, 3.0),
            (1, 0, 3.0),
            (1, 2, 5.0),
            (2, 1, 5.0),
            (2, 2, 2.0),
        ]
    )

import pytest

from polylp.linearity import (
    create_lp_h_implicit_linearity,
    create_lp_v_implicit_linearity,
    free_of_implicit_linearity,
    implicit_linearity,
    implicit_linearity_rows,
)
from polylp.model import Matrix, Objective, Representation


def square():
    # 0 <= x <= 1, 0 <= y <= 1
    return Matrix([[0, 1, 0], [1, -1, 0], [0, 0, 1], [1, 0, -1]])


def flat_segment():
    # x >= 0, -x >= 0, 0 <= y <= 1: x = 0 is implied by rows 1 and 2
    return Matrix([[0, 1, 0], [0, -1, 0], [1, 0, -1], [0, 0, 1]])


def empty_interval():
    # x >= 1 and x <= -1
    return Matrix([[-1, 1], [-1, -1]])


def test_h_lp_shape():
    matrix = Matrix([[0, 1, 0], [1, 0, -1]], linset={1})
    lp = create_lp_h_implicit_linearity(matrix)
    assert lp.m == 2 + 1 + 1 + 1
    assert lp.d == 4
    assert lp.objective is Objective.MAX
    assert lp.equalityset == {1}
    assert lp.eqnumber == 1


def test_h_lp_rows():
    matrix = Matrix([[0, 1, 0], [1, 0, -1]], linset={1})
    lp = create_lp_h_implicit_linearity(matrix)
    assert lp.A[0][:4] == [0, 1, 0, 0]
    assert lp.A[1][:4] == [1, 0, -1, -1]
    assert lp.A[2][:3] == [0, -1, 0]
    assert lp.A[lp.m - 2][:4] == [1, 0, 0, -1]
    assert lp.A[lp.m - 1][:4] == [0, 0, 0, 1]


def test_v_lp_shape_and_rows():
    matrix = Matrix(
        [[1, 0, 0], [1, 1, 0], [0, 0, 1]],
        linset={3},
        representation=Representation.GENERATOR,
    )
    lp = create_lp_v_implicit_linearity(matrix)
    assert lp.d == 5
    assert lp.m == 3 + 1 + 1 + 1
    assert lp.homogeneous is False
    assert lp.A[0][:5] == [0, 1, 0, 0, -1]
    assert lp.A[2][:5] == [0, 0, 0, 1, 0]
    assert lp.A[3][1:4] == [0, 0, -1]
    assert lp.A[lp.m - 2][:5] == [1, 0, 0, 0, -1]
    assert lp.A[lp.m - 1][:5] == [0, 0, 0, 0, 1]
    assert lp.equalityset == {3}


def test_square_is_free():
    result = free_of_implicit_linearity(square())
    assert result.answer == 1
    assert result.rows == set()
    assert len(result.certificate) == 4


def test_square_has_no_implicit_rows():
    assert implicit_linearity_rows(square()) == set()


def test_square_row_is_not_implicit():
    check = implicit_linearity(square(), 1)
    assert check.implicit is False
    assert len(check.certificate) == 3


def test_flat_segment_rows():
    result = free_of_implicit_linearity(flat_segment())
    assert result.answer == 0
    assert result.rows == {1, 2}


def test_flat_segment_single_row():
    assert implicit_linearity(flat_segment(), 1).implicit is True
    assert implicit_linearity(flat_segment(), 3).implicit is False


def test_trivial_system_lists_all_rows():
    result = free_of_implicit_linearity(empty_interval())
    assert result.answer == -1
    assert result.rows == {1, 2}


def test_explicit_linearity_is_not_reported():
    matrix = Matrix([[0, 1, 0], [0, 0, 1], [1, 0, -1]], linset={1})
    assert implicit_linearity(matrix, 1) == (False, None)
    result = free_of_implicit_linearity(matrix)
    assert result.answer == 1
    assert 1 not in result.rows


def test_rows_are_subset_of_matrix_rows():
    matrix = flat_segment()
    rows = implicit_linearity_rows(matrix)
    assert rows <= set(range(1, matrix.rowsize + 1))


@pytest.mark.parametrize("factory", [square, flat_segment, empty_interval])
def test_input_matrix_untouched(factory):
    matrix = factory()
    before = matrix.copy()
    free_of_implicit_linearity(matrix)
    assert matrix.rows == before.rows
    assert matrix.linset == before.linset
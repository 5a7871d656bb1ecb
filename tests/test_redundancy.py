from fractions import Fraction

import pytest

from polylp.model import (
    ErrorType,
    LPError,
    Matrix,
    NumberType,
    Objective,
    Representation,
)
from polylp.redundancy import (
    create_lp_h_redundancy,
    create_lp_v_redundancy,
    create_lp_v_strong_redundancy,
    redundant,
    redundant_extensive,
    redundant_rows,
    strongly_redundant,
    strongly_redundant_rows,
)

SQUARE = [[0, 1, 0], [1, -1, 0], [0, 0, 1], [1, 0, -1]]


def h_matrix(extra, linset=()):
    return Matrix(
        [list(r) for r in SQUARE] + [list(r) for r in extra],
        linset=set(linset),
        numbtype=NumberType.RATIONAL,
    )


def v_matrix(extra_point):
    rows = [[1, 0, 0], [1, 1, 0], [1, 0, 1], [1, 1, 1], list(extra_point)]
    return Matrix(
        rows,
        representation=Representation.GENERATOR,
        numbtype=NumberType.RATIONAL,
    )


def dot(a, b):
    return sum(Fraction(x) * Fraction(y) for x, y in zip(a, b))


def test_create_lp_h_redundancy_layout():
    m = h_matrix([[2, -1, 0]])
    lp = create_lp_h_redundancy(m, 5)
    assert lp.m == m.rowsize + 1
    assert lp.d == m.colsize
    assert lp.objective is Objective.MIN
    assert lp.A[lp.m - 1][:3] == [2, -1, 0]
    assert lp.A[4][:3] == [3, -1, 0]
    assert lp.A[0][:3] == [0, 1, 0]


def test_create_lp_h_redundancy_reverses_equations():
    m = h_matrix([], linset={1})
    lp = create_lp_h_redundancy(m, 2)
    assert lp.m == m.rowsize + 2
    assert lp.equalityset == {1}
    assert lp.A[m.rowsize][:3] == [0, -1, 0]


def test_create_lp_v_redundancy_layout():
    m = v_matrix([1, Fraction(1, 2), Fraction(1, 2)])
    lp = create_lp_v_redundancy(m, 2)
    assert lp.d == m.colsize + 1
    assert lp.objective is Objective.MIN
    assert lp.A[1][0] == 1
    assert all(lp.A[i][0] == 0 for i in range(m.rowsize) if i != 1)
    assert lp.A[1][1:4] == [1, 1, 0]
    assert lp.A[lp.m - 1][:4] == [0, 1, 1, 0]


def test_create_lp_v_strong_redundancy_layout():
    m = v_matrix([1, Fraction(1, 2), 0])
    lp = create_lp_v_strong_redundancy(m, 5)
    assert lp.m == m.rowsize + 3
    assert lp.objective is Objective.MAX
    assert 5 in lp.equalityset
    objective = lp.A[lp.m - 1]
    bound = lp.A[lp.m - 2]
    assert bound[0] == 1
    assert [bound[j] for j in range(1, 4)] == [-objective[j] for j in range(1, 4)]
    assert objective[1] == sum(row[0] for row in m.rows)


def test_redundant_h_row():
    m = h_matrix([[2, -1, 0]])
    assert redundant(m, 5).redundant is True


def test_nonredundant_h_row_certificate_violates_only_that_row():
    m = h_matrix([[2, -1, 0]])
    result = redundant(m, 1)
    assert result.redundant is False
    cert = result.certificate
    assert cert[0] == 1
    assert dot(m.rows[0], cert) < 0
    assert all(dot(row, cert) >= 0 for row in m.rows[1:])


def test_linearity_row_is_not_checked():
    m = h_matrix([[2, -1, 0]], linset={3})
    result = redundant(m, 3)
    assert result == (False, None)
    assert strongly_redundant(m, 3) == (False, None)


def test_redundant_out_of_range_row():
    m = h_matrix([])
    with pytest.raises(LPError) as info:
        redundant(m, 9)
    assert info.value.kind is ErrorType.ROW_INDEX_OUT_OF_RANGE


def test_redundant_rows_finds_loose_bound():
    m = h_matrix([[2, -1, 0]])
    assert redundant_rows(m) == {5}


def test_redundant_rows_removes_one_of_a_duplicate_pair():
    m = h_matrix([[1, -1, 0]])
    assert redundant_rows(m) == {5}


def test_redundant_rows_leaves_input_unchanged():
    m = h_matrix([[2, -1, 0]])
    before = m.copy()
    redundant_rows(m)
    assert m == before


def test_redundant_rows_with_linearity():
    m = Matrix(
        [[0, 0, 1], [0, 1, 0], [1, -1, 0], [2, -1, 0]],
        linset={1},
        numbtype=NumberType.RATIONAL,
    )
    result = redundant_rows(m)
    assert 4 in result
    assert 1 not in result
    assert 2 not in result and 3 not in result


def test_redundant_extensive_agrees_with_redundant():
    m = h_matrix([[2, -1, 0]])
    for i in range(1, m.rowsize + 1):
        extensive = redundant_extensive(m, i)
        assert extensive.redundant == redundant(m, i).redundant
        assert i not in extensive.redset
        assert extensive.redset <= set(range(1, m.rowsize + 1))


def test_redundant_extensive_linearity_row():
    m = h_matrix([], linset={2})
    assert redundant_extensive(m, 2) == (False, None, set())


def test_strongly_redundant_h():
    m = h_matrix([[2, -1, 0]])
    assert strongly_redundant(m, 5).redundant is True
    assert strongly_redundant(m, 1).redundant is False


def test_weakly_redundant_duplicate_is_not_strongly_redundant():
    m = h_matrix([[1, -1, 0]])
    assert redundant(m, 5).redundant is True
    assert strongly_redundant(m, 5).redundant is False


def test_strongly_redundant_rows_h():
    m = h_matrix([[2, -1, 0]])
    assert strongly_redundant_rows(m) == {5}


def test_interior_generator_is_redundant_and_strongly_redundant():
    m = v_matrix([1, Fraction(1, 2), Fraction(1, 2)])
    assert redundant(m, 5).redundant is True
    assert strongly_redundant(m, 5).redundant is True


def test_boundary_generator_is_redundant_but_not_strongly():
    m = v_matrix([1, Fraction(1, 2), 0])
    assert redundant(m, 5).redundant is True
    assert strongly_redundant(m, 5).redundant is False


def test_vertex_generator_is_not_redundant():
    m = v_matrix([1, Fraction(1, 2), Fraction(1, 2)])
    result = redundant(m, 1)
    assert result.redundant is False
    assert len(result.certificate) == m.colsize + 1


def test_redundant_rows_v():
    m = v_matrix([1, Fraction(1, 2), Fraction(1, 2)])
    assert redundant_rows(m) == {5}


def test_strongly_redundant_rows_v():
    m = v_matrix([1, Fraction(1, 2), Fraction(1, 2)])
    assert strongly_redundant_rows(m) == {5}
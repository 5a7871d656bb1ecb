from fractions import Fraction

import pytest

from polylp.lp import (
    LinearProgram,
    make_lp_for_interior_finding,
    matrix_to_feasibility,
    matrix_to_lp,
    matrix_to_restricted_feasibility,
)
from polylp.model import (
    ErrorType,
    LPError,
    LPStatus,
    Matrix,
    NumberType,
    Objective,
    Solver,
)

TRIANGLE_ROWS = [[0, 1, 0], [0, 0, 1], [1, -1, -1]]


def triangle(objective=Objective.MAX, numbtype=NumberType.RATIONAL):
    return Matrix(
        [list(r) for r in TRIANGLE_ROWS],
        objective=objective,
        numbtype=numbtype,
        rowvec=[0, 1, 1],
    )


def dot(a, b):
    return sum(x * y for x, y in zip(a, b))


@pytest.mark.parametrize("solver", [Solver.DUAL_SIMPLEX, Solver.CRISS_CROSS])
def test_maximize_triangle_is_optimal_and_feasible(solver):
    lp = matrix_to_lp(triangle())
    status = lp.solve(solver)
    assert status is LPStatus.OPTIMAL
    assert lp.sol[0] == 1
    for row in TRIANGLE_ROWS:
        assert dot(row, lp.sol) >= 0
    assert dot([0, 1, 1], lp.sol) == lp.optvalue
    assert lp.optvalue == 1


def test_solvers_agree_on_optimum():
    a = matrix_to_lp(triangle())
    b = matrix_to_lp(triangle())
    a.solve(Solver.DUAL_SIMPLEX)
    b.solve(Solver.CRISS_CROSS)
    assert a.optvalue == b.optvalue


@pytest.mark.parametrize("solver", [Solver.DUAL_SIMPLEX, Solver.CRISS_CROSS])
def test_minimize_restores_objective_row(solver):
    lp = matrix_to_lp(triangle(objective=Objective.MIN))
    before = lp.copy_row(lp.objrow)
    assert lp.solve(solver) is LPStatus.OPTIMAL
    assert lp.copy_row(lp.objrow) == before
    assert lp.optvalue == 0
    assert dot([0, 1, 1], lp.sol) == lp.optvalue


def test_real_number_type_gives_floats():
    lp = matrix_to_lp(triangle(numbtype=NumberType.REAL))
    assert lp.solve() is LPStatus.OPTIMAL
    assert isinstance(lp.optvalue, float)
    assert lp.optvalue == pytest.approx(1.0)


@pytest.mark.parametrize("solver", [Solver.DUAL_SIMPLEX, Solver.CRISS_CROSS])
def test_infeasible_lp_is_inconsistent(solver):
    m = Matrix([[-1, 1], [0, -1]], objective=Objective.MAX,
               numbtype=NumberType.RATIONAL, rowvec=[0, 1])
    lp = matrix_to_lp(m)
    assert lp.solve(solver) is LPStatus.INCONSISTENT
    assert lp.re in (1, 2)
    assert "dual_direction" in lp.format_result()


@pytest.mark.parametrize("solver", [Solver.DUAL_SIMPLEX, Solver.CRISS_CROSS])
def test_unbounded_lp_is_dual_inconsistent(solver):
    m = Matrix([[0, 1]], objective=Objective.MAX,
               numbtype=NumberType.RATIONAL, rowvec=[0, 1])
    lp = matrix_to_lp(m)
    assert lp.solve(solver) is LPStatus.DUAL_INCONSISTENT
    assert lp.se == 2
    assert "primal_direction" in lp.format_result()


def test_no_objective_raises():
    lp = LinearProgram(Objective.NONE, NumberType.RATIONAL, 2, 2)
    with pytest.raises(LPError) as info:
        lp.solve()
    assert info.value.kind is ErrorType.NO_LP_OBJECTIVE


def test_total_pivots_is_sum_of_phases():
    lp = matrix_to_lp(triangle())
    lp.solve()
    assert lp.total_pivots == sum(lp.pivots)


def test_reverse_and_replace_row():
    lp = matrix_to_lp(triangle())
    lp.reverse_row(3)
    assert lp.copy_row(3) == [-1, 1, 1]
    lp.replace_row(3, [2, 0, -1])
    assert lp.copy_row(3) == [2, 0, -1]
    assert lp.status is LPStatus.UNDECIDED


@pytest.mark.parametrize("i", [0, 5])
def test_row_operations_out_of_range(i):
    lp = matrix_to_lp(triangle())
    with pytest.raises(LPError) as info:
        lp.copy_row(i)
    assert info.value.kind is ErrorType.ROW_INDEX_OUT_OF_RANGE
    with pytest.raises(LPError):
        lp.reverse_row(i)


def test_matrix_to_lp_with_equality():
    m = Matrix([[1, -1, 0], [0, 0, 1]], linset={1}, objective=Objective.MAX,
               numbtype=NumberType.RATIONAL, rowvec=[0, 1, 0])
    lp = matrix_to_lp(m)
    assert lp.m == m.rowsize + 1 + 1
    assert lp.d == 3
    assert lp.equalityset == {1}
    assert lp.eqnumber == 1
    assert lp.copy_row(3) == [-1, 1, 0]
    assert lp.copy_row(1) == [1, -1, 0]
    assert lp.copy_row(lp.objrow) == [0, 1, 0]
    assert lp.homogeneous is False


def test_matrix_to_lp_homogeneous():
    m = Matrix([[0, 1], [0, -1], [5, 1]], numbtype=NumberType.RATIONAL,
               objective=Objective.MAX)
    lp = matrix_to_lp(m)
    assert lp.homogeneous is True


def test_matrix_to_feasibility_zero_objective():
    lp = matrix_to_feasibility(triangle(objective=Objective.MIN))
    assert lp.objective is Objective.MAX
    assert all(v == 0 for v in lp.copy_row(lp.objrow))
    assert lp.solve() is LPStatus.OPTIMAL
    assert lp.optvalue == 0


def test_restricted_feasibility_strict_interior_exists():
    m = triangle()
    lp = matrix_to_restricted_feasibility(m, set(), {1, 2, 3})
    assert lp.d == m.colsize + 1
    assert lp.m == m.rowsize + 2
    assert lp.copy_row(1)[-1] == -1
    assert lp.copy_row(lp.m - 1) == [1, 0, 0, -1]
    assert lp.copy_row(lp.m) == [0, 0, 0, 1]
    assert lp.solve() is LPStatus.OPTIMAL
    assert lp.optvalue > 0


def test_restricted_feasibility_equation_rows():
    m = triangle()
    lp = matrix_to_restricted_feasibility(m, {1}, {2, 3})
    assert lp.equalityset == {1}
    assert lp.copy_row(4) == [0, -1, 0, 0]


def test_solution_snapshot_is_independent():
    lp = matrix_to_lp(triangle())
    lp.solve()
    snap = lp.solution()
    assert snap.status is lp.status
    assert snap.optvalue == lp.optvalue
    assert snap.sol == lp.sol
    snap.sol[0] = Fraction(99)
    assert lp.sol[0] == 1


def test_format_result_optimal():
    lp = matrix_to_lp(triangle())
    lp.solve()
    text = lp.format_result()
    assert text.startswith("* cdd LP solver result\n")
    assert "* LP status: a dual pair (x,y) of optimal solutions found." in text
    assert "* maximization is chosen" in text
    assert "optimal_value :" in text
    assert "* Algorithm: dual simplex algorithm" in text


def test_redundancy_tracking_accumulates():
    lp = matrix_to_lp(triangle())
    lp.redcheck_extensive = True
    lp.solve(Solver.DUAL_SIMPLEX)
    assert lp.redset_extra <= lp.redset_accum
    assert all(1 <= i <= lp.m for i in lp.redset_accum)
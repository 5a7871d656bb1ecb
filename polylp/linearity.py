"""Implicit linearity: inequality rows that every point satisfies with equality.

For an H-representation a row ``b_i + A_i x >= 0`` is an implicit linearity
when ``b_i + A_i x = 0`` holds throughout the polyhedron.  V-representations
are handled through the matching separation problems.  Rows already in the
linearity set are never reported.
"""

from __future__ import annotations

from typing import NamedTuple

from polylp.lp import LinearProgram, _load_rows
from polylp.model import (
    LPStatus,
    Matrix,
    Number,
    Objective,
    Representation,
    Solver,
    sign,
)
from polylp.redundancy import create_lp_h_redundancy, create_lp_v_redundancy

_REDCHECK_SOLVER = Solver.DUAL_SIMPLEX


class _ImplicitCheck(NamedTuple):
    implicit: bool
    certificate: list[Number] | None


class _FreenessCheck(NamedTuple):
    answer: int
    certificate: list[Number]
    rows: set[int]


def _finish_bounding(lp: LinearProgram) -> None:
    """Add ``1 - z >= 0`` as row ``m-1`` and the objective ``max z``."""
    m, d = lp.m, lp.d
    one = lp._num(1)
    lp.A[m - 2][0] = one
    lp.A[m - 2][d - 1] = -one
    lp.A[m - 1][d - 1] = one


def create_lp_h_implicit_linearity(matrix: Matrix) -> LinearProgram:
    """Build ``max z`` s.t. ``b_I + A_I x - z >= 0``, ``b_L + A_L x = 0``, ``z <= 1``."""
    linc = len(matrix.linset)
    m = matrix.rowsize + 1 + linc + 1
    d = matrix.colsize + 1
    lp = LinearProgram(matrix.objective, matrix.numbtype, m, d)
    lp.homogeneous = True
    lp.objective = Objective.MAX
    lp.eqnumber = linc
    lp.redcheck_extensive = False
    strict = set(range(1, matrix.rowsize + 1)) - set(matrix.linset)
    _load_rows(lp, matrix, matrix.linset, d - 1, strict)
    _finish_bounding(lp)
    return lp


def create_lp_v_implicit_linearity(matrix: Matrix) -> LinearProgram:
    """Build the V-form of the implicit linearity LP, with two extra columns.

    It maximizes ``z`` subject to ``b_I x_0 + A_I x - z >= 0`` for the
    nonlinearity generators, ``b_L x_0 + A_L x = 0`` and ``z <= 1``.
    """
    linc = len(matrix.linset)
    m = matrix.rowsize + 1 + linc + 1
    cols = matrix.colsize
    d = cols + 2
    lp = LinearProgram(matrix.objective, matrix.numbtype, m, d)
    lp.homogeneous = False
    lp.objective = Objective.MAX
    lp.eqnumber = linc
    lp.redcheck_extensive = False
    zero, minus_one = lp._zero, lp._num(-1)
    irev = matrix.rowsize
    for i, row in enumerate(matrix.rows, start=1):
        values = [lp._num(v) for v in row]
        lp.A[i - 1][0] = zero
        if i in matrix.linset:
            irev += 1
            lp.equalityset.add(i)
            lp.A[irev - 1][1 : cols + 1] = [-v for v in values]
        else:
            lp.A[i - 1][d - 1] = minus_one
        lp.A[i - 1][1 : cols + 1] = values
    _finish_bounding(lp)
    return lp


def implicit_linearity(matrix: Matrix, itest: int) -> _ImplicitCheck:
    """Decide whether row ``itest`` is an implicit linearity.

    The redundancy LP of the row is maximized instead of minimized; the row
    is an implicit linearity iff the optimum exists and is zero.  Linearity
    rows give ``(False, None)``.  Raises :class:`LPError` when the LP fails.
    """
    if itest in matrix.linset:
        return _ImplicitCheck(False, None)
    if matrix.representation is Representation.GENERATOR:
        lp = create_lp_v_redundancy(matrix, itest)
    else:
        lp = create_lp_h_redundancy(matrix, itest)
    lp.objective = Objective.MAX
    lp.solve(_REDCHECK_SOLVER)
    solution = lp.solution()
    answer = solution.status is LPStatus.OPTIMAL and sign(solution.optvalue) == 0
    return _ImplicitCheck(answer, list(solution.sol))


def free_of_implicit_linearity(matrix: Matrix) -> _FreenessCheck:
    """Check whether ``matrix`` has any implicit linearity.

    ``answer`` is 1 when it has none, 0 when some exist (listed in ``rows``),
    -1 when the system is trivial (every row is listed) and -2 when the LP
    ends without an optimum.  Raises :class:`LPError` when an LP fails.
    """
    if matrix.representation is Representation.GENERATOR:
        lp = create_lp_v_implicit_linearity(matrix)
    else:
        lp = create_lp_h_implicit_linearity(matrix)
    lp.solve(_REDCHECK_SOLVER)
    certificate = list(lp.sol[: lp.d])

    if lp.status is LPStatus.OPTIMAL:
        answer = sign(lp.optvalue)
        if answer < 0:
            answer = -1
    else:
        answer = -2

    rows: set[int] = set()
    if answer == 0:
        for i in range(matrix.rowsize, 0, -1):
            if i not in lp.posset_extra and implicit_linearity(matrix, i).implicit:
                rows.add(i)
    elif answer == -1:
        rows = set(range(1, matrix.rowsize + 1))
    return _FreenessCheck(answer, certificate, rows)


def implicit_linearity_rows(matrix: Matrix) -> set[int]:
    """Return the 1-based rows of ``matrix`` that are implicit linearities."""
    return free_of_implicit_linearity(matrix).rows
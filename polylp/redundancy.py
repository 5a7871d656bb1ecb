"""Redundancy and strong redundancy of matrix rows, decided by LPs.

A row is redundant when removing it leaves the polyhedron unchanged.  For an
H-representation a row is strongly redundant when every point of the
polyhedron satisfies it strictly; for a V-representation a generator is
strongly redundant when it lies in the interior.  Rows in the linearity set
are never tested and count as not redundant.
"""

from __future__ import annotations

from typing import NamedTuple

from polylp.lp import LinearProgram, _load_rows
from polylp.model import (
    Matrix,
    Number,
    Objective,
    Representation,
    Solver,
    sign,
)

_REDCHECK_SOLVER = Solver.DUAL_SIMPLEX


class _RedundancyCheck(NamedTuple):
    redundant: bool
    certificate: list[Number] | None


class _ExtensiveCheck(NamedTuple):
    redundant: bool
    certificate: list[Number] | None
    redset: set[int]


def create_lp_h_redundancy(matrix: Matrix, itest: int) -> LinearProgram:
    """Build the LP minimizing row ``itest`` of an H-matrix over the other rows.

    Row ``itest`` itself is relaxed by one so that the LP stays bounded.
    """
    target = matrix.row(itest)
    linc = len(matrix.linset)
    m = matrix.rowsize + 1 + linc
    lp = LinearProgram(matrix.objective, matrix.numbtype, m, matrix.colsize)
    lp.homogeneous = True
    lp.objective = Objective.MIN
    lp.eqnumber = linc
    lp.redcheck_extensive = False
    _load_rows(lp, matrix, matrix.linset)
    lp.A[m - 1][: matrix.colsize] = [lp._num(v) for v in target]
    lp.A[itest - 1][0] = lp.A[itest - 1][0] + lp._num(1)
    return lp


def create_lp_v_redundancy(matrix: Matrix, itest: int) -> LinearProgram:
    """Build the separation LP for generator ``itest`` of a V-matrix.

    It minimizes ``b_itest x_0 + A_itest x`` subject to that value being at
    least -1, the other generators on the nonnegative side, and linearity
    generators on the hyperplane.
    """
    target = matrix.row(itest)
    linc = len(matrix.linset)
    m = matrix.rowsize + 1 + linc
    cols = matrix.colsize
    d = cols + 1
    lp = LinearProgram(matrix.objective, matrix.numbtype, m, d)
    lp.homogeneous = False
    lp.objective = Objective.MIN
    lp.eqnumber = linc
    lp.redcheck_extensive = False
    one, zero = lp._num(1), lp._zero
    irev = matrix.rowsize
    for i, row in enumerate(matrix.rows, start=1):
        lp.A[i - 1][0] = one if i == itest else zero
        if i in matrix.linset:
            irev += 1
            lp.equalityset.add(i)
            lp.A[irev - 1][1 : cols + 1] = [-lp._num(v) for v in row]
        lp.A[i - 1][1 : cols + 1] = [lp._num(v) for v in row]
    lp.A[m - 1][1 : cols + 1] = [lp._num(v) for v in target]
    lp.A[m - 1][0] = zero
    return lp


def create_lp_v_strong_redundancy(matrix: Matrix, itest: int) -> LinearProgram:
    """Build the boundary LP for generator ``itest`` of a V-matrix.

    It maximizes the sum of all slacks subject to generator ``itest`` lying
    on the hyperplane, all generators on one side, the sum of slacks at most
    one, and linearity generators on the hyperplane.
    """
    matrix.row(itest)
    linc = len(matrix.linset)
    m = matrix.rowsize + 1 + linc + 2
    cols = matrix.colsize
    d = cols + 1
    lp = LinearProgram(matrix.objective, matrix.numbtype, m, d)
    lp.homogeneous = False
    lp.objective = Objective.MAX
    lp.eqnumber = linc
    zero = lp._zero
    objective = lp.A[m - 1]
    irev = matrix.rowsize
    for i, row in enumerate(matrix.rows, start=1):
        lp.A[i - 1][0] = zero
        values = [lp._num(v) for v in row]
        if i in matrix.linset or i == itest:
            irev += 1
            lp.equalityset.add(i)
            lp.A[irev - 1][1 : cols + 1] = [-v for v in values]
        lp.A[i - 1][1 : cols + 1] = values
        for j, v in enumerate(values, start=1):
            objective[j] = objective[j] + v
    bound = lp.A[m - 2]
    for j in range(1, cols + 1):
        bound[j] = -objective[j]
    bound[0] = lp._num(1)
    return lp


def _redundancy_lp(matrix: Matrix, itest: int) -> LinearProgram:
    if matrix.representation is Representation.GENERATOR:
        return create_lp_v_redundancy(matrix, itest)
    return create_lp_h_redundancy(matrix, itest)


def redundant(matrix: Matrix, itest: int) -> _RedundancyCheck:
    """Decide whether row ``itest`` is redundant.

    Returns the answer with the LP solution as certificate: for a
    nonredundant H-row a point violating only that row, for a V-row a
    separating hyperplane.  Linearity rows give ``(False, None)``.
    Raises :class:`LPError` when the LP cannot be solved.
    """
    if itest in matrix.linset:
        return _RedundancyCheck(False, None)
    lp = _redundancy_lp(matrix, itest)
    lp.solve(_REDCHECK_SOLVER)
    solution = lp.solution()
    return _RedundancyCheck(sign(solution.optvalue) >= 0, list(solution.sol))


def redundant_extensive(matrix: Matrix, itest: int) -> _ExtensiveCheck:
    """Like :func:`redundant`, also collecting other rows found redundant.

    The extra set is gathered from every dual simplex dictionary; it never
    holds linearity rows or ``itest`` itself.
    """
    if itest in matrix.linset:
        return _ExtensiveCheck(False, None, set())
    lp = _redundancy_lp(matrix, itest)
    lp.redcheck_extensive = True
    lp.solve(Solver.DUAL_SIMPLEX)
    redset = {
        i
        for i in lp.redset_extra
        if 1 <= i <= matrix.rowsize and i not in matrix.linset and i != itest
    }
    solution = lp.solution()
    return _ExtensiveCheck(sign(solution.optvalue) >= 0, list(solution.sol), redset)


def redundant_rows(matrix: Matrix) -> set[int]:
    """Return the 1-based rows whose removal, last first, keeps the polyhedron."""
    work = matrix.copy()
    redset: set[int] = set()
    for i in range(matrix.rowsize, 0, -1):
        if redundant(work, i).redundant:
            redset.add(i)
            work.remove_row(i)
    return redset


def strongly_redundant(matrix: Matrix, itest: int) -> _RedundancyCheck:
    """Decide whether row ``itest`` is strongly redundant.

    Linearity rows give ``(False, None)``.  Raises :class:`LPError` when an
    LP cannot be solved.
    """
    if itest in matrix.linset:
        return _RedundancyCheck(False, None)
    lp = _redundancy_lp(matrix, itest)
    lp.solve(_REDCHECK_SOLVER)
    solution = lp.solution()
    if matrix.representation is Representation.INEQUALITY:
        return _RedundancyCheck(sign(solution.optvalue) > 0, list(solution.sol))
    if sign(solution.optvalue) < 0:
        return _RedundancyCheck(False, list(solution.sol))
    boundary = create_lp_v_strong_redundancy(matrix, itest)
    boundary.solve(Solver.DUAL_SIMPLEX)
    second = boundary.solution()
    return _RedundancyCheck(sign(second.optvalue) <= 0, list(second.sol))


def strongly_redundant_rows(matrix: Matrix) -> set[int]:
    """Return the 1-based rows found strongly redundant, removing them last first."""
    work = matrix.copy()
    redset: set[int] = set()
    for i in range(matrix.rowsize, 0, -1):
        if strongly_redundant(work, i).redundant:
            redset.add(i)
            work.remove_row(i)
    return redset
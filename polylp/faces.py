"""Faces, ray shooting and adjacency of polyhedra, decided by LPs.

Matrices are read as H-representations ``b + A x >= 0`` unless noted.
Row numbers are 1-based.
"""

from __future__ import annotations

import warnings
from fractions import Fraction
from typing import NamedTuple, Sequence

from polylp.lp import (
    LPSolution,
    make_lp_for_interior_finding,
    matrix_to_lp,
    matrix_to_restricted_feasibility,
)
from polylp.model import (
    ErrorType,
    LPError,
    LPStatus,
    Matrix,
    Number,
    Representation,
    Solver,
    compare,
    sign,
)
from polylp.redundancy import redundant, redundant_rows, strongly_redundant_rows
from polylp.tableau import _lex_compare


class _FaceCheck(NamedTuple):
    exists: bool
    solution: LPSolution


def _div(a: Number, b: Number) -> Number:
    if isinstance(a, float) or isinstance(b, float):
        return a / b
    return Fraction(a) / Fraction(b)


def _inner(a: Sequence[Number], b: Sequence[Number], d: int) -> Number:
    return sum((a[k] * b[k] for k in range(d)), Fraction(0))


def restricted_face_solution(matrix: Matrix, R: set[int], S: set[int]) -> _FaceCheck:
    """Check for a point meeting rows ``R`` with equality and rows ``S`` strictly.

    Returns the answer with the solution of the underlying LP as certificate.
    Rows of ``S`` that are also in ``R`` or the linearity set count as
    equations.  Raises :class:`LPError` when the LP cannot be solved.
    """
    lp = matrix_to_restricted_feasibility(matrix, set(R), set(S))
    lp.solve(Solver.DUAL_SIMPLEX)
    exists = lp.status is LPStatus.OPTIMAL and sign(lp.optvalue) > 0
    return _FaceCheck(exists, lp.solution())


def exists_restricted_face(matrix: Matrix, R: set[int], S: set[int]) -> bool:
    """Return whether some point meets rows ``R`` with equality and ``S`` strictly."""
    return restricted_face_solution(matrix, R, S).exists


def ray_shooting(matrix: Matrix, p: Sequence[Number], r: Sequence[Number]) -> int:
    """Return the first row hit by the ray from interior point ``p`` along ``r``.

    ``p`` must start with 1 and ``r`` with 0; otherwise a warning is issued
    and the first coordinate is corrected.  Ties are broken by the
    lexicographically smallest normalized row.  Returns -1 when no row has
    a positive value at ``p``.
    """
    d = matrix.colsize
    if len(p) < d or len(r) < d:
        raise ValueError(f"point and direction need {d} coordinates")
    p = list(p)
    r = list(r)
    if compare(1, p[0]) != 0:
        warnings.warn("ray shooting from a point whose first coordinate is not 1")
        p[0] = 1
    if sign(r[0]) != 0:
        warnings.warn("ray shooting along a direction whose first coordinate is not 0")
        r[0] = 0

    imin = -1
    minimum: Number = 0
    t1min: Number = 1
    for i, row in enumerate(matrix.rows, start=1):
        t1 = _inner(row, p, d)
        if sign(t1) <= 0:
            continue
        alpha = _div(_inner(row, r, d), t1)
        if imin < 0 or compare(alpha, minimum) < 0:
            imin, minimum, t1min = i, alpha, t1
        elif compare(alpha, minimum) == 0:
            best = matrix.rows[imin - 1]
            vecmin = [_div(best[k], t1min) for k in range(d)]
            vec = [_div(row[k], t1) for k in range(d)]
            if _lex_compare(vec, vecmin) < 0:
                imin, minimum, t1min = i, alpha, t1
    return imin


def redundant_rows_via_shooting(matrix: Matrix) -> set[int]:
    """Return the redundant rows of an H-matrix, using ray shooting first.

    An interior point is sought; rays from it find some nonredundant rows
    cheaply, and the rest are checked against that growing subsystem.  With
    no interior point, :func:`redundant_rows` is used instead.
    """
    m, d = matrix.rowsize, matrix.colsize
    lp = make_lp_for_interior_finding(matrix_to_lp(matrix))
    lp.solve(Solver.DUAL_SIMPLEX)
    solution = lp.solution()
    if sign(solution.optvalue) <= 0:
        return redundant_rows(matrix)

    point = list(solution.sol[:d])
    rowflag = [0] * (m + 1)
    sub = Matrix([], colsize=d, numbtype=matrix.numbtype)
    redset: set[int] = set()

    def shoot(direction: list[Number]) -> int:
        ired = ray_shooting(matrix, point, direction)
        if ired <= 0:
            raise LPError(ErrorType.NUMERICALLY_INCONSISTENT, "ray shooting hit no row")
        return ired

    zero = point[0] * 0
    for j in range(1, d):
        for unit in (1, -1):
            direction = [zero] * d
            direction[j] = zero + unit
            ired = ray_shooting(matrix, point, direction)
            if ired > 0 and rowflag[ired] <= 0:
                sub.rows.append(matrix.row(ired))
                rowflag[ired] = sub.rowsize

    i = 1
    while i <= m:
        if rowflag[i] != 0:
            i += 1
            continue
        sub.rows.append(matrix.row(i))
        irow = sub.rowsize
        check = redundant(sub, irow)
        if not check.redundant:
            cvec = check.certificate
            direction = [cvec[k] - point[k] for k in range(d)]
            ired = shoot(direction)
            rowflag[ired] = irow
            sub.rows[irow - 1] = matrix.row(ired)
        else:
            rowflag[i] = -1
            redset.add(i)
            sub.remove_row(irow)
            i += 1
    return redset


def _adjacency(matrix: Matrix, rows_of) -> list[set[int]]:
    m = matrix.rowsize
    if m <= 0 or matrix.colsize <= 0:
        raise LPError(ErrorType.EMPTY_REPRESENTATION)
    work = matrix.copy()
    everything = set(range(1, m + 1))
    family: list[set[int]] = [set() for _ in range(m)]
    for i in range(1, m + 1):
        if i in matrix.linset:
            continue
        work.linset.add(i)
        try:
            nonadjacent = rows_of(work) | work.linset
        finally:
            work.linset.discard(i)
        family[i - 1] = everything - nonadjacent
    return family


def adjacency(matrix: Matrix) -> list[set[int]]:
    """Return, for each row, the rows adjacent to it (facet or vertex graph).

    Linearity rows get an empty set.  Raises :class:`LPError` for an empty
    matrix.
    """
    return _adjacency(matrix, redundant_rows)


def weak_adjacency(matrix: Matrix) -> list[set[int]]:
    """Return, for each row, the rows weakly adjacent to it.

    Linearity rows get an empty set.  Raises :class:`LPError` for an empty
    matrix.
    """
    return _adjacency(matrix, strongly_redundant_rows)


__all__ = [
    "Representation",
    "adjacency",
    "exists_restricted_face",
    "ray_shooting",
    "redundant_rows_via_shooting",
    "restricted_face_solution",
    "weak_adjacency",
]
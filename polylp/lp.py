"""Linear programs over polyhedra and their solution by pivoting methods.

An LP has ``m`` rows and ``d`` columns.  Rows ``1..m-1`` are constraints
``A_i . x >= 0`` with ``x_0 = 1`` and row ``m`` is the objective.  The
first column holds the right-hand sides.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Sequence

from polylp.model import (
    ErrorType,
    LPError,
    LPStatus,
    Matrix,
    Number,
    NumberType,
    Objective,
    RowOrder,
    Solver,
    compare,
    sign,
)
from polylp.tableau import Tableau, row_order

_MAX_PIVOT_FACTOR = 20
_MAX_CC_PIVOT_FACTOR = 100
_MAX_CRISS_CROSS_FACTOR = 1000


def _format_number(x: Number) -> str:
    if isinstance(x, float):
        return f" {x:.9g}"
    x = Fraction(x)
    if x.denominator == 1:
        return f" {x.numerator}"
    return f" {x.numerator}/{x.denominator}"


@dataclass
class LPSolution:
    """A snapshot of the result of solving an LP."""

    objective: Objective
    solver: Solver
    m: int
    d: int
    numbtype: NumberType
    status: LPStatus
    optvalue: Number
    sol: list[Number] = field(default_factory=list)
    dsol: list[Number] = field(default_factory=list)
    nbindex: list[int] = field(default_factory=list)
    pivots: list[int] = field(default_factory=lambda: [0] * 5)
    total_pivots: int = 0


class LinearProgram:
    """An LP ``max/min A_m . x`` subject to ``A_i . x >= 0`` and ``x_0 = 1``."""

    def __init__(self, objective: Objective, numbtype: NumberType, m: int, d: int) -> None:
        if m < 1 or d < 1:
            raise ValueError(f"an LP needs at least one row and one column, got {m}x{d}")
        self.objective = objective
        self.numbtype = numbtype
        self.m = m
        self.d = d
        self.objrow = m
        self.rhscol = 1
        self.solver = Solver.DUAL_SIMPLEX
        self.status = LPStatus.UNDECIDED
        self.eqnumber = 0
        self.homogeneous = False
        self.equalityset: set[int] = set()
        self.redcheck_extensive = False
        self.ired = 0
        self.redset_extra: set[int] = set()
        self.redset_accum: set[int] = set()
        self.posset_extra: set[int] = set()
        self.lexicopivot = True
        zero = self._zero
        self.A: list[list[Number]] = [[zero] * (d + 2) for _ in range(m + 2)]
        self.nbindex: list[int] = [0] * (d + 1)
        self.given_nbindex: list[int] = [0] * (d + 1)
        self.sol: list[Number] = [zero] * d
        self.dsol: list[Number] = [zero] * d
        self.optvalue: Number = zero
        self.pivots: list[int] = [0] * 5
        self.total_pivots = 0
        self.re = 0
        self.se = 0
        self.starttime = 0.0
        self.endtime = 0.0

    @property
    def _floating(self) -> bool:
        return self.numbtype is NumberType.REAL

    @property
    def _zero(self) -> Number:
        return 0.0 if self._floating else Fraction(0)

    def _num(self, value: Number) -> Number:
        return float(value) if self._floating else Fraction(value)

    def _check_row(self, i: int) -> None:
        if not 1 <= i <= self.m:
            raise LPError(ErrorType.ROW_INDEX_OUT_OF_RANGE, f"row {i}")

    def reverse_row(self, i: int) -> None:
        """Negate the 1-based constraint row ``i``."""
        self._check_row(i)
        self.status = LPStatus.UNDECIDED
        row = self.A[i - 1]
        for j in range(self.d):
            row[j] = -row[j]

    def replace_row(self, i: int, a: Sequence[Number]) -> None:
        """Replace the 1-based row ``i`` by the first ``d`` entries of ``a``."""
        self._check_row(i)
        if len(a) < self.d:
            raise ValueError(f"row needs {self.d} entries, got {len(a)}")
        self.status = LPStatus.UNDECIDED
        row = self.A[i - 1]
        for j in range(self.d):
            row[j] = self._num(a[j])

    def copy_row(self, i: int) -> list[Number]:
        """Return a copy of the 1-based row ``i``."""
        self._check_row(i)
        return list(self.A[i - 1][: self.d])

    def solve(self, solver: Solver | None = None) -> LPStatus:
        """Solve the LP and return its status; raise :class:`LPError` on failure."""
        if solver is not None:
            self.solver = solver
        self.starttime = time.time()
        try:
            if self.objective is Objective.NONE:
                raise LPError(ErrorType.NO_LP_OBJECTIVE)
            if self.solver is Solver.CRISS_CROSS:
                maximize = self._criss_cross_maximize
            else:
                maximize = self._dual_simplex_maximize
            if self.objective is Objective.MAX:
                maximize()
            else:
                self._minimize(maximize)
        finally:
            self.endtime = time.time()
            self.total_pivots = sum(self.pivots)
        return self.status

    def _negate_objective(self) -> None:
        row = self.A[self.objrow - 1]
        for j in range(self.d):
            row[j] = -row[j]

    def _minimize(self, maximize) -> None:
        self._negate_objective()
        try:
            maximize()
        finally:
            self._negate_objective()
        self.optvalue = -self.optvalue
        if self.status is not LPStatus.INCONSISTENT:
            # An inconsistency certificate stays valid for minimization.
            self.dsol = [-x for x in self.dsol]

    def _new_tableau(self) -> tuple[Tableau, list[int]]:
        order = row_order(self.A[: self.m], RowOrder.MIN_INDEX, 1)
        self.re = 0
        self.se = 0
        tab = Tableau(self.A, self.m, self.d, self.objrow, self.rhscol)
        return tab, order

    def _dual_simplex_maximize(self) -> None:
        """Dual simplex; ``re``/``se`` receive the evidence row/column."""
        self.redset_extra = set()
        self.pivots = [0] * 5
        maxpivots = _MAX_PIVOT_FACTOR * self.d
        maxccpivots = _MAX_CC_PIVOT_FACTOR * self.d
        tab, order = self._new_tableau()

        basis = tab.find_lp_basis(order, self.equalityset)
        self.status = basis.status
        self.pivots[0] = basis.pivots
        if not basis.found:
            self.se = basis.column
            self._finish(tab)
            return

        try:
            phase1 = tab.find_dual_feasible_basis(order, self.lexicopivot, maxpivots)
        except LPError as error:
            if error.kind in (ErrorType.LP_CYCLING, ErrorType.NUMERICALLY_INCONSISTENT):
                self._criss_cross_maximize()
                return
            raise
        self.status = phase1.status
        self.pivots[1] = phase1.pivots
        nbindex_ref = list(tab.nbindex)

        if self.status is LPStatus.DUAL_INCONSISTENT:
            self.se = phase1.column
            self._finish(tab)
            return

        pivots_ds = pivots_pc = 0
        failure: ErrorType | None = None
        while True:
            selected = False
            r = s = 0
            self.status = LPStatus.UNDECIDED
            if pivots_ds < maxpivots:
                choice = tab.select_dual_simplex_pivot(False, nbindex_ref, self.lexicopivot)
                selected, r, s, self.status = choice
                if selected:
                    pivots_ds += 1
                    if self.redcheck_extensive:
                        self.redset_extra |= tab.redundancy_information()
                        self.redset_accum |= self.redset_extra
            if not selected and self.status is LPStatus.UNDECIDED:
                if self._floating and pivots_pc > maxccpivots:
                    failure = ErrorType.LP_CYCLING
                    break
                choice = tab.select_criss_cross_pivot()
                selected, r, s, self.status = choice
                if selected:
                    pivots_pc += 1
            if selected:
                tab.pivot(r, s)
                continue
            if self.status is LPStatus.INCONSISTENT:
                self.re = r
                self.se = s
            elif self.status is LPStatus.DUAL_INCONSISTENT:
                self.se = s
            break

        self.pivots[2] = pivots_ds
        self.pivots[3] = pivots_pc
        self._finish(tab)
        if failure is not None:
            raise LPError(failure, f"{pivots_pc} emergency criss-cross pivots")

    def _criss_cross_maximize(self) -> None:
        """Criss-cross method; ``re``/``se`` receive the evidence row/column."""
        self.pivots = [0] * 5
        maxpivots = _MAX_CRISS_CROSS_FACTOR * self.d
        tab, order = self._new_tableau()
        pivots1 = 0
        failure: ErrorType | None = None

        basis = tab.find_lp_basis(order, self.equalityset)
        self.status = basis.status
        self.pivots[0] += basis.pivots
        if not basis.found:
            self.se = basis.column
        else:
            while True:
                if self._floating and pivots1 > maxpivots:
                    failure = ErrorType.LP_CYCLING
                    break
                selected, r, s, self.status = tab.select_criss_cross_pivot()
                if selected:
                    tab.pivot(r, s)
                    pivots1 += 1
                    continue
                if self.status is LPStatus.INCONSISTENT:
                    self.re = r
                    self.se = s
                elif self.status is LPStatus.DUAL_INCONSISTENT:
                    self.se = s
                break

        self.pivots[1] += pivots1
        self._finish(tab)
        if failure is not None:
            raise LPError(failure, f"{maxpivots} criss-cross pivots performed")

    def _finish(self, tab: Tableau) -> None:
        """Record the basis and the solution vectors from the final dictionary."""
        self.nbindex = list(tab.nbindex)
        d, T = self.d, tab.T
        status = self.status
        if status is LPStatus.OPTIMAL:
            self.sol = [T[j][self.rhscol - 1] for j in range(d)]
            self.dsol = [-tab.entry(self.objrow, j) for j in range(1, d + 1)]
            self.optvalue = tab.entry(self.objrow, self.rhscol)
            for i in range(1, self.m + 1):
                if tab.bflag[i] == -1 and sign(tab.entry(i, self.rhscol)) > 0:
                    self.posset_extra.add(i)
        elif status is LPStatus.INCONSISTENT:
            self.sol = [T[j][self.rhscol - 1] for j in range(d)]
            self.dsol = [-tab.entry(self.re, j) for j in range(1, d + 1)]
        elif status is LPStatus.DUAL_INCONSISTENT:
            self.sol = [T[j][self.se - 1] for j in range(d)]
            self.dsol = [-tab.entry(self.objrow, j) for j in range(1, d + 1)]
        elif status is LPStatus.STRUC_DUAL_INCONSISTENT:
            sw = 1 if sign(tab.entry(self.objrow, self.se)) > 0 else -1
            self.sol = [sw * T[j][self.se - 1] for j in range(d)]
            self.dsol = [-tab.entry(self.objrow, j) for j in range(1, d + 1)]

    def solution(self) -> LPSolution:
        """Return an independent snapshot of the current solution."""
        return LPSolution(
            objective=self.objective,
            solver=self.solver,
            m=self.m,
            d=self.d,
            numbtype=self.numbtype,
            status=self.status,
            optvalue=self.optvalue,
            sol=list(self.sol),
            dsol=list(self.dsol),
            nbindex=list(self.nbindex),
            pivots=list(self.pivots),
            total_pivots=self.total_pivots,
        )

    def format_result(self) -> str:
        """Render the solver result as text."""
        out = ["* cdd LP solver result\n"]
        out.append(f"* #constraints = {self.m - 1}\n")
        out.append(f"* #variables   = {self.d - 1}\n")
        if self.solver is Solver.DUAL_SIMPLEX:
            out.append("* Algorithm: dual simplex algorithm\n")
        else:
            out.append("* Algorithm: criss-cross method\n")
        out.append(
            {
                Objective.MAX: "* maximization is chosen\n",
                Objective.MIN: "* minimization is chosen\n",
                Objective.NONE: "* no objective type (max or min) is chosen\n",
            }[self.objective]
        )
        if self.objective in (Objective.MAX, Objective.MIN):
            out.append("* Objective function is\n")
            objrow = self.A[self.objrow - 1]
            for j in range(self.d):
                if j > 0 and sign(objrow[j]) >= 0:
                    out.append(" +")
                if j > 0 and j % 5 == 0:
                    out.append("\n")
                out.append(_format_number(objrow[j]))
                if j > 0:
                    out.append(f" X[{j:3d}]")
            out.append("\n")

        status = self.status
        if status is LPStatus.OPTIMAL:
            out.append("* LP status: a dual pair (x,y) of optimal solutions found.\n")
            out.append("begin\n  primal_solution\n")
            for j in range(1, self.d):
                out.append(f"  {j:3d} : {_format_number(self.sol[j])}\n")
            out.append("  dual_solution\n")
            out.extend(self._dual_lines())
            out.append(f"  optimal_value : {_format_number(self.optvalue)}\nend\n")
        elif status is LPStatus.INCONSISTENT:
            out.append("* LP status: LP is inconsistent.\n")
            out.append("* The positive combination of original inequalities with\n")
            out.append("* the following coefficients will prove the inconsistency.\n")
            out.append("begin\n  dual_direction\n")
            one = 1.0 if self._floating else Fraction(1)
            out.append(f"  {self.re:3d} : {_format_number(one)}\n")
            out.extend(self._dual_lines())
            out.append("end\n")
        elif status in (LPStatus.DUAL_INCONSISTENT, LPStatus.STRUC_DUAL_INCONSISTENT):
            out.append("* LP status: LP is dual inconsistent.\n")
            out.append("* The linear combination of columns with\n")
            out.append("* the following coefficients will prove the dual inconsistency.\n")
            out.append("* (It is also an unbounded direction for the primal LP.)\n")
            out.append("begin\n  primal_direction\n")
            for j in range(1, self.d):
                out.append(f"  {j:3d} : {_format_number(self.sol[j])}\n")
            out.append("end\n")
        p = self.pivots
        out.append(
            f"* number of pivot operations = {self.total_pivots} "
            f"(ph0 = {p[0]}, ph1 = {p[1]}, ph2 = {p[2]}, ph3 = {p[3]}, ph4 = {p[4]})\n"
        )
        return "".join(out)

    def _dual_lines(self) -> list[str]:
        return [
            f"  {self.nbindex[j + 1]:3d} : {_format_number(self.dsol[j])}\n"
            for j in range(1, self.d)
            if self.nbindex[j + 1] > 0
        ]


def _load_rows(
    lp: LinearProgram,
    matrix: Matrix,
    linearity: set[int],
    extra_column: int | None = None,
    strict: set[int] = frozenset(),
) -> None:
    """Copy matrix rows into ``lp``, adding a reversed row for each equation."""
    irev = matrix.rowsize
    minus_one = lp._num(-1)
    for i, row in enumerate(matrix.rows, start=1):
        if i in linearity:
            irev += 1
            lp.equalityset.add(i)
            lp.A[irev - 1][: matrix.colsize] = [-lp._num(v) for v in row]
        elif extra_column is not None and i in strict:
            lp.A[i - 1][extra_column] = minus_one
        lp.A[i - 1][: matrix.colsize] = [lp._num(v) for v in row]
        if i < matrix.rowsize and sign(row[0]) != 0:
            lp.homogeneous = False


def matrix_to_lp(matrix: Matrix) -> LinearProgram:
    """Build the LP of an H-matrix with its objective ``rowvec``."""
    linc = len(matrix.linset)
    m = matrix.rowsize + 1 + linc
    lp = LinearProgram(matrix.objective, matrix.numbtype, m, matrix.colsize)
    lp.homogeneous = True
    lp.eqnumber = linc
    _load_rows(lp, matrix, matrix.linset)
    lp.A[m - 1][: matrix.colsize] = [lp._num(v) for v in matrix.rowvec]
    return lp


def matrix_to_feasibility(matrix: Matrix) -> LinearProgram:
    """Build the LP of ``matrix`` with an identically zero objective (maximized)."""
    lp = matrix_to_lp(matrix)
    lp.objective = Objective.MAX
    lp.A[lp.m - 1][: matrix.colsize] = [lp._zero] * matrix.colsize
    return lp


def matrix_to_restricted_feasibility(
    matrix: Matrix, R: set[int], S: set[int]
) -> LinearProgram:
    """Build the LP testing feasibility with extra equations ``R`` and strict rows ``S``.

    It maximizes ``z`` subject to the linearity rows, ``b_s + A_s x - z >= 0``
    for ``s`` in ``S``, the other rows, and ``1 - z >= 0``.  The system has a
    solution iff the optimal value is positive.
    """
    linearity = {i for i in set(matrix.linset) | set(R) if 1 <= i <= matrix.rowsize}
    linc = len(linearity)
    m = matrix.rowsize + 1 + linc + 1
    d = matrix.colsize + 1
    lp = LinearProgram(Objective.MAX, matrix.numbtype, m, d)
    lp.homogeneous = True
    lp.eqnumber = linc
    _load_rows(lp, matrix, linearity, matrix.colsize, set(S))
    zero, one = lp._zero, lp._num(1)
    bound = [zero] * d
    bound[0] = one
    bound[matrix.colsize] = -one
    lp.A[m - 2][:d] = bound
    objective = [zero] * d
    objective[matrix.colsize] = one
    lp.A[m - 1][:d] = objective
    return lp


def make_lp_for_interior_finding(lp: LinearProgram) -> LinearProgram:
    """Build the LP maximizing the slack ``x_{d+1}`` common to all rows of ``lp``.

    The new column is all -1, a bounding row starts with ``2 * max(1, b)``
    and the objective is ``x_{d+1}``.  Equations of ``lp`` are ignored.
    """
    m, d = lp.m + 1, lp.d + 1
    new = LinearProgram(Objective.MAX, lp.numbtype, m, d)
    one = new._num(1)
    bmax = one
    for i in range(lp.m):
        value = lp.A[i][lp.rhscol - 1]
        if compare(value, bmax) > 0:
            bmax = value
    bceil = (one + one) * new._num(bmax)
    for i in range(lp.m):
        new.A[i][: lp.d] = [new._num(v) for v in lp.A[i][: lp.d]]
        new.A[i][lp.d] = -one
    new.A[m - 2][: lp.d] = [new._zero] * lp.d
    new.A[m - 2][0] = bceil
    new.A[m - 1][: d - 1] = [new._zero] * (d - 1)
    new.A[m - 1][d - 1] = one
    return new
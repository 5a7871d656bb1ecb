"""Dictionary (tableau) operations shared by the LP solvers.

The tableau is never stored explicitly: entry ``(r, s)`` is the product of
row ``r`` of the constraint matrix ``A`` with column ``s`` of the dual basis
inverse ``T``.  Row and column numbers are 1-based throughout, as are the
index lists ``nbindex`` and ``bflag`` (their position 0 is unused).
"""

from __future__ import annotations

from fractions import Fraction
from functools import cmp_to_key
from typing import NamedTuple, Sequence

from polylp.model import (
    ALMOST_ZERO,
    ErrorType,
    LPError,
    LPStatus,
    Number,
    RowOrder,
    compare,
    sign,
)

_MASK64 = (1 << 64) - 1


class SplitMix64:
    """Small, fast 64-bit pseudo-random generator with a settable seed."""

    def __init__(self, seed: int) -> None:
        self.state = seed & _MASK64

    def next(self) -> int:
        """Return the next 64-bit unsigned value."""
        self.state = (self.state + 0x9E3779B97F4A7C15) & _MASK64
        z = self.state
        z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
        z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK64
        return z ^ (z >> 31)

    def __iter__(self) -> "SplitMix64":
        return self

    def __next__(self) -> int:
        return self.next()


def random_permutation(order: Sequence[int], seed: int) -> list[int]:
    """Return a pseudo-random shuffle of ``order`` determined by ``seed``."""
    result = list(order)
    rng = SplitMix64(seed)
    rand_max = float(_MASK64)
    for j in range(len(result), 1, -1):
        u = float(rng.next()) / rand_max
        k = min(int(j * u + 1), j)
        result[j - 1], result[k - 1] = result[k - 1], result[j - 1]
    return result


def _lex_compare(a: Sequence[Number], b: Sequence[Number]) -> int:
    for x, y in zip(a, b):
        c = compare(x, y)
        if c:
            return c
    return 0


def row_order(rows: Sequence[Sequence[Number]], ho: RowOrder, seed: int = 1) -> list[int]:
    """Return the 1-based indices of ``rows`` in the preference order ``ho``."""
    m = len(rows)
    indices = list(range(1, m + 1))
    if ho is RowOrder.MAX_INDEX:
        return indices[::-1]
    if ho in (RowOrder.LEX_MIN, RowOrder.LEX_MAX):
        key = cmp_to_key(lambda a, b: _lex_compare(rows[a - 1], rows[b - 1]))
        ordered = sorted(indices, key=key)
        return ordered[::-1] if ho is RowOrder.LEX_MAX else ordered
    if ho is RowOrder.RANDOM_ROW:
        return random_permutation(indices, seed if seed > 0 else 1)
    return indices


class _PivotChoice(NamedTuple):
    selected: bool
    r: int
    s: int
    status: LPStatus


class _BasisResult(NamedTuple):
    found: bool
    status: LPStatus
    column: int
    pivots: int


class _DualFeasibleResult(NamedTuple):
    status: LPStatus
    column: int
    pivots: int


def _format_number(x: Number) -> str:
    if isinstance(x, float):
        return f" {x:.9g}"
    x = Fraction(x)
    if x.denominator == 1:
        return f" {x.numerator}"
    return f" {x.numerator}/{x.denominator}"


class Tableau:
    """Implicit dictionary ``A.T`` with its basis bookkeeping."""

    def __init__(
        self,
        A: list[list[Number]],
        m_size: int,
        d_size: int,
        objrow: int,
        rhscol: int,
    ) -> None:
        if len(A) < m_size:
            raise ValueError(f"matrix has {len(A)} rows, expected at least {m_size}")
        if any(len(row) < d_size for row in A[:m_size]):
            raise ValueError(f"every row needs at least {d_size} entries")
        if not 1 <= objrow <= m_size:
            raise ValueError(f"objective row {objrow} is out of range")
        if not 1 <= rhscol <= d_size:
            raise ValueError(f"right-hand-side column {rhscol} is out of range")
        self.A = A
        self.m_size = m_size
        self.d_size = d_size
        self.objrow = objrow
        self.rhscol = rhscol
        exact = not any(
            isinstance(v, float) for row in A[:m_size] for v in row[:d_size]
        )
        self._one: Number = Fraction(1) if exact else 1.0
        self._zero: Number = Fraction(0) if exact else 0.0
        self._minuszero: Number = Fraction(0) if exact else -ALMOST_ZERO
        self.T: list[list[Number]] = []
        self.nbindex: list[int] = []
        self.bflag: list[int] = []
        self.reset()

    def entry(self, r: int, s: int) -> Number:
        """Return entry ``(r, s)`` of the dictionary ``A.T``."""
        row = self.A[r - 1]
        total = self._zero
        for j in range(self.d_size):
            total = total + row[j] * self.T[j][s - 1]
        return total

    def reset(self) -> None:
        """Return to the initial dictionary: ``T`` is the identity."""
        d = self.d_size
        self.T = [
            [self._one if i == j else self._zero for j in range(d)] for i in range(d)
        ]
        self.nbindex = [0] + [-j for j in range(1, d + 1)]
        self.nbindex[self.rhscol] = 0
        self.bflag = [0] + [-1] * self.m_size + [0]
        self.bflag[self.objrow] = 0
        for j in range(1, d + 1):
            if self.nbindex[j] > 0:
                self.bflag[self.nbindex[j]] = j

    def pivot(self, r: int, s: int) -> None:
        """Pivot on ``(r, s)``: row ``r`` leaves the basis through column ``s``."""
        if not 1 <= r <= len(self.A):
            raise LPError(ErrorType.ROW_INDEX_OUT_OF_RANGE, f"row {r}")
        if not 1 <= s <= self.d_size:
            raise LPError(ErrorType.COL_INDEX_OUT_OF_RANGE, f"column {s}")
        d = self.d_size
        row = [self.entry(r, j) for j in range(1, d + 1)]
        piv = row[s - 1]
        if piv == 0:
            raise LPError(ErrorType.NUMERICALLY_INCONSISTENT, f"zero pivot at ({r}, {s})")
        T = self.T
        for j in range(d):
            if j != s - 1:
                ratio = row[j] / piv
                for k in range(d):
                    T[k][j] = T[k][j] - ratio * T[k][s - 1]
        for k in range(d):
            T[k][s - 1] = T[k][s - 1] / piv
        entering = self.nbindex[s]
        self.bflag[r] = s
        self.nbindex[s] = r
        if entering > 0:
            self.bflag[entering] = -1

    def select_pivot(
        self,
        order: Sequence[int],
        equalityset: set[int],
        rowmax: int,
        nopivot_rows: set[int],
        nopivot_cols: set[int],
    ) -> tuple[int, int] | None:
        """Pick a nonzero position avoiding the excluded rows and columns.

        Equality rows come first, then rows in ``order``.  Returns ``None``
        when no position qualifies.
        """
        m = self.m_size
        excluded = set(nopivot_rows) | set(range(rowmax + 1, m + 1))
        candidates = list(order)[:m]
        while True:
            r = next(
                (i for i in range(1, m + 1) if i in equalityset and i not in excluded),
                0,
            )
            if r == 0:
                r = next((k for k in candidates if k not in excluded), 0)
            if r == 0:
                return None
            for s in range(1, self.d_size + 1):
                if s not in nopivot_cols and sign(self.entry(r, s)) != 0:
                    return r, s
            excluded.add(r)

    def select_dual_simplex_pivot(
        self, phase1: bool, nbindex_ref: Sequence[int], lexicopivot: bool
    ) -> _PivotChoice:
        """Choose a dual simplex pivot on a dual feasible dictionary."""
        return self._select_dual(self.m_size, phase1, nbindex_ref, lexicopivot)

    def _select_dual(
        self, m_size: int, phase1: bool, nbindex_ref: Sequence[int], lexicopivot: bool
    ) -> _PivotChoice:
        d, rhscol, objrow, bflag = self.d_size, self.rhscol, self.objrow, self.bflag
        rcost: dict[int, Number] = {}
        dualfeasible = True
        for j in range(1, d + 1):
            if j != rhscol:
                rcost[j] = self.entry(objrow, j)
                if sign(rcost[j]) > 0:
                    dualfeasible = False
        if not dualfeasible:
            return _PivotChoice(False, 0, 0, LPStatus.UNDECIDED)

        r = 0
        minval = self._zero
        for i in range(1, m_size + 1):
            if i != objrow and bflag[i] == -1:
                if phase1:
                    val = -self.entry(i, bflag[m_size])
                else:
                    val = self.entry(i, rhscol)
                if compare(val, minval) < 0:
                    r = i
                    minval = val
        if sign(minval) >= 0:
            return _PivotChoice(False, 0, 0, LPStatus.OPTIMAL)

        s = 0
        minrat = self._zero
        tieset: set[int] = set()
        for j in range(1, d + 1):
            val = self.entry(r, j)
            if j != rhscol and sign(val) > 0:
                rat = -rcost[j] / val
                if s == 0 or compare(rat, minrat) < 0:
                    minrat, s, tieset = rat, j, {j}
                elif compare(rat, minrat) == 0:
                    tieset.add(j)
        if s == 0:
            return _PivotChoice(False, r, 0, LPStatus.INCONSISTENT)
        if not lexicopivot or len(tieset) == 1:
            return _PivotChoice(True, r, s, LPStatus.UNDECIDED)

        # Break the tie lexicographically against the reference cobasis.
        s = 0
        colselected = False
        k = 2
        while True:
            iref = nbindex_ref[k]
            if iref > 0:
                j = bflag[iref]
                if j > 0:
                    if j in tieset and len(tieset) == 1:
                        s = j
                        colselected = True
                    else:
                        tieset.discard(j)
                else:
                    s = 0
                    stieset: set[int] = set()
                    for j in sorted(tieset):
                        val = self.entry(r, j)
                        valn = self.entry(iref, j)
                        if j != rhscol and sign(val) > 0:
                            rat = valn / val
                            if s == 0 or compare(rat, minrat) < 0:
                                minrat, s, stieset = rat, j, {j}
                            elif compare(rat, minrat) == 0:
                                stieset.add(j)
                    tieset = stieset
                    if len(tieset) == 1:
                        colselected = True
            k += 1
            if colselected or k > d:
                break
        return _PivotChoice(True, r, s, LPStatus.UNDECIDED)

    def select_criss_cross_pivot(self) -> _PivotChoice:
        """Choose a criss-cross pivot, or report the terminal status."""
        m, objrow, rhscol, bflag = self.m_size, self.objrow, self.rhscol, self.bflag
        r = s = 0
        rowselected = colselected = False
        for i in range(1, m + 1):
            if i != objrow and bflag[i] == -1:
                if sign(self.entry(i, rhscol)) < 0:
                    rowselected, r = True, i
                    break
            elif bflag[i] > 0:
                if sign(self.entry(objrow, bflag[i])) > 0:
                    colselected, s = True, bflag[i]
                    break
        if not rowselected and not colselected:
            return _PivotChoice(False, 0, 0, LPStatus.OPTIMAL)
        if rowselected:
            for i in range(1, m + 1):
                if bflag[i] > 0 and sign(self.entry(r, bflag[i])) > 0:
                    return _PivotChoice(True, r, bflag[i], LPStatus.UNDECIDED)
            return _PivotChoice(False, r, 0, LPStatus.INCONSISTENT)
        for i in range(1, m + 1):
            if i != objrow and bflag[i] == -1 and sign(self.entry(i, s)) < 0:
                return _PivotChoice(True, i, s, LPStatus.UNDECIDED)
        return _PivotChoice(False, 0, s, LPStatus.DUAL_INCONSISTENT)

    def find_lp_basis(self, order: Sequence[int], equalityset: set[int]) -> _BasisResult:
        """Pivot into an LP basis by Gaussian elimination.

        ``found`` is false, with status ``STRUC_DUAL_INCONSISTENT`` and the
        evidence column, when the dependent columns prove dual inconsistency.
        """
        d, m = self.d_size, self.m_size
        rows_sel = {self.objrow}
        cols_sel = {self.rhscol}
        rank = pivots = 0
        status = LPStatus.UNDECIDED
        column = 0
        found = False
        stop = False
        while not stop:
            choice = self.select_pivot(order, equalityset, m, rows_sel, cols_sel)
            if choice is not None:
                r, s = choice
                rows_sel.add(r)
                cols_sel.add(s)
                self.pivot(r, s)
                pivots += 1
                rank += 1
            else:
                for j in range(1, d + 1):
                    if (
                        j != self.rhscol
                        and self.nbindex[j] < 0
                        and sign(self.entry(self.objrow, j)) != 0
                    ):
                        status = LPStatus.STRUC_DUAL_INCONSISTENT
                        column = j
                        break
                if status is LPStatus.UNDECIDED:
                    found = True
                stop = True
            if rank == d - 1:
                stop = True
                found = True
        return _BasisResult(found, status, column, pivots)

    def find_dual_feasible_basis(
        self, order: Sequence[int], lexicopivot: bool, maxpivots: int
    ) -> _DualFeasibleResult:
        """Reach a dual feasible basis with phase I of the dual simplex method.

        Returns status ``UNDECIDED`` on success or ``DUAL_INCONSISTENT`` with
        the evidence column.  Raises :class:`LPError` (with a ``pivots``
        attribute) on numerical trouble or when ``maxpivots`` is exceeded.
        """
        d, m, objrow, rhscol = self.d_size, self.m_size, self.objrow, self.rhscol
        local = m + 1
        while len(self.A) < local:
            self.A.append([self._zero] * d)

        rcost: dict[int, Number] = {}
        ms = 0
        maxcost = self._minuszero
        for j in range(1, d + 1):
            if j != rhscol:
                rcost[j] = self.entry(objrow, j)
                if compare(rcost[j], maxcost) > 0:
                    maxcost, ms = rcost[j], j
        if sign(maxcost) <= 0:
            return _DualFeasibleResult(LPStatus.UNDECIDED, 0, 0)

        aux = self.A[local - 1]
        for j in range(1, d + 1):
            value = self._zero
            for l in range(1, d + 1):
                if self.nbindex[l] > 0:
                    value = value - self.A[self.nbindex[l] - 1][j - 1] * (self._one * (l + 10))
            aux[j - 1] = value

        def fail(kind: ErrorType, count: int) -> LPError:
            error = LPError(kind)
            error.pivots = count
            return error

        ms = 0
        maxratio = self._minuszero
        for j in range(1, d + 1):
            if j != rhscol and sign(rcost[j]) > 0:
                axvalue = self.entry(local, j)
                if sign(axvalue) >= 0:
                    raise fail(ErrorType.NUMERICALLY_INCONSISTENT, 0)
                ratio = rcost[j] / -axvalue
                if compare(ratio, maxratio) > 0:
                    maxratio, ms = ratio, j
        if ms == 0:
            raise fail(ErrorType.NUMERICALLY_INCONSISTENT, 0)

        self.pivot(local, ms)
        pivots = 1
        nbindex_ref = list(self.nbindex)
        while True:
            if pivots > maxpivots:
                raise fail(ErrorType.LP_CYCLING, pivots)
            choice = self._select_dual(local, True, nbindex_ref, lexicopivot)
            if not choice.selected:
                status, column = LPStatus.UNDECIDED, 0
                if sign(self.entry(objrow, ms)) < 0:
                    status, column = LPStatus.DUAL_INCONSISTENT, ms
                r_val = 0
                minval = self._zero
                for i in range(1, local + 1):
                    if self.bflag[i] < 0:
                        val = self.entry(i, ms)
                        if compare(val, minval) < 0:
                            r_val, minval = i, val
                if r_val == 0:
                    raise fail(ErrorType.NUMERICALLY_INCONSISTENT, pivots)
                self.pivot(r_val, ms)
                pivots += 1
                return _DualFeasibleResult(status, column, pivots)
            self.pivot(choice.r, choice.s)
            pivots += 1
            if self.bflag[local] < 0:
                return _DualFeasibleResult(LPStatus.UNDECIDED, 0, pivots)

    def redundancy_information(self) -> set[int]:
        """Return basic rows whose dictionary rows are entirely nonnegative."""
        return {
            i
            for i in range(1, self.m_size + 1)
            if self.bflag[i] < 0
            and all(sign(self.entry(i, j)) >= 0 for j in range(1, self.d_size + 1))
        }

    def _row_label(self, i: int) -> str:
        return f" {i:3d}({self.bflag[i]:3d}) |"

    def format(self) -> str:
        """Render the dictionary with its entries."""
        m, d = self.m_size, self.d_size
        lines = [
            f" {m}  {d}  real",
            "          |" + "".join(f" {self.nbindex[j]}" for j in range(1, d + 1)),
            " ----" * (d + 1),
        ]
        for i in range(1, m + 1):
            lines.append(
                self._row_label(i)
                + "".join(_format_number(self.entry(i, j)) for j in range(1, d + 1))
            )
        lines.append("end")
        return "\n".join(lines) + "\n"

    def format_signs(self, nbindex_ref: Sequence[int] | None = None) -> str:
        """Render the signs of the dictionary, optionally with a reference cobasis."""
        m, d = self.m_size, self.d_size
        lines = [f" {m}  {d}  real"]
        if nbindex_ref is not None:
            lines.append(
                "          |" + "".join(f"{nbindex_ref[j]:3d}" for j in range(1, d + 1))
            )
        lines.append(
            "          |" + "".join(f"{self.nbindex[j]:3d}" for j in range(1, d + 1))
        )
        lines.append("  ------- | " + "---" * d)
        symbols = {1: "  +", -1: "  -", 0: "  0"}
        for i in range(1, m + 1):
            lines.append(
                self._row_label(i)
                + "".join(symbols[sign(self.entry(i, j))] for j in range(1, d + 1))
            )
        lines.append("end")
        return "\n".join(lines) + "\n"
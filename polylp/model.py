"""Core data model: enumerations, errors, number helpers and the constraint matrix."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from fractions import Fraction
from numbers import Rational
from typing import Iterable, Sequence, Union

Number = Union[int, float, Fraction]

#: Tolerance under which a floating-point value is treated as zero.
ALMOST_ZERO = 1e-7


class NumberType(enum.Enum):
    """Kind of numbers a matrix or LP holds."""

    UNKNOWN = "unknown"
    REAL = "real"
    RATIONAL = "rational"
    INTEGER = "integer"


class Objective(enum.Enum):
    """Direction of an LP objective."""

    NONE = "none"
    MAX = "max"
    MIN = "min"


class Solver(enum.Enum):
    """Pivoting algorithm used to solve an LP."""

    CRISS_CROSS = "criss-cross"
    DUAL_SIMPLEX = "dual simplex"


class Representation(enum.Enum):
    """How the rows of a matrix are to be read."""

    UNSPECIFIED = "unspecified"
    INEQUALITY = "H"
    GENERATOR = "V"


class RowOrder(enum.Enum):
    """Orderings of the rows considered when picking pivots."""

    MAX_INDEX = "maxindex"
    MIN_INDEX = "minindex"
    MIN_CUTOFF = "mincutoff"
    MAX_CUTOFF = "maxcutoff"
    MIX_CUTOFF = "mixcutoff"
    LEX_MIN = "lexmin"
    LEX_MAX = "lexmax"
    RANDOM_ROW = "random"


class LPStatus(enum.Enum):
    """Status of an LP after (or before) solving."""

    UNDECIDED = "undecided"
    OPTIMAL = "optimal"
    INCONSISTENT = "inconsistent"
    DUAL_INCONSISTENT = "dual inconsistent"
    STRUC_INCONSISTENT = "structurally inconsistent"
    STRUC_DUAL_INCONSISTENT = "structurally dual inconsistent"
    UNBOUNDED = "unbounded"
    DUAL_UNBOUNDED = "dual unbounded"


class ErrorType(enum.Enum):
    """Failures reported by the solver and its helpers."""

    IMPROPER_INPUT_FORMAT = "improper input format"
    NO_LP_OBJECTIVE = "LP objective (max or min) is not specified"
    NUMERICALLY_INCONSISTENT = "numerical inconsistency detected"
    LP_CYCLING = "LP cycling, most likely due to floating-point errors"
    EMPTY_REPRESENTATION = "the representation is empty"
    COL_INDEX_OUT_OF_RANGE = "column index out of range"
    ROW_INDEX_OUT_OF_RANGE = "row index out of range"
    NOT_AVAIL_FOR_V = "not available for a V-representation"
    CANNOT_HANDLE_LINEARITY = "linearity (equations) cannot be handled"


class LPError(Exception):
    """Raised when an LP operation fails; ``kind`` tells which way."""

    def __init__(self, kind: ErrorType, detail: str | None = None) -> None:
        self.kind = kind
        message = kind.value if detail is None else f"{kind.value}: {detail}"
        super().__init__(message)


def parse_number_type(line: str) -> NumberType:
    """Read a number type from the start of ``line``."""
    for prefix, kind in (
        ("integer", NumberType.INTEGER),
        ("rational", NumberType.RATIONAL),
        ("real", NumberType.REAL),
    ):
        if line.startswith(prefix):
            return kind
    raise LPError(ErrorType.IMPROPER_INPUT_FORMAT, f"unknown number type {line!r}")


def sign(x: Number) -> int:
    """Return -1, 0 or 1; floats within ``ALMOST_ZERO`` of zero count as zero."""
    if isinstance(x, Rational):
        return (x > 0) - (x < 0)
    if x > ALMOST_ZERO:
        return 1
    if x < -ALMOST_ZERO:
        return -1
    return 0


def compare(a: Number, b: Number) -> int:
    """Compare two numbers with the same tolerance as :func:`sign`."""
    return sign(a - b)


def _zero_like(numbtype: NumberType) -> Number:
    return 0.0 if numbtype is NumberType.REAL else Fraction(0)


@dataclass
class Matrix:
    """A matrix of rows ``(b, A)`` with 1-based linearity rows in ``linset``."""

    rows: list[list[Number]]
    colsize: int | None = None
    linset: set[int] = field(default_factory=set)
    representation: Representation = Representation.INEQUALITY
    numbtype: NumberType = NumberType.REAL
    objective: Objective = Objective.NONE
    rowvec: list[Number] | None = None

    def __post_init__(self) -> None:
        self.rows = [list(row) for row in self.rows]
        if self.colsize is None:
            if not self.rows:
                raise ValueError("colsize is required for a matrix without rows")
            self.colsize = len(self.rows[0])
        for number, row in enumerate(self.rows, start=1):
            if len(row) != self.colsize:
                raise ValueError(
                    f"row {number} has {len(row)} entries, expected {self.colsize}"
                )
        self.linset = set(self.linset)
        for i in self.linset:
            if not 1 <= i <= len(self.rows):
                raise ValueError(f"linearity row {i} is out of range")
        if self.rowvec is None:
            self.rowvec = [_zero_like(self.numbtype)] * self.colsize
        else:
            self.rowvec = list(self.rowvec)
            if len(self.rowvec) != self.colsize:
                raise ValueError("rowvec length does not match colsize")

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Number]], **kwargs) -> "Matrix":
        """Build a matrix from any iterable of rows."""
        return cls([list(r) for r in rows], **kwargs)

    @property
    def rowsize(self) -> int:
        """Number of rows."""
        return len(self.rows)

    def row(self, i: int) -> list[Number]:
        """Return a copy of the 1-based row ``i``."""
        self._check_row(i)
        return list(self.rows[i - 1])

    def copy(self) -> "Matrix":
        """Return an independent copy of the matrix."""
        return Matrix(
            rows=[list(r) for r in self.rows],
            colsize=self.colsize,
            linset=set(self.linset),
            representation=self.representation,
            numbtype=self.numbtype,
            objective=self.objective,
            rowvec=list(self.rowvec),
        )

    def remove_row(self, i: int) -> None:
        """Delete the 1-based row ``i``, renumbering the linearity set."""
        self._check_row(i)
        del self.rows[i - 1]
        self.linset = {k if k < i else k - 1 for k in self.linset if k != i}

    def _check_row(self, i: int) -> None:
        if not 1 <= i <= len(self.rows):
            raise LPError(ErrorType.ROW_INDEX_OUT_OF_RANGE, f"row {i}")
# polylp

`polylp` solves linear programs over polyhedra given as matrices `(b, A)`,
where each row stands for the inequality `b + A x >= 0`. The solvers are the
dual simplex method and the criss-cross method. The package can also find
redundant and strongly redundant rows, implicit linearities, points on
restricted faces, and the adjacency of facets or vertices.

Numbers are exact `fractions.Fraction` values, or floats with a small zero
tolerance (`polylp.model.ALMOST_ZERO`). A matrix or LP with
`NumberType.REAL` works in floats. Any other number type works in fractions.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `polylp.model` defines the `Matrix` dataclass. A matrix has rows, a
  1-based `linset` of equation rows, a `representation` (H or V), a
  `numbtype`, an `objective` and a `rowvec`, with `copy()` and
  `remove_row(i)`. The module also has the enums `NumberType`, `Objective`,
  `Solver`, `Representation`, `RowOrder`, `LPStatus` and `ErrorType`, the
  exception `LPError` (its `kind` is an `ErrorType`), and the helpers
  `parse_number_type`, `sign` and `compare`.
- `polylp.tableau` defines `Tableau`, the implicit dictionary `A.T` with its
  pivot rules (Gaussian, dual simplex and criss-cross). It also has
  `row_order`, `random_permutation` and the `SplitMix64` generator that
  random row orders use.
- `polylp.lp` defines `LinearProgram`, with `solve(solver)`, `solution()`
  (which returns an `LPSolution` record), `format_result()`, `reverse_row`,
  `replace_row` and `copy_row`. It also has the builders `matrix_to_lp`,
  `matrix_to_feasibility`, `matrix_to_restricted_feasibility` and
  `make_lp_for_interior_finding`.
- `polylp.redundancy` has `redundant`, `redundant_extensive`,
  `redundant_rows`, `strongly_redundant` and `strongly_redundant_rows`, and
  the LP builders `create_lp_h_redundancy`, `create_lp_v_redundancy` and
  `create_lp_v_strong_redundancy`.
- `polylp.linearity` has `implicit_linearity`,
  `free_of_implicit_linearity` and `implicit_linearity_rows`, and the
  builders `create_lp_h_implicit_linearity` and
  `create_lp_v_implicit_linearity`.
- `polylp.faces` has `exists_restricted_face`, `restricted_face_solution`,
  `ray_shooting`, `redundant_rows_via_shooting`, `adjacency` and
  `weak_adjacency`.

Row and column indices are 1-based, as in the input matrix. Sets of rows are
plain Python `set`s of these indices. A failure raises `LPError`, for
example when no objective is set, when pivots cycle in floating point, or
when an empty matrix is given to `adjacency`.

## Example

Maximise `x1 + x2` over the unit square `0 <= x1, x2 <= 1`:

```python
from polylp.model import Matrix, NumberType, Objective
from polylp.lp import matrix_to_lp

square = Matrix(
    [[0, 1, 0], [1, -1, 0], [0, 0, 1], [1, 0, -1]],
    numbtype=NumberType.RATIONAL,
    objective=Objective.MAX,
    rowvec=[0, 1, 1],
)
lp = matrix_to_lp(square)
lp.solve()
result = lp.solution()
print(result.status, result.optvalue)   # LPStatus.OPTIMAL 2
print(lp.format_result())
```

A row is redundant when the other rows already imply it:

```python
from polylp.redundancy import redundant, redundant_rows

square_plus = Matrix([[0, 1, 0], [1, -1, 0], [0, 0, 1], [1, 0, -1], [3, -1, -1]])
print(redundant_rows(square_plus))            # {5}
print(redundant(square_plus, 1).redundant)    # False
```

`redundant` returns the answer together with a certificate. For a
nonredundant row of an H-matrix, the certificate is a point that violates
only that row.

## What it does not do

`polylp` is a library only. It has no command-line program, and it does not
read or write matrix files. It does not convert between H- and
V-representations: it cannot enumerate vertices or facets. It answers
questions about a given matrix by solving LPs.
"""Linear programming over polyhedra: LP solvers, redundancy, implicit linearity and adjacency."""

__version__ = "0.1.0"

__all__ = ["model", "tableau", "lp", "redundancy", "linearity", "faces"]
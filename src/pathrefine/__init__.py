"""pathrefine - SVG path geometry and simplification engine.

pathrefine parses SVG documents into a structured curve model and runs
algorithms that reduce anchor-point count while preserving visual shape:
point-importance healing, multi-stage simplification, health scoring and
path-to-path tiling.

Example:
    $ pathrefine simplify logo.svg --tolerance 0.5

This will create logo-simplified.svg with every path simplified.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]

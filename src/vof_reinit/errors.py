# -*- coding: utf-8 -*-
"""
Exceptions raised by the level-set reconstruction core.

Classes:
    LevelSetError: Base class for all errors raised by this package.
    UnsupportedTopologyError: A cell shape has no VOF quadrature.
    DegenerateGeometryError: A cell cannot be solved because its interface
        measure (or normal) vanishes.
    MaxIterationsExceeded: An iterative process hit its iteration ceiling.
"""
from typing import Any


class LevelSetError(Exception):
    """Base class for errors raised while building a level-set field."""


class UnsupportedTopologyError(LevelSetError, ValueError):
    """Raised when a cell topology has no closed-form VOF formula."""


class DegenerateGeometryError(LevelSetError):
    """
    Raised when a cell has a vanishing interface measure or normal.

    Attributes:
        cell (int | None): The offending cell index, when known.
    """

    def __init__(self, message: str, cell: int | None = None) -> None:
        super().__init__(message)
        self.cell = cell


class MaxIterationsExceeded(LevelSetError):
    """
    Raised when an iteration ceiling is reached before convergence.

    Attributes:
        iterations (int): The number of iterations performed.
        result (Any): The last available state. For the reinitialization
            driver this is the `ReinitializationResult`, and the level-set
            field has already been updated in place. `None` for a single
            cell solve.
    """

    def __init__(self, message: str, iterations: int, result: Any = None) -> None:
        super().__init__(message)
        self.iterations = iterations
        self.result = result

# -*- coding: utf-8 -*-
"""
Capability interfaces consumed by the level-set core.

The core only needs narrow read access to a mesh, read/write access to
scalar fields and a way to differentiate a field at a cell centre. Any
object satisfying these protocols can be used: the in-memory `PolyMesh`,
`ScalarField` and `LeastSquaresGradient` shipped with this package, or an
adapter around a distributed mesh and field runtime.
"""
from typing import Protocol, Sequence

import numpy as np

from ..fields import FieldLocation
from ..topology import Topology


class TopologyProvider(Protocol):
    """Read-only mesh queries."""

    dimension: int
    n_nodes: int
    n_cells: int

    def cell_topology(self, cell: int) -> Topology: ...

    def cell_vertices(self, cell: int) -> Sequence[int]: ...

    def cell_coordinates(self, cell: int) -> np.ndarray: ...

    def cell_center(self, cell: int) -> np.ndarray: ...

    def cell_measure(self, cell: int) -> float: ...


class FieldAccessor(Protocol):
    """A scalar field stored per cell or per vertex."""

    location: FieldLocation
    values: np.ndarray

    def __getitem__(self, index: int) -> float: ...

    def __setitem__(self, index: int, value: float) -> None: ...

    def __len__(self) -> int: ...


class GradientOperator(Protocol):
    """First partial derivative of a field at a cell centre."""

    def eval_derivative(
        self, field: FieldAccessor, cell: int, direction: int
    ) -> float: ...


class ScalarFunction(Protocol):
    """Analytic scalar function `f(point, dim, time)`."""

    def __call__(self, point: np.ndarray, dim: int, time: float) -> float: ...

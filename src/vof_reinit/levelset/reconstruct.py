# -*- coding: utf-8 -*-
"""
Vertex level-set values from a planar interface or an analytic function.

A planar interface through a cell is described by the level-set value `c0`
at the cell centre and a unit normal `n`; the value at a vertex `x` is then
``c0 + n . (x - x0)``. The inverse operation, recovering `c0` and the
gradient from vertex values, is a least-squares affine fit that is exact
for planar data.

Classes:
    LinearInterfaceReconstructor: Mesh-bound wrapper around the functions
        of this module.
"""
from typing import Tuple, TYPE_CHECKING

import numpy as np

from ..topology import Topology
from .interfaces import ScalarFunction
from .vof_kernel import VOFResult, compute_vof

if TYPE_CHECKING:
    from .interfaces import TopologyProvider


def _padded(vec, size: int = 3) -> np.ndarray:
    """Returns `vec` as a float array zero padded to `size` components."""
    v = np.zeros(size)
    arr = np.asarray(vec, dtype=float).ravel()
    v[: arr.size] = arr
    return v


def vertex_level_set_from_normal(coords, center, c0: float, normal) -> np.ndarray:
    """
    Level-set values at the vertices for a planar interface.

    Args:
        coords (array-like): Vertex coordinates, shape (n_vertices, dim).
        center (array-like): The cell centre.
        c0 (float): Level-set value at the cell centre.
        normal (array-like): Unit normal of the interface.

    Returns:
        np.ndarray: One value per vertex.
    """
    x = np.asarray(coords, dtype=float)
    if x.ndim == 1:
        x = x.reshape(-1, 1)
    dim = x.shape[1]
    x0 = _padded(center)[:dim]
    n = _padded(normal)[:dim]
    return c0 + (x - x0) @ n


def vertex_level_set_from_function(
    coords, function: ScalarFunction, time: float = 0.0
) -> np.ndarray:
    """Evaluates `function(point, dim, time)` at every vertex."""
    x = np.asarray(coords, dtype=float)
    if x.ndim == 1:
        x = x.reshape(-1, 1)
    dim = x.shape[1]
    return np.array([function(point, dim, time) for point in x], dtype=float)


def cell_value_gradient(coords, values, center) -> Tuple[float, np.ndarray]:
    """
    Level-set value and gradient at a cell centre from its vertex values.

    Uses a least-squares fit of ``c0 + g . (x - x0)``, which reproduces
    planar vertex data exactly and gives the centre gradient of the
    bilinear (trilinear) interpolant on parallelogram (parallelepiped)
    cells.

    Returns:
        Tuple[float, np.ndarray]: `c0` and the gradient (length `dim`).
    """
    x = np.asarray(coords, dtype=float)
    if x.ndim == 1:
        x = x.reshape(-1, 1)
    dim = x.shape[1]
    dx = x - _padded(center)[:dim]
    A = np.hstack([np.ones((x.shape[0], 1)), dx])
    sol, *_ = np.linalg.lstsq(A, np.asarray(values, dtype=float), rcond=None)
    return float(sol[0]), sol[1:]


def vof_from_plane(topology: Topology, coords, center, c0: float, normal) -> VOFResult:
    """VOF of a cell cut by the plane described by `c0` and `normal`."""
    values = vertex_level_set_from_normal(coords, center, c0, normal)
    return compute_vof(topology, coords, values)


def vof_from_function(
    topology: Topology, coords, function: ScalarFunction, time: float = 0.0
) -> VOFResult:
    """VOF of a cell using an analytic level-set function sampled at the vertices."""
    values = vertex_level_set_from_function(coords, function, time)
    return compute_vof(topology, coords, values)


class LinearInterfaceReconstructor:
    """
    Builds vertex level-set values for the cells of a mesh.

    Attributes:
        mesh (TopologyProvider): The mesh whose cells are reconstructed.
    """

    def __init__(self, mesh: "TopologyProvider") -> None:
        self.mesh = mesh

    def from_normal(self, cell: int, c0: float, normal) -> np.ndarray:
        """Vertex values of `cell` for a planar interface at level `c0`."""
        return vertex_level_set_from_normal(
            self.mesh.cell_coordinates(cell), self.mesh.cell_center(cell), c0, normal
        )

    def from_function(
        self, cell: int, function: ScalarFunction, time: float = 0.0
    ) -> np.ndarray:
        """Vertex values of `cell` sampled from an analytic function."""
        return vertex_level_set_from_function(
            self.mesh.cell_coordinates(cell), function, time
        )

    def center_value_gradient(self, cell: int, values) -> Tuple[float, np.ndarray]:
        """Centre value and gradient of `cell` from its vertex values."""
        return cell_value_gradient(
            self.mesh.cell_coordinates(cell), values, self.mesh.cell_center(cell)
        )

    def vof_from_function(
        self, cell: int, function: ScalarFunction, time: float = 0.0
    ) -> VOFResult:
        """VOF of `cell` for an analytic level-set function."""
        return vof_from_function(
            self.mesh.cell_topology(cell),
            self.mesh.cell_coordinates(cell),
            function,
            time,
        )

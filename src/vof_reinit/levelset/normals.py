# -*- coding: utf-8 -*-
"""
Interface normals from field gradients.

The normal of a cut cell points from the VOF = 1 phase towards the VOF = 0
phase, i.e. ``n = -grad(VOF)``. Once a level-set field exists the normal is
taken from ``+grad(phi)`` instead, which has the same orientation because
the level set is negative inside the VOF = 1 phase.

Classes:
    LeastSquaresGradient: In-memory `GradientOperator` for `PolyMesh` fields.
    NormalEstimator: Unit normals from any `GradientOperator`.
"""
from typing import Dict, TYPE_CHECKING

import numpy as np

from ..errors import DegenerateGeometryError
from ..fields import FieldLocation
from .interfaces import FieldAccessor, GradientOperator
from .reconstruct import cell_value_gradient

if TYPE_CHECKING:
    from ..polymesh.poly_mesh import PolyMesh

NORMAL_TOLERANCE = 1e-14


class LeastSquaresGradient:
    """
    Cell-centre gradients by least squares.

    Cell-valued fields are fitted over the cells that share at least one
    vertex with the target cell. Vertex-valued fields are fitted over the
    vertices of the target cell itself, which is exact when the vertex
    values are planar.

    Attributes:
        mesh (PolyMesh): An analyzed mesh.

    Raises:
        ValueError: If `mesh` lacks the cell centroids and neighbour lists
            of a `PolyMesh`. Other meshes need their own `GradientOperator`.
        RuntimeError: If the mesh has not been analyzed.
    """

    def __init__(self, mesh: "PolyMesh") -> None:
        required = ("cell_centroids", "cell_neighbors_of")
        if not all(hasattr(mesh, name) for name in required):
            raise ValueError(
                f"{type(mesh).__name__} has no cell centroids or neighbour lists; "
                "pass a gradient operator for this mesh."
            )
        if not getattr(mesh, "_is_analyzed", True):
            raise RuntimeError("Mesh must be analyzed before computing gradients.")
        self.mesh = mesh
        self._pinv_cache: Dict[int, np.ndarray] = {}

    def eval_derivative(self, field: FieldAccessor, cell: int, direction: int) -> float:
        """Partial derivative of `field` along axis `direction` at `cell`."""
        if not 0 <= direction < self.mesh.dimension:
            raise ValueError(
                f"Direction {direction} is out of range for a "
                f"{self.mesh.dimension}D mesh."
            )
        return float(self.gradient(field, cell)[direction])

    def gradient(self, field: FieldAccessor, cell: int) -> np.ndarray:
        """Full gradient (length `mesh.dimension`) of `field` at `cell`."""
        if field.location is FieldLocation.VERTEX:
            verts = self.mesh.cell_vertices(cell)
            _, g = cell_value_gradient(
                self.mesh.cell_coordinates(cell),
                field.values[verts],
                self.mesh.cell_center(cell),
            )
            return g

        neighbors = self.mesh.cell_neighbors_of(cell)
        if len(neighbors) == 0:
            return np.zeros(self.mesh.dimension)
        df = field.values[neighbors] - field.values[cell]
        return self._pseudo_inverse(cell) @ df

    def _pseudo_inverse(self, cell: int) -> np.ndarray:
        """Cached least-squares operator mapping neighbour differences to a gradient."""
        if cell not in self._pinv_cache:
            dim = self.mesh.dimension
            neighbors = self.mesh.cell_neighbors_of(cell)
            centroids = self.mesh.cell_centroids[:, :dim]
            dx = centroids[neighbors] - centroids[cell]
            self._pinv_cache[cell] = np.linalg.pinv(dx)
        return self._pinv_cache[cell]


class NormalEstimator:
    """
    Unit interface normals from an injected gradient operator.

    Attributes:
        gradient_operator (GradientOperator): Supplies partial derivatives.
        dimension (int): Spatial dimension of the problem (1, 2 or 3).
    """

    def __init__(self, gradient_operator: GradientOperator, dimension: int) -> None:
        if dimension not in (1, 2, 3):
            raise ValueError("dimension must be 1, 2 or 3.")
        self.gradient_operator = gradient_operator
        self.dimension = dimension

    def vof_normal(self, vof_field: FieldAccessor, cell: int) -> np.ndarray:
        """Normal ``-grad(VOF)`` at `cell`, unit length, padded to 3 components."""
        return -self._unit_gradient(vof_field, cell)

    def level_set_normal(self, level_set_field: FieldAccessor, cell: int) -> np.ndarray:
        """Normal ``+grad(phi)`` at `cell`, unit length, padded to 3 components."""
        return self._unit_gradient(level_set_field, cell)

    def _unit_gradient(self, field: FieldAccessor, cell: int) -> np.ndarray:
        g = np.zeros(3)
        for d in range(self.dimension):
            g[d] = self.gradient_operator.eval_derivative(field, cell, d)

        magnitude = np.linalg.norm(g)
        if not np.isfinite(magnitude) or magnitude < NORMAL_TOLERANCE:
            raise DegenerateGeometryError(
                f"Cell {cell}: gradient of field is zero or not finite, "
                "no normal can be defined.",
                cell,
            )
        return g / magnitude

# -*- coding: utf-8 -*-
"""
Debug output for vertex level-set fields.

The text dump is meant for inspection only and carries no compatibility
guarantee: one line per vertex with the tab-separated coordinate components
(as many as the mesh dimension) followed by the value, each written as
``%+.16e``.
"""
from typing import TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.tri import Triangulation

from ..common.utility import plot_mesh
from .interfaces import FieldAccessor
from .reinitialize import UNSET_LEVEL_SET

if TYPE_CHECKING:
    from ..polymesh.poly_mesh import PolyMesh

VALUE_FORMAT = "%+.16e"


def save_vertex_data(filepath: str, mesh: "PolyMesh", field: FieldAccessor) -> None:
    """
    Writes vertex coordinates and field values to a text file.

    Args:
        filepath (str): Output path.
        mesh (PolyMesh): The mesh supplying vertex coordinates.
        field (FieldAccessor): A vertex-valued field.
    """
    if len(field) != mesh.n_nodes:
        raise ValueError("save_vertex_data expects one value per mesh vertex.")
    dim = mesh.dimension
    data = np.column_stack([mesh.node_coords[:, :dim], field.values])
    np.savetxt(filepath, data, fmt=VALUE_FORMAT, delimiter="\t")


def load_vertex_data(filepath: str) -> np.ndarray:
    """Reads a dump written by `save_vertex_data` as an (n_nodes, dim + 1) array."""
    return np.loadtxt(filepath, delimiter="\t", ndmin=2)


def _triangulate(mesh: "PolyMesh") -> Triangulation:
    """Fan triangulation of the 2D cells for contouring."""
    triangles = []
    for conn in mesh.cell_node_connectivity:
        for k in range(1, len(conn) - 1):
            triangles.append([conn[0], conn[k], conn[k + 1]])
    return Triangulation(mesh.node_coords[:, 0], mesh.node_coords[:, 1], triangles)


def plot_level_set(
    mesh: "PolyMesh",
    field: FieldAccessor,
    filepath: str = "level_set_plot.png",
    vof_field: FieldAccessor | None = None,
    show_zero_level: bool = True,
) -> None:
    """
    Plots a vertex level-set field over the mesh and saves it to a file.

    Unset vertices are drawn in grey. The zero level is contoured over the
    cells whose vertices are all set.

    Note: Plotting is currently only supported for 2D meshes.

    Args:
        mesh (PolyMesh): The mesh.
        field (FieldAccessor): A vertex-valued field.
        filepath (str): The path to save the plot image.
        vof_field (FieldAccessor, optional): Cell VOF used to shade the cells.
        show_zero_level (bool): Whether to draw the zero contour.
    """
    if mesh.dimension != 2:
        print("Warning: Plotting is currently supported only for 2D meshes.")
        return

    values = np.asarray(field.values, dtype=float)
    is_set = values != UNSET_LEVEL_SET

    fig, ax = plt.subplots(figsize=(10, 8))
    plot_mesh(
        ax,
        mesh.node_coords,
        mesh.cell_node_connectivity,
        cell_values=None if vof_field is None else vof_field.values,
        title=f"Level Set '{getattr(field, 'name', '')}'",
    )
    xy = mesh.node_coords[:, :2]
    ax.scatter(xy[~is_set, 0], xy[~is_set, 1], c="lightgrey", s=6)
    if np.any(is_set):
        sc = ax.scatter(
            xy[is_set, 0], xy[is_set, 1], c=values[is_set], cmap="coolwarm", s=18
        )
        fig.colorbar(sc, ax=ax, label="level set")

    if show_zero_level and np.any(is_set):
        tri = _triangulate(mesh)
        tri.set_mask(~np.all(is_set[tri.triangles], axis=1))
        contour_values = np.where(is_set, values, 0.0)
        if np.min(contour_values[is_set]) < 0.0 < np.max(contour_values[is_set]):
            ax.tricontour(tri, contour_values, levels=[0.0], colors="k", linewidths=1.5)

    plt.savefig(filepath, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"Level-set plot saved to: {filepath}")

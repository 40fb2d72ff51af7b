# -*- coding: utf-8 -*-
"""
In-memory polytope mesh for level-set reconstruction.

`PolyMesh` stores vertices and first-order cells of a 1D, 2D or 3D mesh and
answers the read-only queries of the level-set core: cell topology, ordered
cell vertices, cell centres and measures, and which cells touch a vertex.

A mesh is built from a Gmsh .msh file, from plain arrays, or as a structured
quadrilateral grid. All factories return an analyzed mesh.
"""

from collections import Counter
from typing import Dict, List, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt
from scipy.sparse import csr_matrix

from ..levelset.vof_kernel import cell_measure
from ..topology import Topology

try:
    import gmsh
except (ImportError, OSError):
    gmsh = None


class PolyMesh:
    """
    Vertices, cells and derived cell data of an unstructured mesh.

    Attributes:
        dimension (int): Spatial dimension (1, 2 or 3).
        n_nodes (int): Number of vertices.
        n_cells (int): Number of cells.
        node_coords (np.ndarray): Vertex coordinates padded with zeros.
            - Shape: `(n_nodes, 3)`
        cell_node_connectivity (List[List[int]]): Vertex indices of each cell
            in canonical (Gmsh) order.
        cell_topologies (List[Topology]): Shape of each cell.
        cell_centroids (np.ndarray): Vertex mean of each cell.
            - Shape: `(n_cells, 3)`
        cell_volumes (np.ndarray): Length, area or volume of each cell; zero
            for shapes without a VOF formula.
            - Shape: `(n_cells,)`
        cell_node_incidence (csr_matrix): Cell-by-vertex incidence.
            - Shape: `(n_cells, n_nodes)`
        cell_neighbors (List[np.ndarray]): Cells sharing at least one vertex
            with each cell, the cell itself excluded.
    """

    def __init__(self) -> None:
        self.dimension: int = 0
        self.n_nodes: int = 0
        self.n_cells: int = 0
        self._is_analyzed: bool = False

        # Primary data
        self.node_coords: np.ndarray = np.zeros((0, 3))
        self.cell_node_connectivity: List[List[int]] = []
        self.cell_topologies: List[Topology] = []

        # Derived data
        self.cell_centroids: np.ndarray = np.zeros((0, 3))
        self.cell_volumes: np.ndarray = np.zeros(0)
        self.cell_node_incidence: csr_matrix | None = None
        self.cell_neighbors: List[np.ndarray] = []

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def from_gmsh(cls, msh_file: str, gmsh_verbose: int = 0) -> "PolyMesh":
        """
        Reads and analyzes a Gmsh .msh file.

        Args:
            msh_file (str): Path to the .msh file.
            gmsh_verbose (int): Gmsh verbosity level (0-10).
        """
        mesh = cls()
        mesh.read_gmsh(msh_file, gmsh_verbose)
        mesh.analyze_mesh()
        return mesh

    @classmethod
    def from_arrays(
        cls,
        node_coords,
        cell_node_connectivity: Sequence[Sequence[int]],
        topology: Topology | Sequence[Topology],
        dimension: int | None = None,
    ) -> "PolyMesh":
        """
        Builds an analyzed mesh from vertex coordinates and cell connectivity.

        Args:
            node_coords (array-like): Shape (n_nodes, d), d in 1..3.
            cell_node_connectivity: Vertex indices of each cell.
            topology: One topology for every cell, or one per cell.
            dimension (int, optional): Spatial dimension. Defaults to the
                highest topological dimension among the cells.
        """
        coords = np.asarray(node_coords, dtype=float)
        if coords.ndim == 1:
            coords = coords[:, np.newaxis]
        if coords.shape[1] > 3:
            raise ValueError("Node coordinates can have at most 3 components.")

        mesh = cls()
        mesh._set_nodes(coords)
        mesh.cell_node_connectivity = [
            [int(v) for v in cell] for cell in cell_node_connectivity
        ]
        mesh.n_cells = len(mesh.cell_node_connectivity)

        if isinstance(topology, Topology):
            mesh.cell_topologies = [topology] * mesh.n_cells
        else:
            mesh.cell_topologies = list(topology)
        if len(mesh.cell_topologies) != mesh.n_cells:
            raise ValueError("One topology per cell is required.")

        if dimension is None and mesh.cell_topologies:
            dimension = max(t.dimension for t in mesh.cell_topologies)
        mesh.dimension = dimension or 0
        mesh.analyze_mesh()
        return mesh

    @classmethod
    def create_structured_quad_mesh(
        cls,
        nx: int,
        ny: int,
        lower: Tuple[float, float] = (0.0, 0.0),
        upper: Tuple[float, float] | None = None,
    ) -> "PolyMesh":
        """
        Quadrilateral grid of nx x ny cells, numbered row by row.

        Args:
            nx (int): Cells along x.
            ny (int): Cells along y.
            lower (Tuple[float, float]): Lower-left corner.
            upper (Tuple[float, float], optional): Upper-right corner.
                Defaults to unit cells, `lower + (nx, ny)`.
        """
        if upper is None:
            upper = (lower[0] + nx, lower[1] + ny)
        xx, yy = np.meshgrid(
            np.linspace(lower[0], upper[0], nx + 1),
            np.linspace(lower[1], upper[1], ny + 1),
        )
        nodes = np.column_stack([xx.ravel(), yy.ravel()])

        # Lower-left vertex of every cell, then the counter-clockwise corners
        ii, jj = np.meshgrid(np.arange(nx), np.arange(ny))
        base = (jj * (nx + 1) + ii).ravel()
        cells = np.column_stack([base, base + 1, base + nx + 2, base + nx + 1])

        return cls.from_arrays(nodes, cells.tolist(), Topology.QUADRILATERAL)

    def _set_nodes(self, coords: np.ndarray) -> None:
        self.n_nodes = coords.shape[0]
        self.node_coords = np.zeros((self.n_nodes, 3))
        self.node_coords[:, : coords.shape[1]] = coords

    # =========================================================================
    # Analysis
    # =========================================================================

    def analyze_mesh(self) -> None:
        """
        Computes cell centroids, measures, incidence and neighbours.

        Raises:
            RuntimeError: If the mesh has no cells or vertices.
            ValueError: If a cell has the wrong number of vertices.
        """
        if self.n_cells == 0 or self.n_nodes == 0:
            raise RuntimeError(
                "Mesh is empty. Read a mesh file or use a factory before analyzing."
            )
        if self._is_analyzed:
            return

        self._check_connectivity()
        self.cell_centroids = np.array(
            [self.node_coords[cell].mean(axis=0) for cell in self.cell_node_connectivity]
        )
        self._compute_cell_volumes()
        self._compute_incidence()
        self._is_analyzed = True

    def _check_connectivity(self) -> None:
        for ci, (cell, topo) in enumerate(
            zip(self.cell_node_connectivity, self.cell_topologies)
        ):
            if len(cell) != topo.num_vertices:
                raise ValueError(
                    f"Cell {ci} of type {topo.value} has {len(cell)} vertices, "
                    f"expected {topo.num_vertices}."
                )

    def _compute_cell_volumes(self) -> None:
        """Measures of the cells of full dimension, from the VOF kernel."""
        self.cell_volumes = np.zeros(self.n_cells)
        for ci, topo in enumerate(self.cell_topologies):
            if topo.dimension != self.dimension:
                continue
            try:
                self.cell_volumes[ci] = cell_measure(topo, self.cell_coordinates(ci))
            except ValueError:
                # No closed form for this shape (wedge, pyramid)
                continue

    def _compute_incidence(self) -> None:
        """
        Builds the cell-vertex incidence matrix C.

        Two cells share a vertex exactly when their entry in ``C @ C.T`` is
        non-zero.
        """
        sizes = [len(cell) for cell in self.cell_node_connectivity]
        rows = np.repeat(np.arange(self.n_cells), sizes)
        cols = np.fromiter(
            (v for cell in self.cell_node_connectivity for v in cell),
            dtype=int,
            count=sum(sizes),
        )
        self.cell_node_incidence = csr_matrix(
            (np.ones(rows.size, dtype=np.int32), (rows, cols)),
            shape=(self.n_cells, self.n_nodes),
        )
        shared = (self.cell_node_incidence @ self.cell_node_incidence.T).tocsr()
        self.cell_neighbors = []
        for ci in range(self.n_cells):
            row = shared.indices[shared.indptr[ci] : shared.indptr[ci + 1]]
            self.cell_neighbors.append(np.setdiff1d(row, [ci]))

    # =========================================================================
    # Mesh queries
    # =========================================================================

    def cell_topology(self, cell: int) -> Topology:
        return self.cell_topologies[cell]

    def cell_vertices(self, cell: int) -> List[int]:
        return self.cell_node_connectivity[cell]

    def cell_coordinates(self, cell: int) -> np.ndarray:
        """Vertex coordinates of `cell`, shape (n_vertices, dimension)."""
        return self.node_coords[self.cell_node_connectivity[cell], : self.dimension]

    def cell_center(self, cell: int) -> np.ndarray:
        return self.cell_centroids[cell]

    def cell_measure(self, cell: int) -> float:
        return float(self.cell_volumes[cell])

    def cell_neighbors_of(self, cell: int) -> np.ndarray:
        """Cells sharing at least one vertex with `cell`."""
        return self.cell_neighbors[cell]

    def vertex_cells(self, vertex: int) -> np.ndarray:
        """Cells incident to `vertex`, in increasing order."""
        col = self.cell_node_incidence[:, vertex]
        return np.sort(col.nonzero()[0])

    # =========================================================================
    # Gmsh input
    # =========================================================================

    def read_gmsh(self, msh_file: str, gmsh_verbose: int = 0) -> None:
        """
        Loads vertices and cells from a .msh file with the Gmsh Python API.

        Only elements of the highest dimension present become cells.

        Raises:
            RuntimeError: If the Gmsh Python API is not installed.
            UnsupportedTopologyError: For element types without a topology
                (e.g. second-order elements).
        """
        if gmsh is None:
            raise RuntimeError("Gmsh Python API is not available.")

        gmsh.initialize()
        gmsh.option.setNumber("General.Verbosity", gmsh_verbose)
        try:
            gmsh.open(msh_file)
            tag_to_index = self._read_gmsh_nodes()
            self._read_gmsh_cells(tag_to_index)
        finally:
            gmsh.finalize()

    def _read_gmsh_nodes(self) -> Dict[int, int]:
        tags, coords, _ = gmsh.model.mesh.getNodes()
        self._set_nodes(np.asarray(coords, dtype=float).reshape(-1, 3))
        return {int(tag): i for i, tag in enumerate(tags)}

    def _read_gmsh_cells(self, tag_to_index: Dict[int, int]) -> None:
        self.dimension = max(dim for dim, _ in gmsh.model.getEntities())
        elem_types, _, elem_nodes = gmsh.model.mesh.getElements(dim=self.dimension)

        lookup = np.vectorize(tag_to_index.__getitem__)
        for etype, nodes in zip(elem_types, elem_nodes):
            name, _, _, n_vertices, *_ = gmsh.model.mesh.getElementProperties(etype)
            topo = Topology.from_element_name(name)
            conn = lookup(np.asarray(nodes, dtype=int).reshape(-1, int(n_vertices)))
            self.cell_node_connectivity.extend(conn.tolist())
            self.cell_topologies.extend([topo] * conn.shape[0])
        self.n_cells = len(self.cell_node_connectivity)

    # =========================================================================
    # Reporting
    # =========================================================================

    def print_summary(self) -> None:
        """Prints vertex and cell counts, bounds and cell measure statistics."""
        if not self._is_analyzed:
            print("Mesh not analyzed. Run analyze_mesh() first.")
            return

        print("\n" + "=" * 80)
        print(f"{'Mesh Summary':^80}")
        print("=" * 80)
        print(f"  {'Dimension:':<25} {self.dimension}D")
        print(f"  {'Vertices:':<25} {self.n_nodes}")
        print(f"  {'Cells:':<25} {self.n_cells}")

        lo = self.node_coords.min(axis=0)
        hi = self.node_coords.max(axis=0)
        for axis in range(self.dimension):
            label = f"{'XYZ'[axis]} Range:"
            print(f"  {label:<25} [{lo[axis]:.4f}, {hi[axis]:.4f}]")

        print(f"\n{'--- Cells ---':^80}\n")
        for topo, count in sorted(
            Counter(self.cell_topologies).items(), key=lambda item: item[0].value
        ):
            print(f"    - {topo.value + ':':<20} {count}")

        measured = self.cell_volumes[self.cell_volumes > 0.0]
        n_neighbors = np.array([len(n) for n in self.cell_neighbors])
        print(f"\n  {'':<20} {'Min':>15} {'Max':>15} {'Average':>15}")
        print(f"  {'-'*19} {'-'*15} {'-'*15} {'-'*15}")
        if measured.size:
            print(
                f"  {'Cell Measure':<20} {measured.min():>15.4e} "
                f"{measured.max():>15.4e} {measured.mean():>15.4e}"
            )
        print(
            f"  {'Vertex Neighbours':<20} {n_neighbors.min():>15d} "
            f"{n_neighbors.max():>15d} {n_neighbors.mean():>15.2f}"
        )
        print("=" * 80)

    def plot(
        self,
        filepath: str = "mesh_plot.png",
        cell_values: np.ndarray | None = None,
        show_cells: bool = False,
    ) -> None:
        """
        Saves a picture of a 2D mesh, optionally shaded by a cell field.

        Args:
            filepath (str): Output image path.
            cell_values (np.ndarray, optional): One value per cell in [0, 1],
                e.g. a VOF field.
            show_cells (bool): Whether to label cells with their index.
        """
        if self.dimension != 2:
            print("Warning: Plotting is currently supported only for 2D meshes.")
            return

        from ..common.utility import plot_mesh

        fig, ax = plt.subplots(figsize=(10, 8))
        plot_mesh(
            ax,
            self.node_coords,
            self.cell_node_connectivity,
            show_cells=show_cells,
            cell_values=cell_values,
            title="Mesh",
        )
        fig.savefig(filepath, dpi=200, bbox_inches="tight")
        plt.close(fig)
        print(f"Mesh plot saved to: {filepath}")

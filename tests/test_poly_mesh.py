import os
import unittest
import numpy as np

from vof_reinit.errors import UnsupportedTopologyError
from vof_reinit.polymesh import poly_mesh
from vof_reinit.polymesh.poly_mesh import PolyMesh
from vof_reinit.topology import Topology
from tests.common_meshes import create_unit_hex_mesh, create_unit_triangle_mesh


class TestPolyMesh(unittest.TestCase):
    """Unit tests for the PolyMesh class based on a structured mesh."""

    @classmethod
    def setUpClass(cls):
        """Set up a structured quad mesh for all tests."""
        cls.output_dir = "results/polymesh"
        os.makedirs(cls.output_dir, exist_ok=True)

        cls.nx, cls.ny = 5, 4
        cls.mesh = PolyMesh.create_structured_quad_mesh(cls.nx, cls.ny)

    def test_creation_and_properties(self):
        """Test creating a mesh and its basic properties."""
        self.assertIsInstance(self.mesh, PolyMesh)
        self.assertEqual(self.mesh.dimension, 2)
        self.assertEqual(self.mesh.n_nodes, (self.nx + 1) * (self.ny + 1))
        self.assertEqual(self.mesh.n_cells, self.nx * self.ny)
        self.assertEqual(
            self.mesh.node_coords.shape, ((self.nx + 1) * (self.ny + 1), 3)
        )
        self.assertEqual(len(self.mesh.cell_topologies), self.nx * self.ny)
        self.assertEqual(set(self.mesh.cell_topologies), {Topology.QUADRILATERAL})
        self.assertTrue(self.mesh._is_analyzed)

    def test_geometric_properties(self):
        """Test centroids and cell measures."""
        self.assertEqual(self.mesh.cell_centroids.shape, (self.nx * self.ny, 3))
        np.testing.assert_allclose(self.mesh.cell_center(0), [0.5, 0.5, 0.0])
        np.testing.assert_allclose(self.mesh.cell_volumes, 1.0)
        self.assertAlmostEqual(self.mesh.cell_measure(7), 1.0)

    def test_cell_queries(self):
        self.assertEqual(self.mesh.cell_topology(3), Topology.QUADRILATERAL)
        self.assertEqual(self.mesh.cell_vertices(0), [0, 1, 7, 6])
        coords = self.mesh.cell_coordinates(0)
        self.assertEqual(coords.shape, (4, 2))
        np.testing.assert_allclose(coords[2], [1.0, 1.0])

    def test_vertex_sharing_neighbours(self):
        """Corner cells touch 3 cells, interior cells touch 8."""
        self.assertEqual(len(self.mesh.cell_neighbors_of(0)), 3)
        interior = 1 * self.nx + 1
        self.assertEqual(len(self.mesh.cell_neighbors_of(interior)), 8)
        self.assertNotIn(interior, self.mesh.cell_neighbors_of(interior))
        self.assertEqual(
            self.mesh.cell_node_incidence.shape, (self.mesh.n_cells, self.mesh.n_nodes)
        )

    def test_vertex_cells(self):
        interior_node = 1 * (self.nx + 1) + 1
        self.assertEqual(self.mesh.vertex_cells(interior_node).tolist(), [0, 1, 5, 6])
        self.assertEqual(self.mesh.vertex_cells(0).tolist(), [0])

    def test_custom_bounds(self):
        mesh = PolyMesh.create_structured_quad_mesh(4, 2, (-1.0, 0.0), (1.0, 0.5))
        np.testing.assert_allclose(mesh.cell_volumes, 0.125)
        np.testing.assert_allclose(np.min(mesh.node_coords, axis=0), [-1.0, 0.0, 0.0])

    def test_reporting_and_plot(self):
        self.mesh.print_summary()
        filepath = os.path.join(self.output_dir, "quad_mesh.png")
        self.mesh.plot(filepath, cell_values=np.linspace(0.0, 1.0, self.mesh.n_cells))
        self.assertTrue(os.path.exists(filepath))


class TestFromArrays(unittest.TestCase):

    def test_triangles(self):
        mesh = create_unit_triangle_mesh(2)
        self.assertEqual(mesh.n_cells, 8)
        self.assertAlmostEqual(float(np.sum(mesh.cell_volumes)), 1.0)
        self.assertEqual(mesh.cell_topology(0), Topology.TRIANGLE)

    def test_hexahedra(self):
        mesh = create_unit_hex_mesh(2)
        self.assertEqual(mesh.dimension, 3)
        np.testing.assert_allclose(mesh.cell_volumes, 0.125)
        self.assertEqual(len(mesh.cell_neighbors_of(0)), 7)

    def test_mixed_topologies(self):
        nodes = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0], [2.0, 0.5]]
        cells = [[0, 1, 2, 3], [1, 4, 2]]
        mesh = PolyMesh.from_arrays(
            nodes, cells, [Topology.QUADRILATERAL, Topology.TRIANGLE]
        )
        np.testing.assert_allclose(mesh.cell_volumes, [1.0, 0.5])
        self.assertEqual(mesh.cell_topology(1), Topology.TRIANGLE)
        self.assertEqual(mesh.cell_neighbors_of(1).tolist(), [0])

    def test_wrong_vertex_count(self):
        with self.assertRaises(ValueError):
            PolyMesh.from_arrays(
                [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], [[0, 1]], Topology.TRIANGLE
            )

    def test_empty_mesh(self):
        with self.assertRaises(RuntimeError):
            PolyMesh().analyze_mesh()

    def test_element_names(self):
        self.assertEqual(
            Topology.from_element_name("Hexahedron 8"), Topology.HEXAHEDRON
        )
        with self.assertRaises(UnsupportedTopologyError):
            Topology.from_element_name("Triangle 6")


@unittest.skipIf(poly_mesh.gmsh is None, "Gmsh Python API is not available.")
class TestReadGmsh(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        gmsh = poly_mesh.gmsh
        cls.output_dir = "results/polymesh"
        os.makedirs(cls.output_dir, exist_ok=True)
        cls.msh_file = os.path.join(cls.output_dir, "unit_square.msh")

        gmsh.initialize()
        gmsh.option.setNumber("General.Verbosity", 0)
        try:
            gmsh.model.add("unit_square")
            gmsh.model.occ.addRectangle(0.0, 0.0, 0.0, 1.0, 1.0)
            gmsh.model.occ.synchronize()
            gmsh.option.setNumber("Mesh.MeshSizeMax", 0.25)
            gmsh.model.mesh.generate(2)
            gmsh.write(cls.msh_file)
        finally:
            gmsh.finalize()

    def test_from_gmsh(self):
        mesh = PolyMesh.from_gmsh(self.msh_file)
        self.assertEqual(mesh.dimension, 2)
        self.assertGreater(mesh.n_cells, 0)
        self.assertAlmostEqual(float(np.sum(mesh.cell_volumes)), 1.0, places=10)
        self.assertEqual(mesh.cell_topology(0), Topology.TRIANGLE)


if __name__ == "__main__":
    unittest.main()

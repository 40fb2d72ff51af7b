import unittest
import numpy as np

from vof_reinit.levelset.reconstruct import (
    LinearInterfaceReconstructor,
    cell_value_gradient,
    vertex_level_set_from_function,
    vertex_level_set_from_normal,
    vof_from_function,
    vof_from_plane,
)
from vof_reinit.common.utility import polygon_area
from vof_reinit.levelset.vof_kernel import compute_vof
from vof_reinit.topology import Topology
from tests.common_meshes import (
    DISTORTED_CELLS,
    REFERENCE_CELLS,
    create_unit_quad_mesh,
    plane_level_set,
)


class TestPlanarValues(unittest.TestCase):

    def test_values_from_normal(self):
        coords = REFERENCE_CELLS[Topology.QUADRILATERAL]
        values = vertex_level_set_from_normal(
            coords, [0.5, 0.5, 0.0], 0.1, [1.0, 0.0, 0.0]
        )
        np.testing.assert_allclose(values, [-0.4, 0.6, 0.6, -0.4])

    def test_round_trip(self):
        """Centre value and normal are recovered from the vertex values."""
        rng = np.random.default_rng(42)
        for topo, coords in DISTORTED_CELLS.items():
            dim = coords.shape[1]
            center = coords.mean(axis=0)
            for _ in range(5):
                normal = rng.normal(size=dim)
                normal /= np.linalg.norm(normal)
                c0 = rng.uniform(-0.3, 0.3)
                values = vertex_level_set_from_normal(coords, center, c0, normal)
                c0_back, grad = cell_value_gradient(coords, values, center)
                with self.subTest(topology=topo):
                    self.assertAlmostEqual(c0_back, c0, delta=1e-10)
                    np.testing.assert_allclose(grad, normal, atol=1e-10)

    def test_plane_vof_on_distorted_cells(self):
        """Planes with a known split of each distorted cell."""
        cells = DISTORTED_CELLS

        # Centrally symmetric cells are halved by any plane through the centre
        for topo in (Topology.SEGMENT, Topology.HEXAHEDRON):
            coords = cells[topo]
            normal = np.ones(coords.shape[1]) / np.sqrt(coords.shape[1])
            res = vof_from_plane(topo, coords, coords.mean(axis=0), 0.0, normal)
            with self.subTest(topology=topo):
                self.assertAlmostEqual(res.vof, 0.5, delta=1e-10)

        # A median of the triangle halves it
        tri = cells[Topology.TRIANGLE]
        median = 0.5 * (tri[1] + tri[2]) - tri[0]
        normal = np.array([-median[1], median[0]])
        res = vof_from_plane(Topology.TRIANGLE, tri, tri[0], 0.0, normal)
        self.assertAlmostEqual(res.vof, 0.5, delta=1e-10)

        # So does the plane through an edge and the midpoint of the opposite edge
        tet = cells[Topology.TETRAHEDRON]
        normal = np.cross(tet[1] - tet[0], 0.5 * (tet[2] + tet[3]) - tet[0])
        res = vof_from_plane(Topology.TETRAHEDRON, tet, tet[0], 0.0, normal)
        self.assertAlmostEqual(res.vof, 0.5, delta=1e-10)

        # The diagonal 0-2 splits the quadrilateral into two triangles
        quad = cells[Topology.QUADRILATERAL]
        diagonal = quad[2] - quad[0]
        normal = np.array([-diagonal[1], diagonal[0]])
        res = vof_from_plane(Topology.QUADRILATERAL, quad, quad[0], 0.0, normal)
        side_1 = polygon_area(quad[[0, 1, 2]])
        side_3 = polygon_area(quad[[0, 2, 3]])
        below = side_1 if np.dot(quad[1] - quad[0], normal) < 0.0 else side_3
        self.assertAlmostEqual(res.vof, below / (side_1 + side_3), delta=1e-10)

    def test_values_from_function(self):
        coords = DISTORTED_CELLS[Topology.TETRAHEDRON]
        phi = plane_level_set([0.0, 0.0, 1.0], 0.5)
        values = vertex_level_set_from_function(coords, phi)
        np.testing.assert_allclose(values, coords[:, 2] - 0.5)

    def test_function_receives_dimension_and_time(self):
        seen = []

        def phi(point, dim, time):
            seen.append((dim, time))
            return 0.0

        vertex_level_set_from_function(REFERENCE_CELLS[Topology.TRIANGLE], phi, 2.5)
        self.assertEqual(seen, [(2, 2.5)] * 3)


class TestVOFHelpers(unittest.TestCase):

    def test_vof_from_plane_matches_kernel(self):
        coords = REFERENCE_CELLS[Topology.HEXAHEDRON]
        center = coords.mean(axis=0)
        res = vof_from_plane(
            Topology.HEXAHEDRON, coords, center, 0.25, [0.0, 0.0, 1.0]
        )
        self.assertAlmostEqual(res.vof, 0.25, places=14)

    def test_vof_from_function(self):
        coords = REFERENCE_CELLS[Topology.QUADRILATERAL]
        res = vof_from_function(
            Topology.QUADRILATERAL, coords, plane_level_set([0.0, 1.0], 0.2)
        )
        expected = compute_vof(Topology.QUADRILATERAL, coords, coords[:, 1] - 0.2)
        self.assertAlmostEqual(res.vof, expected.vof)
        self.assertAlmostEqual(res.vof, 0.2, places=14)


class TestLinearInterfaceReconstructor(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.mesh = create_unit_quad_mesh(4)
        cls.reconstructor = LinearInterfaceReconstructor(cls.mesh)

    def test_from_normal_is_centred(self):
        cell = 5
        values = self.reconstructor.from_normal(cell, 0.0, [0.0, 1.0, 0.0])
        self.assertAlmostEqual(float(np.mean(values)), 0.0)
        c0, grad = self.reconstructor.center_value_gradient(cell, values)
        self.assertAlmostEqual(c0, 0.0)
        np.testing.assert_allclose(grad, [0.0, 1.0], atol=1e-12)

    def test_from_function_and_vof(self):
        phi = plane_level_set([1.0, 0.0], 0.3)
        cell = 1  # x in [0.25, 0.5]
        values = self.reconstructor.from_function(cell, phi)
        coords = self.mesh.cell_coordinates(cell)
        np.testing.assert_allclose(values, coords[:, 0] - 0.3)
        self.assertAlmostEqual(self.reconstructor.vof_from_function(cell, phi).vof, 0.2)


if __name__ == "__main__":
    unittest.main()

import unittest
import numpy as np

from vof_reinit.errors import DegenerateGeometryError, MaxIterationsExceeded
from vof_reinit.levelset.cell_solver import CellLevelSetSolver, solve_for_target_vof
from vof_reinit.levelset.reconstruct import cell_value_gradient
from vof_reinit.levelset.vof_kernel import compute_vof
from vof_reinit.topology import Topology
from tests.common_meshes import DISTORTED_CELLS, REFERENCE_CELLS


class TestCellLevelSetSolver(unittest.TestCase):
    """The offset iteration reproduces the requested VOF."""

    def test_fixed_point_all_topologies(self):
        rng = np.random.default_rng(3)
        solver = CellLevelSetSolver()
        for topo, coords in DISTORTED_CELLS.items():
            dim = coords.shape[1]
            center = coords.mean(axis=0)
            for target in (0.05, 0.3, 0.5, 0.8, 0.97):
                normal = np.zeros(3)
                normal[:dim] = rng.normal(size=dim)
                normal /= np.linalg.norm(normal)
                values = solver.solve(topo, coords, center, normal, target)
                res = compute_vof(topo, coords, values)
                with self.subTest(topology=topo, target=target):
                    self.assertLessEqual(abs(res.vof - target), 1e-8)
                    # Orientation is unchanged, only the offset moves
                    _, grad = cell_value_gradient(coords, values, center)
                    np.testing.assert_allclose(grad, normal[:dim], atol=1e-10)

    def test_known_offset(self):
        coords = REFERENCE_CELLS[Topology.QUADRILATERAL]
        values = solve_for_target_vof(
            Topology.QUADRILATERAL, coords, [0.5, 0.5], [1.0, 0.0], 0.3
        )
        np.testing.assert_allclose(values, coords[:, 0] - 0.3, atol=1e-8)

    def test_iterations_recorded(self):
        solver = CellLevelSetSolver()
        coords = REFERENCE_CELLS[Topology.SEGMENT]
        solver.solve(Topology.SEGMENT, coords, [0.5], [1.0], 0.5)
        self.assertEqual(solver.iterations, 0)
        solver.solve(Topology.SEGMENT, coords, [0.5], [1.0], 0.2)
        self.assertGreater(solver.iterations, 0)

    def test_invalid_target(self):
        coords = REFERENCE_CELLS[Topology.TRIANGLE]
        for target in (0.0, 1.0, -0.1, 1.5):
            with self.assertRaises(ValueError):
                solve_for_target_vof(
                    Topology.TRIANGLE, coords, [1 / 3, 1 / 3], [1.0, 0.0], target
                )

    def test_zero_normal(self):
        coords = REFERENCE_CELLS[Topology.TRIANGLE]
        with self.assertRaises(DegenerateGeometryError) as ctx:
            CellLevelSetSolver().solve(
                Topology.TRIANGLE, coords, [1 / 3, 1 / 3], [0.0, 0.0], 0.5, cell=12
            )
        self.assertEqual(ctx.exception.cell, 12)

    def test_iteration_ceiling(self):
        solver = CellLevelSetSolver(max_iterations=2)
        coords = REFERENCE_CELLS[Topology.QUADRILATERAL]
        with self.assertRaises(MaxIterationsExceeded) as ctx:
            solver.solve(Topology.QUADRILATERAL, coords, [0.5, 0.5], [1.0, 0.0], 0.1)
        self.assertEqual(ctx.exception.iterations, 2)
        self.assertIsNone(ctx.exception.result)

    def test_invalid_parameters(self):
        with self.assertRaises(ValueError):
            CellLevelSetSolver(damping=0.0)
        with self.assertRaises(ValueError):
            CellLevelSetSolver(tolerance=-1.0)
        with self.assertRaises(ValueError):
            CellLevelSetSolver(max_iterations=0)


if __name__ == "__main__":
    unittest.main()

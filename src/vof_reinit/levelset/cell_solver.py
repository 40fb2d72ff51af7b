# -*- coding: utf-8 -*-
"""
Vertex level-set values that reproduce a target VOF in a single cell.

The interface orientation is fixed by the supplied unit normal; only the
offset of the plane is solved for. Starting from a plane through the cell
centre, the offset is corrected with a damped Newton step

    offset = damping * (target - vof) * cell_measure / interface_measure

until the VOF error drops below the tolerance. Without damping the step
tends to overshoot and push the interface out of the cell.

Classes:
    CellLevelSetSolver: The damped offset iteration.
"""
import numpy as np

from ..errors import DegenerateGeometryError, MaxIterationsExceeded
from ..topology import Topology
from .reconstruct import vertex_level_set_from_normal
from .vof_kernel import compute_vof

DEFAULT_DAMPING = 0.5
DEFAULT_TOLERANCE = 1e-8
DEFAULT_MAX_ITERATIONS = 1000

# Interface measures below this fraction of the cell scale count as zero.
INTERFACE_TOLERANCE = 1e-12


class CellLevelSetSolver:
    """
    Solves for the planar vertex values matching a target VOF.

    Attributes:
        damping (float): Fraction of the Newton step applied per iteration.
        tolerance (float): Absolute VOF error at which the solve stops.
        max_iterations (int): Iteration ceiling for a single cell.
        iterations (int): Iterations used by the most recent solve.
    """

    def __init__(
        self,
        damping: float = DEFAULT_DAMPING,
        tolerance: float = DEFAULT_TOLERANCE,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        if not 0.0 < damping <= 1.0:
            raise ValueError("damping must lie in (0, 1].")
        if tolerance <= 0.0:
            raise ValueError("tolerance must be positive.")
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1.")
        self.damping = damping
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.iterations = 0

    def solve(
        self,
        topology: Topology,
        coords,
        center,
        normal,
        target_vof: float,
        cell: int | None = None,
    ) -> np.ndarray:
        """
        Returns vertex level-set values whose VOF matches `target_vof`.

        Args:
            topology (Topology): The cell shape.
            coords (array-like): Vertex coordinates in canonical order.
            center (array-like): The cell centre.
            normal (array-like): Unit normal, pointing from the negative
                (VOF = 1) phase to the positive phase.
            target_vof (float): Desired volume fraction, strictly in (0, 1).
            cell (int, optional): Cell index, only used in error messages.

        Raises:
            ValueError: If `target_vof` is outside (0, 1).
            DegenerateGeometryError: If the normal or the interface measure
                vanishes, or the iteration produces non-finite values.
            MaxIterationsExceeded: If the tolerance is not met in
                `max_iterations` steps.
        """
        if not 0.0 < target_vof < 1.0:
            raise ValueError(f"Target VOF must lie in (0, 1), got {target_vof}.")
        if np.linalg.norm(normal) < INTERFACE_TOLERANCE:
            raise DegenerateGeometryError(
                f"Cell {cell}: interface normal has zero length.", cell
            )

        values = vertex_level_set_from_normal(coords, center, 0.0, normal)
        vof, area, volume = compute_vof(topology, coords, values)
        dim = topology.dimension
        min_area = INTERFACE_TOLERANCE * volume ** ((dim - 1) / dim)
        vof_error = target_vof - vof

        self.iterations = 0
        while abs(vof_error) > self.tolerance:
            if self.iterations >= self.max_iterations:
                raise MaxIterationsExceeded(
                    f"Cell {cell}: VOF error {vof_error:.3e} after "
                    f"{self.iterations} iterations.",
                    self.iterations,
                )
            if area <= min_area:
                raise DegenerateGeometryError(
                    f"Cell {cell}: interface measure {area:.3e} is too small "
                    "to correct the VOF.",
                    cell,
                )

            offset = self.damping * vof_error * volume / area
            values -= offset
            vof, area, _ = compute_vof(topology, coords, values, with_measure=False)
            vof_error = target_vof - vof
            self.iterations += 1

        if not np.all(np.isfinite(values)):
            raise DegenerateGeometryError(
                f"Cell {cell}: solve produced non-finite level-set values.", cell
            )
        return values


def solve_for_target_vof(
    topology: Topology, coords, center, normal, target_vof: float, **kwargs
) -> np.ndarray:
    """Convenience wrapper around `CellLevelSetSolver.solve`."""
    return CellLevelSetSolver(**kwargs).solve(
        topology, coords, center, normal, target_vof
    )

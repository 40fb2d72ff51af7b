# -*- coding: utf-8 -*-
"""
Reinitialization of a vertex level-set field from a cell VOF field.

The driver works on cut cells only, i.e. cells with
``eps < VOF < 1 - eps``:

1. Init: classify cut cells, set every level-set vertex to the unset
   sentinel and reset the contribution counters.
2. Initial pass: normals from ``-grad(VOF)``; each cut cell is solved for
   its VOF and its vertex values are merged into the field.
3. Loop: normals from the current level set, ``+grad(phi)``, are computed
   for every cut cell, then every cut cell is solved and merged again with
   counters reset. The pass stops the loop once the largest vertex change
   (infinity norm over all vertices) is at or below the field tolerance.

Vertices that belong to no cut cell keep `UNSET_LEVEL_SET`; extending the
field away from the interface is left to the caller.

Classes:
    ReinitializationConfig: Tolerances, damping and iteration ceilings.
    ReinitializationResult: Outcome and diagnostics of one run.
    ReinitializationDriver: Runs the state machine above.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, TYPE_CHECKING

import numpy as np

from ..errors import DegenerateGeometryError, MaxIterationsExceeded
from ..fields import FieldLocation
from .aggregator import SignConflict, VertexAggregator
from .cell_solver import CellLevelSetSolver
from .interfaces import FieldAccessor, GradientOperator, TopologyProvider
from .normals import LeastSquaresGradient, NormalEstimator
from .reporting import format_reinitialization_summary

if TYPE_CHECKING:
    from ..polymesh.poly_mesh import PolyMesh

logger = logging.getLogger(__name__)

UNSET_LEVEL_SET = float(np.finfo(float).max)

# Cell mask states
IGNORED_CELL = -1
CUT_CELL = 0
SKIPPED_CELL = 1


@dataclass(frozen=True)
class ReinitializationConfig:
    """
    Parameters of a reinitialization run.

    Attributes:
        cut_cell_epsilon (float): A cell is cut when its VOF lies in
            ``(eps, 1 - eps)``. Must lie in (0, 0.5).
        damping (float): Step damping of the per-cell offset iteration.
        cell_tolerance (float): Per-cell VOF tolerance.
        field_tolerance (float): Largest vertex change at convergence.
        max_passes (int): Ceiling on the number of loop passes.
        max_cell_iterations (int): Ceiling on the per-cell iterations.
        skip_degenerate_cells (bool): Drop cells raising
            `DegenerateGeometryError` from the rest of the run (and report
            them) instead of aborting.
    """

    cut_cell_epsilon: float = 1e-8
    damping: float = 0.5
    cell_tolerance: float = 1e-8
    field_tolerance: float = 1e-6
    max_passes: int = 200
    max_cell_iterations: int = 1000
    skip_degenerate_cells: bool = False

    def __post_init__(self) -> None:
        if not 0.0 < self.cut_cell_epsilon < 0.5:
            raise ValueError("cut_cell_epsilon must lie in (0, 0.5).")
        if not 0.0 < self.damping <= 1.0:
            raise ValueError("damping must lie in (0, 1].")
        if self.cell_tolerance <= 0.0 or self.field_tolerance <= 0.0:
            raise ValueError("Tolerances must be positive.")
        if self.max_passes < 1 or self.max_cell_iterations < 1:
            raise ValueError("Iteration ceilings must be at least 1.")


@dataclass
class ReinitializationResult:
    """
    Outcome of a reinitialization run.

    Attributes:
        converged (bool): Whether the field tolerance was met.
        n_passes (int): Number of loop passes after the initial pass.
        history (List[float]): Largest vertex change of each loop pass.
        cut_cells (np.ndarray): Indices of the cut cells.
        cut_vertices (np.ndarray): Indices of the vertices of cut cells.
        sign_conflicts (List[SignConflict]): Vertices that received
            proposals of opposite sign within a pass.
        skipped_cells (List[int]): Degenerate cells skipped in any pass.
    """

    converged: bool = False
    n_passes: int = 0
    history: List[float] = field(default_factory=list)
    cut_cells: np.ndarray = field(default_factory=lambda: np.array([], dtype=int))
    cut_vertices: np.ndarray = field(default_factory=lambda: np.array([], dtype=int))
    sign_conflicts: List[SignConflict] = field(default_factory=list)
    skipped_cells: List[int] = field(default_factory=list)

    @property
    def final_change(self) -> float:
        """Largest vertex change of the last pass (inf before any loop pass)."""
        return self.history[-1] if self.history else float("inf")

    def print_summary(self) -> None:
        """Prints a formatted report of the run."""
        print(format_reinitialization_summary(self))


@dataclass
class ScratchArena:
    """
    Per-call working storage.

    Attributes:
        cell_mask (np.ndarray): `CUT_CELL`, `IGNORED_CELL` or `SKIPPED_CELL`
            per cell. Only `CUT_CELL` cells are solved.
        vertex_mask (np.ndarray): True for vertices of cut cells.
        counters (np.ndarray): Contribution counters per vertex.
        previous (np.ndarray): Level-set values of the previous pass.
    """

    cell_mask: np.ndarray
    vertex_mask: np.ndarray
    counters: np.ndarray
    previous: np.ndarray

    def release(self) -> None:
        """Drops all buffers."""
        self.cell_mask = np.array([], dtype=int)
        self.vertex_mask = np.array([], dtype=bool)
        self.counters = np.array([], dtype=int)
        self.previous = np.array([])


@contextmanager
def scratch_arena(n_cells: int, n_vertices: int) -> Iterator[ScratchArena]:
    """Acquires the working buffers of one run and releases them on exit."""
    arena = ScratchArena(
        cell_mask=np.full(n_cells, IGNORED_CELL, dtype=int),
        vertex_mask=np.zeros(n_vertices, dtype=bool),
        counters=np.zeros(n_vertices, dtype=int),
        previous=np.zeros(n_vertices),
    )
    try:
        yield arena
    finally:
        arena.release()


def classify_cut_cells(vof_values, epsilon: float = 1e-8) -> np.ndarray:
    """Indices of cells with ``epsilon < VOF < 1 - epsilon``."""
    if not 0.0 < epsilon < 0.5:
        raise ValueError("epsilon must lie in (0, 0.5).")
    vof = np.asarray(vof_values, dtype=float)
    return np.flatnonzero((vof > epsilon) & (vof < 1.0 - epsilon))


def _validate_fields(
    mesh: TopologyProvider, vof_field: FieldAccessor, level_set_field: FieldAccessor
) -> None:
    if vof_field.location is not FieldLocation.CELL:
        raise ValueError("The VOF field must be cell valued.")
    if level_set_field.location is not FieldLocation.VERTEX:
        raise ValueError("The level-set field must be vertex valued.")
    if len(vof_field) != mesh.n_cells:
        raise ValueError(
            f"VOF field has {len(vof_field)} values for {mesh.n_cells} cells."
        )
    if len(level_set_field) != mesh.n_nodes:
        raise ValueError(
            f"Level-set field has {len(level_set_field)} values "
            f"for {mesh.n_nodes} vertices."
        )
    vof = np.asarray(vof_field.values, dtype=float)
    if not np.all(np.isfinite(vof)) or np.any(vof < 0.0) or np.any(vof > 1.0):
        raise ValueError("VOF values must be finite and lie in [0, 1].")


class ReinitializationDriver:
    """
    Builds a vertex level-set field consistent with a cell VOF field.

    Attributes:
        mesh (TopologyProvider): The mesh.
        config (ReinitializationConfig): Run parameters.
        normal_estimator (NormalEstimator): Normals from field gradients.
        solver (CellLevelSetSolver): Per-cell offset iteration.
    """

    def __init__(
        self,
        mesh: "TopologyProvider | PolyMesh",
        gradient_operator: GradientOperator | None = None,
        config: ReinitializationConfig | None = None,
    ) -> None:
        if gradient_operator is None:
            gradient_operator = LeastSquaresGradient(mesh)
        self.mesh = mesh
        self.config = config or ReinitializationConfig()
        self.normal_estimator = NormalEstimator(gradient_operator, mesh.dimension)
        self.solver = CellLevelSetSolver(
            damping=self.config.damping,
            tolerance=self.config.cell_tolerance,
            max_iterations=self.config.max_cell_iterations,
        )

    def run(
        self, vof_field: FieldAccessor, level_set_field: FieldAccessor
    ) -> ReinitializationResult:
        """
        Overwrites `level_set_field` at every vertex of a cut cell.

        Args:
            vof_field (FieldAccessor): Cell-valued VOF, read only.
            level_set_field (FieldAccessor): Vertex-valued level set, written
                in place. Vertices outside cut cells are set to
                `UNSET_LEVEL_SET`.

        Returns:
            ReinitializationResult: Convergence data and diagnostics.

        Raises:
            ValueError: On mismatched or out-of-range fields.
            UnsupportedTopologyError: If a cut cell has no VOF formula.
            DegenerateGeometryError: If a cut cell cannot be solved and
                `skip_degenerate_cells` is False.
            MaxIterationsExceeded: If `max_passes` loop passes do not
                converge; its `result` holds the last state.
        """
        _validate_fields(self.mesh, vof_field, level_set_field)
        result = ReinitializationResult()
        cfg = self.config

        with scratch_arena(self.mesh.n_cells, self.mesh.n_nodes) as arena:
            # --- Init ---
            cut_cells = classify_cut_cells(vof_field.values, cfg.cut_cell_epsilon)
            arena.cell_mask[cut_cells] = CUT_CELL
            for cell in cut_cells:
                arena.vertex_mask[list(self.mesh.cell_vertices(cell))] = True
            result.cut_cells = cut_cells
            result.cut_vertices = np.flatnonzero(arena.vertex_mask)

            level_set_field.values[:] = UNSET_LEVEL_SET
            aggregator = VertexAggregator(level_set_field.values, arena.counters)
            logger.info(
                "Reinitializing level set '%s' from %d cut cells (%d vertices).",
                getattr(level_set_field, "name", "level_set"),
                cut_cells.size,
                result.cut_vertices.size,
            )
            if cut_cells.size == 0:
                result.converged = True
                return result

            # --- Initial pass with VOF normals ---
            normals = self._normals(cut_cells, vof_field, False, arena, result)
            self._solve_pass(
                cut_cells, normals, vof_field, aggregator, 0, arena, result
            )
            arena.previous[:] = level_set_field.values

            # --- Loop with level-set normals ---
            while True:
                if result.n_passes >= cfg.max_passes:
                    result.sign_conflicts = list(aggregator.conflicts)
                    raise MaxIterationsExceeded(
                        f"Level set did not converge in {cfg.max_passes} passes "
                        f"(last change {result.final_change:.3e}).",
                        result.n_passes,
                        result,
                    )

                pass_index = result.n_passes + 1
                normals = self._normals(cut_cells, level_set_field, True, arena, result)
                self._solve_pass(
                    cut_cells, normals, vof_field, aggregator, pass_index, arena, result
                )

                max_change = float(
                    np.max(np.abs(level_set_field.values - arena.previous))
                )
                arena.previous[:] = level_set_field.values
                result.history.append(max_change)
                result.n_passes = pass_index
                logger.info("Pass %d: max level-set change %e", pass_index, max_change)

                if max_change <= cfg.field_tolerance:
                    result.converged = True
                    break

            result.sign_conflicts = list(aggregator.conflicts)

        if result.sign_conflicts:
            logger.warning(
                "%d sign conflicts at shared vertices during reinitialization.",
                len(result.sign_conflicts),
            )
        return result

    def _normals(
        self,
        cut_cells: np.ndarray,
        field: FieldAccessor,
        from_level_set: bool,
        arena: ScratchArena,
        result: ReinitializationResult,
    ) -> List[np.ndarray | None]:
        """Normals of all cut cells, computed before any vertex is updated."""
        estimate = (
            self.normal_estimator.level_set_normal
            if from_level_set
            else self.normal_estimator.vof_normal
        )
        normals: List[np.ndarray | None] = []
        for cell in cut_cells:
            cell = int(cell)
            if arena.cell_mask[cell] != CUT_CELL:
                normals.append(None)
                continue
            try:
                normals.append(estimate(field, cell))
            except DegenerateGeometryError:
                if not self.config.skip_degenerate_cells:
                    raise
                self._record_skip(cell, arena, result)
                normals.append(None)
        return normals

    def _solve_pass(
        self,
        cut_cells: np.ndarray,
        normals: List[np.ndarray | None],
        vof_field: FieldAccessor,
        aggregator: VertexAggregator,
        pass_index: int,
        arena: ScratchArena,
        result: ReinitializationResult,
    ) -> None:
        """Solves every cut cell against its VOF and merges the vertex values."""
        aggregator.reset(pass_index)
        for cell, normal in zip(cut_cells, normals):
            cell = int(cell)
            if arena.cell_mask[cell] != CUT_CELL:
                continue
            try:
                values = self.solver.solve(
                    self.mesh.cell_topology(cell),
                    self.mesh.cell_coordinates(cell),
                    self.mesh.cell_center(cell),
                    normal,
                    vof_field[cell],
                    cell=cell,
                )
            except DegenerateGeometryError:
                if not self.config.skip_degenerate_cells:
                    raise
                self._record_skip(cell, arena, result)
                continue
            aggregator.merge_cell(self.mesh.cell_vertices(cell), values)

    @staticmethod
    def _record_skip(
        cell: int, arena: ScratchArena, result: ReinitializationResult
    ) -> None:
        arena.cell_mask[cell] = SKIPPED_CELL
        result.skipped_cells.append(cell)
        logger.warning("Skipping degenerate cut cell %d.", cell)


def reinitialize(
    mesh: "TopologyProvider | PolyMesh",
    vof_field: FieldAccessor,
    level_set_field: FieldAccessor,
    gradient_operator: GradientOperator | None = None,
    config: ReinitializationConfig | None = None,
) -> ReinitializationResult:
    """Runs a `ReinitializationDriver` once; see `ReinitializationDriver.run`."""
    driver = ReinitializationDriver(mesh, gradient_operator, config)
    return driver.run(vof_field, level_set_field)

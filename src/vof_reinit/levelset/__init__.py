# -*- coding: utf-8 -*-
"""
This package rebuilds a signed level-set field at mesh vertices from a
volume-of-fluid (VOF) field at mesh cells.

Key modules:
- vof_kernel:   Closed-form VOF of a cell from its vertex level-set values.
- reconstruct:  Vertex values from a planar interface or analytic function.
- cell_solver:  Vertex values reproducing a target VOF in one cell.
- normals:      Interface normals from field gradients.
- aggregator:   Running-mean merge at vertices shared by several cells.
- reinitialize: The mesh-wide fixed-point driver.
- reporting:    Text reports of reinitialization runs.
- diagnostics:  Vertex data dumps and level-set plots.
"""

from .vof_kernel import VOFResult, compute_vof, cell_measure, SUPPORTED_TOPOLOGIES
from .reconstruct import (
    LinearInterfaceReconstructor,
    vertex_level_set_from_normal,
    vertex_level_set_from_function,
    cell_value_gradient,
    vof_from_function,
    vof_from_plane,
)
from .cell_solver import CellLevelSetSolver, solve_for_target_vof
from .normals import LeastSquaresGradient, NormalEstimator
from .aggregator import SignConflict, VertexAggregator
from .reinitialize import (
    UNSET_LEVEL_SET,
    ReinitializationConfig,
    ReinitializationDriver,
    ReinitializationResult,
    classify_cut_cells,
    reinitialize,
)
from .diagnostics import save_vertex_data, load_vertex_data, plot_level_set

__all__ = [
    "VOFResult",
    "compute_vof",
    "cell_measure",
    "SUPPORTED_TOPOLOGIES",
    "LinearInterfaceReconstructor",
    "vertex_level_set_from_normal",
    "vertex_level_set_from_function",
    "cell_value_gradient",
    "vof_from_function",
    "vof_from_plane",
    "CellLevelSetSolver",
    "solve_for_target_vof",
    "LeastSquaresGradient",
    "NormalEstimator",
    "SignConflict",
    "VertexAggregator",
    "UNSET_LEVEL_SET",
    "ReinitializationConfig",
    "ReinitializationDriver",
    "ReinitializationResult",
    "classify_cut_cells",
    "reinitialize",
    "save_vertex_data",
    "load_vertex_data",
    "plot_level_set",
]

# -*- coding: utf-8 -*-
"""
Closed-form volume fractions for linearly interpolated level-set values.

Given the vertex coordinates of a cell and the level-set value at each vertex,
the functions in this module return the fraction of the cell where the
level set is negative, the measure of the zero level inside the cell
(a point count in 1D, a length in 2D, an area in 3D) and the cell measure.

Each supported topology has its own formula:

- segment:       location of the single zero crossing.
- triangle:      corner fraction ``t_ab * t_ac`` of the isolated vertex.
- quadrilateral: boundary clipping at the edge crossings, vector shoelace area.
- tetrahedron:   corner fraction ``t_ab * t_ac * t_ad``, or a wedge split
                 into three tetrahedra when two vertices lie on each side.
- hexahedron:    six tetrahedra about the 0-6 diagonal.

Refer to "Quadrature rules for triangular and tetrahedral elements with
generalized functions" by Holdych, Noble and Secor, Int. J. Numer. Meth.
Engng 2008; 73:1310-1327 for the simplex corner formulas.

Vertices with a value of exactly zero belong to the positive phase.
"""
from typing import Callable, Dict, List, NamedTuple, Tuple

import numpy as np

from ..errors import UnsupportedTopologyError
from ..topology import Topology

Measures = Tuple[float, float, float]

# Tetrahedra (local hexahedron indices) sharing the 0-6 diagonal.
HEX_TETRAHEDRA = (
    (0, 1, 2, 6),
    (0, 2, 3, 6),
    (0, 3, 7, 6),
    (0, 7, 4, 6),
    (0, 4, 5, 6),
    (0, 5, 1, 6),
)


class VOFResult(NamedTuple):
    """Volume fraction, interface measure and (optionally) cell measure."""

    vof: float
    interface_measure: float
    cell_measure: float | None


def _as_points(coords) -> np.ndarray:
    """Returns vertex coordinates as an (n, 3) float array."""
    pts = np.asarray(coords, dtype=float)
    if pts.ndim == 1:
        pts = pts.reshape(-1, 1)
    if pts.shape[1] < 3:
        pts = np.hstack([pts, np.zeros((pts.shape[0], 3 - pts.shape[1]))])
    return pts


def _crossing(xa: np.ndarray, xb: np.ndarray, pa: float, pb: float) -> np.ndarray:
    """Zero crossing of the linear interpolant on the edge a-b."""
    return xa + (pa / (pa - pb)) * (xb - xa)


def _edge_fraction(pa: float, pb: float) -> float:
    """Distance from a to the zero crossing, as a fraction of the edge a-b."""
    return pa / (pa - pb)


def _triangle_area(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float:
    return 0.5 * float(np.linalg.norm(np.cross(b - a, c - a)))


def _tetrahedron_volume(a, b, c, d) -> float:
    return abs(float(np.dot(b - a, np.cross(c - a, d - a)))) / 6.0


def _polygon_area(points: List[np.ndarray]) -> float:
    """Area of a planar polygon embedded in 3D (vector shoelace formula)."""
    if len(points) < 3:
        return 0.0
    total = np.zeros(3)
    for k, p in enumerate(points):
        total += np.cross(p, points[(k + 1) % len(points)])
    return 0.5 * float(np.linalg.norm(total))


def _isolated_vertex(negative: np.ndarray) -> int:
    """Index of the only vertex whose sign differs from the others."""
    if np.count_nonzero(negative) == 1:
        return int(np.argmax(negative))
    return int(np.argmin(negative))


# =========================================================================
# Per-topology formulas
# =========================================================================


def segment_vof(coords: np.ndarray, values: np.ndarray) -> Measures:
    """VOF of a two-vertex segment."""
    x = _as_points(coords)
    length = float(np.linalg.norm(x[1] - x[0]))
    negative = values < 0.0
    if negative[0] == negative[1]:
        return (1.0 if negative[0] else 0.0), 0.0, length

    t = _edge_fraction(values[0], values[1])
    vof = t if negative[0] else 1.0 - t
    return vof, 1.0, length


def triangle_vof(coords: np.ndarray, values: np.ndarray) -> Measures:
    """VOF of a three-vertex triangle."""
    x = _as_points(coords)
    area = _triangle_area(x[0], x[1], x[2])
    negative = values < 0.0
    n_neg = int(np.count_nonzero(negative))
    if n_neg in (0, 3):
        return float(n_neg == 3), 0.0, area

    a = _isolated_vertex(negative)
    b, c = (a + 1) % 3, (a + 2) % 3
    corner = _edge_fraction(values[a], values[b]) * _edge_fraction(
        values[a], values[c]
    )
    p_ab = _crossing(x[a], x[b], values[a], values[b])
    p_ac = _crossing(x[a], x[c], values[a], values[c])
    interface = float(np.linalg.norm(p_ab - p_ac))

    vof = corner if negative[a] else 1.0 - corner
    return vof, interface, area


def quadrilateral_vof(coords: np.ndarray, values: np.ndarray) -> Measures:
    """
    VOF of a four-vertex quadrilateral.

    The cell boundary is walked once; negative vertices and edge crossings
    form the clipped polygon. Each chord from a crossing that leaves the
    negative region to the next crossing that re-enters it is part of the
    interface. For saddle sign patterns this joins the negative vertices
    through the cell.
    """
    x = _as_points(coords)
    area = _polygon_area([x[i] for i in range(4)])
    negative = values < 0.0
    n_neg = int(np.count_nonzero(negative))
    if n_neg in (0, 4):
        return float(n_neg == 4), 0.0, area

    clipped: List[np.ndarray] = []
    crossings: List[Tuple[np.ndarray, bool]] = []  # (point, leaves negative)
    for i in range(4):
        j = (i + 1) % 4
        if negative[i]:
            clipped.append(x[i])
        if negative[i] != negative[j]:
            p = _crossing(x[i], x[j], values[i], values[j])
            clipped.append(p)
            crossings.append((p, bool(negative[i])))

    interface = 0.0
    n_cross = len(crossings)
    for k, (p, leaves) in enumerate(crossings):
        if leaves:
            interface += float(np.linalg.norm(crossings[(k + 1) % n_cross][0] - p))

    return _polygon_area(clipped) / area, interface, area


def tetrahedron_vof(coords: np.ndarray, values: np.ndarray) -> Measures:
    """VOF of a four-vertex tetrahedron."""
    x = _as_points(coords)
    volume = _tetrahedron_volume(x[0], x[1], x[2], x[3])
    negative = values < 0.0
    n_neg = int(np.count_nonzero(negative))
    if n_neg in (0, 4):
        return float(n_neg == 4), 0.0, volume

    if n_neg != 2:
        a = _isolated_vertex(negative)
        others = [i for i in range(4) if i != a]
        corner = 1.0
        for b in others:
            corner *= _edge_fraction(values[a], values[b])
        p = [_crossing(x[a], x[b], values[a], values[b]) for b in others]
        interface = _triangle_area(p[0], p[1], p[2])
        vof = corner if negative[a] else 1.0 - corner
        return vof, interface, volume

    a, b = [i for i in range(4) if negative[i]]
    c, d = [i for i in range(4) if not negative[i]]
    p_ac = _crossing(x[a], x[c], values[a], values[c])
    p_ad = _crossing(x[a], x[d], values[a], values[d])
    p_bc = _crossing(x[b], x[c], values[b], values[c])
    p_bd = _crossing(x[b], x[d], values[b], values[d])

    # Wedge (a, p_ac, p_ad) -> (b, p_bc, p_bd)
    negative_volume = (
        _tetrahedron_volume(x[a], p_ac, p_ad, x[b])
        + _tetrahedron_volume(p_ac, p_ad, x[b], p_bc)
        + _tetrahedron_volume(p_ad, x[b], p_bc, p_bd)
    )
    interface = _triangle_area(p_ac, p_bc, p_bd) + _triangle_area(p_ac, p_bd, p_ad)
    return negative_volume / volume, interface, volume


def hexahedron_vof(coords: np.ndarray, values: np.ndarray) -> Measures:
    """VOF of an eight-vertex hexahedron."""
    x = _as_points(coords)
    negative_volume = 0.0
    interface = 0.0
    volume = 0.0
    for tet in HEX_TETRAHEDRA:
        idx = list(tet)
        vof, area, vol = tetrahedron_vof(x[idx], values[idx])
        negative_volume += vof * vol
        interface += area
        volume += vol
    return negative_volume / volume, interface, volume


_KERNELS: Dict[Topology, Callable[[np.ndarray, np.ndarray], Measures]] = {
    Topology.SEGMENT: segment_vof,
    Topology.TRIANGLE: triangle_vof,
    Topology.QUADRILATERAL: quadrilateral_vof,
    Topology.TETRAHEDRON: tetrahedron_vof,
    Topology.HEXAHEDRON: hexahedron_vof,
}

SUPPORTED_TOPOLOGIES = tuple(_KERNELS)


# =========================================================================
# Public API
# =========================================================================


def _kernel_for(topology: Topology) -> Callable[[np.ndarray, np.ndarray], Measures]:
    """Single dispatch point from topology to formula."""
    try:
        return _KERNELS[topology]
    except (KeyError, TypeError) as e:
        raise UnsupportedTopologyError(
            f"No VOF formula for cell topology {topology!r}."
        ) from e


def compute_vof(
    topology: Topology, coords, values, with_measure: bool = True
) -> VOFResult:
    """
    Computes the volume fraction of a cell from its vertex level-set values.

    Args:
        topology (Topology): The cell shape.
        coords (array-like): Vertex coordinates in canonical order,
            shape (n_vertices, dim) with dim in 1..3.
        values (array-like): Level-set value at each vertex.
        with_measure (bool): Whether to report the cell measure.

    Returns:
        VOFResult: `vof` is the fraction of the cell where the level set is
        negative, `interface_measure` the measure of the zero level inside
        the cell and `cell_measure` the length, area or volume of the cell
        (None when `with_measure` is False).

    Raises:
        UnsupportedTopologyError: For shapes without a formula.
        ValueError: If the number of vertices does not match the topology.
    """
    kernel = _kernel_for(topology)
    values = np.asarray(values, dtype=float).ravel()
    n_coords = len(coords)
    if n_coords != topology.num_vertices or values.size != topology.num_vertices:
        raise ValueError(
            f"A {topology.value} cell needs {topology.num_vertices} vertices, "
            f"got {n_coords} coordinates and {values.size} values."
        )
    vof, interface, measure = kernel(coords, values)
    return VOFResult(
        float(vof), float(interface), float(measure) if with_measure else None
    )


def cell_measure(topology: Topology, coords) -> float:
    """Length (1D), area (2D) or volume (3D) of a cell."""
    return compute_vof(topology, coords, np.ones(topology.num_vertices)).cell_measure

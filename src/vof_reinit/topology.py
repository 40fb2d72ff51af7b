# -*- coding: utf-8 -*-
"""
Cell topologies and their canonical vertex layouts.

Vertex ordering follows the Gmsh convention used by the mesh reader:

- Segment:       0 -- 1
- Triangle:      0, 1, 2 counter-clockwise
- Quadrilateral: 0, 1, 2, 3 counter-clockwise
- Tetrahedron:   0, 1, 2 base, 3 apex
- Hexahedron:    0, 1, 2, 3 bottom face, 4, 5, 6, 7 the matching top face
"""
from enum import Enum

from .errors import UnsupportedTopologyError


class Topology(Enum):
    """Combinatorial shape of a mesh cell."""

    SEGMENT = "segment"
    TRIANGLE = "triangle"
    QUADRILATERAL = "quadrilateral"
    TETRAHEDRON = "tetrahedron"
    HEXAHEDRON = "hexahedron"
    WEDGE = "wedge"
    PYRAMID = "pyramid"

    @property
    def num_vertices(self) -> int:
        """Number of vertices in the canonical layout."""
        return _NUM_VERTICES[self]

    @property
    def dimension(self) -> int:
        """Topological dimension of the cell."""
        return _DIMENSION[self]

    @classmethod
    def from_element_name(cls, name: str) -> "Topology":
        """
        Maps a Gmsh element name (e.g. "Quadrilateral 4") to a topology.

        Raises:
            UnsupportedTopologyError: If the element is not a first-order
                cell of a known shape.
        """
        key = name.strip().lower()
        if key not in _GMSH_NAMES:
            raise UnsupportedTopologyError(f"Unsupported element type '{name}'.")
        return _GMSH_NAMES[key]


_NUM_VERTICES = {
    Topology.SEGMENT: 2,
    Topology.TRIANGLE: 3,
    Topology.QUADRILATERAL: 4,
    Topology.TETRAHEDRON: 4,
    Topology.HEXAHEDRON: 8,
    Topology.WEDGE: 6,
    Topology.PYRAMID: 5,
}

_DIMENSION = {
    Topology.SEGMENT: 1,
    Topology.TRIANGLE: 2,
    Topology.QUADRILATERAL: 2,
    Topology.TETRAHEDRON: 3,
    Topology.HEXAHEDRON: 3,
    Topology.WEDGE: 3,
    Topology.PYRAMID: 3,
}

_GMSH_NAMES = {
    "line 2": Topology.SEGMENT,
    "triangle 3": Topology.TRIANGLE,
    "quadrilateral 4": Topology.QUADRILATERAL,
    "quad 4": Topology.QUADRILATERAL,
    "tetrahedron 4": Topology.TETRAHEDRON,
    "hexahedron 8": Topology.HEXAHEDRON,
    "prism 6": Topology.WEDGE,
    "pyramid 5": Topology.PYRAMID,
}

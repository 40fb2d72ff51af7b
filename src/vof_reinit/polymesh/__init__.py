# -*- coding: utf-8 -*-
"""
In-memory unstructured mesh used as the mesh collaborator of the level-set
core.

Key modules:
- poly_mesh: Nodes, cells, centroids, measures and cell-vertex incidence,
             read from Gmsh files or built from arrays.
"""

from .poly_mesh import PolyMesh

__all__ = [
    "PolyMesh",
]

"""
VOF-Reinit

Reconstruction of a vertex level-set field from a cell volume-of-fluid
field on unstructured polytope meshes.
"""

from . import levelset
from . import polymesh
from .errors import (
    LevelSetError,
    UnsupportedTopologyError,
    DegenerateGeometryError,
    MaxIterationsExceeded,
)
from .fields import FieldLocation, ScalarField
from .topology import Topology

__all__ = [
    "levelset",
    "polymesh",
    "LevelSetError",
    "UnsupportedTopologyError",
    "DegenerateGeometryError",
    "MaxIterationsExceeded",
    "FieldLocation",
    "ScalarField",
    "Topology",
]

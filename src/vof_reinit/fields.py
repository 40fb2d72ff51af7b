# -*- coding: utf-8 -*-
"""
In-memory scalar fields defined on mesh cells or vertices.

Classes:
    FieldLocation: Where the values of a field live.
    ScalarField: A named array of values, one per cell or per vertex.
"""
from dataclasses import dataclass, field
from enum import Enum

import numpy as np


class FieldLocation(Enum):
    """Mesh entity carrying the field values."""

    CELL = "cell"
    VERTEX = "vertex"


@dataclass
class ScalarField:
    """
    A scalar field stored as a flat NumPy array.

    Attributes:
        name (str): Field name, used in reports and dumps.
        location (FieldLocation): Whether values are per cell or per vertex.
        values (np.ndarray): The field values.
            - Shape: `(n_cells,)` or `(n_nodes,)`
            - `dtype`: `float`
    """

    name: str
    location: FieldLocation
    values: np.ndarray = field(default_factory=lambda: np.array([]))

    def __post_init__(self) -> None:
        self.values = np.asarray(self.values, dtype=float).ravel()

    @classmethod
    def zeros(cls, name: str, location: FieldLocation, size: int) -> "ScalarField":
        """Creates a field of `size` zeros."""
        return cls(name, location, np.zeros(size))

    @classmethod
    def for_cells(cls, name: str, values) -> "ScalarField":
        """Creates a cell-valued field."""
        return cls(name, FieldLocation.CELL, values)

    @classmethod
    def for_vertices(cls, name: str, values) -> "ScalarField":
        """Creates a vertex-valued field."""
        return cls(name, FieldLocation.VERTEX, values)

    def __getitem__(self, index: int) -> float:
        return float(self.values[index])

    def __setitem__(self, index: int, value: float) -> None:
        self.values[index] = value

    def __len__(self) -> int:
        return self.values.size

    def copy(self) -> "ScalarField":
        """Returns a deep copy of the field."""
        return ScalarField(self.name, self.location, self.values.copy())

# -*- coding: utf-8 -*-
"""
Merging of per-cell vertex values at shared vertices.

Every cut cell proposes a level-set value for each of its vertices. A vertex
shared by several cut cells receives the running mean of all proposals made
during the current pass:

    phi <- (new + phi * count) / (count + 1)

The first proposal of a pass overwrites whatever the vertex held before, so
the mean never mixes values from different passes.
"""
import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignConflict:
    """
    Two proposals of opposite sign at the same vertex.

    Attributes:
        vertex (int): Vertex index.
        existing (float): Pass-local mean before the merge.
        incoming (float): The proposal being merged.
        pass_index (int): Pass in which the conflict happened.
    """

    vertex: int
    existing: float
    incoming: float
    pass_index: int


class VertexAggregator:
    """
    Running-mean merge of vertex proposals.

    Attributes:
        values (np.ndarray): Vertex values, updated in place.
        counters (np.ndarray): Number of proposals merged per vertex in the
            current pass.
        pass_index (int): Index of the current pass, stamped on conflicts.
        conflicts (List[SignConflict]): Sign conflicts recorded so far.
    """

    def __init__(self, values: np.ndarray, counters: np.ndarray | None = None) -> None:
        self.values = values
        if counters is None:
            counters = np.zeros(values.shape[0], dtype=int)
        if counters.shape[0] != values.shape[0]:
            raise ValueError("counters and values must have the same length.")
        self.counters = counters
        self.pass_index = 0
        self.conflicts: List[SignConflict] = []

    def reset(self, pass_index: int | None = None) -> None:
        """Starts a new pass: zeroes every contribution counter."""
        self.counters[:] = 0
        if pass_index is not None:
            self.pass_index = pass_index

    def merge(self, vertex: int, value: float) -> float:
        """Folds `value` into the pass-local mean at `vertex` and returns the mean."""
        count = self.counters[vertex]
        if count == 0:
            self.values[vertex] = value
        else:
            existing = self.values[vertex]
            if existing * value < 0.0:
                conflict = SignConflict(
                    int(vertex), float(existing), float(value), self.pass_index
                )
                self.conflicts.append(conflict)
                logger.debug(
                    "Sign conflict at vertex %d in pass %d: %+.6e vs %+.6e",
                    conflict.vertex,
                    conflict.pass_index,
                    conflict.existing,
                    conflict.incoming,
                )
            self.values[vertex] = (value + existing * count) / (count + 1)
        self.counters[vertex] = count + 1
        return self.values[vertex]

    def merge_cell(self, vertices: Sequence[int], values: Sequence[float]) -> None:
        """Merges the proposals of one cell, vertex by vertex."""
        for vertex, value in zip(vertices, values):
            self.merge(vertex, value)

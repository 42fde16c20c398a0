"""Bipartite matching helpers over a boolean support matrix.

`support[i, j]` is True when left item i may still map to right item j.
Used by the odds model to find which unknown pairs can still belong to some
bijection consistent with what is known.
"""

from typing import Optional

import numpy as np
from scipy.optimize import linear_sum_assignment
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components


def perfect_matching(support: np.ndarray) -> Optional[list[int]]:
    """Find a perfect matching of the support.

    Solved as an assignment problem where allowed pairs cost 0 and every
    other pair costs 1; a zero-cost assignment is a perfect matching.

    Args:
        support: Square boolean matrix of allowed pairs

    Returns:
        `mate[i]` = right item for left i, or None if no perfect matching exists
    """
    cost_matrix = (~support).astype(float)
    row_ind, col_ind = linear_sum_assignment(cost_matrix)
    if cost_matrix[row_ind, col_ind].sum() > 0:
        return None

    mate = [-1] * support.shape[0]
    for i, j in zip(row_ind, col_ind):
        mate[int(i)] = int(j)
    return mate


def viable_pairs(support: np.ndarray) -> np.ndarray:
    """Pairs of the support that belong to at least one perfect matching.

    Given one perfect matching, right items form a directed graph with an
    edge r -> c when the owner of r may also take c. A non-matching pair
    (i, j) lies on some perfect matching exactly when j and mate[i] sit on
    a common alternating cycle, i.e. in the same strongly connected
    component.

    Args:
        support: Square boolean matrix of allowed pairs

    Returns:
        Boolean matrix, a subset of `support`

    Raises:
        ValueError: the support admits no perfect matching
    """
    mate = perfect_matching(support)
    if mate is None:
        raise ValueError("support admits no perfect matching")

    size = support.shape[0]
    owner = np.zeros(size, dtype=int)
    for left, right in enumerate(mate):
        owner[right] = left

    # row r of the graph lists the right items the owner of r may take
    graph = csr_matrix(support[owner].astype(np.int8))
    _, labels = connected_components(graph, directed=True, connection="strong")

    matched = labels[np.array(mate)]
    return support & (labels[None, :] == matched[:, None])

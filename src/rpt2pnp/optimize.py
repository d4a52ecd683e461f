"""
Travel-order optimization for part sequences.

Greedy nearest-neighbor tour: from the current position always go to the
closest part not visited yet. O(n^2), no backtracking; it shortens travel
on typical boards but is not an optimal tour.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from .board import Part
from .geometry import ORIGIN, Position, distance

logger = logging.getLogger(__name__)

__all__ = ["optimize_parts", "path_length"]


def optimize_parts(parts: Sequence[Part], start: Optional[Position] = ORIGIN) -> List[Part]:
    """
    Reorder parts to reduce cumulative travel.

    Args:
        parts: Parts in input order
        start: Position the tour starts from, in the same coordinate space as
            the part positions. ``None`` starts at the first listed part.

    Returns:
        A permutation of ``parts``. Equal distances are resolved in favor of
        the part listed earlier, so the result is deterministic.
    """
    n = len(parts)
    if n == 0:
        return []

    coords = np.array([(p.pos.x, p.pos.y) for p in parts], dtype=float)
    visited = np.zeros(n, dtype=bool)
    order: List[int] = []

    if start is None:
        order.append(0)
        visited[0] = True
        current = coords[0]
    else:
        current = np.array((start.x, start.y), dtype=float)

    while len(order) < n:
        dist = np.hypot(coords[:, 0] - current[0], coords[:, 1] - current[1])
        dist[visited] = np.inf
        # argmin returns the first minimum: ties go to the earlier part.
        idx = int(np.argmin(dist))
        order.append(idx)
        visited[idx] = True
        current = coords[idx]

    result = [parts[i] for i in order]
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Travel %.1f mm -> %.1f mm for %d parts",
            path_length(parts, start),
            path_length(result, start),
            n,
        )
    return result


def path_length(parts: Sequence[Part], start: Optional[Position] = ORIGIN) -> float:
    """Total travel visiting ``parts`` in order, beginning at ``start``."""
    total = 0.0
    current = start
    for part in parts:
        if current is not None:
            total += distance(current, part.pos)
        current = part.pos
    return total

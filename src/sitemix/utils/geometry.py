"""Planar helpers shared by the assigner and the clusterer."""

from collections.abc import Sequence

import numpy as np


def centroid(points: np.ndarray) -> np.ndarray:
    """Unweighted mean of an (n, 2) array of coordinates."""
    if len(points) == 0:
        raise ValueError("Cannot compute the centroid of an empty point set")
    return np.asarray(points, dtype=np.float64).mean(axis=0)


def nearest_index(
    coordinates: np.ndarray, candidates: Sequence[int], point: np.ndarray
) -> int | None:
    """Candidate whose coordinates minimise the squared distance to ``point``.

    Ties go to the candidate listed first.
    """
    if len(candidates) == 0:
        return None
    offsets = coordinates[list(candidates)] - point
    squared = np.einsum("ij,ij->i", offsets, offsets)
    return int(candidates[int(np.argmin(squared))])

"""
Homography estimation module.
Computes homography matrices from point correspondences using the DLT algorithm.

Matrices are row-major and act on column vectors [x, y, 1]^T, so that
dst ~ H @ src in homogeneous coordinates. By default the scale is fixed so
that H[2, 2] == 1.
"""

from __future__ import annotations

import logging
from typing import Iterable, NamedTuple, Optional, Sequence, Union

import numpy as np

from .config import EstimatorConfig
from .errors import DegenerateConfiguration, HomographyError, InsufficientPoints
from .utils.math_utils import (
    collinearity_ratio,
    denormalize_homography,
    from_homogeneous,
    normalize_points,
    padded_singular_values,
    to_homogeneous,
)

LOGGER = logging.getLogger(__name__)

MIN_CORRESPONDENCES = 4

# |H[2, 2]| relative to ||H|| below which the h22 convention is unusable
_H22_EPS = 1e-12


class Point2D(NamedTuple):
    """Image or board-plane coordinate."""

    x: float
    y: float


PointsLike = Union[np.ndarray, Iterable[Sequence[float]]]


def _as_points(points: PointsLike) -> np.ndarray:
    if not isinstance(points, np.ndarray):
        points = list(points)
    return np.asarray(points, dtype=np.float64)


def _check_correspondences(points_src: np.ndarray, points_dst: np.ndarray) -> None:
    if len(points_src) != len(points_dst):
        raise InsufficientPoints(f"Number of source and destination points must match. "
                                 f"Got {len(points_src)} and {len(points_dst)}")

    if len(points_src) < MIN_CORRESPONDENCES:
        raise InsufficientPoints(f"At least {MIN_CORRESPONDENCES} points required for homography. "
                                 f"Got {len(points_src)}")

    for name, pts in (("source", points_src), ("destination", points_dst)):
        if pts.ndim != 2 or pts.shape[1] != 2:
            raise HomographyError(f"{name.capitalize()} points must have shape (n, 2), got {pts.shape}")
        if not np.all(np.isfinite(pts)):
            raise DegenerateConfiguration(f"{name.capitalize()} points contain non-finite values")


def build_constraint_matrix(points_src: np.ndarray, points_dst: np.ndarray) -> np.ndarray:
    """
    Stack the two DLT equations of every correspondence into A (2n x 9).

    For each point pair, with h the row-major entries of H:
    x' * (H[2,0]*x + H[2,1]*y + H[2,2]) = H[0,0]*x + H[0,1]*y + H[0,2]
    y' * (H[2,0]*x + H[2,1]*y + H[2,2]) = H[1,0]*x + H[1,1]*y + H[1,2]
    so that A @ h = 0.
    """
    x, y = points_src[:, 0], points_src[:, 1]
    xp, yp = points_dst[:, 0], points_dst[:, 1]
    zeros = np.zeros_like(x)
    ones = np.ones_like(x)

    A = np.empty((2 * len(points_src), 9))
    A[0::2] = np.column_stack([-x, -y, -ones, zeros, zeros, zeros, x * xp, y * xp, xp])
    A[1::2] = np.column_stack([zeros, zeros, zeros, -x, -y, -ones, x * yp, y * yp, yp])
    return A


def normalize_homography(H: np.ndarray, convention: str = "h22") -> np.ndarray:
    """
    Fix the free scale of a homography.

    Args:
        H: 3x3 homography matrix, any nonzero scale
        convention: "h22" divides by H[2, 2]; "frobenius" scales to unit norm
            with the largest-magnitude entry positive. "h22" falls back to
            "frobenius" when H[2, 2] is numerically zero.

    Returns:
        3x3 matrix; any nonzero multiple of H gives the same result
    """
    H = np.asarray(H, dtype=np.float64)
    if H.shape != (3, 3):
        raise ValueError(f"Homography must be 3x3 matrix, got shape {H.shape}")

    norm = np.linalg.norm(H)
    if not np.isfinite(norm) or norm == 0:
        raise DegenerateConfiguration("Homography is zero or non-finite")

    if convention == "h22":
        if abs(H[2, 2]) > _H22_EPS * norm:
            return H / H[2, 2]
        LOGGER.warning("H[2, 2] is numerically zero; using unit Frobenius norm instead")
    elif convention != "frobenius":
        raise ValueError(f"Unknown scale convention {convention!r}")

    H = H / norm
    if H.flat[np.argmax(np.abs(H))] < 0:
        H = -H
    return H


def find_homography(points_src: PointsLike, points_dst: PointsLike,
                    config: Optional[EstimatorConfig] = None) -> np.ndarray:
    """
    Compute homography matrix using Direct Linear Transform (DLT) algorithm.

    Four correspondences give an exact solution; more are solved in the
    least-squares sense, minimizing the algebraic residual ||A h||.

    Args:
        points_src: Source points, array-like of shape (n, 2), n >= 4
        points_dst: Destination points, array-like of shape (n, 2)
        config: Estimator settings (defaults when None)

    Returns:
        3x3 homography matrix H such that points_dst ≈ H @ points_src (homogeneous)

    Raises:
        InsufficientPoints: If fewer than 4 points or the lengths differ
        DegenerateConfiguration: If the points are coincident, collinear or
            otherwise leave the system without a unique solution
    """
    config = config or EstimatorConfig()
    tol = config.degeneracy_tolerance

    points_src = _as_points(points_src)
    points_dst = _as_points(points_dst)
    _check_correspondences(points_src, points_dst)

    # Normalize points for numerical stability
    if config.normalize:
        points_src_norm, T1 = normalize_points(points_src)
        points_dst_norm, T2 = normalize_points(points_dst)
    else:
        points_src_norm = points_src
        points_dst_norm = points_dst
        T1 = np.eye(3)
        T2 = np.eye(3)

    for name, pts in (("source", points_src_norm), ("destination", points_dst_norm)):
        if collinearity_ratio(pts) < tol:
            raise DegenerateConfiguration(f"{name.capitalize()} points are collinear")

    A = build_constraint_matrix(points_src_norm, points_dst_norm)

    # Solve Ah = 0 using SVD
    # The solution is the right singular vector corresponding to the smallest singular value
    try:
        S, Vt = padded_singular_values(A)
    except np.linalg.LinAlgError as exc:
        raise DegenerateConfiguration("SVD of the constraint matrix did not converge") from exc

    LOGGER.debug("DLT %s solve over %d correspondences, singular values %s",
                 "exact" if len(points_src) == MIN_CORRESPONDENCES else "least-squares",
                 len(points_src), S)

    # A one-dimensional null space needs the next singular value well clear of zero
    if S[-2] < tol * S[0]:
        raise DegenerateConfiguration(
            f"Constraint matrix is rank deficient (singular values {S[-2]:.3g} / {S[0]:.3g}); "
            "check for duplicate or collinear points"
        )

    H_norm = Vt[-1, :].reshape(3, 3)

    s_h = np.linalg.svd(H_norm, compute_uv=False)
    if s_h[-1] < tol * s_h[0]:
        raise DegenerateConfiguration("Estimated homography is singular; "
                                      "three or more points are collinear in one view only")

    H = denormalize_homography(H_norm, T1, T2)
    return normalize_homography(H, config.scale_convention)


class HomographyEstimator:
    """
    Stateless planar homography estimator.

    Holds only its settings, so one instance can be shared freely.
    """

    def __init__(self, config: Optional[EstimatorConfig] = None):
        self.config = config or EstimatorConfig()

    def estimate(self, src_points: PointsLike, dst_points: PointsLike) -> np.ndarray:
        """Return the 3x3 homography mapping src_points onto dst_points."""
        return find_homography(src_points, dst_points, self.config)

    def reprojection_errors(self, H: np.ndarray, src_points: PointsLike,
                            dst_points: PointsLike) -> np.ndarray:
        """Euclidean distance between H applied to each source point and its destination."""
        projected = apply_homography(H, src_points)
        return np.linalg.norm(projected - _as_points(dst_points), axis=1)


def apply_homography(H: np.ndarray, points: PointsLike) -> np.ndarray:
    """
    Apply homography transformation to points.

    Args:
        H: 3x3 homography matrix
        points: Points to transform, array-like of shape (n, 2)

    Returns:
        Transformed points, array of shape (n, 2). Points sent to infinity
        (w == 0) come back as inf/nan.
    """
    H = np.asarray(H, dtype=np.float64)
    if H.shape != (3, 3):
        raise ValueError(f"Homography must be 3x3 matrix, got shape {H.shape}")

    points = _as_points(points)
    if points.size == 0:
        return np.empty((0, 2))
    points_homog = to_homogeneous(points.reshape(-1, 2))

    # Transform: x' = H @ x
    transformed_homog = (H @ points_homog.T).T
    return from_homogeneous(transformed_homog)

"""
Mathematical utilities for homography estimation.
"""

import numpy as np

from ..errors import DegenerateConfiguration

SQRT2 = np.sqrt(2.0)

# Below this spread a point set has collapsed onto a single location
_MIN_SPREAD = 1e-12


def to_homogeneous(points):
    """
    Convert points to homogeneous coordinates.
    
    Args:
        points: Array of shape (n, 2) containing [x, y] coordinates
        
    Returns:
        Array of shape (n, 3) containing [x, y, 1] coordinates
    """
    points = np.asarray(points, dtype=np.float64)
    ones = np.ones((len(points), 1))
    return np.hstack([points, ones])


def from_homogeneous(points_homog):
    """
    Convert points from homogeneous coordinates to Cartesian.

    Rows with w == 0 are points at infinity and come back as inf/nan.
    
    Args:
        points_homog: Array of shape (n, 3) containing [x, y, w] coordinates
        
    Returns:
        Array of shape (n, 2) containing [x/w, y/w] coordinates
    """
    points_homog = np.asarray(points_homog, dtype=np.float64)
    with np.errstate(divide='ignore', invalid='ignore'):
        return points_homog[:, :2] / points_homog[:, 2:3]


def normalize_points(points):
    """
    Condition points for the DLT (Hartley normalization).

    Translates the centroid to the origin and scales so that the mean
    distance from it is sqrt(2).
    
    Args:
        points: Array of shape (n, 2) containing [x, y] coordinates
        
    Returns:
        Tuple of (normalized_points, transformation_matrix)
        where transformation_matrix is 3x3 matrix that normalizes points

    Raises:
        DegenerateConfiguration: If all points coincide
    """
    points = np.asarray(points, dtype=np.float64)
    mean = np.mean(points, axis=0)
    centered = points - mean

    mean_dist = np.mean(np.linalg.norm(centered, axis=1))
    if mean_dist <= _MIN_SPREAD * max(1.0, np.abs(mean).max()):
        raise DegenerateConfiguration("All points coincide; no spread to normalize")

    scale = SQRT2 / mean_dist
    
    T = np.array([
        [scale, 0, -scale * mean[0]],
        [0, scale, -scale * mean[1]],
        [0, 0, 1]
    ])
    
    return centered * scale, T


def denormalize_homography(H_normalized, T1, T2):
    """
    Denormalize a homography matrix computed from normalized points.
    
    Args:
        H_normalized: 3x3 homography matrix computed from normalized points
        T1: Normalization matrix for source points
        T2: Normalization matrix for target points
        
    Returns:
        3x3 denormalized homography matrix
    """
    # H = T2^(-1) @ H_normalized @ T1
    # T2 is a similarity, so its inverse has a closed form
    s = T2[0, 0]
    T2_inv = np.array([
        [1.0 / s, 0, -T2[0, 2] / s],
        [0, 1.0 / s, -T2[1, 2] / s],
        [0, 0, 1]
    ])
    return T2_inv @ H_normalized @ T1


def collinearity_ratio(points):
    """
    Ratio of the smaller to the larger singular value of centred points.

    Zero for collinear points, one for an isotropic spread.
    """
    centered = np.asarray(points, dtype=np.float64)
    centered = centered - centered.mean(axis=0)
    s = np.linalg.svd(centered, compute_uv=False)
    if s[0] == 0:
        return 0.0
    return float(s[-1] / s[0])


def padded_singular_values(A):
    """
    Singular values of A padded with zeros up to its column count.

    An 8x9 system has an implicit ninth singular value of zero that
    np.linalg.svd does not report.
    """
    _, S, Vt = np.linalg.svd(A)
    if len(S) < A.shape[1]:
        S = np.concatenate([S, np.zeros(A.shape[1] - len(S))])
    return S, Vt

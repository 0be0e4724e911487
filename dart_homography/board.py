"""
Board-plane calibration for dartboard images.

Board-plane coordinates are normalized so the board image spans [0, 1] in
both axes with the bull at (0.5, 0.5) and y growing downwards. Calibration
markers sit on the outer edge of the double ring at the segment boundaries
20/1 & 3/17, 11/14 & 6/13 and 9/12 & 15/2.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .config import BoardGeometry, EstimatorConfig
from .errors import InsufficientPoints
from .homography import MIN_CORRESPONDENCES, Point2D, apply_homography, find_homography

LOGGER = logging.getLogger(__name__)

# Angles (degrees) of the marker pairs, measured from the horizontal
CALIBRATION_ANGLES = (81.0, -9.0, 27.0)

ImageSize = Tuple[float, float]


def scoring_radii(geometry: Optional[BoardGeometry] = None) -> List[float]:
    """
    Radii of the scoring ring boundaries, normalized by the board diameter.

    Returns seven values: centre, bull, outer bull, treble inner, treble
    outer, double inner, double outer. The two bull radii include half the
    bullseye wire.
    """
    g = geometry or BoardGeometry()
    raw = [
        0.0,
        g.bull_radius + g.bullseye_wire / 2.0,
        g.outer_bull_radius + g.bullseye_wire / 2.0,
        g.treble_outer - g.ring_width,
        g.treble_outer,
        g.double_outer - g.ring_width,
        g.double_outer,
    ]
    return [r / g.diameter for r in raw]


def board_calibration_coords(geometry: Optional[BoardGeometry] = None) -> List[Point2D]:
    """
    Board-plane positions of the six calibration markers.

    Markers come in diametrically opposite pairs on the outer double radius,
    in the order the detector labels them.
    """
    h = scoring_radii(geometry)[-1]
    coords: List[Point2D] = []
    signs = ((-1, -1, 1, 1), (-1, 1, 1, -1), (-1, -1, 1, 1))
    for angle, (sx1, sy1, sx2, sy2) in zip(CALIBRATION_ANGLES, signs):
        a = h * math.cos(math.radians(angle))
        o = math.sqrt(max(0.0, h * h - a * a))
        coords.append(Point2D(0.5 + sx1 * a, 0.5 + sy1 * o))
        coords.append(Point2D(0.5 + sx2 * a, 0.5 + sy2 * o))
    return coords


def _pixel_scale(image_size: ImageSize) -> np.ndarray:
    width, height = image_size
    if not (width > 0 and height > 0):
        raise ValueError(f"Image size must be positive, got {image_size}")
    return np.array([width, height], dtype=np.float64)


def _is_normalized(point: Sequence[float]) -> bool:
    return 0.0 <= point[0] <= 1.0 and 0.0 <= point[1] <= 1.0


def find_board_homography(
    calibration_coords: Sequence[Sequence[float]],
    board_coords: Sequence[Sequence[float]],
    image_size: ImageSize,
    config: Optional[EstimatorConfig] = None,
) -> np.ndarray:
    """
    Estimate the image -> board-plane homography from detected markers.

    Args:
        calibration_coords: Detected marker centres in normalized image
            coordinates; undetected markers are reported outside [0, 1]
            (conventionally (-1, -1)) and are skipped
        board_coords: Board-plane marker positions, index-aligned with
            calibration_coords; extra entries are ignored
        image_size: (width, height) of the image in pixels
        config: Estimator settings

    Returns:
        3x3 homography in pixel units

    Raises:
        InsufficientPoints: If fewer than 4 markers are valid
    """
    scale = _pixel_scale(image_size)

    board_coords = list(board_coords)[:len(calibration_coords)]
    if len(board_coords) < len(calibration_coords):
        raise InsufficientPoints(f"Got {len(calibration_coords)} calibration points "
                                 f"but only {len(board_coords)} board-plane positions")

    valid = [i for i, p in enumerate(calibration_coords) if _is_normalized(p)]
    dropped = len(calibration_coords) - len(valid)
    if dropped:
        LOGGER.warning("Ignoring %d calibration point(s) outside the image", dropped)

    if len(valid) < MIN_CORRESPONDENCES:
        raise InsufficientPoints(f"Not enough valid calibration points: {len(valid)}")

    src = np.asarray([calibration_coords[i] for i in valid], dtype=np.float64) * scale
    dst = np.asarray([board_coords[i] for i in valid], dtype=np.float64) * scale

    return find_homography(src, dst, config)


def transform_to_boardplane(
    H: np.ndarray,
    dart_coords: Iterable[Sequence[float]],
    image_size: ImageSize,
) -> List[Point2D]:
    """
    Project dart positions from normalized image to normalized board-plane coordinates.

    A dart that the homography sends to infinity is returned unchanged.
    """
    scale = _pixel_scale(image_size)
    dart_coords = list(dart_coords)
    if not dart_coords:
        return []

    pixels = np.asarray(dart_coords, dtype=np.float64).reshape(-1, 2) * scale
    projected = apply_homography(H, pixels) / scale

    result: List[Point2D] = []
    for original, point in zip(dart_coords, projected):
        if np.all(np.isfinite(point)):
            result.append(Point2D(float(point[0]), float(point[1])))
        else:
            result.append(Point2D(float(original[0]), float(original[1])))
    return result

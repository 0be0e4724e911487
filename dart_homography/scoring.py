"""
Dart scoring in normalized board-plane coordinates.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .board import scoring_radii
from .config import BoardGeometry

# Ring names by radius index (see scoring_radii); index 0 is the bullseye
SCORING_NAMES = ("DB", "SB", "S", "T", "S", "D", "miss")

# Start angle of each segment pair (degrees, atan of the slope from centre)
# and the two numbers on opposite sides of the bull along that line.
SEGMENT_ANGLES = (-9, 9, 27, 45, 63, -81, -63, -45, -27)
SEGMENT_NUMBERS = (
    (6, 11),
    (10, 14),
    (15, 9),
    (2, 12),
    (17, 5),
    (19, 1),
    (7, 18),
    (16, 4),
    (8, 13),
)
VERTICAL_NUMBERS = (3, 20)

_X_NUDGE = 1e-5


@dataclass(slots=True)
class DartScore:
    """Labels per dart ("T20", "SB", "miss", ...) and their sum."""

    labels: List[str] = field(default_factory=list)
    total: int = 0


def _segment_numbers(angle_deg: float) -> Tuple[int, int]:
    if abs(angle_deg) >= 81:
        return VERTICAL_NUMBERS
    candidates = [a for a in SEGMENT_ANGLES if a <= angle_deg]
    if not candidates:
        return VERTICAL_NUMBERS
    return SEGMENT_NUMBERS[SEGMENT_ANGLES.index(max(candidates))]


def score_dart(x: float, y: float, radii: Sequence[float]) -> Tuple[str, int]:
    """Label and points for a single dart at board-plane (x, y)."""
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValueError(f"Dart position must be finite, got ({x}, {y})")

    xs = x + _X_NUDGE if abs(x - 0.5) < sys.float_info.epsilon else x

    angle = math.degrees(math.atan((y - 0.5) / (xs - 0.5)))
    angle = math.trunc(angle)

    numbers = _segment_numbers(angle)
    # Opposite segments share a line through the bull; tell them apart by side
    coord = x if numbers == (6, 11) else y
    number = numbers[0] if coord > 0.5 else numbers[1]

    distance = math.hypot(x - 0.5, y - 0.5)
    region_index = 0
    for idx, radius in enumerate(radii):
        if distance > radius:
            region_index = idx
    region = SCORING_NAMES[region_index]

    if region == "DB":
        return "DB", 50
    if region == "SB":
        return "SB", 25
    if region == "S":
        return f"S{number}", number
    if region == "T":
        return f"T{number}", number * 3
    if region == "D":
        return f"D{number}", number * 2
    return "miss", 0


def score_darts(board_points: Sequence[Sequence[float]],
                geometry: Optional[BoardGeometry] = None) -> DartScore:
    """
    Score darts given in normalized board-plane coordinates.

    Args:
        board_points: (x, y) dart positions, e.g. from transform_to_boardplane
        geometry: Board measurements (regulation board when None)

    Returns:
        DartScore with one label per dart, in input order

    Raises:
        ValueError: If a dart position is not finite
    """
    radii = scoring_radii(geometry)
    result = DartScore()
    for point in board_points:
        label, points = score_dart(float(point[0]), float(point[1]), radii)
        result.labels.append(label)
        result.total += points
    return result

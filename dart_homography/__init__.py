"""
Planar homography estimation and dartboard board-plane scoring.
"""

__version__ = "1.0.0"

from .board import (
    board_calibration_coords,
    find_board_homography,
    scoring_radii,
    transform_to_boardplane,
)
from .config import BoardGeometry, EstimatorConfig, load_config
from .errors import DegenerateConfiguration, HomographyError, InsufficientPoints
from .homography import (
    HomographyEstimator,
    Point2D,
    apply_homography,
    find_homography,
    normalize_homography,
)
from .scoring import DartScore, score_darts

__all__ = [
    'BoardGeometry',
    'DartScore',
    'DegenerateConfiguration',
    'EstimatorConfig',
    'HomographyError',
    'HomographyEstimator',
    'InsufficientPoints',
    'Point2D',
    'apply_homography',
    'board_calibration_coords',
    'find_board_homography',
    'find_homography',
    'load_config',
    'normalize_homography',
    'score_darts',
    'scoring_radii',
    'transform_to_boardplane',
]

"""
Exceptions raised by homography estimation.
"""


class HomographyError(ValueError):
    """Base class for estimation failures."""


class InsufficientPoints(HomographyError):
    """Too few correspondences, or source and destination lengths differ."""


class DegenerateConfiguration(HomographyError):
    """Correspondences lack the geometric diversity for a unique solution.

    Raised for coincident, duplicate or collinear points, where the linear
    system loses rank and any returned matrix would be meaningless.
    """

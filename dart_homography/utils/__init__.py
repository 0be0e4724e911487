"""
Numerical helpers shared by the estimator and the board-plane tools.
"""

from . import math_utils

__all__ = ['math_utils']

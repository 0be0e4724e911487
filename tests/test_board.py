"""Tests for board-plane calibration and dart projection."""

import math

import numpy as np
import pytest

from dart_homography import (
    BoardGeometry,
    InsufficientPoints,
    apply_homography,
    board_calibration_coords,
    find_board_homography,
    normalize_homography,
    score_darts,
    scoring_radii,
    transform_to_boardplane,
)

IMAGE_SIZE = (1000, 800)

# Board-plane pixels -> camera image pixels, a mild perspective view
H_VIEW = np.array([
    [0.9, 0.1, 40.0],
    [-0.05, 0.95, 30.0],
    [5e-5, -4e-5, 1.0],
])


def _board_to_image(points):
    scale = np.array(IMAGE_SIZE, dtype=float)
    return apply_homography(H_VIEW, np.asarray(points, dtype=float) * scale) / scale


def test_scoring_radii():
    radii = scoring_radii()
    assert len(radii) == 7
    assert radii[0] == 0.0
    assert radii[1] == pytest.approx((6.35 + 0.8) / 451.0)
    assert radii[3] == pytest.approx(97.4 / 451.0)
    assert radii[-1] == pytest.approx(170.0 / 451.0)
    assert radii == sorted(radii)


def test_scoring_radii_follow_geometry():
    radii = scoring_radii(BoardGeometry(diameter=500.0))
    assert radii[-1] == pytest.approx(170.0 / 500.0)


def test_calibration_coords_on_outer_double():
    h = scoring_radii()[-1]
    coords = board_calibration_coords()

    assert len(coords) == 6
    for point in coords:
        assert math.hypot(point.x - 0.5, point.y - 0.5) == pytest.approx(h)

    # Each pair is diametrically opposite
    for first, second in zip(coords[0::2], coords[1::2]):
        assert first.x + second.x == pytest.approx(1.0)
        assert first.y + second.y == pytest.approx(1.0)

    # 20 & 3 markers sit near the vertical axis, the 20 side on top
    assert coords[0].y < 0.5 < coords[1].y
    assert abs(coords[0].x - 0.5) < abs(coords[0].y - 0.5)


def test_identity_when_image_is_board_plane():
    coords = board_calibration_coords()
    H = find_board_homography(coords, coords, IMAGE_SIZE)
    np.testing.assert_allclose(H, np.eye(3), atol=1e-9)


def test_recovers_inverse_view():
    board = board_calibration_coords()
    calibration = _board_to_image(board)

    H = find_board_homography(calibration, board, IMAGE_SIZE)

    np.testing.assert_allclose(H, normalize_homography(np.linalg.inv(H_VIEW)), rtol=1e-6, atol=1e-9)


def test_invalid_calibration_points_are_skipped(caplog):
    board = board_calibration_coords()
    calibration = [tuple(p) for p in _board_to_image(board)]
    calibration[1] = (-1.0, -1.0)
    calibration[4] = (-1.0, -1.0)

    with caplog.at_level("WARNING"):
        H = find_board_homography(calibration, board, IMAGE_SIZE)

    assert "Ignoring 2 calibration point(s)" in caplog.text
    np.testing.assert_allclose(H, normalize_homography(np.linalg.inv(H_VIEW)), rtol=1e-6, atol=1e-9)


def test_too_few_valid_calibration_points():
    board = board_calibration_coords()
    calibration = [(-1.0, -1.0)] * 3 + [tuple(p) for p in _board_to_image(board[3:])]
    with pytest.raises(InsufficientPoints, match="Not enough valid calibration points: 3"):
        find_board_homography(calibration, board, IMAGE_SIZE)


def test_board_coords_truncated_to_calibration_count():
    board = board_calibration_coords()
    calibration = _board_to_image(board[:4])
    H = find_board_homography(calibration, board, IMAGE_SIZE)
    np.testing.assert_allclose(H, normalize_homography(np.linalg.inv(H_VIEW)), rtol=1e-6, atol=1e-9)


def test_missing_board_coords():
    board = board_calibration_coords()
    with pytest.raises(InsufficientPoints, match="board-plane positions"):
        find_board_homography(_board_to_image(board), board[:5], IMAGE_SIZE)


def test_rejects_empty_image():
    board = board_calibration_coords()
    with pytest.raises(ValueError, match="Image size must be positive"):
        find_board_homography(board, board, (0, 800))


def test_scores_darts_seen_in_perspective():
    h = scoring_radii()
    darts_on_board = [
        (0.5, 0.5 - (h[3] + h[4]) / 2),   # T20
        (0.5, 0.5 - (h[5] + h[6]) / 2),   # D20
        (0.5 + (h[1] + h[2]) / 2, 0.5),   # SB
        (0.5, 0.5),                       # DB
        (0.65, 0.5),                      # S6
        (0.95, 0.5),                      # miss
    ]
    board = board_calibration_coords()
    H = find_board_homography(_board_to_image(board), board, IMAGE_SIZE)

    projected = transform_to_boardplane(H, _board_to_image(darts_on_board), IMAGE_SIZE)
    np.testing.assert_allclose(projected, darts_on_board, atol=1e-9)

    result = score_darts(projected)
    assert result.labels == ["T20", "D20", "SB", "DB", "S6", "miss"]
    assert result.total == 60 + 40 + 25 + 50 + 6


def test_transform_passes_through_points_at_infinity():
    H = np.array([[1.0, 0, 0], [0, 1.0, 0], [1.0, 0, 0]])
    result = transform_to_boardplane(H, [(0.0, 0.3), (0.5, 0.25)], (100, 100))

    assert result[0] == (0.0, 0.3)
    assert result[1].x == pytest.approx(0.01)
    assert result[1].y == pytest.approx(0.005)


def test_transform_empty():
    assert transform_to_boardplane(np.eye(3), [], IMAGE_SIZE) == []


@pytest.mark.parametrize("image_size", [(0, 800), (1000, -1), (float("nan"), 800)])
def test_transform_rejects_bad_image_size(image_size):
    with pytest.raises(ValueError, match="Image size must be positive"):
        transform_to_boardplane(np.eye(3), [(0.3, 0.4)], image_size)


def test_transform_accepts_generators():
    darts = ((x, y) for x, y in [(0.25, 0.5), (0.5, 0.75)])
    result = transform_to_boardplane(np.eye(3), darts, IMAGE_SIZE)
    np.testing.assert_allclose(result, [(0.25, 0.5), (0.5, 0.75)])

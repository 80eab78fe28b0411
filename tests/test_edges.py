"""Tests for cuesight.detection.edges: grayscale, blur, gradient magnitude."""

import numpy as np
import pytest

from cuesight.detection.edges import (
    edge_map,
    forward_difference_edges,
    gaussian_blur,
    gaussian_kernel,
    sobel_edges,
    to_grayscale,
)


def _rgba(width=40, height=30, rgb=(0, 0, 0)):
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[..., :3] = rgb
    img[..., 3] = 255
    return img


def _step(width=40, height=30, left=50, right=200):
    """Grayscale image with a vertical step at the middle column."""
    gray = np.full((height, width), left, dtype=np.uint8)
    gray[:, width // 2:] = right
    return gray


class TestGrayscale:
    def test_luminance_weights(self):
        img = _rgba(rgb=(10, 20, 30))
        # floor(2.99 + 11.74 + 3.42)
        assert (to_grayscale(img) == 18).all()

    def test_white_and_black(self):
        assert (to_grayscale(_rgba(rgb=(255, 255, 255))) == 255).all()
        assert (to_grayscale(_rgba(rgb=(0, 0, 0))) == 0).all()

    def test_shape_and_dtype(self):
        gray = to_grayscale(_rgba(width=7, height=5))
        assert gray.shape == (5, 7)
        assert gray.dtype == np.uint8


class TestGaussian:
    def test_kernel_symmetric_peak_at_center(self):
        k = gaussian_kernel(2)
        assert k.shape == (5, 5)
        assert k[2, 2] == pytest.approx(1.0)
        np.testing.assert_allclose(k, k.T)
        np.testing.assert_allclose(k, k[::-1, ::-1])
        assert k[2, 2] == k.max()

    def test_uniform_image_unchanged_including_border(self):
        gray = np.full((20, 20), 100, dtype=np.uint8)
        out = gaussian_blur(gray, 2)
        assert (out == 100).all()

    def test_zero_radius_is_copy(self):
        gray = _step()
        out = gaussian_blur(gray, 0)
        np.testing.assert_array_equal(out, gray)
        assert out is not gray

    def test_softens_step(self):
        out = gaussian_blur(_step(), 2)
        row = out[15]
        assert row[19] > 50
        assert row[20] < 200
        assert row[0] == 50
        assert row[-1] == 200


class TestEdgeOperators:
    @pytest.mark.parametrize("op", [sobel_edges, forward_difference_edges])
    def test_uniform_has_no_edges(self, op):
        edges = op(np.full((20, 20), 128, dtype=np.uint8))
        assert edges.max() == 0

    @pytest.mark.parametrize("op", [sobel_edges, forward_difference_edges])
    def test_step_is_detected_and_clamped(self, op):
        edges = op(_step())
        assert edges.dtype == np.uint8
        assert edges[15, 19] > 40
        assert edges[15, 5] == 0
        assert edges.max() <= 255

    @pytest.mark.parametrize("op", [sobel_edges, forward_difference_edges])
    def test_border_is_zero(self, op):
        gray = np.random.default_rng(0).integers(0, 256, (25, 25), dtype=np.uint8)
        edges = op(gray)
        assert edges[0].max() == 0
        assert edges[-1].max() == 0
        assert edges[:, 0].max() == 0
        assert edges[:, -1].max() == 0

    def test_sobel_saturates_strong_step(self):
        edges = sobel_edges(_step(left=0, right=255))
        assert edges[15, 19] == 255


class TestEdgeMap:
    def test_shape_matches_image(self):
        edges = edge_map(_rgba(width=33, height=21))
        assert edges.shape == (21, 33)

    def test_forward_operator_selectable(self):
        img = _rgba()
        img[:, 20:, :3] = 255
        edges = edge_map(img, blur_radius=0, operator="forward")
        assert edges[15, 19] == 255

    def test_unknown_operator_raises(self):
        with pytest.raises(ValueError, match="Unknown edge operator"):
            edge_map(_rgba(), operator="canny")

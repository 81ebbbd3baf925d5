import numpy as np
import pytest

from photoscore.errors import DecodeError, InvalidInput
from photoscore.models import RawImage
from photoscore.pixels import compute_statistics, edge_response, histogram, to_grayscale


def test_grayscale_uses_bt601_weights():
    red = np.zeros((2, 2, 3), dtype=np.uint8)
    red[..., 0] = 255
    gray = to_grayscale(RawImage(red))
    assert gray.shape == (2, 2)
    assert np.allclose(gray, 0.299 * 255)


def test_grayscale_ignores_alpha_and_passes_single_channel_through():
    rgba = np.zeros((3, 3, 4), dtype=np.uint8)
    rgba[..., :3] = 100
    rgba[..., 3] = 7
    assert np.allclose(to_grayscale(RawImage(rgba)), 100)
    assert np.allclose(to_grayscale(RawImage(np.full((3, 3), 42, dtype=np.uint8))), 42)
    assert np.allclose(to_grayscale(RawImage(np.full((3, 3, 1), 9, dtype=np.uint8))), 9)


def test_histogram_counts_mean_and_std():
    gray = np.array([[0.0, 0.0], [255.0, 255.0]])
    hist = histogram(gray)
    assert len(hist.counts) == 256
    assert hist.total == 4
    assert hist.counts[0] == 2 and hist.counts[255] == 2
    assert hist.mean == pytest.approx(127.5)
    assert hist.std == pytest.approx(127.5)


def test_flat_image_has_zero_edge_variance():
    edges = edge_response(np.full((20, 20), 128.0))
    assert edges.response.shape == (20, 20)
    assert edges.variance == pytest.approx(0.0)


def test_single_spike_gives_laplacian_kernel_response():
    gray = np.zeros((5, 5))
    gray[2, 2] = 10.0
    resp = edge_response(gray).response
    assert resp[2, 2] == pytest.approx(-40.0)
    assert resp[1, 2] == pytest.approx(10.0)
    assert resp[0, 0] == pytest.approx(0.0)


def test_compute_statistics_returns_both(sharp_image):
    hist, edges = compute_statistics(sharp_image)
    assert hist.total == sharp_image.width * sharp_image.height
    assert edges.variance > 1000


def test_raw_image_is_read_only():
    img = RawImage(np.zeros((4, 4, 3), dtype=np.uint8))
    with pytest.raises(ValueError):
        img.pixels[0, 0, 0] = 1


@pytest.mark.parametrize("pixels", [
    np.zeros((0, 10, 3), dtype=np.uint8),
    np.zeros((10, 0), dtype=np.uint8),
    np.zeros((10, 10, 2), dtype=np.uint8),
    np.zeros((10,), dtype=np.uint8),
    np.zeros((4, 4), dtype=bool),
])
def test_degenerate_images_are_invalid(pixels):
    with pytest.raises(InvalidInput):
        to_grayscale(RawImage(pixels))


def test_missing_image_is_invalid():
    with pytest.raises(InvalidInput):
        to_grayscale(None)


def test_non_finite_pixels_fail_decode():
    px = np.full((4, 4, 3), 10.0)
    px[1, 1, 1] = np.nan
    with pytest.raises(DecodeError):
        to_grayscale(RawImage(px))


def test_raw_image_does_not_share_the_callers_buffer():
    source = np.zeros((4, 4, 3), dtype=np.uint8)
    img = RawImage(source)
    source[0, 0, 0] = 200
    assert img.pixels[0, 0, 0] == 0
    assert source.flags.writeable

"""
Pixel statistics shared by the sharpness and exposure scorers.

Grayscale uses BT.601 luma (0.299 R + 0.587 G + 0.114 B) on 0..255 values.
The edge response is the 4-neighbour Laplacian [[0,1,0],[1,-4,1],[0,1,0]]
with a reflected border; its population variance is the focus measure.
"""
import cv2
import numpy as np

from photoscore import config
from photoscore.errors import DecodeError, InvalidInput
from photoscore.models import EdgeResponseMap, GrayscaleHistogram, RawImage


def checked_pixels(image: RawImage) -> np.ndarray:
    """Validate shape/dtype/values and return the pixels as float64."""
    if image is None:
        raise InvalidInput("No image provided")
    if not isinstance(image, RawImage):
        raise InvalidInput(f"Expected RawImage, got {type(image).__name__}")

    px = image.pixels
    if px.ndim not in (2, 3):
        raise InvalidInput(f"Unsupported pixel array shape {px.shape}")
    if image.width == 0 or image.height == 0:
        raise InvalidInput(f"Degenerate image dimensions {image.width}x{image.height}")
    if image.channels not in (1, 3, 4):
        raise InvalidInput(f"Unsupported channel count: {image.channels}")
    if px.dtype == np.bool_ or not np.issubdtype(px.dtype, np.number):
        raise InvalidInput(f"Unsupported pixel dtype: {px.dtype}")

    values = px.astype(np.float64)
    if not np.isfinite(values).all():
        raise DecodeError("Image contains non-finite pixel values")
    return values


def to_grayscale(image: RawImage) -> np.ndarray:
    values = checked_pixels(image)
    if values.ndim == 2:
        return values
    if values.shape[-1] == 1:
        return values[..., 0]
    rgb = values[..., :3]  # drop alpha
    return rgb @ np.asarray(config.LUMA_WEIGHTS, dtype=np.float64)


def histogram(gray: np.ndarray) -> GrayscaleHistogram:
    levels = np.clip(np.rint(gray), 0, 255).astype(np.int64)
    counts = np.bincount(levels.ravel(), minlength=256)
    return GrayscaleHistogram(counts=counts, mean=float(gray.mean()), std=float(gray.std()))


def edge_response(gray: np.ndarray) -> EdgeResponseMap:
    response = cv2.Laplacian(np.ascontiguousarray(gray), cv2.CV_64F, ksize=1)
    return EdgeResponseMap(response=response, variance=float(response.var()))


def compute_statistics(image: RawImage):
    """Return (GrayscaleHistogram, EdgeResponseMap) for one image."""
    gray = to_grayscale(image)
    return histogram(gray), edge_response(gray)

import io

import cv2
import numpy as np
import pytest
from PIL import Image

from photoscore.detector import FaceDetector
from photoscore.models import FaceExpression, RawImage


class StubDetector(FaceDetector):
    """Always returns the same expression (or None for "no face")."""

    def __init__(self, emotions=None):
        self.emotions = emotions
        self.calls = 0

    def detect(self, image):
        self.calls += 1
        if self.emotions is None:
            return None
        return FaceExpression(emotions=dict(self.emotions), confidence=0.99)


class BrokenDetector(FaceDetector):
    def detect(self, image):
        raise RuntimeError("model not loaded")


SMILING = {"happy": 0.92, "neutral": 0.05, "sad": 0.01, "angry": 0.01, "surprised": 0.01}
NEUTRAL_FACE = {"happy": 0.1, "neutral": 0.85, "sad": 0.03, "angry": 0.01, "surprised": 0.01}


def noise_rgb(size=128, seed=0):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(size, size, 3), dtype=np.uint8)


def to_png(pixels) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def sharp_image():
    """Full-range noise: tack sharp, mid brightness, high contrast."""
    return RawImage(noise_rgb())


@pytest.fixture
def blurred_image():
    return RawImage(cv2.GaussianBlur(noise_rgb(), (0, 0), sigmaX=10))


@pytest.fixture
def black_image():
    return RawImage(np.zeros((64, 64, 3), dtype=np.uint8))


@pytest.fixture
def white_image():
    return RawImage(np.full((64, 64, 3), 255, dtype=np.uint8))


@pytest.fixture
def sharp_png():
    return to_png(noise_rgb())

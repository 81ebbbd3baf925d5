from typing import List, Union

import numpy as np
from PIL import Image

from photoscore import config, loader
from photoscore.errors import InvalidInput
from photoscore.exposure import lighting_from_histogram
from photoscore.expression import detect_expression, smile_from_expression
from photoscore.models import (AnalysisResult, BlurResult, LightingResult,
                               RawImage, SmileResult)
from photoscore.pixels import checked_pixels, compute_statistics, edge_response, histogram, to_grayscale
from photoscore.scoring import clamp, round_score
from photoscore.sharpness import blur_from_edges

ImageInput = Union[bytes, bytearray, memoryview, RawImage, Image.Image, np.ndarray]

NO_FACE_WARNING = "No face detected in image"
NO_SMILE_WARNING = ("Consider using a photo with a smile - "
                    "profiles with smiling photos tend to perform better")


def overall_score(blur: BlurResult, lighting: LightingResult, smile: SmileResult) -> int:
    combined = (blur.score * config.WEIGHT_BLUR
                + lighting.score * config.WEIGHT_LIGHTING
                + smile.score * config.WEIGHT_SMILE)
    return round_score(clamp(combined))


def collect_warnings(blur: BlurResult, lighting: LightingResult, smile: SmileResult) -> List[str]:
    """Blur first, then lighting issues, then smile."""
    warnings = []
    if blur.is_blurry:
        warnings.append(f"Image is {blur.severity}: Consider using a sharper photo")
    warnings.extend(lighting.issues)
    if not smile.face_detected:
        warnings.append(NO_FACE_WARNING)
    elif not smile.has_smile:
        warnings.append(NO_SMILE_WARNING)
    return warnings


class ImageAnalyzer:
    """
    Composite image-quality analyzer:
      - sharpness from Laplacian variance
      - lighting from the grayscale histogram
      - smile from the injected face detector
      - weighted 0..100 overall score + human-readable warnings

    Holds no per-call state, so one instance can serve concurrent requests as
    long as the detector can.
    """

    def __init__(self, detector=None):
        self.detector = detector

    # ---------- input ----------
    @staticmethod
    def to_raw_image(image: ImageInput) -> RawImage:
        if image is None:
            raise InvalidInput("No image provided")
        if isinstance(image, RawImage):
            return image
        if isinstance(image, (bytes, bytearray, memoryview)):
            return loader.decode(bytes(image))
        if isinstance(image, Image.Image):
            return loader.from_pil(image)
        if isinstance(image, np.ndarray):
            return RawImage(image)
        raise InvalidInput(f"Unsupported image input: {type(image).__name__}")

    # ---------- single scorers ----------
    def score_sharpness(self, image: ImageInput) -> BlurResult:
        return blur_from_edges(edge_response(to_grayscale(self.to_raw_image(image))))

    def score_exposure(self, image: ImageInput) -> LightingResult:
        return lighting_from_histogram(histogram(to_grayscale(self.to_raw_image(image))))

    def score_expression(self, image: ImageInput) -> SmileResult:
        raw = self.to_raw_image(image)
        checked_pixels(raw)
        return smile_from_expression(detect_expression(raw, self.detector))

    # ---------- pipeline ----------
    def analyze(self, image: ImageInput) -> AnalysisResult:
        raw = self.to_raw_image(image)
        hist, edges = compute_statistics(raw)
        blur = blur_from_edges(edges)
        lighting = lighting_from_histogram(hist)
        smile = smile_from_expression(detect_expression(raw, self.detector))

        return AnalysisResult(
            blur=blur,
            lighting=lighting,
            smile=smile,
            overall_score=overall_score(blur, lighting, smile),
            warnings=tuple(collect_warnings(blur, lighting, smile)),
        )

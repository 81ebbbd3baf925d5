"""
Exposure scoring from the grayscale histogram.

Brightness peaks on a mid-tone plateau and falls off linearly toward pure
black and pure white; contrast rewards intensity spread up to a saturation
point. Both feed the lighting score.
"""
from typing import List

from photoscore import config
from photoscore.models import GrayscaleHistogram, LightingResult, RawImage
from photoscore.pixels import histogram, to_grayscale
from photoscore.scoring import clamp, round_score

TOO_DARK = "Image is too dark"
OVEREXPOSED = "Image is overexposed"
LOW_CONTRAST = "Low contrast - image appears flat"


def brightness_score(mean: float) -> float:
    lo, hi = config.BRIGHTNESS_PLATEAU
    if mean < lo:
        return clamp(100.0 * mean / lo)
    if mean > hi:
        return clamp(100.0 * (255.0 - mean) / (255.0 - hi))
    return 100.0


def contrast_score(std: float) -> float:
    return clamp(100.0 * std / config.CONTRAST_STD_FULL)


def lighting_from_histogram(hist: GrayscaleHistogram) -> LightingResult:
    brightness = round_score(brightness_score(hist.mean))
    contrast = round_score(contrast_score(hist.std))

    issues: List[str] = []
    if brightness < config.BRIGHTNESS_ISSUE_BELOW:
        lo, _ = config.BRIGHTNESS_PLATEAU
        issues.append(TOO_DARK if hist.mean < lo else OVEREXPOSED)
    if contrast < config.CONTRAST_ISSUE_BELOW:
        issues.append(LOW_CONTRAST)

    score = config.WEIGHT_BRIGHTNESS * brightness + config.WEIGHT_CONTRAST * contrast
    return LightingResult(
        score=round_score(clamp(score)),
        brightness=brightness,
        contrast=contrast,
        issues=tuple(issues),
    )


def score_exposure(image: RawImage) -> LightingResult:
    return lighting_from_histogram(histogram(to_grayscale(image)))

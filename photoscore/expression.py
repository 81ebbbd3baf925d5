"""
Smile scoring from face-detector emotion probabilities.

The score is the "happy" probability on a 0..100 scale. A strong competing
negative emotion (sad or angry above NEGATIVE_FLOOR) pulls it down, so that
a noisy happy reading on a frowning face does not count as a smile.
"""
import math
from typing import Optional

from photoscore import config
from photoscore.errors import DetectionFailure
from photoscore.models import FaceExpression, RawImage, SmileResult
from photoscore.pixels import checked_pixels
from photoscore.scoring import clamp, round_score

NO_FACE_RESULT = SmileResult(score=0, face_detected=False)


def _checked_probabilities(expression: FaceExpression) -> dict:
    probs = {}
    for name, value in expression.emotions.items():
        try:
            p = float(value)
        except (TypeError, ValueError) as exc:
            raise DetectionFailure(f"Face detector returned a non-numeric {name!r} probability") from exc
        if not math.isfinite(p) or p < 0.0 or p > 1.0:
            raise DetectionFailure(f"Face detector returned {name!r}={value!r}, expected a value in [0, 1]")
        probs[name] = p
    return probs


def smile_from_expression(expression: Optional[FaceExpression]) -> SmileResult:
    if expression is None:
        return NO_FACE_RESULT

    probs = _checked_probabilities(expression)
    raw = probs.get("happy", 0.0) * 100.0
    negative = max((probs.get(name, 0.0) for name in config.NEGATIVE_EMOTIONS), default=0.0)
    if negative > config.NEGATIVE_FLOOR:
        raw -= (negative - config.NEGATIVE_FLOOR) * config.NEGATIVE_PENALTY

    return SmileResult(
        score=round_score(clamp(raw)),
        face_detected=True,
        expressions={name: round_score(p * 100.0) for name, p in probs.items()},
    )


def detect_expression(image: RawImage, detector) -> Optional[FaceExpression]:
    """Run the detector, turning its own failures into DetectionFailure."""
    if detector is None:
        raise DetectionFailure("No face detector configured")
    try:
        return detector.detect(image)
    except DetectionFailure:
        raise
    except Exception as exc:
        raise DetectionFailure(f"Face detection failed: {exc}") from exc


def score_expression(image: RawImage, detector) -> SmileResult:
    checked_pixels(image)
    return smile_from_expression(detect_expression(image, detector))

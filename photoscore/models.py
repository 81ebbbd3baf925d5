from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from photoscore import config

# Severity / confidence labels
SHARP = "sharp"
SLIGHT_BLUR = "slight-blur"
BLURRY = "blurry"
VERY_BLURRY = "very-blurry"

NO_FACE = "no-face"
NEUTRAL = "neutral"
SLIGHT_SMILE = "slight-smile"
CLEAR_SMILE = "clear-smile"


def blur_severity(score: int) -> str:
    if score >= config.SHARP_MIN:
        return SHARP
    if score >= config.SLIGHT_BLUR_MIN:
        return SLIGHT_BLUR
    if score >= config.BLURRY_MIN:
        return BLURRY
    return VERY_BLURRY


def smile_confidence(score: int, face_detected: bool) -> str:
    if not face_detected:
        return NO_FACE
    if score >= config.CLEAR_SMILE_MIN:
        return CLEAR_SMILE
    if score >= config.SLIGHT_SMILE_MIN:
        return SLIGHT_SMILE
    return NEUTRAL


# ---------- engine inputs ----------
@dataclass(frozen=True, eq=False)
class RawImage:
    """Decoded pixels, shape (h, w) or (h, w, channels). Holds its own read-only copy."""
    pixels: np.ndarray

    def __post_init__(self):
        own = np.array(self.pixels, copy=True)
        own.flags.writeable = False
        object.__setattr__(self, "pixels", own)

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0]) if self.pixels.ndim >= 1 else 0

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1]) if self.pixels.ndim >= 2 else 0

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[-1])


@dataclass(frozen=True, eq=False)
class GrayscaleHistogram:
    counts: np.ndarray  # 256 bins
    mean: float
    std: float

    @property
    def total(self) -> int:
        return int(self.counts.sum())


@dataclass(frozen=True, eq=False)
class EdgeResponseMap:
    response: np.ndarray
    variance: float


@dataclass(frozen=True)
class FaceExpression:
    """Emotion probabilities in [0,1] for one detected face."""
    emotions: Dict[str, float]
    confidence: Optional[float] = None
    box: Optional[Tuple[int, int, int, int]] = None  # x, y, w, h


# ---------- engine outputs ----------
@dataclass(frozen=True)
class BlurResult:
    score: int

    @property
    def severity(self) -> str:
        return blur_severity(self.score)

    @property
    def is_blurry(self) -> bool:
        return self.score < config.SLIGHT_BLUR_MIN

    def to_dict(self) -> dict:
        return {"score": self.score, "isBlurry": self.is_blurry, "severity": self.severity}


@dataclass(frozen=True)
class LightingResult:
    score: int
    brightness: int
    contrast: int
    issues: Tuple[str, ...] = ()

    @property
    def is_good_lighting(self) -> bool:
        return self.score >= config.GOOD_LIGHTING_MIN

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "isGoodLighting": self.is_good_lighting,
            "brightness": self.brightness,
            "contrast": self.contrast,
            "issues": list(self.issues),
        }


@dataclass(frozen=True)
class SmileResult:
    score: int
    face_detected: bool
    expressions: Optional[Dict[str, int]] = None

    def __post_init__(self):
        if not self.face_detected and (self.score != 0 or self.expressions is not None):
            raise ValueError("A result without a face must have score 0 and no expressions")

    @property
    def has_smile(self) -> bool:
        return self.score >= config.SLIGHT_SMILE_MIN

    @property
    def confidence(self) -> str:
        return smile_confidence(self.score, self.face_detected)

    def to_dict(self) -> dict:
        out = {
            "score": self.score,
            "hasSmile": self.has_smile,
            "confidence": self.confidence,
            "faceDetected": self.face_detected,
        }
        if self.face_detected:
            out["expressions"] = dict(self.expressions or {})
        return out


@dataclass(frozen=True)
class AnalysisResult:
    blur: BlurResult
    lighting: LightingResult
    smile: SmileResult
    overall_score: int
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "blur": self.blur.to_dict(),
            "lighting": self.lighting.to_dict(),
            "smile": self.smile.to_dict(),
            "overallScore": self.overall_score,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ValidationReport:
    valid: bool
    error: Optional[str] = None
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    size: Optional[int] = None

    def to_dict(self) -> dict:
        out: dict = {"valid": self.valid}
        if self.error is not None:
            out["error"] = self.error
        if self.valid:
            out["metadata"] = {
                "format": self.format, "width": self.width,
                "height": self.height, "size": self.size,
            }
        return out


# ---------- API response models ----------
class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class BlurResponse(_CamelModel):
    score: int
    is_blurry: bool = Field(alias="isBlurry")
    severity: str


class LightingResponse(_CamelModel):
    score: int
    is_good_lighting: bool = Field(alias="isGoodLighting")
    brightness: int
    contrast: int
    issues: List[str]


class SmileResponse(_CamelModel):
    score: int
    has_smile: bool = Field(alias="hasSmile")
    confidence: str
    face_detected: bool = Field(alias="faceDetected")
    expressions: Optional[Dict[str, int]] = None


class AnalyzeResponse(_CamelModel):
    blur: BlurResponse
    lighting: LightingResponse
    smile: SmileResponse
    overall_score: int = Field(alias="overallScore")
    warnings: List[str]
    analyzed_at: Optional[str] = Field(default=None, alias="analyzedAt")
    image_filename: Optional[str] = Field(default=None, alias="imageFilename")


class PhotoResult(_CamelModel):
    image_filename: str = Field(alias="imageFilename")
    analysis: Optional[AnalyzeResponse] = None
    error: Optional[str] = None


class BatchResponse(_CamelModel):
    total_photos: int = Field(alias="totalPhotos")
    success_count: int = Field(alias="successCount")
    error_count: int = Field(alias="errorCount")
    results: List[PhotoResult]


class ValidationMetadata(BaseModel):
    format: str
    width: int
    height: int
    size: int


class ValidationResponse(BaseModel):
    valid: bool
    error: Optional[str] = None
    metadata: Optional[ValidationMetadata] = None
